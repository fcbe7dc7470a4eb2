"""标签页生命周期：打开、等待外部新标签页、等待导航"""

import asyncio
import logging
from typing import Any, Optional

from playwright.async_api import Error as PlaywrightError

from .context import SessionContext
from .models import StatementArgumentError, Tab, TargetTimeoutError

logger = logging.getLogger("browser_script.tabs")

DEFAULT_LIFECYCLE = "networkidle"

# puppeteer 风格的别名
LIFECYCLE_EVENTS = {
    "load": "load",
    "domcontentloaded": "domcontentloaded",
    "networkidle": "networkidle",
    "networkidle0": "networkidle",
    "networkidle2": "networkidle",
}


def lifecycle_state(event: Optional[str]) -> str:
    if event is None:
        return DEFAULT_LIFECYCLE
    state = LIFECYCLE_EVENTS.get(event)
    if state is None:
        raise StatementArgumentError(
            f"未知的导航事件 {event!r}，可选: {', '.join(LIFECYCLE_EVENTS)}"
        )
    return state


def _track(session: SessionContext, page: Any, title: str = "") -> Tab:
    """压栈并在标签页关闭时按身份移除"""
    tab = session.push_tab(page, title)

    def on_close(closed_page):
        if session.remove_page(closed_page):
            logger.info("tab closed: %s", tab.title or tab.target_id)

    page.on("close", on_close)
    return tab


async def open_tab(session: SessionContext, url: str) -> Tab:
    page = await session.browser_context.new_page()
    tab = _track(session, page)
    await page.goto(url, wait_until=DEFAULT_LIFECYCLE)
    tab.title = await page.title()
    return tab


async def _find_page_by_title(session: SessionContext, title: str) -> Optional[Any]:
    for page in session.browser_context.pages:
        if page.is_closed():
            continue
        try:
            if await page.title() == title:
                return page
        except PlaywrightError:
            # 轮询过程中页面可能刚好关闭
            continue
    return None


async def wait_new_target(session: SessionContext, title: str) -> Tab:
    """
    等待标题完全等于 title 的标签页出现，切到前台并设为当前标签页。
    已经在栈里的页面只移到栈顶，不重复压栈。
    """
    config = session.config
    loop = asyncio.get_running_loop()
    deadline = loop.time() + config.target_timeout

    while True:
        page = await _find_page_by_title(session, title)
        if page is not None:
            break
        if loop.time() >= deadline:
            raise TargetTimeoutError(f"{config.target_timeout:g} 秒内没有出现标题为 {title!r} 的标签页")
        await asyncio.sleep(config.poll_interval)

    await page.bring_to_front()
    tab = session.find_tab(page)
    if tab is not None:
        session.activate(tab)
        return tab
    return _track(session, page, title)


async def wait_navigation(session: SessionContext, event: Optional[str] = None):
    state = lifecycle_state(event)
    await session.active_page.wait_for_load_state(state)
