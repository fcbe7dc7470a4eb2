"""执行模块：关键字 → 异步处理函数的注册表"""

import asyncio
import logging
from contextlib import suppress
from typing import Awaitable, Callable, Dict, Type
from urllib.parse import urlsplit

from .context import SessionContext
from .credentials import resolve_password
from .models import (
    STATEMENT_CLASSES,
    CaptureClipboardStatement,
    ClearStatement,
    ClickStatement,
    FocusStatement,
    NoLocatedElementError,
    OpenStatement,
    PasswordStatement,
    ReadStatement,
    SleepStatement,
    Statement,
    StepError,
    TypeStatement,
    UnknownVariableError,
    WaitNavigationStatement,
    WaitNewTargetStatement,
    WaitStatement,
)
from .tabs import open_tab, wait_navigation, wait_new_target

logger = logging.getLogger("browser_script.controller")

Handler = Callable[[Statement, SessionContext], Awaitable[None]]

CLIPBOARD_PERMISSIONS = ["clipboard-read", "clipboard-write"]


def xpath_literal(text: str) -> str:
    """把任意文本转成 XPath 字符串字面量"""
    if '"' not in text:
        return f'"{text}"'
    if "'" not in text:
        return f"'{text}'"
    parts = text.split('"')
    return "concat(" + ", '\"', ".join(f'"{part}"' for part in parts) + ")"


def text_selector(text: str) -> str:
    """第一个直接文本节点包含 text 的元素（区分大小写，文档顺序）"""
    # 逐个检查文本节点；contains(text(), ...) 只看第一个文本节点
    return f"xpath=//*[text()[contains(., {xpath_literal(text)})]]"


def page_origin(url: str):
    parts = urlsplit(url)
    if parts.scheme in ("http", "https") and parts.netloc:
        return f"{parts.scheme}://{parts.netloc}"
    return None


def _located(session: SessionContext):
    if session.query is None:
        raise NoLocatedElementError("没有已定位的元素，请先 wait")
    return session.query


async def handle_open(statement: OpenStatement, session: SessionContext):
    await open_tab(session, statement.url)


async def handle_click(statement: ClickStatement, session: SessionContext):
    selector = statement.selector
    if selector is not None:
        await session.active_page.click(selector)
    else:
        await _located(session).click()


async def handle_focus(statement: FocusStatement, session: SessionContext):
    await session.active_page.focus(statement.selector)


async def handle_clear(statement: ClearStatement, session: SessionContext):
    await session.active_page.eval_on_selector(statement.selector, "el => { el.value = '' }")


async def handle_type(statement: TypeStatement, session: SessionContext):
    name = statement.variable
    if name is None:
        await session.active_page.keyboard.type(statement.text)
        return

    if name not in session.vars:
        raise UnknownVariableError(f"变量 {name!r} 未定义")
    value = session.vars[name]
    if session.query is not None:
        await session.query.type(value)
    else:
        await session.active_page.keyboard.type(value)


async def handle_wait(statement: WaitStatement, session: SessionContext):
    selector = statement.selector
    if selector is None:
        selector = text_selector(statement.text)

    element = await session.active_page.wait_for_selector(selector, state="visible")
    if element is None:
        raise StepError(f"没有找到元素: {selector}")
    session.query = element


async def handle_wait_navigation(statement: WaitNavigationStatement, session: SessionContext):
    await wait_navigation(session, statement.event)


async def handle_wait_new_target(statement: WaitNewTargetStatement, session: SessionContext):
    await wait_new_target(session, statement.title)


async def handle_sleep(statement: SleepStatement, session: SessionContext):
    await asyncio.sleep(statement.seconds)


async def handle_read(statement: ReadStatement, session: SessionContext):
    question, name = statement.question, statement.name
    page = session.active_page
    errors = []

    # 页面里的 prompt 对话框由终端回答；读不到输入时关掉对话框，否则 evaluate 永远不返回
    async def answer_in_terminal(dialog):
        try:
            reply = await session.prompter.ask(dialog.message, secret=False)
        except Exception as e:
            errors.append(e)
            await dialog.dismiss()
            return
        await dialog.accept(reply)

    page.once("dialog", answer_in_terminal)
    try:
        answer = await page.evaluate("question => window.prompt(question)", question)
    finally:
        # 监听器触发后已自动移除
        with suppress(KeyError):
            page.remove_listener("dialog", answer_in_terminal)

    if errors:
        raise StepError(f"读取输入失败: {errors[0]!r}") from errors[0]
    session.vars[name] = answer if answer is not None else ""


async def handle_password(statement: PasswordStatement, session: SessionContext):
    await resolve_password(statement, session)


async def handle_capture_clipboard(statement: CaptureClipboardStatement, session: SessionContext):
    key = statement.key
    page = session.active_page

    origin = page_origin(page.url)
    if origin is not None:
        await session.browser_context.grant_permissions(CLIPBOARD_PERMISSIONS, origin=origin)
    else:
        await session.browser_context.grant_permissions(CLIPBOARD_PERMISSIONS)

    text = await page.evaluate("() => navigator.clipboard.readText()")
    session.output[key] = text


HANDLERS: Dict[Type[Statement], Handler] = {
    OpenStatement: handle_open,
    ClickStatement: handle_click,
    FocusStatement: handle_focus,
    ClearStatement: handle_clear,
    TypeStatement: handle_type,
    WaitStatement: handle_wait,
    WaitNavigationStatement: handle_wait_navigation,
    WaitNewTargetStatement: handle_wait_new_target,
    SleepStatement: handle_sleep,
    ReadStatement: handle_read,
    PasswordStatement: handle_password,
    CaptureClipboardStatement: handle_capture_clipboard,
}


def check_registry(handlers: Dict[Type[Statement], Handler] = HANDLERS):
    missing = [cls.keyword for cls in STATEMENT_CLASSES if cls not in handlers]
    if missing:
        raise RuntimeError(f"以下关键字没有处理函数: {', '.join(missing)}")


check_registry()


async def dispatch(statement: Statement, session: SessionContext):
    handler = HANDLERS[type(statement)]
    logger.debug("line %d: %s", statement.line, statement.describe())
    await handler(statement, session)
