"""脚本执行器：按顺序执行语句，单步失败不影响后续步骤"""

import logging
import sys
from typing import Dict, Optional

from playwright.async_api import async_playwright

from .config import RunnerConfig
from .context import SessionContext
from .controller import dispatch
from .credentials import KeyringStore, TerminalPrompter
from .models import Script

logger = logging.getLogger("browser_script.core")


class ScriptRunner:
    """浏览器脚本执行器"""

    def __init__(self, config: Optional[RunnerConfig] = None, credentials=None, prompter=None):
        self.config = config or RunnerConfig()
        self.credentials = credentials or KeyringStore()
        self.prompter = prompter or TerminalPrompter()

    def new_session(self, browser=None, browser_context=None) -> SessionContext:
        return SessionContext(
            browser=browser,
            browser_context=browser_context,
            credentials=self.credentials,
            prompter=self.prompter,
            config=self.config,
        )

    async def execute(self, script: Script, session: SessionContext) -> SessionContext:
        """
        逐条执行。任何处理函数抛出的异常都只记为该步失败，然后继续下一条。
        """
        for statement in script:
            print(f"[line {statement.line}] {statement.describe()}", file=sys.stderr)
            try:
                await dispatch(statement, session)
            except Exception as e:
                message = str(e) or type(e).__name__
                print(f"❌ {message}", file=sys.stderr)
                logger.debug("line %d failed", statement.line, exc_info=True)
                session.record(statement.line, statement.keyword, "failed", message)
            else:
                print("✓", file=sys.stderr)
                session.record(statement.line, statement.keyword, "success")
        return session

    async def run(self, script: Script) -> Dict[str, str]:
        """
        启动浏览器、执行脚本，最后无论成败都关闭浏览器。返回输出映射。
        """
        async with async_playwright() as p:
            browser_type = getattr(p, self.config.browser)
            browser = await browser_type.launch(headless=self.config.headless)
            try:
                browser_context = await browser.new_context()
                browser_context.set_default_timeout(self.config.timeout_ms)
                session = self.new_session(browser, browser_context)
                await self.execute(script, session)
            finally:
                await browser.close()

        failed = len(session.failed_steps)
        print(f"\n✓ 脚本执行完成（共 {len(session.history)} 步，失败 {failed} 步）", file=sys.stderr)
        if failed:
            print(session.format_history(), file=sys.stderr)
        return session.output
