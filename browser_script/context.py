"""会话上下文：整个运行期间在各步骤之间共享的可变状态"""

from itertools import count
from typing import Any, Dict, List, Optional

from .models import NoActiveTabError, StepRecord, Tab


class SessionContext:
    """
    会话上下文：标签页栈、变量、输出、最近定位的元素和执行记录。

    tabs 按最近激活排序，tabs[0] 是当前标签页。pages/targets 都由 tabs
    派生，所以两者长度和下标永远一致。
    """

    def __init__(
        self,
        browser: Any = None,
        browser_context: Any = None,
        credentials: Any = None,
        prompter: Any = None,
        config: Any = None,
    ):
        self.browser = browser
        self.browser_context = browser_context
        self.credentials = credentials
        self.prompter = prompter
        self.config = config

        self.tabs: List[Tab] = []
        self.vars: Dict[str, str] = {}
        self.output: Dict[str, str] = {}
        self.query: Any = None
        self.history: List[StepRecord] = []
        self._target_ids = count(1)

    @property
    def pages(self) -> List[Any]:
        return [tab.page for tab in self.tabs]

    @property
    def targets(self) -> List[Tab]:
        return list(self.tabs)

    @property
    def active_page(self) -> Any:
        if not self.tabs:
            raise NoActiveTabError("没有打开的标签页，请先 open")
        return self.tabs[0].page

    def find_tab(self, page: Any) -> Optional[Tab]:
        return next((tab for tab in self.tabs if tab.page is page), None)

    def push_tab(self, page: Any, title: str = "") -> Tab:
        """压入栈顶，成为当前标签页"""
        tab = Tab(page=page, target_id=next(self._target_ids), title=title)
        self.tabs.insert(0, tab)
        return tab

    def activate(self, tab: Tab):
        """把已有标签页移到栈顶"""
        self.tabs.remove(tab)
        self.tabs.insert(0, tab)

    def remove_page(self, page: Any) -> bool:
        """按对象身份移除；下标在触发时重新查找"""
        for index, tab in enumerate(self.tabs):
            if tab.page is page:
                del self.tabs[index]
                return True
        return False

    def record(self, line: int, keyword: str, result: str, error: Optional[str] = None):
        """记录单步结果"""
        self.history.append(StepRecord(line=line, keyword=keyword, result=result, error=error))

    @property
    def failed_steps(self) -> List[StepRecord]:
        return [r for r in self.history if r.result == "failed"]

    def format_history(self) -> str:
        if not self.history:
            return "(无记录)"
        lines = []
        for rec in self.history:
            error_str = f" ({rec.error})" if rec.error else ""
            lines.append(f"[line {rec.line}] {rec.keyword} → {rec.result}{error_str}")
        return "\n".join(lines)
