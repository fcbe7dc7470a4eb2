"""数据模型定义：脚本语句、执行记录与错误类型"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, List, Optional, Type


class ScriptError(Exception):
    """脚本相关错误的基类"""


class ScriptLoadError(ScriptError):
    """脚本结构错误，整个运行立即终止"""

    def __init__(self, line: int, statement: Any, reason: str):
        self.line = line
        self.statement = statement
        self.reason = reason
        super().__init__(f"(line={line} statement={_dump(statement)}) {reason}")


class StepError(ScriptError):
    """单步执行错误，只影响当前语句"""


class StatementArgumentError(StepError):
    """语句参数形状不对"""


class UnknownVariableError(StepError):
    """引用了不存在的变量"""


class NoActiveTabError(StepError):
    """当前没有打开的标签页"""


class NoLocatedElementError(StepError):
    """之前没有 wait 定位到元素"""


class TargetTimeoutError(StepError):
    """等待新标签页超时"""


def _dump(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False, default=str)


@dataclass
class Statement:
    """单条语句：(keyword, argument)"""
    keyword: ClassVar[str] = ""
    argument: Any = None
    line: int = 0

    def describe(self) -> str:
        if self.argument is None:
            return self.keyword
        return f"{self.keyword}: {_dump(self.argument)}"

    def _string(self, what: str) -> str:
        if not isinstance(self.argument, str):
            raise StatementArgumentError(f"{self.keyword} 需要{what}（字符串），得到 {_dump(self.argument)}")
        return self.argument

    def _field(self, name: str) -> str:
        if not isinstance(self.argument, dict) or name not in self.argument:
            raise StatementArgumentError(f"{self.keyword} 缺少字段 '{name}'，得到 {_dump(self.argument)}")
        value = self.argument[name]
        if value is None:
            raise StatementArgumentError(f"{self.keyword} 的字段 '{name}' 为空")
        return str(value)


@dataclass
class OpenStatement(Statement):
    keyword: ClassVar[str] = "open"

    @property
    def url(self) -> str:
        return self._string("URL")


@dataclass
class ClickStatement(Statement):
    keyword: ClassVar[str] = "click"

    @property
    def selector(self) -> Optional[str]:
        """None 表示点击最近一次 wait 定位到的元素"""
        if self.argument is None:
            return None
        return self._string("选择器")


@dataclass
class FocusStatement(Statement):
    keyword: ClassVar[str] = "focus"

    @property
    def selector(self) -> str:
        return self._string("选择器")


@dataclass
class ClearStatement(Statement):
    keyword: ClassVar[str] = "clear"

    @property
    def selector(self) -> str:
        return self._string("选择器")


@dataclass
class TypeStatement(Statement):
    keyword: ClassVar[str] = "type"

    @property
    def text(self) -> Optional[str]:
        """字面文本；参数是 {name} 时为 None"""
        if isinstance(self.argument, dict):
            return None
        return self._string("文本")

    @property
    def variable(self) -> Optional[str]:
        if not isinstance(self.argument, dict):
            return None
        return self._field("name")


@dataclass
class WaitStatement(Statement):
    keyword: ClassVar[str] = "wait"

    @property
    def selector(self) -> Optional[str]:
        if isinstance(self.argument, dict):
            return None
        return self._string("选择器")

    @property
    def text(self) -> Optional[str]:
        if not isinstance(self.argument, dict):
            return None
        return self._field("text")


@dataclass
class WaitNavigationStatement(Statement):
    keyword: ClassVar[str] = "wait-navigation"

    @property
    def event(self) -> Optional[str]:
        if self.argument is None:
            return None
        return self._string("生命周期事件名")


@dataclass
class WaitNewTargetStatement(Statement):
    keyword: ClassVar[str] = "wait-new-target"

    @property
    def title(self) -> str:
        return self._string("标题")


@dataclass
class SleepStatement(Statement):
    keyword: ClassVar[str] = "sleep"

    @property
    def seconds(self) -> float:
        # bool 是 int 的子类，这里单独排除
        if isinstance(self.argument, bool) or not isinstance(self.argument, (int, float)):
            raise StatementArgumentError(f"sleep 需要秒数，得到 {_dump(self.argument)}")
        if self.argument < 0:
            raise StatementArgumentError(f"sleep 秒数不能为负: {self.argument}")
        return float(self.argument)


@dataclass
class ReadStatement(Statement):
    keyword: ClassVar[str] = "read"

    @property
    def question(self) -> str:
        return self._field("question")

    @property
    def name(self) -> str:
        return self._field("name")


@dataclass
class PasswordStatement(Statement):
    keyword: ClassVar[str] = "password"

    @property
    def account(self) -> str:
        return self._field("account")

    @property
    def service(self) -> str:
        return self._field("service")

    @property
    def name(self) -> str:
        return self._field("name")


@dataclass
class CaptureClipboardStatement(Statement):
    keyword: ClassVar[str] = "capture-clipboard"

    @property
    def key(self) -> str:
        return self._string("输出键名")


STATEMENT_CLASSES: List[Type[Statement]] = [
    OpenStatement,
    ClickStatement,
    FocusStatement,
    ClearStatement,
    TypeStatement,
    WaitStatement,
    WaitNavigationStatement,
    WaitNewTargetStatement,
    SleepStatement,
    ReadStatement,
    PasswordStatement,
    CaptureClipboardStatement,
]

STATEMENT_TYPES: Dict[str, Type[Statement]] = {cls.keyword: cls for cls in STATEMENT_CLASSES}

Script = List[Statement]


@dataclass
class StepRecord:
    """单步执行记录"""
    line: int
    keyword: str
    result: str  # success|failed
    error: Optional[str] = None


@dataclass
class Tab:
    """一个标签页：页面句柄 + 目标元数据"""
    page: Any
    target_id: int
    title: str = ""
