"""Browser Script 包

包含各个模块：
- models: 语句与错误类型
- loader: 脚本加载与规整
- context: 会话上下文
- controller: 关键字处理函数
- tabs: 标签页生命周期
- credentials: 密码读取
- exporter: 输出交付
- core: 脚本执行器
"""

from .config import RunnerConfig
from .context import SessionContext
from .core import ScriptRunner
from .exporter import export_output
from .loader import load_script, parse_script
from .models import ScriptLoadError, Statement, StepError

__all__ = [
    "RunnerConfig",
    "SessionContext",
    "ScriptRunner",
    "export_output",
    "load_script",
    "parse_script",
    "ScriptLoadError",
    "Statement",
    "StepError",
]
