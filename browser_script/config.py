"""运行配置：从环境变量（和 .env）读取"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

BROWSER_TYPES = ("chromium", "firefox", "webkit")

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"{name} 不是合法的布尔值: {raw!r}")


def _env_number(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} 不是合法的数字: {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} 必须大于 0: {raw!r}")
    return value


@dataclass
class RunnerConfig:
    browser: str = "chromium"
    headless: bool = False
    timeout_ms: float = 30000
    target_timeout: float = 30.0
    poll_interval: float = 0.25
    export_command: Optional[str] = None
    debug: bool = False

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "RunnerConfig":
        if dotenv:
            load_dotenv()

        browser = (os.getenv("BROWSER_SCRIPT_BROWSER") or "chromium").strip().lower()
        if browser not in BROWSER_TYPES:
            raise ValueError(f"BROWSER_SCRIPT_BROWSER 必须是 {'/'.join(BROWSER_TYPES)}，得到 {browser!r}")

        return cls(
            browser=browser,
            headless=_env_bool("BROWSER_SCRIPT_HEADLESS", False),
            timeout_ms=_env_number("BROWSER_SCRIPT_TIMEOUT_MS", 30000),
            target_timeout=_env_number("BROWSER_SCRIPT_TARGET_TIMEOUT", 30.0),
            export_command=os.getenv("BROWSER_SCRIPT_EXPORT_COMMAND") or None,
            debug=_env_bool("BROWSER_SCRIPT_DEBUG", False),
        )
