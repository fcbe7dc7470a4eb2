"""输出交付：把输出映射序列化为 YAML，交给下游进程"""

import logging
import shlex
import subprocess
import sys
from typing import Dict, Optional

import yaml

logger = logging.getLogger("browser_script.exporter")

# 与 shell 的 “command not found” 一致
EXPORT_FAILED = 127


def serialize_output(output: Dict[str, str]) -> str:
    return yaml.safe_dump(output, allow_unicode=True, default_flow_style=False, sort_keys=False)


def export_output(output: Dict[str, str], command: Optional[str] = None) -> int:
    """
    有下游命令时通过 stdin 交给它并返回它的退出码；
    没有配置命令时直接写到 stdout。
    """
    document = serialize_output(output)
    if not command:
        sys.stdout.write(document)
        sys.stdout.flush()
        return 0

    args = shlex.split(command)
    logger.info("exporting %d output keys to %s", len(output), args[0])
    try:
        completed = subprocess.run(args, input=document, text=True)
    except OSError as e:
        print(f"❌ 无法启动下游命令 {args[0]!r}: {e}", file=sys.stderr)
        return EXPORT_FAILED
    return completed.returncode
