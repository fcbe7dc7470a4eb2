"""脚本加载模块：把 YAML 文档规整为有序的语句列表"""

from pathlib import Path
from typing import Any, List, Union

import yaml

from .models import STATEMENT_TYPES, Script, ScriptLoadError, Statement


def normalize(entries: Any) -> Script:
    """
    把宽松的条目序列转为类型化语句。

    每个条目要么是裸关键字字符串，要么是只有一个键的 {keyword: argument}。
    这里只检查结构和关键字，参数形状留给执行阶段。
    """
    if entries is None:
        return []
    if not isinstance(entries, list):
        raise ScriptLoadError(0, entries, "脚本必须是语句列表")

    script: List[Statement] = []
    for line, entry in enumerate(entries, start=1):
        if isinstance(entry, str):
            keyword, argument = entry, None
        elif isinstance(entry, dict):
            if len(entry) != 1:
                raise ScriptLoadError(line, entry, f"每条语句只能有一个关键字，得到 {len(entry)} 个")
            keyword, argument = next(iter(entry.items()))
            if not isinstance(keyword, str):
                raise ScriptLoadError(line, entry, "关键字必须是字符串")
        else:
            raise ScriptLoadError(line, entry, "语句必须是关键字或 {关键字: 参数}")

        statement_cls = STATEMENT_TYPES.get(keyword)
        if statement_cls is None:
            raise ScriptLoadError(line, entry, f"Keyword not implemented: {keyword}.")
        script.append(statement_cls(argument=argument, line=line))

    return script


def parse_script(source: str) -> Script:
    """解析 YAML 文本"""
    try:
        entries = yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise ScriptLoadError(0, None, f"YAML 解析失败: {e}") from e
    return normalize(entries)


def load_script(path: Union[str, Path]) -> Script:
    return parse_script(Path(path).read_text(encoding="utf-8"))
