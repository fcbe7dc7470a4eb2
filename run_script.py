"""
Browser Script - 用 YAML 描述步骤、由 Playwright 执行的浏览器自动化脚本

用法：
    python run_script.py login.yaml

依赖安装：
    pip install -e .
    playwright install chromium
"""

import argparse
import asyncio
import logging
import sys

from browser_script import RunnerConfig, ScriptLoadError, ScriptRunner, export_output, load_script


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="按 YAML 脚本驱动浏览器")
    parser.add_argument("script", help="脚本文件路径")
    args = parser.parse_args(argv)

    try:
        config = RunnerConfig.from_env()
    except ValueError as e:
        print(f"❌ 配置错误: {e}", file=sys.stderr)
        return 2

    logging.basicConfig(
        level=logging.DEBUG if config.debug else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    # 结构错误在启动浏览器之前就终止
    try:
        script = load_script(args.script)
    except ScriptLoadError as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"❌ 无法读取脚本: {e}", file=sys.stderr)
        return 1

    output = asyncio.run(ScriptRunner(config).run(script))
    return export_output(output, config.export_command)


if __name__ == "__main__":
    raise SystemExit(main())
