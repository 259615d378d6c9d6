"""`python -m ModuleKit.cli` 的命令行启动入口。"""

from ModuleKit.cli.main import cli


def main() -> None:
    """执行 CLI。"""
    cli(prog_name="modulekit")


if __name__ == "__main__":
    main()
