"""Entry point for python -m py_image_convert.

默认启动 HTTP 服务，--mcp 启动 MCP 服务器。
"""

import sys


def main() -> None:
    """主入口函数 - 启动 HTTP 服务"""
    # 检查版本信息
    if len(sys.argv) > 1 and sys.argv[1] in ["--version", "-v"]:
        from . import __version__

        print(f"py-image-convert {__version__}")
        return

    if len(sys.argv) > 1 and sys.argv[1] == "--mcp":
        from .mcp_server import main as mcp_main

        mcp_main()
        return

    import uvicorn

    from .config import get_config

    server = get_config().server
    uvicorn.run(
        "py_image_convert.api:create_app",
        factory=True,
        host=server.HOST,
        port=server.PORT,
    )


if __name__ == "__main__":
    main()
