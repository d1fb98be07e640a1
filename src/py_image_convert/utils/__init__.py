"""工具模块包。

提供纯工具函数，不包含业务逻辑。
文件列表与路径解析请直接从 file_helpers / path_helpers 导入。
"""

# 从日志工具模块导入
from .logging_helpers import get_logger, setup_logging

# 从消息格式化模块导入
from .message_formatter import MessageFormatter


__all__ = [
    "MessageFormatter",
    "get_logger",
    "setup_logging",
]
