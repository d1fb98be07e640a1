"""批量图片格式转换服务。

基于 Pillow 的目录级批量转换，分组并在有界并发下执行。
"""

__version__ = "0.1.0"
__author__ = "crper"
__description__ = "目录批量图片格式转换服务，基于 Pillow"

# 核心功能导出
from .converter import ImageConverter
from .models.conversion_policy import ConversionPolicy, ExecutionConfig
from .models.conversion_result import BatchResult, TaskOutcome


__all__ = [
    "BatchResult",
    "ConversionPolicy",
    "ExecutionConfig",
    "ImageConverter",
    "TaskOutcome",
    "get_version",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
