"""核心处理模块。

包含格式处理、转换适配器和文件准入判定。
"""

from .formats import FormatProcessor, get_save_parameters
from .gate import SIZE_LIMIT_REASON, FileGate, GateDecision
from .transformer import ImageTransformer, Transformer, transform_task


__all__ = [
    "SIZE_LIMIT_REASON",
    "FileGate",
    "FormatProcessor",
    "GateDecision",
    "ImageTransformer",
    "Transformer",
    "get_save_parameters",
    "transform_task",
]
