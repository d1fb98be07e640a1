"""数据模型包。

定义批量图片转换相关的数据结构和模型。
"""

from .constants import (
    MB,
    ConversionDefaultValues,
    ExecutionDefaultValues,
    ImageFormats,
    TargetFormat,
    normalize_format_name,
)
from .conversion_policy import (
    ConcurrencyScope,
    ConversionPolicy,
    ExecutionConfig,
    ExecutorType,
)
from .conversion_result import (
    BatchGroup,
    BatchResult,
    BatchState,
    BatchSummary,
    FileTask,
    OutcomeStatus,
    TaskOutcome,
    format_size,
)


__all__ = [
    "MB",
    "BatchGroup",
    "BatchResult",
    "BatchState",
    "BatchSummary",
    "ConcurrencyScope",
    "ConversionDefaultValues",
    "ConversionPolicy",
    "ExecutionConfig",
    "ExecutionDefaultValues",
    "ExecutorType",
    "FileTask",
    "ImageFormats",
    "OutcomeStatus",
    "TargetFormat",
    "TaskOutcome",
    "format_size",
    "normalize_format_name",
]
