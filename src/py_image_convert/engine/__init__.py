"""批量转换处理引擎模块。

包含分区、有界并发执行、批量编排和配置构建等核心处理逻辑。
"""

from .batch import BatchOrchestrator, BatchStateMachine
from .concurrent_executor import ConcurrencyLimiter, ConcurrentExecutor
from .config import PolicyBuilder
from .partitioner import partition


__all__ = [
    "BatchOrchestrator",
    "BatchStateMachine",
    "ConcurrencyLimiter",
    "ConcurrentExecutor",
    "PolicyBuilder",
    "partition",
]
