"""转换策略与执行配置模型。

定义单次批量转换中不可变的策略参数和并发参数。
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from .constants import ConversionDefaultValues, ExecutionDefaultValues, TargetFormat


class ConcurrencyScope(str, Enum):
    """并发上限的作用范围"""

    GLOBAL = "global"  # 所有分组共享一个上限
    PER_GROUP = "per_group"  # 每个分组独立的上限


class ExecutorType(str, Enum):
    """执行器类型"""

    THREAD = "thread"
    PROCESS = "process"


class ConversionPolicy(BaseModel):
    """转换策略，一个批次内保持不变"""

    model_config = ConfigDict(frozen=True)

    target_format: TargetFormat = Field(description="目标格式")
    max_file_size: int = Field(
        ConversionDefaultValues.MAX_FILE_SIZE,
        gt=0,
        description="超过该大小（字节）的文件直接跳过",
    )
    compression_threshold: int = Field(
        ConversionDefaultValues.COMPRESSION_THRESHOLD,
        ge=0,
        description="转换结果超过该大小（字节）时二次压缩",
    )
    compression_quality: int = Field(
        ConversionDefaultValues.COMPRESSION_QUALITY,
        ge=ConversionDefaultValues.MIN_QUALITY,
        le=ConversionDefaultValues.MAX_QUALITY,
        description="二次压缩使用的固定质量",
    )

    def should_skip(self, size_bytes: int) -> bool:
        """文件是否超过大小上限"""
        return size_bytes > self.max_file_size

    def needs_recompression(self, size_bytes: int) -> bool:
        """转换结果是否需要二次压缩"""
        return size_bytes > self.compression_threshold


class ExecutionConfig(BaseModel):
    """批量执行配置，在构造编排器时传入"""

    model_config = ConfigDict(frozen=True)

    concurrency_cap: int = Field(
        ExecutionDefaultValues.CONCURRENCY_CAP, gt=0, description="最大并发数"
    )
    group_size: int = Field(
        ExecutionDefaultValues.GROUP_SIZE, gt=0, description="每个分组的文件数"
    )
    concurrency_scope: ConcurrencyScope = Field(
        ConcurrencyScope.GLOBAL, description="并发上限作用范围"
    )
    overlap_groups: bool = Field(True, description="分组之间是否重叠执行")
    max_parallel_groups: int = Field(
        ExecutionDefaultValues.MAX_PARALLEL_GROUPS,
        gt=0,
        description="per_group 作用范围下同时执行的分组数上限",
    )
    executor_type: ExecutorType = Field(ExecutorType.THREAD, description="执行器类型")

    @property
    def peak_concurrency(self) -> int:
        """整个批次同时执行的文件数上限"""
        if self.concurrency_scope == ConcurrencyScope.GLOBAL or not self.overlap_groups:
            return self.concurrency_cap
        return self.concurrency_cap * self.max_parallel_groups
