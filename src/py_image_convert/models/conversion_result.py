"""转换任务与结果模型。

定义文件任务、分组、单文件结果和批量结果的数据结构。
"""

from enum import Enum
from pathlib import Path
from typing import TypedDict

from humanize import naturalsize
from pydantic import BaseModel, ConfigDict, Field


def format_size(size_bytes: int) -> str:
    """格式化文件大小为人类可读格式"""
    return naturalsize(size_bytes, binary=True)


class FileTask(BaseModel):
    """列目录时创建的单个文件任务"""

    model_config = ConfigDict(frozen=True)

    source_path: Path = Field(description="源文件路径")
    file_name: str = Field(description="文件名")
    size_bytes: int = Field(ge=0, description="文件大小（字节）")

    @classmethod
    def from_path(cls, path: Path) -> "FileTask":
        """根据文件路径创建任务（读取一次 stat）"""
        return cls(source_path=path, file_name=path.name, size_bytes=path.stat().st_size)

    def output_path(self, output_dir: Path, extension: str) -> Path:
        """输出路径：<输出目录>/<文件名主干><扩展名>"""
        return output_dir / f"{self.source_path.stem}{extension}"


class BatchGroup(BaseModel):
    """分区器产生的有序任务分组"""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0, description="分组序号")
    tasks: tuple[FileTask, ...] = Field(description="分组内的任务")

    def __len__(self) -> int:
        return len(self.tasks)


class OutcomeStatus(str, Enum):
    """单文件处理的最终分类"""

    CONVERTED = "converted"
    COMPRESSED = "compressed"
    SKIPPED = "skipped"
    FAILED = "failed"

    @property
    def is_success(self) -> bool:
        return self in (OutcomeStatus.CONVERTED, OutcomeStatus.COMPRESSED)


class BatchState(str, Enum):
    """批次状态"""

    PENDING = "pending"
    LISTING = "listing"
    PARTITIONING = "partitioning"
    EXECUTING = "executing"
    AGGREGATED = "aggregated"
    FAILED = "failed"


class TaskOutcome(BaseModel):
    """单个文件的处理结果"""

    file_name: str = Field(description="文件名")
    status: OutcomeStatus = Field(description="处理状态")
    source_size_bytes: int | None = Field(None, description="源文件大小（字节）")
    converted_size_bytes: int | None = Field(
        None, description="首次转换后、二次压缩前的大小（字节）"
    )
    result_size_bytes: int | None = Field(None, description="输出文件大小（字节）")
    output_path: Path | None = Field(None, description="输出文件路径")
    error: str | None = Field(None, description="错误或跳过原因")

    @property
    def success(self) -> bool:
        return self.status.is_success

    def get_summary(self) -> str:
        """单文件结果摘要"""
        match self.status:
            case OutcomeStatus.FAILED:
                return f"{self.file_name}: 失败 - {self.error}"
            case OutcomeStatus.SKIPPED:
                return f"{self.file_name}: 跳过 - {self.error}"
            case _:
                size = format_size(self.result_size_bytes or 0)
                return f"{self.file_name}: {self.status.value} ({size})"


class BatchResult(BaseModel):
    """批量转换结果"""

    input_dir: Path | None = Field(None, description="输入目录")
    output_dir: Path | None = Field(None, description="输出目录")
    group_count: int = Field(0, ge=0, description="分组数量")
    outcomes: list[TaskOutcome] = Field(default_factory=list, description="所有文件的结果")

    @classmethod
    def aggregate(
        cls,
        outcomes: list[TaskOutcome],
        input_dir: Path | None = None,
        output_dir: Path | None = None,
        group_count: int = 0,
    ) -> "BatchResult":
        """汇总结果；计数与完成顺序无关，结果按文件名排序"""
        return cls(
            input_dir=input_dir,
            output_dir=output_dir,
            group_count=group_count,
            outcomes=sorted(outcomes, key=lambda o: o.file_name),
        )

    def _count(self, *statuses: OutcomeStatus) -> int:
        return sum(1 for o in self.outcomes if o.status in statuses)

    @property
    def total_files(self) -> int:
        return len(self.outcomes)

    @property
    def succeeded(self) -> int:
        return self._count(OutcomeStatus.CONVERTED, OutcomeStatus.COMPRESSED)

    @property
    def converted(self) -> int:
        return self._count(OutcomeStatus.CONVERTED)

    @property
    def compressed(self) -> int:
        return self._count(OutcomeStatus.COMPRESSED)

    @property
    def skipped(self) -> int:
        return self._count(OutcomeStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(OutcomeStatus.FAILED)

    def get_failed_items(self) -> list[TaskOutcome]:
        return [o for o in self.outcomes if o.status == OutcomeStatus.FAILED]

    def get_total_output_size(self) -> int:
        """成功输出的总大小"""
        return sum(o.result_size_bytes or 0 for o in self.outcomes if o.success)

    def get_summary(self) -> str:
        """批量处理摘要"""
        return (
            f"处理 {self.total_files} 个文件: 成功 {self.succeeded} "
            f"(其中压缩 {self.compressed}), 跳过 {self.skipped}, 失败 {self.failed}, "
            f"输出共 {format_size(self.get_total_output_size())}"
        )

    def to_summary_dict(self) -> "BatchSummary":
        return {
            "totalFiles": self.total_files,
            "succeeded": self.succeeded,
            "converted": self.converted,
            "compressed": self.compressed,
            "skipped": self.skipped,
            "failed": self.failed,
            "groups": self.group_count,
        }


class BatchSummary(TypedDict):
    """对外响应中的批量统计"""

    totalFiles: int
    succeeded: int
    converted: int
    compressed: int
    skipped: int
    failed: int
    groups: int
