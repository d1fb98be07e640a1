"""文件准入模块。

在任务进入并发流水线之前按文件大小过滤，不占用并发名额。
"""

from dataclasses import dataclass

from ..models.conversion_policy import ConversionPolicy
from ..models.conversion_result import FileTask, OutcomeStatus, TaskOutcome
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

SIZE_LIMIT_REASON = "exceeds size limit"


@dataclass(frozen=True, slots=True)
class GateDecision:
    """准入判定结果"""

    admitted: bool
    reason: str | None = None


ADMITTED = GateDecision(admitted=True)


class FileGate:
    """基于文件大小的准入判定"""

    def admit(self, task: FileTask, policy: ConversionPolicy) -> GateDecision:
        """判定文件是否进入转换流程

        size_bytes <= max_file_size 时准入，否则跳过并记录一条 INFO 日志。
        """
        if not policy.should_skip(task.size_bytes):
            return ADMITTED

        logger.info(
            MessageFormatter.skipped_oversize(
                task.file_name, task.size_bytes, policy.max_file_size
            )
        )
        return GateDecision(admitted=False, reason=SIZE_LIMIT_REASON)

    @staticmethod
    def skipped_outcome(task: FileTask, decision: GateDecision) -> TaskOutcome:
        return TaskOutcome(
            file_name=task.file_name,
            status=OutcomeStatus.SKIPPED,
            source_size_bytes=task.size_bytes,
            error=decision.reason,
        )
