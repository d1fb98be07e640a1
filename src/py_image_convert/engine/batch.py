"""批量编排模块。

分区后逐组执行：准入判定、并发转换，最后汇总为批量结果。
"""

from concurrent.futures import ThreadPoolExecutor
from functools import partial
from pathlib import Path
from typing import ClassVar

from ..core.gate import FileGate
from ..core.transformer import ImageTransformer, Transformer, transform_task
from ..exceptions import InvalidStateTransitionError
from ..models.conversion_policy import (
    ConcurrencyScope,
    ConversionPolicy,
    ExecutionConfig,
)
from ..models.conversion_result import (
    BatchGroup,
    BatchResult,
    BatchState,
    FileTask,
    TaskOutcome,
)
from ..utils.logging_helpers import get_logger
from .concurrent_executor import ConcurrencyLimiter, ConcurrentExecutor, WorkFunction
from .partitioner import partition


logger = get_logger()


class BatchStateMachine:
    """单个批次的状态机

    pending -> listing -> partitioning -> executing -> aggregated，
    文件处理开始前的准备错误进入 failed。单文件失败不改变批次状态。
    """

    TRANSITIONS: ClassVar[dict[BatchState, set[BatchState]]] = {
        BatchState.PENDING: {BatchState.LISTING, BatchState.PARTITIONING, BatchState.FAILED},
        BatchState.LISTING: {BatchState.PARTITIONING, BatchState.FAILED},
        BatchState.PARTITIONING: {BatchState.EXECUTING, BatchState.FAILED},
        BatchState.EXECUTING: {BatchState.AGGREGATED, BatchState.FAILED},
        BatchState.AGGREGATED: set(),
        BatchState.FAILED: set(),
    }

    def __init__(self) -> None:
        self.state = BatchState.PENDING
        self.history: list[BatchState] = [BatchState.PENDING]

    def transition(self, new_state: BatchState) -> None:
        """执行状态转换

        Raises:
            InvalidStateTransitionError: 转换不被允许
        """
        if new_state not in self.TRANSITIONS[self.state]:
            raise InvalidStateTransitionError(self.state.value, new_state.value)
        logger.debug(f"批次状态: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)


class BatchOrchestrator:
    """批量转换编排器

    并发参数在构造时传入，不依赖任何进程级单例。
    """

    def __init__(
        self,
        execution_config: ExecutionConfig | None = None,
        transformer: Transformer | None = None,
        gate: FileGate | None = None,
    ):
        """初始化编排器

        Args:
            execution_config: 并发上限、分组大小与并发作用范围
            transformer: 转换适配器
            gate: 文件准入判定
        """
        self.execution_config = execution_config or ExecutionConfig()
        self.transformer = transformer or ImageTransformer()
        self.gate = gate or FileGate()
        self.executor = ConcurrentExecutor(
            max_workers=self.execution_config.concurrency_cap,
            executor_type=self.execution_config.executor_type,
        )

    def run(
        self,
        files: list[FileTask],
        policy: ConversionPolicy,
        output_dir: Path,
        input_dir: Path | None = None,
        state: BatchStateMachine | None = None,
    ) -> BatchResult:
        """执行批量转换

        Args:
            files: 有序文件任务
            policy: 转换策略
            output_dir: 输出目录（需已存在）
            input_dir: 输入目录，仅用于结果展示
            state: 调用方持有的状态机

        Returns:
            BatchResult: 批量结果
        """
        state = state or BatchStateMachine()
        config = self.execution_config

        state.transition(BatchState.PARTITIONING)
        groups = partition(files, config.group_size)

        state.transition(BatchState.EXECUTING)
        logger.info(
            f"开始批量转换: {len(files)} 个文件, {len(groups)} 个分组, "
            f"目标格式 {policy.target_format.value}, 并发上限 {config.concurrency_cap} "
            f"({config.concurrency_scope.value}, 峰值不超过 {config.peak_concurrency})"
        )

        work = partial(
            transform_task,
            policy=policy,
            output_dir=output_dir,
            transformer=self.transformer,
        )

        if config.concurrency_scope == ConcurrencyScope.GLOBAL:
            outcomes = self._run_shared(groups, policy, work)
        else:
            outcomes = self._run_per_group(groups, policy, work)

        result = BatchResult.aggregate(
            outcomes,
            input_dir=input_dir,
            output_dir=output_dir,
            group_count=len(groups),
        )
        state.transition(BatchState.AGGREGATED)
        logger.info(f"批量转换完成: {result.get_summary()}")
        return result

    def _admit(
        self, group: BatchGroup, policy: ConversionPolicy
    ) -> tuple[list[TaskOutcome], list[FileTask]]:
        """准入判定在获取并发名额之前完成，返回 (跳过结果, 准入任务)"""
        logger.debug(
            f"分组 {group.index + 1}: {[task.file_name for task in group.tasks]}"
        )

        skipped: list[TaskOutcome] = []
        admitted: list[FileTask] = []
        for task in group.tasks:
            decision = self.gate.admit(task, policy)
            if decision.admitted:
                admitted.append(task)
            else:
                skipped.append(FileGate.skipped_outcome(task, decision))
        return skipped, admitted

    def _run_shared(
        self,
        groups: list[BatchGroup],
        policy: ConversionPolicy,
        work: WorkFunction,
    ) -> list[TaskOutcome]:
        """global 作用范围：所有分组共享一个限制器

        分组重叠时按分组顺序把所有准入任务送入同一个执行池，
        线程数只取决于并发上限；否则逐组执行，组间等待。
        """
        limiter = ConcurrencyLimiter(self.execution_config.concurrency_cap)
        outcomes: list[TaskOutcome] = []

        if self.execution_config.overlap_groups:
            admitted: list[FileTask] = []
            for group in groups:
                skipped, group_admitted = self._admit(group, policy)
                outcomes.extend(skipped)
                admitted.extend(group_admitted)
            outcomes.extend(self.executor.run_all(admitted, work, limiter))
            return outcomes

        for group in groups:
            skipped, admitted = self._admit(group, policy)
            outcomes.extend(skipped)
            outcomes.extend(self.executor.run_all(admitted, work, limiter))
        return outcomes

    def _run_per_group(
        self,
        groups: list[BatchGroup],
        policy: ConversionPolicy,
        work: WorkFunction,
    ) -> list[TaskOutcome]:
        """per_group 作用范围：每个分组独立的限制器

        分组重叠时最多 max_parallel_groups 个分组同时执行。
        """
        config = self.execution_config
        outcomes: list[TaskOutcome] = []

        if not config.overlap_groups or len(groups) <= 1:
            for group in groups:
                outcomes.extend(self._run_group(group, policy, work))
            return outcomes

        parallel_groups = min(len(groups), config.max_parallel_groups)
        with ThreadPoolExecutor(
            max_workers=parallel_groups, thread_name_prefix="batch-group"
        ) as group_pool:
            futures = [
                group_pool.submit(self._run_group, group, policy, work)
                for group in groups
            ]
            for future in futures:
                outcomes.extend(future.result())

        return outcomes

    def _run_group(
        self,
        group: BatchGroup,
        policy: ConversionPolicy,
        work: WorkFunction,
    ) -> list[TaskOutcome]:
        """执行单个分组，使用该分组自己的限制器"""
        outcomes, admitted = self._admit(group, policy)
        limiter = ConcurrencyLimiter(self.execution_config.concurrency_cap)
        outcomes.extend(self.executor.run_all(admitted, work, limiter))
        return outcomes
