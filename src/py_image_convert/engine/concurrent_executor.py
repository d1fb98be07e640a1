"""并发执行器模块。

在并发上限内执行单文件任务，单个任务失败不影响其他任务。
"""

import logging
import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor
from typing import Any

from ..exceptions import ConfigError, ErrorHandler
from ..models.conversion_policy import ExecutorType
from ..models.conversion_result import FileTask, OutcomeStatus, TaskOutcome
from ..utils.message_formatter import MessageFormatter


logger = logging.getLogger(__name__)

WorkFunction = Callable[[FileTask], TaskOutcome]


class ConcurrencyLimiter:
    """计数信号量

    调度时获取，任务完成时释放。可以在多个分组之间共享，
    从而让整个批次的并发数不超过 capacity。
    """

    def __init__(self, capacity: int):
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity <= 0:
            raise ConfigError(f"并发上限必须是正整数，当前值: {capacity}")
        self.capacity = capacity
        self._semaphore = threading.BoundedSemaphore(capacity)
        self._lock = threading.Lock()
        self._in_flight = 0
        self._peak = 0

    def acquire(self) -> None:
        self._semaphore.acquire()
        with self._lock:
            self._in_flight += 1
            self._peak = max(self._peak, self._in_flight)

    def release(self) -> None:
        with self._lock:
            self._in_flight -= 1
        self._semaphore.release()

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def peak(self) -> int:
        """同时占用名额的最大数量

        名额在提交前获取，包含已提交但尚未开始执行的任务。
        """
        return self._peak


def log_outcome(outcome: TaskOutcome) -> None:
    """按结果类型记录日志，日志顺序即完成顺序"""
    match outcome.status:
        case OutcomeStatus.CONVERTED:
            logger.info(
                MessageFormatter.converted(outcome.file_name, outcome.result_size_bytes or 0)
            )
        case OutcomeStatus.COMPRESSED:
            logger.info(
                MessageFormatter.compressing(
                    outcome.file_name, outcome.converted_size_bytes or 0
                )
            )
            logger.info(
                MessageFormatter.compressed(outcome.file_name, outcome.result_size_bytes or 0)
            )
        case OutcomeStatus.FAILED:
            logger.warning(f"处理失败: {outcome.file_name} - {outcome.error}")
        case OutcomeStatus.SKIPPED:
            logger.debug(f"已跳过: {outcome.file_name} - {outcome.error}")


class ConcurrentExecutor:
    """有界并发执行器

    同一时刻最多 max_workers 个任务在执行；一个任务完成后立即放行下一个排队任务，
    放行顺序与提交顺序一致。
    """

    def __init__(
        self,
        max_workers: int = 4,
        executor_type: ExecutorType = ExecutorType.THREAD,
    ):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数
            executor_type: 执行器类型，进程池要求 work 函数可被 pickle
        """
        if isinstance(max_workers, bool) or not isinstance(max_workers, int) or max_workers <= 0:
            raise ConfigError(f"max_workers 必须是正整数，当前值: {max_workers}")
        self.max_workers = max_workers
        self.executor_type = ExecutorType(executor_type)

    def run_all(
        self,
        tasks: Sequence[FileTask],
        work: WorkFunction,
        limiter: ConcurrencyLimiter | None = None,
    ) -> list[TaskOutcome]:
        """执行所有任务并收集结果

        Args:
            tasks: 文件任务列表
            work: 单文件处理函数
            limiter: 共享的并发限制器，None 时使用 max_workers 新建

        Returns:
            list[TaskOutcome]: 每个任务恰好一个结果，顺序为完成顺序
        """
        if not tasks:
            return []

        limiter = limiter or ConcurrencyLimiter(self.max_workers)
        results: list[TaskOutcome] = []
        results_lock = threading.Lock()
        executor_class = self._choose_executor()

        # 池大小不超过限制器容量，排队由限制器负责
        pool_size = min(limiter.capacity, len(tasks))
        with executor_class(max_workers=pool_size) as executor:
            self._submit_tasks(executor, tasks, work, limiter, results, results_lock)

        return results

    def _submit_tasks(
        self,
        executor: Any,
        tasks: Sequence[FileTask],
        work: WorkFunction,
        limiter: ConcurrencyLimiter,
        results: list[TaskOutcome],
        results_lock: threading.Lock,
    ) -> None:
        """按顺序获取名额并提交任务"""
        for task in tasks:
            limiter.acquire()
            try:
                future = executor.submit(work, task)
            except Exception as e:
                limiter.release()
                error_result = ErrorHandler.handle_with_context(
                    e, task, "任务提交", log_level="error"
                )
                with results_lock:
                    results.append(error_result)
                continue

            future.add_done_callback(
                self._collect_result(task, limiter, results, results_lock)
            )

    @staticmethod
    def _collect_result(
        task: FileTask,
        limiter: ConcurrencyLimiter,
        results: list[TaskOutcome],
        results_lock: threading.Lock,
    ) -> Callable[[Future], None]:
        """构造完成回调：记录结果并释放名额"""

        def on_done(future: Future) -> None:
            try:
                error = future.exception()
                if error is None:
                    outcome = future.result()
                else:
                    outcome = ErrorHandler.handle_with_context(
                        error, task, "并发任务处理", log_level="error"
                    )
                # 结果先入列，再写日志
                with results_lock:
                    results.append(outcome)
                if error is None:
                    log_outcome(outcome)
            finally:
                limiter.release()

        return on_done

    def _choose_executor(self) -> type:
        """根据配置选择执行器类"""
        if self.executor_type == ExecutorType.PROCESS:
            logger.debug(f"使用ProcessPoolExecutor: 并发上限={self.max_workers}")
            return ProcessPoolExecutor

        logger.debug(f"使用ThreadPoolExecutor: 并发上限={self.max_workers}")
        return ThreadPoolExecutor
