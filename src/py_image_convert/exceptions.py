"""图像转换异常处理模块。

定义统一的异常类和错误处理机制，包含 Pillow 异常到编解码错误的转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.conversion_result import FileTask, OutcomeStatus, TaskOutcome
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


# 统一的异常类型
class ConversionError(Exception):
    """转换相关错误基类"""

    def __init__(self, message: str, path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigError(ConversionError):
    """配置错误：格式不支持、分组大小或并发数非法，批次不会开始"""

    def __init__(
        self,
        message: str,
        path: Path | None = None,
        supported_formats: list[str] | None = None,
    ):
        super().__init__(message, path)
        self.supported_formats = supported_formats


class SetupError(ConversionError):
    """准备阶段错误：源目录不存在或不可读"""

    pass


class NoFilesFoundError(SetupError):
    """源目录中没有文件"""

    pass


class CodecError(ConversionError):
    """单个文件的解码、编码或压缩失败"""

    pass


class InvalidStateTransitionError(ConversionError):
    """批次状态转换非法"""

    def __init__(self, old_state: str, new_state: str):
        super().__init__(f"非法的批次状态转换: {old_state} -> {new_state}")
        self.old_state = old_state
        self.new_state = new_state


def handle_image_errors(operation_name: str = "图像转换"):
    """统一的图像处理异常处理装饰器

    将 Pillow 和文件系统异常转换为 CodecError。

    Args:
        operation_name: 操作名称，用于错误消息
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except CodecError:
                raise
            except UnidentifiedImageError as e:
                raise CodecError(f"{operation_name} - 无法识别图像格式: {e}") from e
            except DecompressionBombError as e:
                raise CodecError(f"{operation_name} - 图像过大: {e}") from e
            except OSError as e:
                raise CodecError(f"{operation_name} - 文件操作失败: {e}") from e
            except (ValueError, TypeError, KeyError) as e:
                raise CodecError(f"{operation_name} - 编码参数错误: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    把单文件异常转换为 failed 结果并记录日志，异常不会越过批次边界。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称（如"格式转换"、"并发任务处理"等）
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def create_failed_outcome(task: FileTask, error_msg: str) -> TaskOutcome:
        """创建标准化的失败结果"""
        return TaskOutcome(
            file_name=task.file_name,
            status=OutcomeStatus.FAILED,
            source_size_bytes=task.size_bytes,
            error=error_msg,
        )

    @staticmethod
    def handle_with_context(
        error: Exception,
        task: FileTask,
        operation: str = "未知操作",
        log_level: str = "error",
    ) -> TaskOutcome:
        """记录日志并返回失败结果

        Args:
            error: 异常对象
            task: 出错的文件任务
            operation: 操作名称
            log_level: 日志级别

        Returns:
            TaskOutcome: 标准化的失败结果
        """
        ErrorHandler._log_error(operation, task.source_path, error, log_level)
        return ErrorHandler.create_failed_outcome(task, f"{operation}: {error}")

    @staticmethod
    def failed_outcome(
        error: Exception, task: FileTask, operation: str = "格式转换"
    ) -> TaskOutcome:
        """把单文件异常转换为 failed 结果（不记录日志）"""
        match error:
            case CodecError() as ce:
                message = ce.message
            case PermissionError() as pe:
                message = f"{operation} - 权限错误: {pe}"
            case OSError() as ose:
                message = f"{operation} - 系统错误: {ose}"
            case _:
                message = f"{operation}: {error}"
        return ErrorHandler.create_failed_outcome(task, message)
