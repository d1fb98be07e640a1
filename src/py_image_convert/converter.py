"""图像批量转换器接口。

核心入口：接收已解析的目录，完成目录检查、列出文件并驱动批量编排。
"""

from pathlib import Path
from typing import Any

from .core.transformer import Transformer
from .engine.batch import BatchOrchestrator, BatchStateMachine
from .engine.config import PolicyBuilder
from .exceptions import ConversionError, NoFilesFoundError, SetupError
from .models.constants import ImageFormats, TargetFormat
from .models.conversion_policy import ConversionPolicy, ExecutionConfig
from .models.conversion_result import BatchResult, BatchState, FileTask
from .utils.file_helpers import list_file_tasks
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()


class ImageConverter:
    """图像批量转换器。

    提供目录级别的批量转换接口，配置错误与准备错误在任何文件处理前抛出，
    单文件失败只体现在结果统计中。
    """

    def __init__(
        self,
        execution_config: ExecutionConfig | None = None,
        transformer: Transformer | None = None,
        policy_builder: PolicyBuilder | None = None,
    ):
        """初始化转换器。

        Args:
            execution_config: 执行配置，None 时按应用配置构建
            transformer: 转换适配器
            policy_builder: 策略构建器
        """
        self.policy_builder = policy_builder or PolicyBuilder()
        self.execution_config = (
            execution_config or self.policy_builder.build_execution_config()
        )
        self.orchestrator = BatchOrchestrator(
            execution_config=self.execution_config,
            transformer=transformer,
        )

        logger.debug("初始化图像批量转换器")

    def build_policy(
        self,
        convert_format: Any,
        allowed_formats: tuple[TargetFormat, ...] = ImageFormats.ALL_FORMATS,
        **overrides: Any,
    ) -> ConversionPolicy:
        """构建转换策略（ConfigError 直接抛出）"""
        return self.policy_builder.build_policy(
            convert_format, allowed_formats=allowed_formats, **overrides
        )

    def convert_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        policy: ConversionPolicy,
    ) -> BatchResult:
        """转换目录中的所有文件

        Args:
            input_dir: 源目录（已解析）
            output_dir: 输出目录（已解析，不存在时递归创建）
            policy: 转换策略

        Returns:
            BatchResult: 批量结果，包含部分失败

        Raises:
            SetupError: 源目录不存在、不可读或输出目录无法创建
            NoFilesFoundError: 源目录中没有文件（输出目录已创建）
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        state = BatchStateMachine()

        try:
            state.transition(BatchState.LISTING)
            files = self._list_files(input_dir)
            self._prepare_output_dir(output_dir)
            if not files:
                raise NoFilesFoundError(
                    MessageFormatter.no_files_found(input_dir), input_dir
                )
        except ConversionError as e:
            logger.error(f"批量转换准备失败: {e.message}")
            state.transition(BatchState.FAILED)
            raise

        return self.orchestrator.run(
            files, policy, output_dir, input_dir=input_dir, state=state
        )

    def _list_files(self, input_dir: Path) -> list[FileTask]:
        """列出源目录文件，文件系统错误转换为 SetupError"""
        try:
            return list_file_tasks(input_dir)
        except FileNotFoundError as e:
            raise SetupError(MessageFormatter.directory_not_found(input_dir), input_dir) from e
        except NotADirectoryError as e:
            raise SetupError(MessageFormatter.path_not_directory(input_dir), input_dir) from e
        except PermissionError as e:
            raise SetupError(
                MessageFormatter.permission_error(input_dir, "读取目录"), input_dir
            ) from e
        except OSError as e:
            raise SetupError(
                MessageFormatter.operation_failed("读取目录", input_dir, e), input_dir
            ) from e

    def _prepare_output_dir(self, output_dir: Path) -> None:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SetupError(
                MessageFormatter.operation_failed("创建输出目录", output_dir, e), output_dir
            ) from e
