"""配置构建器模块。

统一的转换策略与执行配置构建逻辑，集成参数验证功能。
"""

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..config import AppConfig, get_config
from ..core.formats import FormatProcessor
from ..exceptions import ConfigError
from ..models.constants import ImageFormats, TargetFormat, normalize_format_name
from ..models.conversion_policy import ConversionPolicy, ExecutionConfig
from ..utils.message_formatter import MessageFormatter


logger = logging.getLogger(__name__)


class PolicyBuilder:
    """转换策略构建器

    提供统一的配置构建接口和参数验证，缺省值取自应用配置。
    所有验证失败都以 ConfigError 抛出。
    """

    def __init__(
        self,
        app_config: AppConfig | None = None,
        format_processor: FormatProcessor | None = None,
    ):
        """初始化配置构建器

        Args:
            app_config: 应用配置，None 时使用全局配置
            format_processor: 格式处理器，用于检查 Pillow 能否写出目标格式
        """
        self.app_config = app_config or get_config()
        self.format_processor = format_processor or FormatProcessor()

    def supported_formats(
        self, allowed: tuple[TargetFormat, ...] = ImageFormats.ALL_FORMATS
    ) -> tuple[TargetFormat, ...]:
        """允许且当前 Pillow 可写的格式"""
        return tuple(fmt for fmt in allowed if self.format_processor.is_supported(fmt))

    def parse_format(
        self,
        value: Any,
        allowed: tuple[TargetFormat, ...] = ImageFormats.ALL_FORMATS,
    ) -> TargetFormat:
        """解析并验证目标格式

        Args:
            value: 用户输入的格式（大小写不敏感，支持 jpg/tif 别名）
            allowed: 允许的格式

        Returns:
            TargetFormat: 目标格式

        Raises:
            ConfigError: 格式缺失、不允许或 Pillow 无法写出，错误中附带支持的格式列表
        """
        writable = self.supported_formats(allowed)
        supported = ImageFormats.names(writable) if writable else []
        if isinstance(value, TargetFormat):
            target = value
        elif isinstance(value, str) and value.strip():
            try:
                target = TargetFormat(normalize_format_name(value))
            except ValueError:
                target = None
        else:
            target = None

        if target is None or target not in writable:
            raise ConfigError(
                MessageFormatter.unsupported_format(value, supported),
                supported_formats=supported,
            )
        return target

    def build_policy(
        self,
        convert_format: Any,
        max_file_size: int | None = None,
        compression_threshold: int | None = None,
        compression_quality: int | None = None,
        allowed_formats: tuple[TargetFormat, ...] = ImageFormats.ALL_FORMATS,
    ) -> ConversionPolicy:
        """构建转换策略

        Args:
            convert_format: 目标格式
            max_file_size: 跳过阈值（字节）
            compression_threshold: 二次压缩阈值（字节）
            compression_quality: 二次压缩质量 1-100
            allowed_formats: 允许的格式

        Returns:
            ConversionPolicy: 不可变的转换策略

        Raises:
            ConfigError: 参数验证失败
        """
        defaults = self.app_config.conversion
        target_format = self.parse_format(convert_format, allowed_formats)

        try:
            return ConversionPolicy(
                target_format=target_format,
                max_file_size=(
                    defaults.MAX_FILE_SIZE if max_file_size is None else max_file_size
                ),
                compression_threshold=(
                    defaults.COMPRESSION_THRESHOLD
                    if compression_threshold is None
                    else compression_threshold
                ),
                compression_quality=(
                    defaults.COMPRESSION_QUALITY
                    if compression_quality is None
                    else compression_quality
                ),
            )
        except PydanticValidationError as e:
            raise ConfigError(self._format_validation_error(e)) from e

    def build_execution_config(self, **overrides: Any) -> ExecutionConfig:
        """构建执行配置

        Args:
            **overrides: 覆盖应用配置的字段（concurrency_cap、group_size 等）

        Returns:
            ExecutionConfig: 不可变的执行配置

        Raises:
            ConfigError: 参数验证失败
        """
        defaults = self.app_config.execution
        values: dict[str, Any] = {
            "concurrency_cap": defaults.CONCURRENCY_CAP,
            "group_size": defaults.GROUP_SIZE,
            "concurrency_scope": defaults.CONCURRENCY_SCOPE,
            "overlap_groups": defaults.OVERLAP_GROUPS,
            "max_parallel_groups": defaults.MAX_PARALLEL_GROUPS,
            "executor_type": defaults.EXECUTOR_TYPE,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return ExecutionConfig(**values)
        except PydanticValidationError as e:
            raise ConfigError(self._format_validation_error(e)) from e

    def _format_validation_error(self, error: PydanticValidationError) -> str:
        """格式化验证错误"""
        messages = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            msg = err["msg"]
            if field:
                messages.append(f"{field}: {msg}")
            else:
                messages.append(msg)
        return "; ".join(messages)
