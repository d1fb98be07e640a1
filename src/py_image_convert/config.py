"""统一配置管理模块。

提供应用程序的全局配置管理，包括默认值、环境变量支持等。
"""

import os
from dataclasses import dataclass
from pathlib import Path

from .models.constants import MB, ConversionDefaultValues, ExecutionDefaultValues
from .models.conversion_policy import ConcurrencyScope, ExecutorType


@dataclass(frozen=True)
class ConversionDefaults:
    """转换相关的默认配置"""

    # 超过该大小的文件直接跳过
    MAX_FILE_SIZE: int = ConversionDefaultValues.MAX_FILE_SIZE
    # 转换后超过该大小时二次压缩
    COMPRESSION_THRESHOLD: int = ConversionDefaultValues.COMPRESSION_THRESHOLD
    COMPRESSION_QUALITY: int = ConversionDefaultValues.COMPRESSION_QUALITY


@dataclass(frozen=True)
class ExecutionDefaults:
    """批量执行相关的默认配置"""

    CONCURRENCY_CAP: int = ExecutionDefaultValues.CONCURRENCY_CAP
    GROUP_SIZE: int = ExecutionDefaultValues.GROUP_SIZE
    CONCURRENCY_SCOPE: str = ConcurrencyScope.GLOBAL.value
    OVERLAP_GROUPS: bool = True
    MAX_PARALLEL_GROUPS: int = ExecutionDefaultValues.MAX_PARALLEL_GROUPS
    EXECUTOR_TYPE: str = ExecutorType.THREAD.value


@dataclass(frozen=True)
class PathDefaults:
    """目录相关的默认配置，None 表示使用平台默认目录"""

    SOURCE_DIR: Path | None = None
    OUTPUT_DIR: Path | None = None


@dataclass(frozen=True)
class ServerDefaults:
    """服务相关的默认配置"""

    HOST: str = "127.0.0.1"
    PORT: int = 3001


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "py_image_convert.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


def _env_bool(value: str) -> bool:
    return value.lower() in ("true", "1", "yes")


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.conversion = ConversionDefaults()
        self.execution = ExecutionDefaults()
        self.paths = PathDefaults()
        self.server = ServerDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        # 转换配置
        if max_size := os.getenv("PIC_MAX_FILE_SIZE_MB"):
            object.__setattr__(
                self.conversion, "MAX_FILE_SIZE", int(float(max_size) * MB)
            )

        if threshold := os.getenv("PIC_COMPRESS_THRESHOLD_MB"):
            object.__setattr__(
                self.conversion, "COMPRESSION_THRESHOLD", int(float(threshold) * MB)
            )

        if quality := os.getenv("PIC_COMPRESS_QUALITY"):
            object.__setattr__(self.conversion, "COMPRESSION_QUALITY", int(quality))

        # 执行配置
        if cap := os.getenv("PIC_CONCURRENCY_CAP"):
            object.__setattr__(self.execution, "CONCURRENCY_CAP", int(cap))

        if group_size := os.getenv("PIC_GROUP_SIZE"):
            object.__setattr__(self.execution, "GROUP_SIZE", int(group_size))

        if scope := os.getenv("PIC_CONCURRENCY_SCOPE"):
            object.__setattr__(self.execution, "CONCURRENCY_SCOPE", scope.lower())

        if overlap := os.getenv("PIC_OVERLAP_GROUPS"):
            object.__setattr__(self.execution, "OVERLAP_GROUPS", _env_bool(overlap))

        if parallel_groups := os.getenv("PIC_MAX_PARALLEL_GROUPS"):
            object.__setattr__(self.execution, "MAX_PARALLEL_GROUPS", int(parallel_groups))

        if executor_type := os.getenv("PIC_EXECUTOR_TYPE"):
            object.__setattr__(self.execution, "EXECUTOR_TYPE", executor_type.lower())

        # 目录配置
        if source_dir := os.getenv("PIC_SOURCE_DIR"):
            object.__setattr__(self.paths, "SOURCE_DIR", Path(source_dir))

        if output_dir := os.getenv("PIC_OUTPUT_DIR"):
            object.__setattr__(self.paths, "OUTPUT_DIR", Path(output_dir))

        # 服务配置
        if host := os.getenv("PIC_HOST"):
            object.__setattr__(self.server, "HOST", host)

        if port := os.getenv("PIC_PORT"):
            object.__setattr__(self.server, "PORT", int(port))

        # 日志配置
        if log_level := os.getenv("PIC_LOG_LEVEL"):
            object.__setattr__(self.logging, "LOG_LEVEL", log_level.upper())

        if enable_file_log := os.getenv("PIC_ENABLE_FILE_LOGGING"):
            object.__setattr__(
                self.logging, "ENABLE_FILE_LOGGING", _env_bool(enable_file_log)
            )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
