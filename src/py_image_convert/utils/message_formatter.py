"""消息格式化工具模块。

提供统一的错误消息、进度消息格式化功能。
"""

from pathlib import Path
from typing import Any

from humanize import naturalsize


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def directory_not_found(directory: str | Path) -> str:
        """目录不存在错误消息"""
        return f"目录不存在: {directory}"

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"路径不是目录: {path}"

    @staticmethod
    def no_files_found(directory: str | Path) -> str:
        return f"目录中没有文件: {directory}"

    @staticmethod
    def permission_error(path: str | Path, operation: str = "访问") -> str:
        """权限错误消息"""
        return f"权限错误，无法{operation}: {path}"

    @staticmethod
    def unsupported_format(value: Any, supported: list[str]) -> str:
        return f"不支持的格式: {value}，支持的格式: {', '.join(supported)}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation}失败: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation}失败 [{path}]: {error}"

    @staticmethod
    def skipped_oversize(file_name: str, size_bytes: int, limit_bytes: int) -> str:
        return (
            f"跳过 {file_name} (大小: {_human(size_bytes)}) - 超过 {_human(limit_bytes)} 限制"
        )

    @staticmethod
    def converted(file_name: str, size_bytes: int) -> str:
        return f"已转换 {file_name} (大小: {_human(size_bytes)}) - 无需压缩"

    @staticmethod
    def compressing(file_name: str, size_bytes: int) -> str:
        return f"压缩 {file_name} (转换后大小: {_human(size_bytes)})"

    @staticmethod
    def compressed(file_name: str, size_bytes: int) -> str:
        return f"已压缩并保存 {file_name} (最终大小: {_human(size_bytes)})"


def _human(size_bytes: int) -> str:
    return naturalsize(size_bytes, binary=True)
