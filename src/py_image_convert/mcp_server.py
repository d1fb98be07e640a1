"""批量图片转换 MCP 服务器。

以 MCP 工具的形式提供与 HTTP 接口相同的目录批量转换。
"""

import logging
from typing import Any

from fastmcp import FastMCP

from .config import get_config
from .converter import ImageConverter
from .exceptions import ConfigError, NoFilesFoundError, SetupError
from .models.constants import ImageFormats
from .models.conversion_result import BatchResult
from .utils.logging_helpers import setup_logging
from .utils.message_formatter import MessageFormatter
from .utils.path_helpers import resolve_directories


# MCP 服务器响应类型定义
MCPConvertResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(
        message: str, supported_formats: list[str] | None = None
    ) -> dict[str, Any]:
        """构建验证错误结果，附带支持的格式"""
        details = {"supported_formats": supported_formats} if supported_formats else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="validation",
            details=details,
        )

    @staticmethod
    def file_error(message: str, file_path: str | None = None) -> dict[str, Any]:
        """构建文件相关错误结果。

        Args:
            message: 错误消息
            file_path: 相关文件路径

        Returns:
            dict: 文件错误响应
        """
        details = {"file_path": file_path} if file_path else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="file",
            details=details,
        )

    @staticmethod
    def batch_result(result: BatchResult) -> dict[str, Any]:
        """构建批量转换结果"""
        return {
            "success": True,
            "message": f"所有图片已处理并保存到 {result.output_dir}",
            "outputDirectory": str(result.output_dir),
            "summary": result.to_summary_dict(),
            "text": result.get_summary(),
            "failures": [
                {"file": outcome.file_name, "error": outcome.error}
                for outcome in result.get_failed_items()
            ],
        }


logger = logging.getLogger(__name__)

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("批量图片转换服务")

# 全局转换器实例
converter = ImageConverter()


@mcp.tool()
def convert_all(
    convert_format: str,
    directory: str | None = None,
    output_directory: str | None = None,
    folder_name: str | None = None,
) -> MCPConvertResponse:
    """批量转换目录中的所有图片

    超过大小上限的文件被跳过，转换结果超过压缩阈值时以固定质量二次压缩。

    Args:
        convert_format: 目标格式 jpeg / png / webp / gif / avif
        directory: 源目录（默认图片目录）
        output_directory: 输出目录（默认下载目录/upload-images）
        folder_name: 追加在输出目录后的子目录

    Returns:
        dict: 批量统计结果
    """
    app_config = get_config()
    try:
        policy = converter.build_policy(
            convert_format, allowed_formats=ImageFormats.HTTP_FORMATS
        )
        paths = resolve_directories(
            directory,
            output_directory,
            folder_name,
            default_input=app_config.paths.SOURCE_DIR,
            default_output=app_config.paths.OUTPUT_DIR,
        )
        result = converter.convert_directory(paths.input_dir, paths.output_dir, policy)
        return MCPResponseBuilder.batch_result(result)

    except ConfigError as e:
        return MCPResponseBuilder.validation_error(e.message, e.supported_formats)
    except NoFilesFoundError as e:
        return MCPResponseBuilder.file_error(e.message, str(e.path) if e.path else None)
    except SetupError as e:
        logger.error(MessageFormatter.operation_failed("批量转换", directory or "", e))
        return MCPResponseBuilder.file_error(e.message, str(e.path) if e.path else None)


@mcp.tool()
def get_supported_formats() -> dict[str, Any]:
    """列出当前环境可写出的目标格式及别名"""
    writable = converter.policy_builder.supported_formats(ImageFormats.HTTP_FORMATS)
    return {
        "success": True,
        "formats": [fmt.value for fmt in writable],
        "aliases": dict(ImageFormats.ALIASES),
    }


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    setup_logging(get_config().logging)
    logger.info("启动批量图片转换 MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
