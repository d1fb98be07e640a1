"""批量图片转换 HTTP 服务。

FastAPI 应用工厂，提供 POST /convert-all 接口。
"""

import asyncio
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from . import __version__
from .config import AppConfig, get_config
from .converter import ImageConverter
from .exceptions import ConfigError, NoFilesFoundError, SetupError
from .models.constants import ImageFormats
from .utils.logging_helpers import setup_logging
from .utils.path_helpers import resolve_directories


logger = logging.getLogger(__name__)

SETUP_FAILED_MESSAGE = "处理图片时发生错误"


class ConvertAllRequest(BaseModel):
    """POST /convert-all 请求体"""

    model_config = ConfigDict(populate_by_name=True)

    directory: str | None = Field(None, description="源目录，缺省为图片目录")
    convert_format: str = Field(
        ...,
        alias="convertFormat",
        description=f"目标格式: {', '.join(ImageFormats.names(ImageFormats.HTTP_FORMATS))}",
    )
    output_directory: str | None = Field(
        None, alias="outputDirectory", description="输出目录，缺省为下载目录/upload-images"
    )
    folder_name: str | None = Field(
        None, alias="folderName", description="追加在输出目录后的子目录"
    )


class BatchSummaryModel(BaseModel):
    """批量统计"""

    totalFiles: int
    succeeded: int
    converted: int
    compressed: int
    skipped: int
    failed: int
    groups: int


class ConvertAllResponse(BaseModel):
    """转换完成响应（包含部分失败）"""

    message: str
    outputDirectory: str
    summary: BatchSummaryModel


class ErrorResponse(BaseModel):
    """错误响应"""

    error: str = Field(..., description="错误概要")
    detail: str | None = Field(None, description="详细信息")
    supportedFormats: list[str] | None = Field(None, description="支持的格式")


class HealthResponse(BaseModel):
    """健康检查响应"""

    status: str = Field(default="healthy")
    version: str = Field(default=__version__)


async def run_blocking(func: Any, *args: Any, **kwargs: Any) -> Any:
    """在线程中执行阻塞函数，避免阻塞事件循环"""
    return await asyncio.to_thread(func, *args, **kwargs)


def _error(status_code: int, error: str, detail: str | None = None, **extra: Any) -> JSONResponse:
    content = ErrorResponse(error=error, detail=detail, **extra).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    converter: ImageConverter | None = None,
    app_config: AppConfig | None = None,
) -> FastAPI:
    """创建 FastAPI 应用

    Args:
        converter: 批量转换器，None 时按应用配置创建
        app_config: 应用配置，None 时使用全局配置
    """
    app_config = app_config or get_config()
    setup_logging(app_config.logging)

    converter = converter or ImageConverter()

    app = FastAPI(
        title="Image Batch Convert API",
        description="把目录中的图片批量转换为目标格式，超过阈值时二次压缩。",
        version=__version__,
    )
    app.state.converter = converter
    app.state.app_config = app_config

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """请求体验证失败统一返回 400"""
        return _error(
            400,
            "Validation error",
            str(exc.errors()),
            supportedFormats=[
                fmt.value
                for fmt in converter.policy_builder.supported_formats(ImageFormats.HTTP_FORMATS)
            ],
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(request: Request, exc: ConfigError):
        return _error(
            400,
            "Invalid request",
            exc.message,
            supportedFormats=exc.supported_formats,
        )

    @app.exception_handler(NoFilesFoundError)
    async def no_files_handler(request: Request, exc: NoFilesFoundError):
        return _error(404, "No files found", exc.message)

    @app.exception_handler(SetupError)
    async def setup_error_handler(request: Request, exc: SetupError):
        logger.error(f"批量转换失败: {exc.message}")
        return _error(500, SETUP_FAILED_MESSAGE)

    @app.get("/", response_model=HealthResponse)
    async def root():
        return HealthResponse(status="healthy", version=__version__)

    @app.get("/health", response_model=HealthResponse)
    async def health_check():
        return HealthResponse(status="healthy", version=__version__)

    @app.post(
        "/convert-all",
        response_model=ConvertAllResponse,
        summary="批量转换目录中的图片",
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )
    async def convert_all(payload: ConvertAllRequest):
        policy = converter.build_policy(
            payload.convert_format, allowed_formats=ImageFormats.HTTP_FORMATS
        )
        paths = resolve_directories(
            payload.directory,
            payload.output_directory,
            payload.folder_name,
            default_input=app_config.paths.SOURCE_DIR,
            default_output=app_config.paths.OUTPUT_DIR,
        )

        result = await run_blocking(
            converter.convert_directory, paths.input_dir, paths.output_dir, policy
        )

        return ConvertAllResponse(
            message=f"所有图片已处理并保存到 {paths.output_dir}",
            outputDirectory=str(paths.output_dir),
            summary=BatchSummaryModel(**result.to_summary_dict()),
        )

    logger.info("注册接口 POST /convert-all")
    return app
