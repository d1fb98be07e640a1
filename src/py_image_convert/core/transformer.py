"""图像转换适配器模块。

封装 Pillow 的格式转换与二次压缩，两阶段策略：
先按目标格式转换，转换结果超过压缩阈值时再以固定质量原地重新编码。
"""

from pathlib import Path
from typing import Protocol

from PIL import Image, ImageOps

from ..exceptions import ErrorHandler, handle_image_errors
from ..models.constants import TargetFormat
from ..models.conversion_policy import ConversionPolicy
from ..models.conversion_result import FileTask, OutcomeStatus, TaskOutcome
from .formats import FormatProcessor, get_save_parameters, quantize_colors


class Transformer(Protocol):
    """转换适配器接口"""

    def convert(
        self, source_path: Path, target_format: TargetFormat, output_path: Path
    ) -> Path: ...

    def recompress(
        self, output_path: Path, target_format: TargetFormat, quality: int
    ) -> Path: ...


class ImageTransformer:
    """基于 Pillow 的转换适配器

    失败时抛出 CodecError，不保证输出文件的原子性。
    """

    def __init__(self, format_processor: FormatProcessor | None = None) -> None:
        self.format_processor = format_processor or FormatProcessor()

    @handle_image_errors("格式转换")
    def convert(
        self, source_path: Path, target_format: TargetFormat, output_path: Path
    ) -> Path:
        """把源文件转换为目标格式并写入 output_path"""
        with Image.open(source_path) as img:
            # 多帧图片只转换第一帧
            img.seek(0)
            oriented = ImageOps.exif_transpose(img)
            prepared = self.format_processor.prepare_for_format(oriented, target_format)
            prepared.save(output_path, **get_save_parameters(target_format))
        return output_path

    @handle_image_errors("二次压缩")
    def recompress(
        self, output_path: Path, target_format: TargetFormat, quality: int
    ) -> Path:
        """以固定质量重新编码输出文件，覆盖原文件"""
        with Image.open(output_path) as img:
            working = img.copy()

        if target_format == TargetFormat.PNG and working.mode in ("RGB", "RGBA"):
            working = working.quantize(colors=quantize_colors(quality))
        else:
            working = self.format_processor.prepare_for_format(working, target_format)

        working.save(
            output_path,
            **get_save_parameters(
                target_format, quality, supports_lossy=working.mode in ("RGB", "L")
            ),
        )
        return output_path


def transform_task(
    task: FileTask,
    policy: ConversionPolicy,
    output_dir: Path,
    transformer: Transformer,
) -> TaskOutcome:
    """执行单个文件的两阶段转换。

    任何异常都转换为 failed 结果返回，不会抛出；日志由观察结果的调用方记录。

    Args:
        task: 文件任务
        policy: 转换策略
        output_dir: 输出目录
        transformer: 转换适配器

    Returns:
        TaskOutcome: converted / compressed / failed
    """
    target_format = policy.target_format
    output_path = task.output_path(output_dir, target_format.extension)

    try:
        transformer.convert(task.source_path, target_format, output_path)
        converted_size = output_path.stat().st_size

        if not policy.needs_recompression(converted_size):
            return TaskOutcome(
                file_name=task.file_name,
                status=OutcomeStatus.CONVERTED,
                source_size_bytes=task.size_bytes,
                result_size_bytes=converted_size,
                output_path=output_path,
            )

        transformer.recompress(output_path, target_format, policy.compression_quality)
        return TaskOutcome(
            file_name=task.file_name,
            status=OutcomeStatus.COMPRESSED,
            source_size_bytes=task.size_bytes,
            converted_size_bytes=converted_size,
            result_size_bytes=output_path.stat().st_size,
            output_path=output_path,
        )

    except Exception as e:
        return ErrorHandler.failed_outcome(e, task, "格式转换")
