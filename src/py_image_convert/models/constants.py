"""图像转换相关常量定义。

目标格式枚举、格式别名以及批量转换的默认阈值。
"""

from enum import Enum
from typing import Final


MB: Final[int] = 1024 * 1024


class TargetFormat(str, Enum):
    """支持的目标格式"""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    AVIF = "avif"
    TIFF = "tiff"

    @property
    def pillow_format(self) -> str:
        """Pillow 保存时使用的格式名"""
        return self.value.upper()

    @property
    def extension(self) -> str:
        """输出文件扩展名（与格式值一致，例如 .jpeg）"""
        return f".{self.value}"


class ImageFormats:
    """格式分类与别名映射"""

    # 用户友好的别名
    ALIASES: Final[dict[str, str]] = {
        "jpg": "jpeg",
        "tif": "tiff",
    }

    # HTTP 接口允许的格式（TIFF 只在内部策略中可用）
    HTTP_FORMATS: Final[tuple[TargetFormat, ...]] = (
        TargetFormat.JPEG,
        TargetFormat.PNG,
        TargetFormat.WEBP,
        TargetFormat.GIF,
        TargetFormat.AVIF,
    )

    ALL_FORMATS: Final[tuple[TargetFormat, ...]] = tuple(TargetFormat)

    @classmethod
    def names(cls, formats: tuple[TargetFormat, ...] | None = None) -> list[str]:
        """格式值列表，用于错误消息"""
        return [fmt.value for fmt in (formats or cls.ALL_FORMATS)]


class ConversionDefaultValues:
    """转换策略默认值"""

    MAX_FILE_SIZE: Final[int] = 5 * MB
    COMPRESSION_THRESHOLD: Final[int] = 1 * MB
    COMPRESSION_QUALITY: Final[int] = 50

    MIN_QUALITY: Final[int] = 1
    MAX_QUALITY: Final[int] = 100


class ExecutionDefaultValues:
    """批量执行默认值"""

    CONCURRENCY_CAP: Final[int] = 5
    GROUP_SIZE: Final[int] = 5
    # per_group 作用范围下同时执行的分组数
    MAX_PARALLEL_GROUPS: Final[int] = 2


def normalize_format_name(format_str: str) -> str:
    """标准化格式名：去空白、转小写并解析别名"""
    name = format_str.strip().lower()
    return ImageFormats.ALIASES.get(name, name)
