"""格式处理器模块。

为目标格式准备色彩模式，并生成转换与二次压缩时的保存参数。
"""

import logging
from typing import Any

from PIL import Image

from ..models.constants import TargetFormat


logger = logging.getLogger(__name__)

# JPEG 透明区域合成背景
JPEG_BACKGROUND = (255, 255, 255)


class FormatProcessor:
    """格式处理器"""

    def __init__(self) -> None:
        """初始化格式处理器"""
        # 动态获取 Pillow 可写的格式
        Image.init()
        self.writable_formats = {fmt.upper() for fmt in Image.SAVE}
        logger.debug(f"可写格式: {sorted(self.writable_formats)}")

    def is_supported(self, target_format: TargetFormat) -> bool:
        """当前 Pillow 是否能写出该格式"""
        return target_format.pillow_format in self.writable_formats

    def prepare_for_format(
        self, img: Image.Image, target_format: TargetFormat
    ) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象
        """
        match target_format:
            case TargetFormat.JPEG:
                return self._prepare_for_jpeg(img)
            case TargetFormat.PNG | TargetFormat.TIFF:
                return self._prepare_lossless(img)
            case TargetFormat.WEBP | TargetFormat.AVIF:
                return self._prepare_for_modern(img)
            case TargetFormat.GIF:
                return self._prepare_for_gif(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，透明区域合成到白色背景"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode in ("RGBA", "LA"):
            if img.mode == "LA":
                img = img.convert("RGBA")
            rgb_img = Image.new("RGB", img.size, JPEG_BACKGROUND)
            rgb_img.paste(img, mask=img.split()[-1])
            return rgb_img

        if img.mode != "RGB":
            # CMYK、灰度、二值等模式
            return img.convert("RGB")

        return img

    def _prepare_lossless(self, img: Image.Image) -> Image.Image:
        """PNG/TIFF 保留透明度，只转换不支持的模式"""
        if img.mode == "P":
            if "transparency" in img.info:
                return img.convert("RGBA")
            return img.convert("RGB")

        if img.mode == "CMYK":
            return img.convert("RGB")

        if img.mode in ("1", "L", "LA", "RGB", "RGBA"):
            return img

        return img.convert("RGBA" if "A" in img.getbands() else "RGB")

    def _prepare_for_modern(self, img: Image.Image) -> Image.Image:
        """WebP/AVIF 只接受 RGB 和 RGBA"""
        if img.mode in ("RGB", "RGBA"):
            return img
        if img.mode in ("LA", "PA") or (
            img.mode == "P" and "transparency" in img.info
        ):
            return img.convert("RGBA")
        return img.convert("RGB")

    def _prepare_for_gif(self, img: Image.Image) -> Image.Image:
        """GIF 为调色板格式"""
        if img.mode in ("P", "L", "1"):
            return img
        if img.mode == "CMYK":
            img = img.convert("RGB")
        if img.mode in ("RGBA", "LA"):
            return img.convert("RGBA").convert("P", palette=Image.Palette.ADAPTIVE)
        return img.convert("RGB").convert("P", palette=Image.Palette.ADAPTIVE)


def quantize_colors(quality: int) -> int:
    """PNG 有损压缩时按质量换算调色板颜色数（2-256）"""
    return max(2, min(256, round(256 * quality / 100)))


def get_save_parameters(
    target_format: TargetFormat,
    quality: int | None = None,
    supports_lossy: bool = True,
) -> dict[str, Any]:
    """获取保存参数

    Args:
        target_format: 目标格式
        quality: 二次压缩质量，None 表示首次转换（不指定质量）
        supports_lossy: 图片模式能否使用 JPEG 压缩（TIFF 用）

    Returns:
        dict: 传给 Image.save 的参数（包含 format）
    """
    params: dict[str, Any] = {"format": target_format.pillow_format}

    match target_format:
        case TargetFormat.JPEG:
            params["optimize"] = True
            if quality is not None:
                params.update(quality=quality, progressive=True, subsampling=2)
        case TargetFormat.PNG:
            params.update(optimize=True, compress_level=9)
        case TargetFormat.WEBP:
            params["method"] = 6
            if quality is not None:
                params.update(quality=quality, alpha_quality=quality)
        case TargetFormat.AVIF:
            if quality is not None:
                params.update(quality=quality, speed=6)
        case TargetFormat.GIF:
            params["optimize"] = True
        case TargetFormat.TIFF:
            if quality is not None and supports_lossy:
                params.update(compression="jpeg", quality=quality)
            else:
                params["compression"] = "tiff_adobe_deflate"

    return params
