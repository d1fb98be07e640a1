"""测试配置文件。

提供测试所需的fixtures和配置。
"""

import threading
import time
from collections.abc import Callable
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from py_image_convert.config import AppConfig, reset_config
from py_image_convert.exceptions import CodecError
from py_image_convert.models.constants import MB, TargetFormat
from py_image_convert.models.conversion_policy import ConversionPolicy


def draw_image(path: Path, size: tuple[int, int] = (64, 48), mode: str = "RGB") -> Path:
    """生成带图案的测试图片"""
    background = (0, 0, 0, 0) if mode == "RGBA" else "white"
    img = Image.new(mode, size, color=background)
    draw = ImageDraw.Draw(img)
    for i in range(10):
        x, y = (i * 7) % size[0], (i * 5) % size[1]
        fill = (i * 25 % 256, 100 + i * 15 % 156, i * 11 % 256)
        if mode == "RGBA":
            fill = (*fill, 128 + i * 10)
        draw.rectangle([x, y, x + size[0] // 4, y + size[1] // 4], fill=fill)
    img.save(path)
    return path


def write_bytes(path: Path, size: int) -> Path:
    """生成指定大小的任意文件"""
    path.write_bytes(b"\0" * size)
    return path


class SpyTransformer:
    """记录调用的转换适配器

    convert 写出 converted_size 字节，recompress 写出 recompressed_size 字节。
    """

    def __init__(
        self,
        converted_size: int | Callable[[Path], int] = 100,
        recompressed_size: int = 10,
        delay: float = 0.0,
        fail_names: set[str] | None = None,
        on_convert: Callable[[Path], None] | None = None,
    ):
        self.converted_size = converted_size
        self.recompressed_size = recompressed_size
        self.delay = delay
        self.fail_names = fail_names or set()
        self.on_convert = on_convert
        self.convert_calls: list[Path] = []
        self.recompress_calls: list[tuple[Path, TargetFormat, int]] = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def convert(self, source_path: Path, target_format: TargetFormat, output_path: Path) -> Path:
        with self._lock:
            self.convert_calls.append(source_path)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            if self.delay:
                time.sleep(self.delay)
            if self.on_convert:
                self.on_convert(source_path)
            if source_path.name in self.fail_names:
                raise CodecError(f"无法解码: {source_path.name}", source_path)
            size = (
                self.converted_size(source_path)
                if callable(self.converted_size)
                else self.converted_size
            )
            write_bytes(output_path, size)
            return output_path
        finally:
            with self._lock:
                self.in_flight -= 1

    def recompress(self, output_path: Path, target_format: TargetFormat, quality: int) -> Path:
        with self._lock:
            self.recompress_calls.append((output_path, target_format, quality))
        write_bytes(output_path, self.recompressed_size)
        return output_path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """清理 PIC_ 环境变量，避免影响默认配置"""
    import os

    for key in list(os.environ):
        if key.startswith("PIC_"):
            monkeypatch.delenv(key, raising=False)
    reset_config()


@pytest.fixture
def app_config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "input"
    directory.mkdir()
    return directory


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """输出目录（不预先创建）"""
    return tmp_path / "output"


@pytest.fixture
def image_dir(input_dir: Path) -> Path:
    """包含三张真实图片的源目录"""
    draw_image(input_dir / "a.png")
    draw_image(input_dir / "b.png", mode="RGBA")
    draw_image(input_dir / "c.jpg", size=(80, 60))
    return input_dir


@pytest.fixture
def webp_policy() -> ConversionPolicy:
    return ConversionPolicy(target_format=TargetFormat.WEBP)


@pytest.fixture
def spy_policy() -> ConversionPolicy:
    """小阈值策略，便于用字节文件触发跳过与二次压缩"""
    return ConversionPolicy(
        target_format=TargetFormat.WEBP,
        max_file_size=5 * MB,
        compression_threshold=1000,
        compression_quality=50,
    )
