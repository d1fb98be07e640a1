"""路径解析模块。

把请求中的目录参数解析为绝对路径，缺省时使用平台默认目录。
核心流程只接收解析好的路径。
"""

from dataclasses import dataclass
from pathlib import Path

from ..exceptions import ConfigError


OUTPUT_FOLDER_NAME = "upload-images"


@dataclass(frozen=True)
class ResolvedPaths:
    """解析后的输入输出目录"""

    input_dir: Path
    output_dir: Path


def default_pictures_dir(home: Path | None = None) -> Path:
    """平台默认图片目录"""
    return (home or Path.home()) / "Pictures"


def default_output_dir(home: Path | None = None) -> Path:
    """平台默认输出目录：下载目录下的 upload-images"""
    return (home or Path.home()) / "Downloads" / OUTPUT_FOLDER_NAME


def resolve_directories(
    directory: str | None = None,
    output_directory: str | None = None,
    folder_name: str | None = None,
    default_input: Path | None = None,
    default_output: Path | None = None,
) -> ResolvedPaths:
    """解析输入输出目录

    Args:
        directory: 源目录，None 时使用默认图片目录
        output_directory: 输出目录，None 时使用默认输出目录
        folder_name: 追加在输出目录后的子目录名
        default_input: 覆盖默认源目录
        default_output: 覆盖默认输出目录

    Returns:
        ResolvedPaths: 解析结果

    Raises:
        ConfigError: 子目录名非法
    """
    input_dir = Path(directory).expanduser() if directory else (
        default_input or default_pictures_dir()
    )
    output_dir = Path(output_directory).expanduser() if output_directory else (
        default_output or default_output_dir()
    )

    if folder_name:
        name = folder_name.strip()
        if not name or name in {".", ".."} or Path(name).name != name:
            raise ConfigError(f"非法的子目录名: {folder_name}")
        output_dir = output_dir / name

    return ResolvedPaths(input_dir=input_dir.resolve(), output_dir=output_dir.resolve())
