"""文件工具模块。

列出待转换的候选文件。
"""

from pathlib import Path

from ..models.conversion_result import FileTask
from .logging_helpers import get_logger


logger = get_logger()


def list_file_tasks(directory: str | Path) -> list[FileTask]:
    """列出目录下（不递归）的所有普通文件。

    按文件名排序，保证分组结果稳定。

    Args:
        directory: 源目录

    Returns:
        list[FileTask]: 文件任务列表

    Raises:
        FileNotFoundError: 目录不存在
        NotADirectoryError: 路径不是目录
        PermissionError: 目录不可读
    """
    directory = Path(directory)
    if not directory.exists():
        raise FileNotFoundError(str(directory))
    if not directory.is_dir():
        raise NotADirectoryError(str(directory))

    tasks = []
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if not entry.is_file():
            continue
        try:
            tasks.append(FileTask.from_path(entry))
        except FileNotFoundError:
            # 列目录与 stat 之间文件被删除
            logger.debug(f"文件已消失，忽略: {entry}")

    logger.debug(f"在 {directory} 中发现 {len(tasks)} 个文件")
    return tasks
