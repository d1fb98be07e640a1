"""批次分区模块。"""

from collections.abc import Sequence

from ..exceptions import ConfigError
from ..models.conversion_result import BatchGroup, FileTask


def partition(files: Sequence[FileTask], group_size: int) -> list[BatchGroup]:
    """把有序文件列表切分为固定大小的分组。

    第 i 组包含输入中 [i*group_size, (i+1)*group_size) 的元素，
    各组拼接后与输入完全一致。

    Args:
        files: 有序文件任务
        group_size: 分组大小，必须大于 0

    Returns:
        list[BatchGroup]: 分组列表，空输入返回空列表

    Raises:
        ConfigError: group_size 不是正整数
    """
    if isinstance(group_size, bool) or not isinstance(group_size, int) or group_size <= 0:
        raise ConfigError(f"分组大小必须是正整数，当前值: {group_size}")

    return [
        BatchGroup(index=index, tasks=tuple(files[start : start + group_size]))
        for index, start in enumerate(range(0, len(files), group_size))
    ]
