"""数据模型测试。"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from py_image_convert.models.constants import (
    MB,
    ImageFormats,
    TargetFormat,
    normalize_format_name,
)
from py_image_convert.models.conversion_policy import (
    ConcurrencyScope,
    ConversionPolicy,
    ExecutionConfig,
)
from py_image_convert.models.conversion_result import (
    BatchResult,
    FileTask,
    OutcomeStatus,
    TaskOutcome,
)


def _outcome(name: str, status: OutcomeStatus, size: int = 10) -> TaskOutcome:
    return TaskOutcome(file_name=name, status=status, result_size_bytes=size)


class TestTargetFormat:
    """目标格式测试"""

    def test_extension_and_pillow_name(self):
        assert TargetFormat.JPEG.extension == ".jpeg"
        assert TargetFormat.WEBP.pillow_format == "WEBP"

    def test_aliases(self):
        assert normalize_format_name("JPG") == "jpeg"
        assert normalize_format_name(" Tif ") == "tiff"
        assert normalize_format_name("webp") == "webp"

    def test_http_formats_exclude_tiff(self):
        assert TargetFormat.TIFF not in ImageFormats.HTTP_FORMATS
        assert ImageFormats.names(ImageFormats.HTTP_FORMATS) == [
            "jpeg",
            "png",
            "webp",
            "gif",
            "avif",
        ]


class TestConversionPolicy:
    """转换策略测试"""

    def test_defaults(self):
        policy = ConversionPolicy(target_format=TargetFormat.PNG)

        assert policy.max_file_size == 5 * MB
        assert policy.compression_threshold == 1 * MB
        assert policy.compression_quality == 50

    def test_boundaries_are_inclusive(self):
        """恰好等于上限或阈值的文件不跳过、不压缩"""
        policy = ConversionPolicy(target_format=TargetFormat.PNG)

        assert not policy.should_skip(5 * MB)
        assert policy.should_skip(5 * MB + 1)
        assert not policy.needs_recompression(1 * MB)
        assert policy.needs_recompression(1 * MB + 1)

    def test_policy_is_frozen(self):
        policy = ConversionPolicy(target_format=TargetFormat.PNG)
        with pytest.raises(ValidationError):
            policy.compression_quality = 90

    @pytest.mark.parametrize("quality", [0, 101])
    def test_invalid_quality(self, quality):
        with pytest.raises(ValidationError):
            ConversionPolicy(target_format=TargetFormat.PNG, compression_quality=quality)


class TestExecutionConfig:
    """执行配置测试"""

    def test_defaults(self):
        config = ExecutionConfig()

        assert config.concurrency_cap == 5
        assert config.group_size == 5
        assert config.concurrency_scope == ConcurrencyScope.GLOBAL
        assert config.overlap_groups is True
        assert config.peak_concurrency == 5

    def test_per_group_overlap_peak_bounded_by_parallel_groups(self):
        config = ExecutionConfig(
            concurrency_cap=3, concurrency_scope="per_group", overlap_groups=True
        )
        assert config.max_parallel_groups == 2
        assert config.peak_concurrency == 6

        sequential = ExecutionConfig(concurrency_scope="per_group", overlap_groups=False)
        assert sequential.peak_concurrency == sequential.concurrency_cap

    @pytest.mark.parametrize("field", ["concurrency_cap", "group_size", "max_parallel_groups"])
    def test_rejects_non_positive(self, field):
        with pytest.raises(ValidationError):
            ExecutionConfig(**{field: 0})


class TestFileTask:
    """文件任务测试"""

    def test_from_path(self, tmp_path: Path):
        path = tmp_path / "photo.final.png"
        path.write_bytes(b"x" * 42)

        task = FileTask.from_path(path)

        assert task.file_name == "photo.final.png"
        assert task.size_bytes == 42

    def test_output_path_replaces_last_extension(self, tmp_path: Path):
        task = FileTask(source_path=tmp_path / "photo.final.png", file_name="photo.final.png", size_bytes=1)

        assert task.output_path(tmp_path / "out", ".webp") == tmp_path / "out" / "photo.final.webp"


class TestBatchResult:
    """批量结果测试"""

    def test_counts(self):
        result = BatchResult.aggregate(
            [
                _outcome("c.png", OutcomeStatus.COMPRESSED),
                _outcome("a.png", OutcomeStatus.CONVERTED),
                _outcome("d.png", OutcomeStatus.SKIPPED),
                _outcome("b.png", OutcomeStatus.FAILED),
            ],
            group_count=1,
        )

        assert result.total_files == 4
        assert result.succeeded == 2
        assert result.converted == 1
        assert result.compressed == 1
        assert result.skipped == 1
        assert result.failed == 1
        assert [o.file_name for o in result.outcomes] == ["a.png", "b.png", "c.png", "d.png"]
        assert [o.file_name for o in result.get_failed_items()] == ["b.png"]

    def test_aggregate_independent_of_completion_order(self):
        outcomes = [
            _outcome("a.png", OutcomeStatus.CONVERTED),
            _outcome("b.png", OutcomeStatus.FAILED),
            _outcome("c.png", OutcomeStatus.COMPRESSED),
        ]

        forward = BatchResult.aggregate(outcomes)
        backward = BatchResult.aggregate(list(reversed(outcomes)))

        assert forward.to_summary_dict() == backward.to_summary_dict()
        assert forward.outcomes == backward.outcomes

    def test_summary_dict_keys(self):
        result = BatchResult.aggregate([_outcome("a.png", OutcomeStatus.CONVERTED)], group_count=1)

        assert result.to_summary_dict() == {
            "totalFiles": 1,
            "succeeded": 1,
            "converted": 1,
            "compressed": 0,
            "skipped": 0,
            "failed": 0,
            "groups": 1,
        }
        assert "处理 1 个文件" in result.get_summary()
