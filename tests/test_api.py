"""HTTP 接口与转换器集成测试。"""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from py_image_convert import __version__
from py_image_convert.api import create_app
from py_image_convert.converter import ImageConverter
from py_image_convert.core.formats import FormatProcessor
from py_image_convert.engine.config import PolicyBuilder
from py_image_convert.exceptions import NoFilesFoundError, SetupError
from py_image_convert.models.constants import TargetFormat
from py_image_convert.models.conversion_policy import ExecutionConfig
from tests.conftest import SpyTransformer, write_bytes


@pytest.fixture
def spy() -> SpyTransformer:
    return SpyTransformer()


@pytest.fixture
def client(spy, app_config) -> TestClient:
    converter = ImageConverter(ExecutionConfig(concurrency_cap=2, group_size=5), transformer=spy)
    return TestClient(create_app(converter=converter, app_config=app_config))


@pytest.fixture
def real_client(app_config) -> TestClient:
    return TestClient(create_app(converter=ImageConverter(), app_config=app_config))


class TestImageConverter:
    """转换器测试"""

    def test_missing_directory(self, tmp_path: Path, output_dir: Path, webp_policy):
        converter = ImageConverter(transformer=SpyTransformer())

        with pytest.raises(SetupError):
            converter.convert_directory(tmp_path / "missing", output_dir, webp_policy)

    def test_path_is_file(self, tmp_path: Path, output_dir: Path, webp_policy):
        path = write_bytes(tmp_path / "file.png", 1)

        with pytest.raises(SetupError):
            ImageConverter().convert_directory(path, output_dir, webp_policy)

    def test_empty_directory_creates_output(self, input_dir, output_dir, webp_policy):
        with pytest.raises(NoFilesFoundError):
            ImageConverter().convert_directory(input_dir, output_dir, webp_policy)

        assert output_dir.is_dir()
        assert list(output_dir.iterdir()) == []

    def test_ignores_subdirectories(self, image_dir, output_dir, webp_policy):
        (image_dir / "nested").mkdir()
        (image_dir / "nested" / "skip.png").write_bytes(b"x")

        result = ImageConverter().convert_directory(image_dir, output_dir, webp_policy)

        assert result.total_files == 3
        assert result.converted == 3

    def test_mixed_directory(self, image_dir, output_dir, webp_policy):
        """非图片文件计为失败，不影响其他文件"""
        (image_dir / "notes.txt").write_text("hello")

        result = ImageConverter().convert_directory(image_dir, output_dir, webp_policy)

        assert result.total_files == 4
        assert result.succeeded == 3
        assert result.failed == 1
        assert result.get_failed_items()[0].file_name == "notes.txt"
        assert sorted(p.name for p in output_dir.iterdir()) == ["a.webp", "b.webp", "c.webp"]

    def test_build_policy_alias(self):
        policy = ImageConverter().build_policy("JPG")

        assert policy.target_format == TargetFormat.JPEG


class TestConvertAllEndpoint:
    """POST /convert-all 测试"""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    def test_success(self, client, input_dir, output_dir, spy):
        for i in range(7):
            write_bytes(input_dir / f"img{i}.png", 100)

        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "webp",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["outputDirectory"] == str(output_dir.resolve())
        assert str(output_dir.resolve()) in body["message"]
        assert body["summary"] == {
            "totalFiles": 7,
            "succeeded": 7,
            "converted": 7,
            "compressed": 0,
            "skipped": 0,
            "failed": 0,
            "groups": 2,
        }
        assert len(spy.convert_calls) == 7

    def test_folder_name_appended(self, client, input_dir, output_dir):
        write_bytes(input_dir / "img.png", 100)

        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "png",
                "outputDirectory": str(output_dir),
                "folderName": "batch1",
            },
        )

        assert response.status_code == 200
        assert (output_dir / "batch1" / "img.png").exists()

    def test_unsupported_format(self, client, input_dir, output_dir, spy):
        write_bytes(input_dir / "img.png", 100)

        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "bmp",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 400
        body = response.json()
        assert body["supportedFormats"] == ["jpeg", "png", "webp", "gif", "avif"]
        assert "bmp" in body["detail"]
        assert spy.convert_calls == []
        assert not output_dir.exists()

    def test_unwritable_format_rejected_before_touching_disk(
        self, app_config, spy, input_dir, output_dir
    ):
        """Pillow 无法写出的格式返回 400，不创建输出目录"""
        write_bytes(input_dir / "img.png", 100)
        processor = FormatProcessor()
        processor.writable_formats.discard("AVIF")
        converter = ImageConverter(
            transformer=spy, policy_builder=PolicyBuilder(app_config, processor)
        )
        client = TestClient(create_app(converter=converter, app_config=app_config))

        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "avif",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 400
        assert response.json()["supportedFormats"] == ["jpeg", "png", "webp", "gif"]
        assert spy.convert_calls == []
        assert not output_dir.exists()

    def test_tiff_not_accepted_over_http(self, client, input_dir):
        response = client.post(
            "/convert-all", json={"directory": str(input_dir), "convertFormat": "tiff"}
        )

        assert response.status_code == 400

    def test_missing_format(self, client, input_dir):
        response = client.post("/convert-all", json={"directory": str(input_dir)})

        assert response.status_code == 400
        assert response.json()["error"] == "Validation error"

    def test_invalid_folder_name(self, client, input_dir, output_dir):
        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "png",
                "outputDirectory": str(output_dir),
                "folderName": "../escape",
            },
        )

        assert response.status_code == 400

    def test_empty_directory(self, client, input_dir, output_dir):
        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "png",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 404
        assert response.json()["error"] == "No files found"
        assert output_dir.is_dir()
        assert list(output_dir.iterdir()) == []

    def test_missing_directory(self, client, tmp_path, output_dir):
        response = client.post(
            "/convert-all",
            json={
                "directory": str(tmp_path / "nope"),
                "convertFormat": "png",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 500
        assert response.json() == {"error": "处理图片时发生错误"}

    def test_partial_failure_still_200(self, app_config, input_dir, output_dir):
        for name in ("a.png", "b.png", "c.png"):
            write_bytes(input_dir / name, 100)
        write_bytes(input_dir / "huge.png", 5 * 1024 * 1024 + 1)
        spy = SpyTransformer(fail_names={"b.png"})
        client = TestClient(
            create_app(converter=ImageConverter(transformer=spy), app_config=app_config)
        )

        response = client.post(
            "/convert-all",
            json={
                "directory": str(input_dir),
                "convertFormat": "jpg",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 200
        summary = response.json()["summary"]
        assert summary["totalFiles"] == 4
        assert summary["succeeded"] == 2
        assert summary["skipped"] == 1
        assert summary["failed"] == 1
        assert sorted(p.name for p in output_dir.iterdir()) == ["a.jpeg", "c.jpeg"]

    def test_real_conversion(self, real_client, image_dir, output_dir):
        response = real_client.post(
            "/convert-all",
            json={
                "directory": str(image_dir),
                "convertFormat": "jpeg",
                "outputDirectory": str(output_dir),
            },
        )

        assert response.status_code == 200
        assert response.json()["summary"]["converted"] == 3
        for name in ("a.jpeg", "b.jpeg", "c.jpeg"):
            with Image.open(output_dir / name) as img:
                assert img.format == "JPEG"
                assert img.mode == "RGB"

    def test_default_directories_from_config(self, monkeypatch, spy, tmp_path):
        from py_image_convert.config import AppConfig

        source = tmp_path / "pics"
        source.mkdir()
        write_bytes(source / "x.png", 100)
        monkeypatch.setenv("PIC_SOURCE_DIR", str(source))
        monkeypatch.setenv("PIC_OUTPUT_DIR", str(tmp_path / "dest"))
        client = TestClient(
            create_app(converter=ImageConverter(transformer=spy), app_config=AppConfig())
        )

        response = client.post("/convert-all", json={"convertFormat": "gif"})

        assert response.status_code == 200
        assert (tmp_path / "dest" / "x.gif").exists()
