import json
import pytest
from visionbulk.core.exporter import export_scene, write_scene_files, write_manifest, ExportError
from visionbulk.core.models import Progress, RunSnapshot, SceneStatus


class TestExportScene:
    def test_uses_original_index(self, make_scene, png_data_url, png_bytes):
        scene = make_scene("3", status=SceneStatus.COMPLETED, image_url=png_data_url)
        filename, raw = export_scene(scene, 3)
        assert filename == "scene-3.png"
        assert raw == png_bytes

    def test_rejects_incomplete_scene(self, make_scene):
        with pytest.raises(ExportError, match="no completed image"):
            export_scene(make_scene("1", status=SceneStatus.ERROR, error="x"), 1)

    def test_rejects_zero_index(self, make_scene, png_data_url):
        scene = make_scene("1", status=SceneStatus.COMPLETED, image_url=png_data_url)
        with pytest.raises(ExportError, match="1-based"):
            export_scene(scene, 0)

    def test_rejects_undecodable_payload(self, make_scene):
        scene = make_scene("1", status=SceneStatus.COMPLETED, image_url="data:image/png;base64,@@@")
        with pytest.raises(ExportError, match="undecodable"):
            export_scene(scene, 1)


class TestWriteFiles:
    @pytest.fixture
    def snapshot(self, characters, make_scene, png_data_url):
        return RunSnapshot(
            characters=tuple(characters),
            visual_style="Cinematic photography",
            scenes=(
                make_scene("a", status=SceneStatus.COMPLETED, image_url=png_data_url, present=["Ayesha"]),
                make_scene("b", status=SceneStatus.ERROR, error="Failed to generate image"),
                make_scene("c", status=SceneStatus.COMPLETED, image_url=png_data_url),
            ),
            progress=Progress(current=3, total=3),
            finished=True,
        )

    def test_write_scene_files_keeps_gaps(self, snapshot, tmp_path, png_bytes):
        paths = write_scene_files(snapshot.scenes, tmp_path / "scenes")

        assert [p.name for p in paths] == ["scene-1.png", "scene-3.png"]
        assert (tmp_path / "scenes" / "scene-3.png").read_bytes() == png_bytes
        assert not (tmp_path / "scenes" / "scene-2.png").exists()

    def test_write_manifest(self, snapshot, tmp_path):
        path = write_manifest(snapshot, tmp_path / "scenes.json")
        data = json.loads(path.read_text(encoding="utf-8"))

        assert data["visual_style"] == "Cinematic photography"
        assert data["characters"][0] == {"name": "Ayesha", "description": "tall woman with a red scarf"}
        assert data["progress"] == {"current": 3, "total": 3}
        assert [s["status"] for s in data["scenes"]] == ["completed", "error", "completed"]
        assert [s["file"] for s in data["scenes"]] == ["scene-1.png", None, "scene-3.png"]
        assert data["scenes"][1]["error"] == "Failed to generate image"
        assert data["scenes"][0]["present_characters"] == ["Ayesha"]

    def test_manifest_rejects_undecodable_payload(self, make_scene, tmp_path):
        snapshot = RunSnapshot(
            scenes=(make_scene("1", status=SceneStatus.COMPLETED, image_url="data:image/png;base64,@@@"),),
            progress=Progress(current=1, total=1),
            finished=True,
        )
        with pytest.raises(ExportError, match="undecodable"):
            write_manifest(snapshot, tmp_path / "scenes.json")
