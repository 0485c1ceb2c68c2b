"""Tests for the command-line entry point.

The Taichi runtime is initialised once per session by conftest, so tests
that go through main() replace init_runtime with a no-op.
"""

import json

import pytest
from PIL import Image


@pytest.fixture
def no_reinit(monkeypatch):
    """Prevent main() from re-initialising Taichi mid-session."""
    import phongtracer.cli

    calls = []
    monkeypatch.setattr(phongtracer.cli, "init_runtime", lambda threads=None: calls.append(threads))
    return calls


class TestParseArgs:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default option values."""
        from phongtracer.cli import parse_args

        args = parse_args([])
        assert (args.width, args.height) == (640, 480)
        assert args.threads is None
        assert args.ambient is None
        assert args.no_ambient is False
        assert args.output == "render.bmp"
        assert args.scene is None
        assert args.batch_rows == 32
        assert args.quiet is False

    def test_options(self):
        """Test options are parsed with their types."""
        from phongtracer.cli import parse_args

        args = parse_args(
            ["--width", "64", "--height", "48", "--threads", "2", "--ambient", "0.2", "--quiet"]
        )
        assert (args.width, args.height, args.threads) == (64, 48, 2)
        assert args.ambient == 0.2
        assert args.quiet is True


class TestMain:
    """Tests for main()."""

    def test_renders_example_scene(self, tmp_path, no_reinit):
        """Test the example scene is rendered to the output file."""
        from phongtracer.cli import main

        output = tmp_path / "example.bmp"
        code = main(
            ["--width", "16", "--height", "12", "--threads", "2", "--output", str(output), "--quiet"]
        )

        assert code == 0
        assert no_reinit == [2]
        with Image.open(output) as img:
            assert img.size == (16, 12)

    def test_progress_output(self, tmp_path, no_reinit, capsys):
        """Test progress and ray count are printed unless quiet."""
        from phongtracer.cli import main

        output = tmp_path / "example.bmp"
        assert main(["--width", "8", "--height", "8", "--batch-rows", "4", "--output", str(output)]) == 0

        out = capsys.readouterr().out
        assert "Progress: 8/8 rows" in out
        assert "Rays cast:" in out

    def test_invalid_size_returns_error(self, tmp_path, no_reinit, capsys):
        """Test an invalid configuration exits with status 1."""
        from phongtracer.cli import main

        code = main(["--width", "0", "--output", str(tmp_path / "x.bmp"), "--quiet"])

        assert code == 1
        assert "Error:" in capsys.readouterr().err

    def test_scene_file(self, tmp_path, no_reinit):
        """Test rendering a scene loaded from a JSON file."""
        from phongtracer.cli import main

        scene = {
            "config": {"background_colour": [10, 20, 30], "ambient_intensity": 0.5},
            "camera": {"position": [0, 0, 0], "target": [0, 0, 100], "hfov": 90},
            "materials": [{"colour": [200, 100, 50]}],
            "objects": [{"type": "sphere", "center": [0, 0, 100], "radius": 50, "material_id": 0}],
            "lights": [],
        }
        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(scene), encoding="utf-8")
        output = tmp_path / "scene.bmp"

        code = main(
            ["--width", "8", "--height", "6", "--scene", str(scene_path), "--output", str(output), "--quiet"]
        )

        assert code == 0
        with Image.open(output) as img:
            assert img.getpixel((0, 0)) == (10, 20, 30)
            assert img.getpixel((3, 2)) == (100, 50, 25)

    def test_no_ambient(self, tmp_path, no_reinit):
        """Test --no-ambient leaves unlit hits black."""
        from phongtracer.cli import main

        scene = {
            "camera": {"position": [0, 0, 0], "target": [0, 0, 100]},
            "materials": [{"colour": [200, 100, 50]}],
            "objects": [{"type": "sphere", "center": [0, 0, 100], "radius": 50, "material_id": 0}],
        }
        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(scene), encoding="utf-8")
        output = tmp_path / "scene.bmp"

        code = main(
            ["--width", "8", "--height", "6", "--scene", str(scene_path), "--output", str(output),
             "--no-ambient", "--quiet"]
        )

        assert code == 0
        with Image.open(output) as img:
            assert img.getpixel((3, 2)) == (0, 0, 0)

    def test_scene_file_without_camera(self, tmp_path, no_reinit, capsys):
        """Test a scene file without a camera is reported as an error."""
        from phongtracer.cli import main

        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps({"objects": []}), encoding="utf-8")

        code = main(["--scene", str(scene_path), "--output", str(tmp_path / "x.bmp"), "--quiet"])

        assert code == 1
        assert "camera" in capsys.readouterr().err

    def test_missing_scene_file(self, tmp_path, no_reinit):
        """Test a missing scene file exits with status 1."""
        from phongtracer.cli import main

        code = main(["--scene", str(tmp_path / "missing.json"), "--quiet"])
        assert code == 1


class TestThreads:
    """Tests for choosing the worker thread count."""

    def _write_scene(self, tmp_path, config):
        scene = {
            "config": config,
            "camera": {"position": [0, 0, 0], "target": [0, 0, 100]},
            "materials": [{}],
            "objects": [{"type": "sphere", "center": [0, 0, 100], "radius": 50, "material_id": 0}],
        }
        scene_path = tmp_path / "scene.json"
        scene_path.write_text(json.dumps(scene), encoding="utf-8")
        return scene_path

    def test_resolve_threads(self):
        """Test --threads wins over the scene file, which wins over the default."""
        from phongtracer.cli import resolve_threads

        data = {"config": {"threads": 2}}
        assert resolve_threads(3, data) == 3
        assert resolve_threads(None, data) == 2
        assert resolve_threads(None, {"camera": {}}) is None
        assert resolve_threads(None, None) is None

    def test_resolve_threads_invalid_config(self):
        """Test an invalid thread count in the scene file is rejected."""
        from phongtracer.cli import resolve_threads

        with pytest.raises(ValueError):
            resolve_threads(None, {"config": {"threads": 0}})

    def test_scene_file_threads_initialise_runtime(self, tmp_path, no_reinit):
        """Test the scene file's thread count reaches init_runtime."""
        from phongtracer.cli import main

        scene_path = self._write_scene(tmp_path, {"threads": 2})
        code = main(
            ["--width", "4", "--height", "4", "--scene", str(scene_path),
             "--output", str(tmp_path / "x.bmp"), "--quiet"]
        )

        assert code == 0
        assert no_reinit == [2]

    def test_cli_threads_override_scene_file(self, tmp_path, no_reinit):
        """Test --threads takes precedence over the scene file."""
        from phongtracer.cli import main

        scene_path = self._write_scene(tmp_path, {"threads": 2})
        code = main(
            ["--width", "4", "--height", "4", "--threads", "3", "--scene", str(scene_path),
             "--output", str(tmp_path / "x.bmp"), "--quiet"]
        )

        assert code == 0
        assert no_reinit == [3]

    def test_invalid_scene_threads_returns_error(self, tmp_path, no_reinit, capsys):
        """Test an invalid scene thread count exits before initialising the runtime."""
        from phongtracer.cli import main

        scene_path = self._write_scene(tmp_path, {"threads": -1})
        code = main(["--scene", str(scene_path), "--output", str(tmp_path / "x.bmp"), "--quiet"])

        assert code == 1
        assert no_reinit == []
        assert "Error:" in capsys.readouterr().err
