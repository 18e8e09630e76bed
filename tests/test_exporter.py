"""Tests for archive export (appforge.exporter).

Covers:
- flatten() path layout for every group
- Collision detection and last-write-wins
- Zip contents and byte-for-byte determinism
- Writing archives and extracted trees to disk
"""

from __future__ import annotations

import io
import zipfile
from unittest.mock import patch

import pytest

from appforge.exporter import (
    ArchiveExportError,
    export_zip,
    find_collisions,
    flatten,
    to_zip,
    write_tree,
    write_zip,
)
from appforge.models import AppConfigFiles, GeneratedApp

pytestmark = pytest.mark.unit


@pytest.fixture
def small_app() -> GeneratedApp:
    return GeneratedApp(
        frontend={"index.html": "<html></html>", "src/App.tsx": "app"},
        backend={"index.js": "server", "package.json": "{}"},
        config=AppConfigFiles(
            package_manifest='{"name": "x"}',
            env_example="PORT=3000\n",
            readme="# X\n",
            dockerfile="FROM node:18-alpine\n",
            ts_config="{}",
        ),
        deployment={"vercel": {"vercel.json": "{}", ".vercelignore": "dist\n"}},
    )


def _expected_paths(app: GeneratedApp) -> set[str]:
    paths = set(app.frontend)
    paths |= {f"server/{p}" for p in app.backend}
    paths |= {"package.json", ".env.example", "README.md", "tsconfig.json"}
    if app.config.dockerfile:
        paths.add("Dockerfile")
    for provider, files in app.deployment.items():
        paths |= {f".{provider}/{p}" for p in files}
    return paths


class TestFlatten:
    def test_layout(self, small_app):
        files = flatten(small_app)
        assert list(files) == [
            "index.html",
            "src/App.tsx",
            "server/index.js",
            "server/package.json",
            "package.json",
            ".env.example",
            "README.md",
            "tsconfig.json",
            "Dockerfile",
            ".vercel/vercel.json",
            ".vercel/.vercelignore",
        ]
        assert files["server/index.js"] == "server"
        assert files["package.json"] == '{"name": "x"}'

    def test_missing_dockerfile_is_omitted(self, small_app):
        app = small_app.model_copy(
            update={"config": small_app.config.model_copy(update={"dockerfile": None})}
        )
        assert "Dockerfile" not in flatten(app)

    def test_collision_last_write_wins(self, small_app):
        app = small_app.model_copy(
            update={"frontend": {**small_app.frontend, "README.md": "frontend readme"}}
        )
        assert find_collisions(app) == {"README.md": ["frontend", "config"]}
        with patch("appforge.exporter.print_warning") as warn:
            files = flatten(app)
        assert files["README.md"] == "# X\n"
        warn.assert_called_once()
        assert "README.md" in warn.call_args.args[0]

    def test_no_collisions(self, small_app):
        assert find_collisions(small_app) == {}

    def test_generated_app_path_set(self, generator, blog_spec):
        app = generator.generate_app(blog_spec)
        assert set(flatten(app)) == _expected_paths(app)
        assert find_collisions(app) == {}


class TestZip:
    async def test_contents(self, small_app):
        data = await export_zip(small_app)
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == list(flatten(small_app))
            assert archive.read("server/index.js") == b"server"
            info = archive.getinfo("index.html")
            assert info.date_time == (1980, 1, 1, 0, 0, 0)
            assert info.compress_type == zipfile.ZIP_DEFLATED

    async def test_deterministic(self, generator, dashboard_spec):
        app = generator.generate_app(dashboard_spec)
        first = await export_zip(app)
        second = await export_zip(generator.generate_app(dashboard_spec))
        assert first == second

    def test_sync_returns_zip_bytes(self, small_app):
        assert to_zip(small_app)[:4] == b"PK\x03\x04"

    def test_compression_failure_is_wrapped(self, small_app):
        with patch("appforge.exporter._pack", side_effect=OSError("disk full")):
            with pytest.raises(ArchiveExportError, match="disk full"):
                to_zip(small_app)


class TestWrite:
    async def test_write_zip(self, small_app, tmp_path):
        path = await write_zip(small_app, tmp_path / "out" / "x.zip")
        assert path.exists()
        with zipfile.ZipFile(path) as archive:
            assert "Dockerfile" in archive.namelist()

    async def test_write_tree(self, small_app, tmp_path):
        written = await write_tree(small_app, tmp_path / "x")
        assert len(written) == len(flatten(small_app))
        assert (tmp_path / "x" / "server" / "index.js").read_text(encoding="utf-8") == "server"
        assert (tmp_path / "x" / ".vercel" / "vercel.json").exists()

    async def test_write_zip_failure(self, small_app, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(ArchiveExportError):
            await write_zip(small_app, blocker / "x.zip")
