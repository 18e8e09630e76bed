"""Archive export for generated applications.

Flattens a ``GeneratedApp`` into one ``path -> content`` map and packs it
into a zip archive:

    frontend files          unprefixed
    backend files           ``server/<path>``
    root config files       ``package.json``, ``.env.example``, ``README.md``,
                            ``tsconfig.json``, ``Dockerfile``
    deployment descriptors  ``.<provider>/<path>``

When two logical files land on the same archive path the later one wins
and the collision is reported.  Archives are byte-for-byte reproducible:
entries carry a fixed timestamp and are written in flatten order.
"""

from __future__ import annotations

import asyncio
import io
import zipfile
from pathlib import Path

from appforge.models import GeneratedApp
from appforge.utils import print_warning, write_files

BACKEND_PREFIX = "server/"

# 1980-01-01 is the earliest timestamp a zip entry can carry.
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_FILE_MODE = 0o644 << 16


class ArchiveExportError(Exception):
    """Raised when a ``GeneratedApp`` cannot be packed or written."""


# ---------------------------------------------------------------------------
# Flattening
# ---------------------------------------------------------------------------


def _logical_entries(app: GeneratedApp) -> list[tuple[str, str, str]]:
    """Return ``(group, archive path, content)`` for every generated file, in order."""
    entries: list[tuple[str, str, str]] = [
        ("frontend", path, content) for path, content in app.frontend.items()
    ]
    entries += [
        ("backend", BACKEND_PREFIX + path, content) for path, content in app.backend.items()
    ]

    root = {
        "package.json": app.config.package_manifest,
        ".env.example": app.config.env_example,
        "README.md": app.config.readme,
        "tsconfig.json": app.config.ts_config,
        "Dockerfile": app.config.dockerfile,
    }
    entries += [("config", path, content) for path, content in root.items() if content]

    for provider, files in app.deployment.items():
        entries += [
            (f"deployment:{provider}", f".{provider}/{path}", content)
            for path, content in files.items()
        ]
    return entries


def find_collisions(app: GeneratedApp) -> dict[str, list[str]]:
    """Return ``archive path -> groups`` for every path written more than once."""
    groups: dict[str, list[str]] = {}
    for group, path, _ in _logical_entries(app):
        groups.setdefault(path, []).append(group)
    return {path: owners for path, owners in groups.items() if len(owners) > 1}


def flatten(app: GeneratedApp) -> dict[str, str]:
    """Merge every map of *app* into one archive-path map.

    Later entries overwrite earlier ones on a path collision; each
    collision is printed as a warning.
    """
    for path, owners in find_collisions(app).items():
        print_warning(f"Archive path '{path}' written by {', '.join(owners)}; keeping the last")

    files: dict[str, str] = {}
    for _, path, content in _logical_entries(app):
        files[path] = content
    return files


# ---------------------------------------------------------------------------
# Zip packing
# ---------------------------------------------------------------------------


def _pack(files: dict[str, str]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for path, content in files.items():
            info = zipfile.ZipInfo(path, date_time=_FIXED_DATE_TIME)
            info.compress_type = zipfile.ZIP_DEFLATED
            info.external_attr = _FILE_MODE
            archive.writestr(info, content.encode("utf-8"))
    return buffer.getvalue()


def to_zip(app: GeneratedApp) -> bytes:
    """Pack *app* into zip bytes synchronously.

    Raises:
        ArchiveExportError: Compression failed.
    """
    files = flatten(app)
    try:
        return _pack(files)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as exc:
        raise ArchiveExportError(f"Failed to build archive: {exc}") from exc


async def export_zip(app: GeneratedApp) -> bytes:
    """Pack *app* into zip bytes, compressing in a worker thread."""
    return await asyncio.to_thread(to_zip, app)


async def write_zip(app: GeneratedApp, path: str | Path) -> Path:
    """Write the archive for *app* to *path* and return it."""
    data = await export_zip(app)
    out = Path(path)
    try:
        await asyncio.to_thread(out.parent.mkdir, parents=True, exist_ok=True)
        await asyncio.to_thread(out.write_bytes, data)
    except OSError as exc:
        raise ArchiveExportError(f"Failed to write archive to {out}: {exc}") from exc
    return out


async def write_tree(app: GeneratedApp, output_dir: str | Path) -> list[Path]:
    """Write the flattened files of *app* below *output_dir*."""
    try:
        return await write_files(flatten(app), output_dir)
    except OSError as exc:
        raise ArchiveExportError(f"Failed to write files to {output_dir}: {exc}") from exc
