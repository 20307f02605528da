"""Name and persist binary streams returned by the download endpoint."""

from __future__ import annotations

import logging
import os
import re
import shutil
import tempfile
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

__all__ = [
    "DEFAULT_DOWNLOAD_NAME",
    "DownloadDescriptor",
    "MIME_EXTENSIONS",
    "resolve_download_name",
    "save_download",
]

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_NAME: Final[str] = "downloaded_file"
"""Base name used when the response carries no usable filename."""

MIME_EXTENSIONS: Final[dict[str, str]] = {
    "model/vnd.collada+xml": ".dae",
    "model/gltf+json": ".gltf",
    "model/gltf-binary": ".glb",
    "application/octet-stream": ".bin",
}
"""Fallback extensions keyed by response content type."""

_FILENAME_PATTERN = re.compile(r'filename\s*=\s*(?:"([^"]+)"|([^;]+))', re.IGNORECASE)


@dataclass(slots=True)
class DownloadDescriptor:
    """Describe one completed download waiting to be saved."""

    filename: str
    extension: str
    stream: Iterable[bytes]
    close: Callable[[], None] | None = field(default=None, repr=False)

    def release(self) -> None:
        """Release the underlying response, if any."""

        if self.close is not None:
            closer, self.close = self.close, None
            closer()


def _header(headers: Mapping[str, str] | None, name: str) -> str | None:
    if not headers:
        return None
    value = headers.get(name)
    if value is None:
        lowered = name.lower()
        for key, candidate in headers.items():
            if str(key).lower() == lowered:
                value = candidate
                break
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_download_name(headers: Mapping[str, str] | None) -> tuple[str, str]:
    """Return the ``(filename, extension)`` pair for a download response.

    The filename comes from the ``filename=`` parameter of
    ``Content-Disposition`` and falls back to :data:`DEFAULT_DOWNLOAD_NAME`.
    The extension derived from ``Content-Type`` is appended only when the
    filename contains no ``.`` at all.
    """

    filename = DEFAULT_DOWNLOAD_NAME
    disposition = _header(headers, "Content-Disposition")
    if disposition and "filename=" in disposition.lower():
        match = _FILENAME_PATTERN.search(disposition)
        if match:
            candidate = (match.group(1) or match.group(2) or "").strip()
            if candidate:
                filename = candidate

    content_type = _header(headers, "Content-Type") or ""
    mime = content_type.split(";", 1)[0].strip().lower()
    extension = MIME_EXTENSIONS.get(mime, "")

    if "." not in filename:
        filename += extension
    return filename, extension


DestinationChooser = Callable[[str], "Path | str | None"]


def save_download(
    descriptor: DownloadDescriptor,
    destination: Path | str | DestinationChooser,
) -> Path | None:
    """Write *descriptor* to disk and return the saved path.

    *destination* is either a directory, a full target path, or a callable
    receiving the suggested filename and returning the chosen path (``None``
    when the user cancels). The stream is spooled into a temporary file that
    is removed on every exit path.
    """

    fd, temp_name = tempfile.mkstemp(prefix="arvr-download-", suffix=descriptor.extension or None)
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "wb") as handle:
            for chunk in descriptor.stream:
                if chunk:
                    handle.write(chunk)
        descriptor.release()

        target = _resolve_target(descriptor.filename, destination)
        if target is None:
            logger.info("Download of %s cancelled by the user", descriptor.filename)
            return None

        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(temp_path, target)
        logger.info("Saved download to %s", target)
        return target
    finally:
        descriptor.release()
        temp_path.unlink(missing_ok=True)


def _resolve_target(filename: str, destination: Path | str | DestinationChooser) -> Path | None:
    if callable(destination):
        chosen = destination(filename)
        if chosen is None or not str(chosen).strip():
            return None
        return Path(chosen).expanduser()

    candidate = Path(destination).expanduser()
    if candidate.is_dir():
        return _unique_path(candidate / Path(filename).name)
    return candidate


def _unique_path(path: Path) -> Path:
    """Return *path*, or the first free ``name (n).ext`` sibling when taken."""

    if not path.exists():
        return path
    stem, suffix = path.stem, path.suffix
    counter = 1
    while True:
        candidate = path.with_name(f"{stem} ({counter}){suffix}")
        if not candidate.exists():
            return candidate
        counter += 1
