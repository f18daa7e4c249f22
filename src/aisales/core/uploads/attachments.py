"""Image attachments: inline validation and staged-file consumption.

Attachments reach the tools either inline (base64 in the tool arguments) or as
files staged in the upload directory by an HTTP front end. Staged files are
always deleted once read, whether or not the request succeeds.
"""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

MAX_FILES = 6
MAX_FILE_BYTES = 10 * 1024 * 1024
ALLOWED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/gif", "image/webp"})


class AttachmentError(ValueError):
    """Raised for attachments that cannot be sent to the live model."""


@dataclass(frozen=True)
class Attachment:
    """One image ready to hand to a live model."""

    display_name: str
    mime_type: str
    base64_payload: str

    @property
    def data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.base64_payload}"


def _decoded_size(payload: str) -> int:
    try:
        return len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError) as exc:
        raise AttachmentError("Attachment payload is not valid base64") from exc


def _check_count(count: int) -> None:
    if count > MAX_FILES:
        raise AttachmentError(f"At most {MAX_FILES} attachments are allowed, got {count}")


def _check_mime(name: str, mime_type: str) -> str:
    mime = (mime_type or "").strip().lower()
    if not mime:
        mime = mimetypes.guess_type(name)[0] or ""
    if mime not in ALLOWED_MIME_TYPES:
        raise AttachmentError(f"Unsupported attachment type for {name!r}: {mime or 'unknown'}")
    return mime


def _check_size(name: str, size: int) -> None:
    if size > MAX_FILE_BYTES:
        raise AttachmentError(
            f"Attachment {name!r} is {size} bytes; the limit is {MAX_FILE_BYTES} bytes"
        )


def validate_attachments(raw: list[dict[str, Any]] | None) -> list[Attachment]:
    """Validate inline attachments passed as tool arguments.

    Each item is ``{"name", "mime_type", "data"}`` with ``data`` base64
    encoded. ``mimeType`` and ``base64`` are accepted as aliases.
    """
    if not raw:
        return []
    _check_count(len(raw))

    attachments: list[Attachment] = []
    for idx, item in enumerate(raw):
        if not isinstance(item, dict):
            raise AttachmentError(f"Attachment {idx + 1} must be an object")
        name = str(item.get("name") or f"attachment-{idx + 1}")
        payload = item.get("data") or item.get("base64") or ""
        if not isinstance(payload, str) or not payload.strip():
            raise AttachmentError(f"Attachment {name!r} has no data")
        payload = payload.strip()
        mime = _check_mime(name, str(item.get("mime_type") or item.get("mimeType") or ""))
        _check_size(name, _decoded_size(payload))
        attachments.append(Attachment(display_name=name, mime_type=mime, base64_payload=payload))
    return attachments


def _resolve_staged(upload_dir: Path, name: str) -> Path:
    path = (upload_dir / name).resolve()
    if upload_dir.resolve() not in path.parents:
        raise AttachmentError(f"Staged file {name!r} is outside the upload directory")
    return path


def consume_staged_files(upload_dir: str | Path, names: list[str] | None) -> list[Attachment]:
    """Read staged uploads into attachments and delete them.

    Files are removed in every case, including when validation of a later
    file fails.
    """
    if not names:
        return []
    directory = Path(upload_dir).expanduser()

    paths: list[Path] = []
    rejected: list[AttachmentError] = []
    for name in names:
        try:
            paths.append(_resolve_staged(directory, name))
        except AttachmentError as exc:
            rejected.append(exc)

    try:
        if rejected:
            raise rejected[0]
        _check_count(len(paths))

        attachments: list[Attachment] = []
        for path in paths:
            if not path.is_file():
                raise AttachmentError(f"Staged file {path.name!r} does not exist")
            mime = _check_mime(path.name, "")
            _check_size(path.name, path.stat().st_size)
            payload = base64.b64encode(path.read_bytes()).decode("ascii")
            attachments.append(
                Attachment(display_name=path.name, mime_type=mime, base64_payload=payload)
            )
        return attachments
    finally:
        cleanup_files(paths)


def cleanup_files(paths: list[Path]) -> None:
    for path in paths:
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Failed to delete staged upload %s: %s", path, exc)


def prepare_upload_dir(upload_dir: str | Path) -> Path:
    """Create the staging directory and clear uploads left by an earlier run.

    Staged files are only valid for the request that names them, so anything
    present at startup is an orphan from a crashed or killed process.
    """
    directory = Path(upload_dir).expanduser()
    directory.mkdir(mode=0o700, parents=True, exist_ok=True)
    stale = [p for p in directory.iterdir() if p.is_file()]
    if stale:
        logger.info("Removing %d stale staged upload(s) from %s", len(stale), directory)
        cleanup_files(stale)
    return directory
