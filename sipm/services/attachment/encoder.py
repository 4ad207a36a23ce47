"""
Attachment Encoding

Death certificates are uploaded as photos and stored inline on the
resident record as a data URL (`data:image/png;base64,...`).

DESIGN DECISION: The bytes are opened with PIL before encoding.
A file that isn't a readable image is rejected here, at upload time,
rather than discovered later when someone tries to view it.
"""

import base64
import binascii
import re
from io import BytesIO
from typing import Optional

from PIL import Image, UnidentifiedImageError

from sipm.config import get_settings


# PIL format name -> MIME type
_FORMAT_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
}

# File extension -> PIL format name
_EXTENSION_FORMAT = {
    "jpg": "JPEG",
    "jpeg": "JPEG",
    "png": "PNG",
    "webp": "WEBP",
}

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<payload>[A-Za-z0-9+/=\s]+)$")


class AttachmentError(Exception):
    """The uploaded file cannot be used as a death certificate."""
    pass


def _detect_format(data: bytes) -> str:
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
            return img.format or ""
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise AttachmentError(f"File is not a readable image: {e}")


def encode_attachment(
    data: bytes,
    filename: str,
    max_size_bytes: Optional[int] = None,
) -> str:
    """
    Encode an uploaded image as a data URL.

    Args:
        data: Raw file bytes
        filename: Original filename (its extension must be a supported format)
        max_size_bytes: Override for the configured upload limit

    Returns:
        The data URL to store on the resident record

    Raises:
        AttachmentError: Empty, too large, unsupported or unreadable file
    """
    settings = get_settings().app
    limit = max_size_bytes if max_size_bytes is not None else settings.max_attachment_size_bytes

    if not data:
        raise AttachmentError("Uploaded file is empty")
    if len(data) > limit:
        raise AttachmentError(
            f"File is too large ({len(data) / (1024 * 1024):.1f} MB). "
            f"Maximum is {limit / (1024 * 1024):.0f} MB"
        )

    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension not in settings.supported_formats_list:
        raise AttachmentError(
            f"Unsupported file type '.{extension}'. "
            f"Allowed: {', '.join(settings.supported_formats_list)}"
        )

    detected = _detect_format(data)
    mime = _FORMAT_MIME.get(detected)
    if mime is None or _EXTENSION_FORMAT.get(extension) != detected:
        raise AttachmentError(
            f"File content ({detected or 'unknown'}) doesn't match its extension '.{extension}'"
        )

    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime};base64,{payload}"


def is_data_url(value: Optional[str]) -> bool:
    """True if the value has the shape of a base64 data URL."""
    if not value:
        return False
    return _DATA_URL_RE.match(value) is not None


def decode_attachment(value: str) -> tuple[str, bytes]:
    """Split a data URL into (mime_type, raw bytes)."""
    match = _DATA_URL_RE.match(value or "")
    if match is None:
        raise AttachmentError("Value is not a base64 data URL")
    try:
        return match.group("mime"), base64.b64decode(match.group("payload"), validate=False)
    except (binascii.Error, ValueError) as e:
        raise AttachmentError(f"Corrupt attachment payload: {e}")
