"""Image loading for the command-line front end."""

import logging
import mimetypes
from pathlib import Path

import requests as http

from .constants import MAX_IMAGE_BYTES
from .errors import ValidationError

log = logging.getLogger(__name__)


def download_image(image_url: str) -> tuple[bytes, str | None] | None:
    """Download an image, returning (bytes, content type) or None on failure."""
    if not image_url:
        return None
    try:
        resp = http.get(
            image_url,
            timeout=15,
            headers={"User-Agent": "artwall/0.1"},
        )
        if resp.status_code == 200:
            content_type = resp.headers.get("content-type", "")
            mime = content_type.split(";")[0].strip() or None
            return resp.content, mime
        log.warning(f"Image download {image_url}: HTTP {resp.status_code}")
    except http.exceptions.RequestException as e:
        log.warning(f"Image download failed: {e}")
    return None


def load_image(source: str, mime_type: str | None = None) -> tuple[bytes, str]:
    """Read an image from a local path or an http(s) URL.

    Args:
        source: File path or URL.
        mime_type: Explicit MIME type; otherwise taken from the response
            header or guessed from the name.

    Returns:
        (image bytes, MIME type).

    Raises:
        ValidationError: If the image is missing, empty, too large or not an
            image type.
    """
    if source.startswith(("http://", "https://")):
        result = download_image(source)
        if result is None:
            raise ValidationError("image", f"could not download {source}")
        data, served_mime = result
        mime = mime_type or served_mime or mimetypes.guess_type(source)[0]
    else:
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise ValidationError("image", f"cannot read {path}: {e}") from e
        mime = mime_type or mimetypes.guess_type(path.name)[0]

    if not data:
        raise ValidationError("image", "image is empty")
    if len(data) > MAX_IMAGE_BYTES:
        raise ValidationError(
            "image", f"image is {len(data):,} bytes, limit is {MAX_IMAGE_BYTES:,}"
        )
    if not mime or not mime.startswith("image/"):
        raise ValidationError("image", f"only image files can be uploaded (got {mime})")
    return data, mime
