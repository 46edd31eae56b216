"""Resolve and decode image sources.

An enhancement job accepts its input image as one of four forms:

========================  ==============================================
Form                      Handling
========================  ==============================================
``http://`` / ``https://``  passed through unchanged
``data:...``              passed through unchanged
``/relative/path.png``    read from inside ``static_dir`` and re-encoded
anything else             read as a local file path and re-encoded
========================  ==============================================

Re-encoded files become ``data:application/octet-stream;base64,...`` URIs.

Canvas layers, on the other hand, need decoded pixels, so this module also
loads image bytes from URLs, data URIs or raw uploads and decodes them with
Pillow. Layer sources are never read from arbitrary local paths; a
site-relative path must resolve to a file inside ``static_dir``.
"""

import base64
import binascii
import io
import logging
from pathlib import Path

import httpx
from PIL import Image, UnidentifiedImageError

from .errors import SourceResolutionError

logger = logging.getLogger(__name__)

OCTET_STREAM_PREFIX = "data:application/octet-stream;base64,"


def is_remote(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def is_data_uri(source: str) -> bool:
    return source.startswith("data:")


def encode_data_uri(data: bytes, mime_type: str = "application/octet-stream") -> str:
    """Encode raw bytes as a base64 data URI."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"


def decode_data_uri(uri: str) -> bytes:
    """Extract the payload of a base64 data URI.

    Raises:
        SourceResolutionError: If the URI is not base64 encoded or is corrupt.
    """
    header, sep, payload = uri.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise SourceResolutionError("Unsupported data URI; expected base64 encoding")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SourceResolutionError(f"Corrupt data URI: {e}") from e


def read_image_file(path: Path) -> bytes:
    """Read an image file from disk, raising :class:`SourceResolutionError` on failure."""
    try:
        return path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read image file {path}: {e}")
        raise SourceResolutionError(f"Could not read image: {path.name}") from e


def static_path(source: str, static_dir: Path) -> Path:
    """Map a site-relative path onto a file inside *static_dir*.

    Raises:
        SourceResolutionError: If the path escapes *static_dir*.
    """
    root = static_dir.resolve()
    path = (root / source.lstrip("/")).resolve()
    if not path.is_relative_to(root):
        logger.warning(f"Rejected image path outside static directory: {source}")
        raise SourceResolutionError("Image path must stay inside the static directory")
    return path


def resolve_image_source(source: str, static_dir: Path) -> str:
    """Turn a user-facing image reference into something a job can consume.

    Args:
        source: URL, data URI, site-relative path or local file path.
        static_dir: Root that site-relative paths resolve against.

    Returns:
        A URL or data URI.

    Raises:
        SourceResolutionError: If a file-based source cannot be read or a
            site-relative path escapes *static_dir*.
    """
    if not source:
        raise SourceResolutionError("No source image provided")

    if is_remote(source) or is_data_uri(source):
        return source

    if source.startswith("/"):
        path = static_path(source, static_dir)
    else:
        path = Path(source)

    return OCTET_STREAM_PREFIX + base64.b64encode(read_image_file(path)).decode("ascii")


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes into a fully loaded Pillow image.

    Raises:
        SourceResolutionError: If the bytes are not a readable image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise SourceResolutionError("Unreadable image data") from e
    if image.width <= 0 or image.height <= 0:
        raise SourceResolutionError("Image has no area")
    return image


async def fetch_image_bytes(url: str, client: httpx.AsyncClient) -> bytes:
    """Download an image over HTTP.

    Raises:
        SourceResolutionError: On any transport error or non-2xx response.
    """
    try:
        response = await client.get(url, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error(f"Failed to download image {url}: {e}")
        raise SourceResolutionError("Could not download image") from e
    return response.content


async def load_layer_image(
    source: str | bytes,
    client: httpx.AsyncClient | None = None,
    static_dir: Path | None = None,
) -> Image.Image:
    """Load and decode the raster for a new canvas layer.

    Args:
        source: Raw bytes, a data URI, an http(s) URL, or a site-relative
            path under *static_dir*.
        client: HTTP client used for URLs (required for URL sources).
        static_dir: Root for site-relative paths.

    Raises:
        SourceResolutionError: If the source cannot be read or decoded, is a
            bare local path, or escapes *static_dir*.
    """
    if isinstance(source, bytes):
        return decode_image(source)

    if is_data_uri(source):
        return decode_image(decode_data_uri(source))

    if is_remote(source):
        if client is None:
            raise SourceResolutionError("No HTTP client available to download image")
        return decode_image(await fetch_image_bytes(source, client))

    if not source.startswith("/") or static_dir is None:
        raise SourceResolutionError("Image source must be a URL, a data URI or a site-relative path")

    return decode_image(read_image_file(static_path(source, static_dir)))
