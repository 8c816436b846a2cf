"""Turn images from disk, memory or the network into base64 data URLs."""

from __future__ import annotations

import base64
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Union

import httpx

logger = logging.getLogger(__name__)

DEFAULT_MEDIA_TYPE = "image/jpeg"


def encode_image_bytes(data: bytes, media_type: Optional[str] = None) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{media_type or DEFAULT_MEDIA_TYPE};base64,{encoded}"


def encode_image_file(image_path: Union[str, Path]) -> str:
    """Read an image file and return it as a data URL."""
    path = Path(image_path)
    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    media_type, _ = mimetypes.guess_type(path.name)
    if not media_type or not media_type.startswith("image/"):
        media_type = DEFAULT_MEDIA_TYPE
    return encode_image_bytes(path.read_bytes(), media_type)


def fetch_image_as_data_url(url: str, client: Optional[httpx.Client] = None) -> str:
    """Download ``url`` and return the body as a data URL.

    HTTP error statuses raise ``httpx.HTTPStatusError``.
    """
    owns_client = client is None
    http = client or httpx.Client(timeout=30.0, follow_redirects=True)
    try:
        response = http.get(url)
        response.raise_for_status()
    finally:
        if owns_client:
            http.close()

    media_type = response.headers.get("content-type", "").split(";")[0].strip()
    if not media_type.startswith("image/"):
        media_type = DEFAULT_MEDIA_TYPE
    logger.debug("Fetched sample image %s (%s bytes, %s)", url, len(response.content), media_type)
    return encode_image_bytes(response.content, media_type)
