"""Download document images into the local images directory."""

import logging
import re
from pathlib import Path
from typing import Dict, Optional

import requests

from ..dingtalk_client import DingTalkClient, cookie_headers
from .markdown_exporter import ExportError, MarkdownExporter

IMAGE_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'bmp', 'webp', 'svg')
DEFAULT_IMAGE_EXTENSION = '.png'
IMAGE_ACCEPT = 'image/avif,image/webp,image/apng,image/svg+xml,image/*,*/*;q=0.8'

_EXTENSION_PATTERN = re.compile(r'\.(' + '|'.join(IMAGE_EXTENSIONS) + r')$')


class ImageDownloadError(Exception):
    """An image could not be fetched or written."""
    pass


def image_extension(src: str) -> str:
    """
    Pick a file extension from an image URL.

    The query string is ignored and only whitelisted extensions are kept;
    everything else becomes ``.png``.
    """
    path = src.split('?', 1)[0].lower()
    match = _EXTENSION_PATTERN.search(path)
    return f".{match.group(1)}" if match else DEFAULT_IMAGE_EXTENSION


def image_filename(number: int, extension: str) -> str:
    """``image_001.png`` style names, numbered in document order."""
    return f"image_{number:03d}{extension}"


class ImageMaterializer:
    """Fetches images with the document's cookie and saves them to disk."""

    def __init__(
        self,
        client: DingTalkClient,
        base_url: Optional[str] = None,
        logger: Optional[logging.Logger] = None
    ):
        self.client = client
        self.base_url = (base_url or client.base_url).rstrip('/')
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.exporters.image_materializer')

    def request_headers(self, cookie: Optional[str]) -> Dict[str, str]:
        headers = {
            'Accept': IMAGE_ACCEPT,
            'Referer': self.base_url + '/',
        }
        headers.update(cookie_headers(cookie))
        return headers

    def materialize(self, src: str, cookie: Optional[str], destination: Path) -> Path:
        """
        Download ``src`` and write it to ``destination``.

        Args:
            src: Absolute or base-relative image URL
            cookie: Cookie header value for the image host
            destination: Target file; parent directories are created

        Returns:
            The written path

        Raises:
            ImageDownloadError: On transport errors, non-2xx responses,
                empty bodies or write failures
        """
        url = self.client.absolute_url(src)

        try:
            data = self.client.download(url, self.request_headers(cookie))
        except requests.exceptions.RequestException as e:
            raise ImageDownloadError(f"Failed to download image {url}: {e}") from e

        if not data:
            raise ImageDownloadError(f"Empty image body: {url}")

        destination = Path(destination)
        try:
            MarkdownExporter.write_bytes(destination, data)
        except ExportError as e:
            raise ImageDownloadError(f"Failed to write image {destination}: {e}") from e

        self.logger.debug(f"Saved image {destination.name} ({len(data)} bytes)")
        return destination


__all__ = [
    'ImageMaterializer',
    'ImageDownloadError',
    'IMAGE_EXTENSIONS',
    'image_extension',
    'image_filename'
]
