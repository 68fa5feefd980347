"""Exporters package for writing Markdown documents and their images to disk."""

from .image_materializer import (
    IMAGE_EXTENSIONS,
    ImageDownloadError,
    ImageMaterializer,
    image_extension,
    image_filename,
)
from .markdown_exporter import ExportError, MarkdownExporter

__all__ = [
    'MarkdownExporter',
    'ExportError',
    'ImageMaterializer',
    'ImageDownloadError',
    'IMAGE_EXTENSIONS',
    'image_extension',
    'image_filename'
]
