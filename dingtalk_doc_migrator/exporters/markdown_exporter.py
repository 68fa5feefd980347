"""Filesystem side of the migration: output directories and Markdown files."""

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..config_loader import get_nested

PathLike = Union[str, Path]

# Characters that are not allowed in file names on common filesystems
_UNSAFE_FILENAME_CHARS = re.compile(r'[/\\:*?"<>|]')
_ADOC_SUFFIX = re.compile(r'\.adoc$', re.IGNORECASE)
MAX_FILENAME_LENGTH = 200


class ExportError(Exception):
    """A directory or file could not be written."""
    pass


class MarkdownExporter:
    """
    Writes rendered documents below one output directory.

    Each document gets its own directory named after its sanitized title,
    holding ``<title>.md`` and an ``images/`` subdirectory.
    """

    def __init__(self, output_directory: PathLike, logger: Optional[logging.Logger] = None):
        self.output_directory = Path(output_directory)
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.exporters.markdown_exporter')

    @classmethod
    def from_config(cls, config: Dict[str, Any], output_dir: Optional[str] = None) -> 'MarkdownExporter':
        return cls(output_dir or get_nested(config, 'export.output_directory', './dingtalk-docs'))

    @staticmethod
    def sanitize_filename(title: Optional[str]) -> str:
        """
        Convert a document title to a filesystem-safe name.

        Args:
            title: Document title

        Returns:
            Sanitized name, ``untitled`` when nothing usable remains
        """
        if not title:
            return "untitled"

        sanitized = _UNSAFE_FILENAME_CHARS.sub('_', title)
        sanitized = _ADOC_SUFFIX.sub('', sanitized)
        sanitized = sanitized.strip()

        if len(sanitized) > MAX_FILENAME_LENGTH:
            sanitized = sanitized[:MAX_FILENAME_LENGTH]

        return sanitized or "untitled"

    def document_directory(self, title: Optional[str]) -> Path:
        """``<output_directory>/<sanitized title>``; created on first write."""
        return self.output_directory / self.sanitize_filename(title)

    def save_markdown_file(self, title: Optional[str], markdown: str) -> Path:
        """Write ``<document dir>/<sanitized title>.md``, overwriting any previous export."""
        file_path = self.document_directory(title) / f"{self.sanitize_filename(title)}.md"
        self.write_text(file_path, markdown)
        self.logger.info(f"Saved Markdown: {file_path}")
        return file_path

    @staticmethod
    def ensure_directory(path: PathLike) -> Path:
        path = Path(path)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportError(f"Failed to create directory {path}: {e}") from e
        return path

    @classmethod
    def write_bytes(cls, path: PathLike, data: bytes) -> Path:
        path = Path(path)
        cls.ensure_directory(path.parent)
        try:
            path.write_bytes(data)
        except OSError as e:
            raise ExportError(f"Failed to write {path}: {e}") from e
        return path

    @classmethod
    def write_text(cls, path: PathLike, text: str) -> Path:
        path = Path(path)
        cls.ensure_directory(path.parent)
        try:
            path.write_text(text, encoding='utf-8')
        except OSError as e:
            raise ExportError(f"Failed to write {path}: {e}") from e
        return path


__all__ = ['MarkdownExporter', 'ExportError', 'MAX_FILENAME_LENGTH']
