"""Data models for the DingTalk document to Markdown migration pipeline."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

logger = logging.getLogger('dingtalk_doc_migrator')


@dataclass
class DocumentBundle:
    """Everything the fetch pipeline learned about one document."""

    node_id: str
    dentry_key: str
    title: str
    content: Optional[Dict[str, Any]] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def has_content(self) -> bool:
        """Content is absent for encrypted storage or an unparseable checkpoint."""
        return self.content is not None

    @property
    def ast_root(self) -> Optional[Any]:
        """The main part of the content, i.e. ``parts[main]``."""
        if not isinstance(self.content, dict):
            return None
        main_key = self.content.get('main')
        parts = self.parts_index
        if main_key is None:
            return None
        return parts.get(main_key)

    @property
    def parts_index(self) -> Dict[str, Any]:
        """Sibling part lookup table used to resolve cross-references."""
        if not isinstance(self.content, dict):
            return {}
        parts = self.content.get('parts')
        return parts if isinstance(parts, dict) else {}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize bundle to dictionary (content omitted)."""
        return {
            'node_id': self.node_id,
            'dentry_key': self.dentry_key,
            'title': self.title,
            'has_content': self.has_content,
            'parts': len(self.parts_index)
        }


@dataclass
class RenderContext:
    """
    Mutable state for exactly one render call.

    A fresh instance must be created for every document; the image counter
    is what makes image filenames deterministic within that document.
    """

    output_dir: Path
    cookie: Optional[str] = None
    parts_index: Dict[str, Any] = field(default_factory=dict)
    image_counter: int = 0
    images_saved: int = 0
    images_failed: int = 0

    def __post_init__(self) -> None:
        self.output_dir = Path(self.output_dir)

    @property
    def images_dir(self) -> Path:
        return self.output_dir / 'images'

    def next_image_number(self) -> int:
        """Advance and return the image counter."""
        self.image_counter += 1
        return self.image_counter


@dataclass
class DocumentResult:
    """Outcome of converting a single document to a Markdown file."""

    node_id: str
    title: str
    file_path: Optional[str]
    markdown: str
    image_count: int = 0
    images_failed: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'node_id': self.node_id,
            'title': self.title,
            'file_path': self.file_path,
            'image_count': self.image_count,
            'images_failed': self.images_failed
        }


@dataclass
class BatchItemStatus:
    """Tracks the status of one reference in a batch run."""

    reference: str
    status: str  # "success", "failed", "skipped"
    node_id: Optional[str] = None
    title: Optional[str] = None
    file_path: Optional[str] = None
    error_message: Optional[str] = None
    timestamp: Optional[str] = None

    def __post_init__(self) -> None:
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = datetime.now().isoformat()


@dataclass
class BatchReport:
    """Aggregated counts of a sequential batch run."""

    items: List[BatchItemStatus] = field(default_factory=list)

    def add(self, item: BatchItemStatus) -> None:
        self.items.append(item)

    def _count(self, status: str) -> int:
        return sum(1 for item in self.items if item.status == status)

    @property
    def success_count(self) -> int:
        return self._count('success')

    @property
    def failure_count(self) -> int:
        return self._count('failed')

    @property
    def skipped_count(self) -> int:
        return self._count('skipped')

    @property
    def total(self) -> int:
        return len(self.items)

    def summary(self) -> str:
        return (
            f"Batch complete: {self.success_count} succeeded, "
            f"{self.failure_count} failed, {self.skipped_count} skipped"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total': self.total,
            'success_count': self.success_count,
            'failure_count': self.failure_count,
            'skipped_count': self.skipped_count,
            'items': [
                {
                    'reference': item.reference,
                    'status': item.status,
                    'node_id': item.node_id,
                    'title': item.title,
                    'file_path': item.file_path,
                    'error_message': item.error_message,
                    'timestamp': item.timestamp
                }
                for item in self.items
            ]
        }


__all__ = [
    'DocumentBundle',
    'RenderContext',
    'DocumentResult',
    'BatchItemStatus',
    'BatchReport'
]
