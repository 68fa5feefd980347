"""Abstract base fetcher interface and the fetch pipeline error taxonomy."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..models import DocumentBundle

STAGE_RESOLVE_ID = 'resolve_id'
STAGE_FETCH_PAGE = 'fetch_page'
STAGE_EXTRACT_METADATA = 'extract_metadata'
STAGE_RESOLVE_DENTRY_KEY = 'resolve_dentry_key'
STAGE_FETCH_CONTENT = 'fetch_content'


class FetcherError(Exception):
    """Base exception for fetcher-related errors."""

    default_stage: Optional[str] = None

    def __init__(self, message: str, stage: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage or self.default_stage

    def __str__(self) -> str:
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class ReferenceResolutionError(FetcherError):
    """The document reference is a URL without a node id."""
    default_stage = STAGE_RESOLVE_ID


class FetchError(FetcherError):
    """Transport failure while fetching the page or the document data."""
    pass


class ExtractionError(FetcherError):
    """The embedded metadata element is missing or unparseable."""
    default_stage = STAGE_EXTRACT_METADATA


class DentryKeyMissingError(FetcherError):
    """Neither dentryInfo.data.dentryKey nor data.nodeId is present."""
    default_stage = STAGE_RESOLVE_DENTRY_KEY


class BaseFetcher(ABC):
    """Abstract base class for DingTalk document fetchers."""

    def __init__(self, config: Dict[str, Any], logger=None):
        """
        Initialize base fetcher with configuration and logger.

        Args:
            config: Configuration dictionary
            logger: Logger instance (optional, uses module logger if not provided)
        """
        self.config = config
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.fetcher')

    @abstractmethod
    def resolve_document(self, reference: str, cookie: str) -> DocumentBundle:
        """
        Run the full fetch pipeline for one document.

        Args:
            reference: Document URL or bare node id
            cookie: Cookie header value

        Returns:
            DocumentBundle with content set to None when the body is unavailable

        Raises:
            FetcherError: Subclass identifying the failing stage
        """
        pass

    def _log_progress(self, message: str, level: str = 'info') -> None:
        """
        Log progress message at specified level.

        Args:
            message: Message to log
            level: Log level (debug, info, warning, error)
        """
        log_method = getattr(self.logger, level, self.logger.info)
        log_method(message)
