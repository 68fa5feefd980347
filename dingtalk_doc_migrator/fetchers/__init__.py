"""Fetchers package for retrieving DingTalk document content."""

from .base_fetcher import (
    BaseFetcher,
    DentryKeyMissingError,
    ExtractionError,
    FetchError,
    FetcherError,
    ReferenceResolutionError,
)
from .document_fetcher import DocumentFetcher
from .node_id import resolve_node_id


def resolve_document(reference: str, cookie: str, config: dict = None, client=None):
    """
    Convenience function running the fetch pipeline for one document.

    Args:
        reference: Document URL or bare node id
        cookie: Cookie header value
        config: Optional configuration dictionary
        client: Optional DingTalkClient

    Returns:
        DocumentBundle
    """
    return DocumentFetcher(config or {}, client=client).resolve_document(reference, cookie)


__all__ = [
    'BaseFetcher',
    'DocumentFetcher',
    'FetcherError',
    'ReferenceResolutionError',
    'FetchError',
    'ExtractionError',
    'DentryKeyMissingError',
    'resolve_document',
    'resolve_node_id'
]
