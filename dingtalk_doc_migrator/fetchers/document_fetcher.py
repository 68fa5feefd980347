"""Fetch pipeline: node id -> page -> embedded metadata -> dentry key -> document content."""

import logging
import random
from typing import Any, Dict, Optional

import requests

from ..config_loader import DEFAULT_TITLE, document_data_url, get_nested
from ..dingtalk_client import DingTalkClient, cookie_headers
from ..models import DocumentBundle
from .base_fetcher import (
    STAGE_FETCH_CONTENT,
    STAGE_FETCH_PAGE,
    BaseFetcher,
    FetchError,
)
from .node_id import resolve_node_id
from .page_extractor import (
    extract_content,
    extract_embedded_metadata,
    extract_title,
    resolve_dentry_key,
)

logger = logging.getLogger('dingtalk_doc_migrator.fetcher.document')


class DocumentFetcher(BaseFetcher):
    """Fetches a DingTalk document's content through the web page and data API."""

    def __init__(
        self,
        config: Dict[str, Any],
        client: Optional[DingTalkClient] = None,
        logger=None
    ):
        """
        Initialize the fetcher.

        Args:
            config: Configuration dictionary (``dingtalk`` section is used)
            client: Transport; built from config when not provided
            logger: Logger instance (optional)
        """
        super().__init__(config, logger)
        self.client = client or DingTalkClient.from_config(config)
        self.base_url = (get_nested(config, 'dingtalk.base_url') or self.client.base_url).rstrip('/')
        self.document_data_url = document_data_url(config, self.base_url)
        self.default_title = get_nested(config, 'renderer.default_title') or DEFAULT_TITLE

    def resolve_document(self, reference: str, cookie: str) -> DocumentBundle:
        """
        Run every pipeline stage for one document.

        Raises:
            ReferenceResolutionError, FetchError, ExtractionError,
            DentryKeyMissingError: carrying the failing stage
        """
        self._log_progress(f"Resolving document: {reference}")

        node_id = resolve_node_id(reference)
        self._log_progress(f"Node ID: {node_id}")

        html = self.fetch_page(node_id, cookie)
        self._log_progress(f"Page HTML length: {len(html)} characters", 'debug')

        metadata = extract_embedded_metadata(html)
        dentry_key = resolve_dentry_key(metadata)
        self._log_progress(f"Dentry key resolved for {node_id}", 'debug')

        title = extract_title(metadata, self.default_title)
        self._log_progress(f"Document title: {title}")

        envelope = self.fetch_document_data(dentry_key, cookie)
        content = extract_content(envelope)

        if content is None:
            self._log_progress(f"No document content available for {node_id} (possibly encrypted)", 'warning')
        else:
            self._log_progress(f"Document content extracted for {node_id}")

        return DocumentBundle(
            node_id=node_id,
            dentry_key=dentry_key,
            title=title,
            content=content,
            metadata=metadata if isinstance(metadata, dict) else {}
        )

    def fetch_page(self, node_id: str, cookie: str) -> str:
        """GET the document page HTML."""
        url = f"{self.base_url}/i/nodes/{node_id}?rnd={random.random()}"
        headers = {
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Referer': self.base_url,
        }
        headers.update(cookie_headers(cookie))

        try:
            return self.client.get(url, headers)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to fetch document page for {node_id}: {e}", STAGE_FETCH_PAGE) from e

    def fetch_document_data(self, dentry_key: str, cookie: str) -> Any:
        """POST to the document-data endpoint keyed by the dentry key."""
        headers = {
            'a-dentry-key': dentry_key,
            'Accept': '*/*',
            'Content-Type': 'application/json',
            'Origin': self.base_url,
            'Referer': self.base_url,
        }
        headers.update(cookie_headers(cookie))

        try:
            return self.client.post(self.document_data_url, {'fetchBody': True}, headers)
        except requests.exceptions.RequestException as e:
            raise FetchError(f"Failed to fetch document data: {e}", STAGE_FETCH_CONTENT) from e


__all__ = ['DocumentFetcher']
