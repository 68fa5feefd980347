"""Extraction of embedded metadata and document content from DingTalk responses."""

import json
import logging
from typing import Any, Dict, Optional

from bs4 import BeautifulSoup

from ..config_loader import DEFAULT_TITLE
from .base_fetcher import DentryKeyMissingError, ExtractionError

logger = logging.getLogger('dingtalk_doc_migrator.fetcher.extractor')

METADATA_ELEMENT_ID = 'mainsite_server_content'
METADATA_FALLBACK_FRAGMENT = 'mainsite'


def _path(data: Any, *keys: str) -> Any:
    """Walk nested mappings, returning None as soon as a key is missing."""
    for key in keys:
        if not isinstance(data, dict) or key not in data:
            return None
        data = data[key]
    return data


def extract_embedded_metadata(html: str) -> Any:
    """
    Locate the server-rendered metadata script and parse it as JSON.

    The element is looked up by its id first; if it is missing, any script
    whose id contains ``mainsite`` is used instead.

    Raises:
        ExtractionError: If no element is found or its text is not JSON
    """
    soup = BeautifulSoup(html or '', 'html.parser')
    element = soup.find(id=METADATA_ELEMENT_ID)

    if element is None:
        script_ids = [script.get('id') for script in soup.find_all('script', id=True)]
        logger.debug(f"Script ids on page: {script_ids}")

        element = soup.find(
            'script',
            id=lambda value: bool(value) and METADATA_FALLBACK_FRAGMENT in value
        )
        if element is None:
            raise ExtractionError(
                f"Element '{METADATA_ELEMENT_ID}' not found and no similar script element present"
            )
        logger.info(f"Using similar script element: {element.get('id')}")

    json_text = element.get_text().strip()
    logger.debug(f"Embedded metadata length: {len(json_text)} characters")

    try:
        return json.loads(json_text)
    except ValueError as e:
        raise ExtractionError(f"Embedded metadata is not valid JSON: {e}") from e


def resolve_dentry_key(metadata: Any) -> str:
    """
    Read ``dentryInfo.data.dentryKey``, falling back to ``data.nodeId``.

    Raises:
        DentryKeyMissingError: If neither path is present
    """
    dentry_key = _path(metadata, 'dentryInfo', 'data', 'dentryKey')
    if dentry_key is not None:
        return str(dentry_key)

    node_id = _path(metadata, 'data', 'nodeId')
    if node_id is not None:
        logger.debug("dentryKey missing, using data.nodeId")
        return str(node_id)

    raise DentryKeyMissingError("Neither dentryInfo.data.dentryKey nor data.nodeId found")


def extract_title(metadata: Any, default: str = DEFAULT_TITLE) -> str:
    """Read ``dentryInfo.data.name``; never raises."""
    name = _path(metadata, 'dentryInfo', 'data', 'name')
    if name is None or name == '':
        logger.warning(f"Document title missing, using '{default}'")
        return default
    return str(name)


def extract_content(envelope: Any) -> Optional[Dict[str, Any]]:
    """
    Decode ``data.documentContent.checkpoint.content`` from the data envelope.

    Missing, null or unparseable content yields None: the document body is
    unavailable (e.g. encrypted storage), which is not an error.
    """
    raw = _path(envelope, 'data', 'documentContent', 'checkpoint', 'content')
    if raw is None:
        logger.warning("Document content not present (storage may be encrypted)")
        return None

    if isinstance(raw, (dict, list)):
        return raw

    try:
        return json.loads(raw)
    except (TypeError, ValueError) as e:
        logger.warning(f"Failed to parse document content (storage may be encrypted): {e}")
        return None


__all__ = [
    'extract_embedded_metadata',
    'resolve_dentry_key',
    'extract_title',
    'extract_content',
    'METADATA_ELEMENT_ID'
]
