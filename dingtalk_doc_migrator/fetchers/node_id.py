"""Resolve document references to DingTalk node ids."""

import re

from .base_fetcher import ReferenceResolutionError

NODE_ID_PATTERN = re.compile(r'/i/nodes/([^?/]+)')
SCHEME_PATTERN = re.compile(r'^[A-Za-z][A-Za-z0-9+.\-]*://')


def resolve_node_id(reference: str) -> str:
    """
    Extract the node id from a document URL, or pass a bare id through.

    Args:
        reference: URL such as ``https://alidocs.dingtalk.com/i/nodes/abc?x=1``
            or an already-bare node id

    Returns:
        The node id

    Raises:
        ReferenceResolutionError: If a URL does not contain ``/i/nodes/<id>``
    """
    reference = (reference or '').strip()

    if not SCHEME_PATTERN.match(reference):
        return reference

    match = NODE_ID_PATTERN.search(reference)
    if not match:
        raise ReferenceResolutionError(f"Cannot extract node id from URL: {reference}")

    return match.group(1)


__all__ = ['resolve_node_id', 'NODE_ID_PATTERN']
