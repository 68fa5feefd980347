"""Decoded form of the DingTalk tagged-array document tree.

Raw nodes arrive as ``[tag, attrs, child_0, child_1, ...]`` where each child
is either another raw node or a plain text leaf. They are decoded once into
:class:`AstNode` so the renderer never indexes positions directly.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger('dingtalk_doc_migrator.converters.ast')


@dataclass
class AstNode:
    """A tagged node with its attributes and ordered children."""

    tag: str
    attrs: Dict[str, Any] = field(default_factory=dict)
    children: List[Union['AstNode', str]] = field(default_factory=list)

    def attr(self, key: str, default: Any = None) -> Any:
        value = self.attrs.get(key, default)
        return default if value is None else value

    def child_nodes(self, tag: Optional[str] = None) -> List['AstNode']:
        """Children that are nodes, optionally restricted to one tag."""
        return [
            child for child in self.children
            if isinstance(child, AstNode) and (tag is None or child.tag == tag)
        ]


Child = Union[AstNode, str]


def decode_node(raw: Any, max_depth: int = 64, _depth: int = 0) -> Optional[AstNode]:
    """
    Decode one raw node and its subtree.

    Returns None for anything that is not a well-formed node: fewer than two
    elements, a non-string tag or a non-mapping attrs slot. Malformed
    children are dropped; subtrees deeper than ``max_depth`` are cut off.
    """
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        return None

    tag, attrs = raw[0], raw[1]
    if not isinstance(tag, str):
        return None
    if attrs is None:
        attrs = {}
    if not isinstance(attrs, dict):
        return None

    if _depth >= max_depth:
        logger.warning(f"Node nesting exceeds {max_depth} levels, dropping <{tag}> subtree")
        return None

    children: List[Child] = []
    for raw_child in raw[2:]:
        child = decode_child(raw_child, max_depth, _depth + 1)
        if child is not None:
            children.append(child)

    return AstNode(tag=tag, attrs=attrs, children=children)


def decode_child(raw: Any, max_depth: int = 64, _depth: int = 0) -> Optional[Child]:
    """Decode a child slot: text leaves stay strings, arrays become nodes."""
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (list, tuple)):
        return decode_node(raw, max_depth, _depth)
    # numbers, booleans and mappings are not part of the grammar
    return None


def heading_level(tag: str) -> int:
    """Parse ``hN`` into a level clamped to 1..6; unparseable suffixes give 1."""
    try:
        level = int(tag[1:])
    except (TypeError, ValueError):
        return 1
    return max(1, min(6, level))


def is_heading_tag(tag: str) -> bool:
    """``h`` followed by digits; covers h7..h9 that clamp down to h6."""
    return len(tag) >= 2 and tag[0] == 'h' and tag[1:].isdigit()


__all__ = [
    'AstNode',
    'Child',
    'decode_node',
    'decode_child',
    'heading_level',
    'is_heading_tag'
]
