"""Converters package for rendering DingTalk document trees to Markdown."""

import logging
from pathlib import Path

from ..config_loader import DEFAULT_BASE_URL
from ..dingtalk_client import DingTalkClient
from ..exporters.image_materializer import ImageMaterializer
from ..models import RenderContext
from .ast_nodes import AstNode, decode_node
from .markdown_renderer import CODE_LANGUAGE_MAP, MarkdownRenderer, RenderError


def render_markdown(content, title, output_dir, cookie=None, image_materializer=None, max_depth=64,
                    base_url=DEFAULT_BASE_URL, logger=None):
    """
    Convenience function to render one document's content to Markdown.

    Images are downloaded into ``<output_dir>/images/``; any image that
    cannot be saved keeps its remote URL.

    Args:
        content: Decoded content JSON (``{main, parts}``)
        title: Document title
        output_dir: Directory that receives the ``images/`` subdirectory
        cookie: Cookie used for image downloads
        image_materializer: Optional ImageMaterializer; a default one bound
            to ``base_url`` is created when omitted
        max_depth: Maximum node nesting depth
        base_url: Platform base URL for relative image sources and the Referer
        logger: Optional logger instance

    Returns:
        str: Markdown text, empty when the content has no renderable body

    Example:
        >>> from dingtalk_doc_migrator.converters import render_markdown
        >>> markdown = render_markdown(bundle.content, bundle.title, './out/Doc', cookie)
    """
    if logger is None:
        logger = logging.getLogger('dingtalk_doc_migrator.converters')

    client = None
    if image_materializer is None:
        client = DingTalkClient(base_url=base_url)
        image_materializer = ImageMaterializer(client)

    try:
        renderer = MarkdownRenderer(image_materializer=image_materializer, max_depth=max_depth, logger=logger)
        context = RenderContext(output_dir=Path(output_dir), cookie=cookie)
        return renderer.render(content, title, context)
    finally:
        if client is not None:
            client.close()


__all__ = [
    'render_markdown',
    'MarkdownRenderer',
    'RenderError',
    'CODE_LANGUAGE_MAP',
    'AstNode',
    'decode_node'
]
