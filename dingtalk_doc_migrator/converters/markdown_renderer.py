"""Markdown renderer for the DingTalk tagged-array document tree."""

import logging
from typing import Any, List, Optional

from ..config_loader import DEFAULT_TITLE
from ..exporters.image_materializer import (
    ImageDownloadError,
    ImageMaterializer,
    image_extension,
    image_filename,
)
from ..models import RenderContext
from .ast_nodes import AstNode, Child, decode_node, heading_level, is_heading_tag

# Fenced-block language tags for the code block syntax attribute
CODE_LANGUAGE_MAP = {
    'text/x-java': 'java',
    'text/x-python': 'python',
    'text/x-javascript': 'javascript',
    'text/x-go': 'go',
    'text/x-c++': 'cpp',
    'text/x-sql': 'sql',
    'text/x-sh': 'bash',
    'text/plain': 'text',
    'application/json': 'json',
    'text/html': 'html',
    'text/css': 'css',
}

CROSS_REFERENCE_TYPE = 'hetu'


class RenderError(Exception):
    """
    The content is present but unusable at the top level.

    Never escapes :meth:`MarkdownRenderer.render`, which turns it into an
    empty result.
    """
    pass


def code_language(syntax: str) -> str:
    """Map a MIME-like syntax string to a fenced code block language tag."""
    if syntax in CODE_LANGUAGE_MAP:
        return CODE_LANGUAGE_MAP[syntax]
    if syntax.startswith('text/x-'):
        return syntax[len('text/x-'):]
    if syntax.startswith('text/'):
        return syntax[len('text/'):]
    return syntax


class MarkdownRenderer:
    """
    Walks a decoded document tree and emits Markdown.

    All per-document state (output directory, cookie, image counter, parts
    index) lives in the :class:`RenderContext` passed to every call, so one
    renderer can serve any number of documents.
    """

    def __init__(
        self,
        image_materializer: Optional[ImageMaterializer] = None,
        max_depth: int = 64,
        default_title: str = DEFAULT_TITLE,
        logger: Optional[logging.Logger] = None
    ):
        self.image_materializer = image_materializer
        self.max_depth = max_depth
        self.default_title = default_title
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.converters.markdown_renderer')

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def render(self, content: Any, title: Optional[str], context: RenderContext) -> str:
        """
        Render full document content ``{main, parts}`` to Markdown.

        Args:
            content: Decoded content JSON
            title: Document title, emitted as the level-1 banner heading
            context: Fresh per-document render context

        Returns:
            Markdown text, or an empty string when there is nothing to render
        """
        try:
            body, parts = self._locate_body(content)
        except RenderError as e:
            self.logger.warning(f"Nothing to render: {e}")
            return ''

        context.parts_index = parts

        blocks = [f"# {title or self.default_title}"]
        for raw in body[2:]:
            node = decode_node(raw, self.max_depth)
            if node is None:
                continue
            rendered = self.render_node(node, context)
            if rendered:
                blocks.append(rendered)

        self.logger.debug(f"Rendered {len(blocks) - 1} block(s), {context.image_counter} image(s)")
        return '\n\n'.join(blocks).strip()

    def _locate_body(self, content: Any):
        """Find ``parts[main].data.body`` and the parts index."""
        if not isinstance(content, dict):
            raise RenderError("content is not an object")

        main_key = content.get('main')
        if isinstance(main_key, bool) or not isinstance(main_key, (str, int)):
            raise RenderError("'main' not found")

        parts = content.get('parts')
        if not isinstance(parts, dict):
            raise RenderError("'parts' not found")

        main_part = parts.get(str(main_key))
        data = main_part.get('data') if isinstance(main_part, dict) else None
        body = data.get('body') if isinstance(data, dict) else None
        if not isinstance(body, list):
            raise RenderError("main part has no body array")

        return body, parts

    # ------------------------------------------------------------------
    # Block dispatch
    # ------------------------------------------------------------------

    def render_node(self, node: AstNode, context: RenderContext) -> str:
        """Dispatch a block node by tag; unknown tags go to paragraph handling."""
        tag = node.tag

        if tag == 'table':
            return self._render_table(node)
        if tag == 'code':
            return self._render_code(node)
        if is_heading_tag(tag):
            return self._render_heading(node)
        if tag in ('ul', 'ol'):
            return self._render_list(node)
        if tag == 'blockquote':
            return self._render_blockquote(node, context)
        if tag == 'tag':
            return self._render_cross_reference(node, context)
        return self._render_paragraph(node, context)

    # ------------------------------------------------------------------
    # Inline content
    # ------------------------------------------------------------------

    def _render_span(self, node: AstNode, apply_bold: bool = True) -> str:
        """Resolve a span's text, wrapping each text leaf in ``**`` when bold."""
        if node.tag != 'span':
            return ''

        bold = apply_bold and node.attrs.get('bold') is True
        pieces = []
        for child in node.children:
            if isinstance(child, str):
                pieces.append(f"**{child}**" if bold else child)
            else:
                pieces.append(self._render_span(child, apply_bold))
        return ''.join(pieces)

    def _render_inline(self, child: Child, context: RenderContext) -> str:
        """Render one paragraph or list-item child."""
        if isinstance(child, str):
            return child
        if child.tag == 'img':
            return self._render_image(child, context)
        if child.tag == 'a':
            return self._render_link(child)
        if child.tag == 'tag':
            return self._render_cross_reference(child, context)
        return self._render_span(child)

    def _inline_text(self, node: AstNode, context: RenderContext) -> str:
        return ''.join(self._render_inline(child, context) for child in node.children).strip()

    def _span_text(self, children: List[Child], apply_bold: bool = True) -> str:
        """Concatenate text leaves and styled spans only."""
        pieces = []
        for child in children:
            if isinstance(child, str):
                pieces.append(child)
            else:
                pieces.append(self._render_span(child, apply_bold))
        return ''.join(pieces)

    def _render_link(self, node: AstNode) -> str:
        href = str(node.attr('href', ''))
        text = self._span_text(node.children).strip()

        if not href:
            return text
        if not text or text == href:
            return href
        return f"[{text}]({href})"

    def _render_cross_reference(self, node: AstNode, context: RenderContext) -> str:
        """Resolve a ``hetu`` tag through the parts index into a titled link."""
        tag_type = node.attr('tagType', '')
        if tag_type != CROSS_REFERENCE_TYPE:
            self.logger.debug(f"Unsupported tag type: {tag_type!r}")
            return ''

        metadata = node.attrs.get('metadata')
        ref_id = metadata.get('id') if isinstance(metadata, dict) else None
        if not ref_id:
            self.logger.warning("Cross-reference tag without metadata.id")
            return ''

        part = context.parts_index.get(str(ref_id))
        if not isinstance(part, dict):
            self.logger.warning(f"Referenced part not found: {ref_id}")
            return ''

        data = part.get('data') if isinstance(part.get('data'), dict) else {}
        file_name = data.get('fileName') or 'untitled'
        meta_url = data.get('metaUrl') or ''

        if not meta_url:
            self.logger.debug(f"Cross-reference without URL: {file_name}")
            return f"《{file_name}》"
        return f"[《{file_name}》]({meta_url})"

    def _render_image(self, node: AstNode, context: RenderContext) -> str:
        """Download the image into ``images/``; fall back to the remote URL on failure."""
        src = str(node.attr('src', ''))
        name = str(node.attr('name', 'image'))

        if not src:
            return f"[image: {name}]"

        if self.image_materializer is None:
            self.logger.debug(f"No image materializer configured, linking remote image: {src}")
            return f"![{name}]({src})"

        filename = image_filename(context.next_image_number(), image_extension(src))
        destination = context.images_dir / filename

        try:
            self.logger.info(f"Downloading image: {src} -> images/{filename}")
            self.image_materializer.materialize(src, context.cookie, destination)
        except (ImageDownloadError, OSError) as e:
            self.logger.error(f"Image download failed, keeping remote URL {src}: {e}")
            context.images_failed += 1
            return f"![{name}]({src})"

        context.images_saved += 1
        return f"![{name}](./images/{filename})"

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def _render_paragraph(self, node: AstNode, context: RenderContext) -> str:
        """Plain paragraphs, list-item paragraphs and bare images."""
        if node.tag == 'img':
            return self._render_image(node, context)
        if node.tag != 'p':
            self.logger.debug(f"Skipping unsupported node <{node.tag}>")
            return ''

        if isinstance(node.attrs.get('list'), dict):
            return self._render_list_item(node, context)

        return self._inline_text(node, context)

    def _render_list_item(self, node: AstNode, context: RenderContext) -> str:
        """A paragraph carrying a ``list`` attribute is one list item."""
        list_info = node.attrs['list']

        try:
            level = max(0, int(list_info.get('level') or 0))
        except (TypeError, ValueError):
            level = 0
        marker = '1. ' if list_info.get('isOrdered') is True else '- '

        text = self._inline_text(node, context)
        if not text:
            return ''
        return '  ' * level + marker + text

    def _render_heading(self, node: AstNode) -> str:
        text = self._span_text(node.children, apply_bold=False).strip()
        if not text:
            return ''
        return '#' * heading_level(node.tag) + ' ' + text

    def _render_list(self, node: AstNode) -> str:
        """``ul``/``ol`` containers of ``li`` items; empty items are not numbered."""
        ordered = node.tag == 'ol'
        number = 1
        lines = []

        for item in node.child_nodes('li'):
            text = self._span_text(item.children).strip()
            if not text:
                continue
            if ordered:
                lines.append(f"{number}. {text}")
                number += 1
            else:
                lines.append(f"- {text}")

        return '\n'.join(lines)

    def _render_blockquote(self, node: AstNode, context: RenderContext) -> str:
        lines = []
        for child in node.children:
            if isinstance(child, str):
                lines.append(f"> {child}")
                continue

            rendered = self.render_node(child, context)
            if rendered:
                lines.extend(f"> {line}" for line in rendered.split('\n'))

        return '\n'.join(lines)

    def _render_table(self, node: AstNode) -> str:
        """
        Pipe table from ``tr``/``tc`` children.

        The first row with at least one cell always becomes the header, since
        the source grammar has no header/body distinction.
        """
        lines = []
        header_written = False

        for row in node.child_nodes('tr'):
            cells = [self._table_cell_text(cell) for cell in row.child_nodes('tc')]
            if not cells:
                continue

            lines.append('| ' + ' | '.join(cells) + ' |')
            if not header_written:
                lines.append('| ' + ' | '.join('---' for _ in cells) + ' |')
                header_written = True

        return '\n'.join(lines)

    def _table_cell_text(self, cell: AstNode) -> str:
        text = ''.join(self._span_text(paragraph.children) for paragraph in cell.child_nodes('p'))
        return text.strip().replace('\n', ' ')

    def _render_code(self, node: AstNode) -> str:
        syntax = str(node.attr('syntax', 'text/plain'))
        code = node.attr('code', '')
        if not code:
            return ''

        return f"```{code_language(syntax)}\n{code}\n```"


__all__ = ['MarkdownRenderer', 'RenderError', 'CODE_LANGUAGE_MAP', 'code_language']
