"""Single-document pipeline: cookie -> fetch -> render -> save."""

import logging
from typing import Any, Dict, Optional

from ..config_loader import get_nested
from ..converters.markdown_renderer import MarkdownRenderer
from ..credentials import CookieProvider
from ..dingtalk_client import DingTalkClient
from ..exporters.image_materializer import ImageMaterializer
from ..exporters.markdown_exporter import MarkdownExporter
from ..fetchers.document_fetcher import DocumentFetcher
from ..models import DocumentResult, RenderContext


class DocumentServiceError(Exception):
    """A document was fetched but could not be turned into a Markdown file."""
    pass


class ContentUnavailableError(DocumentServiceError):
    """The document-data response carried no readable content (e.g. encrypted storage)."""
    pass


class DocumentService:
    """
    Coordinates the collaborators needed to export one document.

    Nothing is written to disk when the document has no content.
    """

    def __init__(
        self,
        fetcher: DocumentFetcher,
        renderer: MarkdownRenderer,
        exporter: MarkdownExporter,
        cookie_provider: CookieProvider,
        logger: Optional[logging.Logger] = None
    ):
        self.fetcher = fetcher
        self.renderer = renderer
        self.exporter = exporter
        self.cookie_provider = cookie_provider
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.orchestrator.document_service')

    @classmethod
    def from_config(cls, config: Dict[str, Any], client: Optional[DingTalkClient] = None) -> 'DocumentService':
        """Wire up the default collaborators from configuration."""
        client = client or DingTalkClient.from_config(config)
        fetcher = DocumentFetcher(config, client=client)
        renderer = MarkdownRenderer(
            image_materializer=ImageMaterializer(client, fetcher.base_url),
            max_depth=get_nested(config, 'renderer.max_depth', 64),
            default_title=fetcher.default_title
        )
        return cls(
            fetcher=fetcher,
            renderer=renderer,
            exporter=MarkdownExporter.from_config(config),
            cookie_provider=CookieProvider(config)
        )

    def parse_document(self, reference: str, cookie: Optional[str] = None) -> DocumentResult:
        """
        Fetch, render and save one document.

        Args:
            reference: Document URL or bare node id
            cookie: Cookie override; otherwise looked up by the cookie provider

        Returns:
            DocumentResult describing the written file

        Raises:
            CredentialError: If no cookie is available
            FetcherError: If a fetch pipeline stage fails
            ContentUnavailableError: If the document has no readable content
            DocumentServiceError: If rendering produced nothing
            ExportError: If the Markdown file cannot be written
        """
        cookie = self.cookie_provider.get_cookie(cookie)

        bundle = self.fetcher.resolve_document(reference, cookie)
        if not bundle.has_content:
            raise ContentUnavailableError(
                f"Document '{bundle.title}' ({bundle.node_id}) has no readable content; "
                f"it may use encrypted storage"
            )

        document_dir = self.exporter.document_directory(bundle.title)
        context = RenderContext(output_dir=document_dir, cookie=cookie)

        markdown = self.renderer.render(bundle.content, bundle.title, context)
        if not markdown:
            raise DocumentServiceError(f"Markdown generation produced no output for {bundle.node_id}")

        file_path = self.exporter.save_markdown_file(bundle.title, markdown)

        if context.images_failed:
            self.logger.warning(
                f"{context.images_failed} image(s) of '{bundle.title}' kept remote URLs"
            )
        self.logger.info(f"Document '{bundle.title}' exported to {file_path}")

        return DocumentResult(
            node_id=bundle.node_id,
            title=bundle.title,
            file_path=str(file_path),
            markdown=markdown,
            image_count=context.images_saved,
            images_failed=context.images_failed
        )


__all__ = ['DocumentService', 'DocumentServiceError', 'ContentUnavailableError']
