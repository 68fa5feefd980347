"""
DingTalk Document to Markdown Migration Tool

Exports DingTalk (alidocs) documents to Markdown files with locally saved
images, using a logged-in browser session cookie.

Features:
- Accepts document URLs or bare node ids
- Fetch pipeline: document page -> embedded metadata -> dentry key -> document data
- Transparent gzip handling and charset detection
- Markdown rendering of headings, paragraphs, lists, tables, code blocks,
  quotes, links, images and document cross-references
- Images downloaded into an ``images/`` directory next to the Markdown file
- Sequential batch export with a summary report

Basic Usage:
    1. export DINGTALK_COOKIE="<Cookie header from a logged-in browser session>"
    2. Run: dingtalk-migrate https://alidocs.dingtalk.com/i/nodes/<node id>

Example Configuration (config.yaml):
    dingtalk:
        base_url: "https://alidocs.dingtalk.com"
        cookie: ${DINGTALK_COOKIE}

    export:
        output_directory: "./dingtalk-docs"
"""

__version__ = "1.0.0"
__description__ = "DingTalk document to Markdown migration tool"

# Import and expose key classes for public API
from .models import (
    BatchItemStatus,
    BatchReport,
    DocumentBundle,
    DocumentResult,
    RenderContext
)
from .config_loader import ConfigLoader, get_nested
from .logger import setup_logging, ProgressTracker, log_section, log_config
from .credentials import CookieProvider, CredentialError
from .dingtalk_client import DingTalkClient
from .fetchers import DocumentFetcher, FetcherError, resolve_document, resolve_node_id
from .converters import MarkdownRenderer, RenderError, render_markdown
from .exporters import ExportError, ImageDownloadError, ImageMaterializer, MarkdownExporter
from .orchestrator import BatchRunner, ContentUnavailableError, DocumentService, DocumentServiceError

# Expose main entry point for CLI
from .migrate import main as cli_main

__all__ = [
    # Version info
    '__version__',
    '__description__',

    # Core data models
    'BatchItemStatus',
    'BatchReport',
    'DocumentBundle',
    'DocumentResult',
    'RenderContext',

    # Configuration
    'ConfigLoader',
    'get_nested',

    # Logging
    'setup_logging',
    'ProgressTracker',
    'log_section',
    'log_config',

    # Pipeline
    'CookieProvider',
    'CredentialError',
    'DingTalkClient',
    'DocumentFetcher',
    'FetcherError',
    'resolve_document',
    'resolve_node_id',
    'MarkdownRenderer',
    'RenderError',
    'render_markdown',
    'MarkdownExporter',
    'ExportError',
    'ImageMaterializer',
    'ImageDownloadError',
    'DocumentService',
    'DocumentServiceError',
    'ContentUnavailableError',
    'BatchRunner',

    # CLI
    'cli_main'
]
