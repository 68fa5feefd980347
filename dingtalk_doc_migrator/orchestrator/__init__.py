"""
Orchestration package for the fetch -> render -> save pipeline.

DocumentService exports one document; BatchRunner drives it over a list of
references and collects a BatchReport.
"""

from .batch_runner import BatchRunner
from .document_service import ContentUnavailableError, DocumentService, DocumentServiceError

__all__ = [
    'DocumentService',
    'DocumentServiceError',
    'ContentUnavailableError',
    'BatchRunner'
]
