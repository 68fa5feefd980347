"""Sequential batch export of several document references."""

import logging
from typing import Iterable, Optional, Set

import requests

from ..exporters.markdown_exporter import ExportError
from ..fetchers.base_fetcher import FetcherError
from ..fetchers.node_id import resolve_node_id
from ..logger import ProgressTracker
from ..models import BatchItemStatus, BatchReport
from .document_service import ContentUnavailableError, DocumentService, DocumentServiceError


class BatchRunner:
    """Runs :class:`DocumentService` over many references, one at a time."""

    def __init__(self, service: DocumentService, logger: Optional[logging.Logger] = None):
        self.service = service
        self.logger = logger or logging.getLogger('dingtalk_doc_migrator.orchestrator.batch_runner')

    def run(self, references: Iterable[str], cookie: Optional[str] = None) -> BatchReport:
        """
        Export every reference and collect per-item outcomes.

        A failing document never stops the batch. Credential errors do,
        since every remaining document would fail the same way.
        """
        references = list(references)
        report = BatchReport()
        seen: Set[str] = set()

        with ProgressTracker(total_items=len(references), item_type='documents') as tracker:
            for reference in references:
                reference = (reference or '').strip()

                if not reference:
                    report.add(BatchItemStatus(reference='', status='skipped', error_message='blank reference'))
                    tracker.skip()
                    continue

                try:
                    node_id = resolve_node_id(reference)
                except FetcherError as e:
                    self.logger.error(f"Invalid reference {reference}: {e}")
                    report.add(BatchItemStatus(reference=reference, status='failed', error_message=str(e)))
                    tracker.increment(success=False)
                    continue

                if node_id in seen:
                    self.logger.info(f"Skipping duplicate document {node_id}")
                    report.add(BatchItemStatus(
                        reference=reference,
                        status='skipped',
                        node_id=node_id,
                        error_message='duplicate'
                    ))
                    tracker.skip()
                    continue
                seen.add(node_id)

                try:
                    result = self.service.parse_document(reference, cookie)
                except ContentUnavailableError as e:
                    self.logger.warning(str(e))
                    report.add(BatchItemStatus(
                        reference=reference,
                        status='skipped',
                        node_id=node_id,
                        error_message=str(e)
                    ))
                    tracker.skip()
                    continue
                except (FetcherError, DocumentServiceError, ExportError, requests.exceptions.RequestException) as e:
                    self.logger.error(f"Failed to export {reference}: {e}")
                    report.add(BatchItemStatus(
                        reference=reference,
                        status='failed',
                        node_id=node_id,
                        error_message=str(e)
                    ))
                    tracker.increment(success=False)
                    continue

                report.add(BatchItemStatus(
                    reference=reference,
                    status='success',
                    node_id=result.node_id,
                    title=result.title,
                    file_path=result.file_path
                ))
                tracker.increment(success=True)

        self.logger.info(report.summary())
        return report


__all__ = ['BatchRunner']
