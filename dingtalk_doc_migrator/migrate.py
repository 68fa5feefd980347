#!/usr/bin/env python3
"""
DingTalk Document to Markdown Migration Tool - CLI Entry Point

Fetches DingTalk (alidocs) documents with a browser session cookie and
writes each one as a Markdown file with locally saved images.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List

import requests

from . import __version__
from .config_loader import ConfigLoader
from .credentials import CredentialError
from .exporters.markdown_exporter import ExportError
from .fetchers.base_fetcher import FetcherError
from .logger import log_config, log_section, setup_logging
from .orchestrator import BatchRunner, ContentUnavailableError, DocumentService, DocumentServiceError


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        prog='dingtalk-migrate',
        description="Export DingTalk documents to Markdown files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Single document by URL
  dingtalk-migrate https://alidocs.dingtalk.com/i/nodes/abc123 --cookie "$COOKIE"

  # Bare node id, cookie from DINGTALK_COOKIE
  dingtalk-migrate abc123

  # Batch from a file (one reference per line, # comments allowed)
  dingtalk-migrate --input-file docs.txt --output-dir ./export

  # With a configuration file and debug logging
  dingtalk-migrate --config config.yaml -vv abc123
        """
    )

    parser.add_argument(
        'references',
        nargs='*',
        metavar='REFERENCE',
        help='Document URL or bare node id'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--input-file',
        type=str,
        help='File with one document reference per line'
    )

    parser.add_argument(
        '--config',
        type=str,
        help='Path to configuration YAML file'
    )

    parser.add_argument(
        '--cookie',
        type=str,
        help='Cookie header value of a logged-in DingTalk session'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        help='Output directory (default: ./dingtalk-docs)'
    )

    parser.add_argument(
        '--base-url',
        type=str,
        help='DingTalk documents base URL (default: https://alidocs.dingtalk.com)'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Write logs to this file as well'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def read_references(args: argparse.Namespace) -> List[str]:
    """Collect references from positional arguments and the input file."""
    references = list(args.references or [])

    if args.input_file:
        path = Path(args.input_file)
        if not path.is_file():
            raise FileNotFoundError(f"Input file not found: {args.input_file}")
        for line in path.read_text(encoding='utf-8').splitlines():
            line = line.strip()
            if line and not line.startswith('#'):
                references.append(line)

    return references


def run_single(service: DocumentService, reference: str, cookie: str, logger: logging.Logger) -> int:
    try:
        result = service.parse_document(reference, cookie)
    except ContentUnavailableError as e:
        logger.warning(str(e))
        print(f"SKIPPED: {e}", file=sys.stderr)
        return 1
    except (FetcherError, DocumentServiceError, ExportError, requests.exceptions.RequestException) as e:
        logger.error(f"Export failed: {e}")
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"Saved '{result.title}' to {result.file_path} ({result.image_count} image(s))")
    return 0


def run_batch(service: DocumentService, references: List[str], cookie: str) -> int:
    report = BatchRunner(service).run(references, cookie)

    print(report.summary())
    for item in report.items:
        if item.status == 'failed':
            print(f"  FAILED {item.reference}: {item.error_message}", file=sys.stderr)

    return 1 if report.failure_count else 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        setup_logging(verbosity=args.verbose)
        logger = logging.getLogger('dingtalk_doc_migrator.migrate')

        if args.config:
            logger.info(f"Loading configuration from {args.config}")
            config = ConfigLoader.load(args.config)
        else:
            config = ConfigLoader.defaults()

        config = ConfigLoader.merge_with_args(config, args)
        ConfigLoader.validate(config)

        logging_config = config.get('logging', {})
        setup_logging(
            verbosity=args.verbose,
            log_file=logging_config.get('file'),
            level=logging_config.get('level')
        )

        log_section("DingTalk Document to Markdown Migration Tool")
        logger.info(f"Version: {__version__}")
        log_config(config)

        references = read_references(args)
        if not references:
            parser.print_usage(sys.stderr)
            print("ERROR: No document reference given", file=sys.stderr)
            return 2

        service = DocumentService.from_config(config)
        # Resolve the cookie once so a missing credential fails before any request
        cookie = service.cookie_provider.get_cookie(args.cookie)

        if len(references) == 1 and not args.input_file:
            return run_single(service, references[0], cookie, logger)
        return run_batch(service, references, cookie)

    except CredentialError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 2
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except ValueError as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("\nMigration interrupted by user", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
