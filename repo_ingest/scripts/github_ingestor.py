#!/usr/bin/env python3
"""
Command-line GitHub Repository Ingestion

Downloads a branch snapshot of a GitHub repository and writes the extracted
documents as JSON, using the same pipeline as the HTTP API.
"""

import sys
import time
import logging
import argparse
import dataclasses
from pathlib import Path
from typing import List, Optional

from repo_ingest.config import IngestionSettings
from repo_ingest.errors import IngestionError, InvalidRequestError
from repo_ingest.services.archive_ingestor import GitHubArchiveIngester
from repo_ingest.services.reference_resolver import resolve_reference

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Extract source-file documents from a GitHub repository snapshot',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest the default branch and print JSON
  repo-ingest https://github.com/owner/repo

  # Ingest a specific branch into a file, keeping at most 100 documents
  repo-ingest https://github.com/owner/repo --branch develop --max-files 100 --output docs.json
        """
    )

    parser.add_argument('repo_url', help='GitHub repository URL')
    parser.add_argument('--branch', help='Repository branch to ingest (default: configured default branch)')
    parser.add_argument('--max-files', type=int, help='Maximum number of documents to extract')
    parser.add_argument('--output', type=Path, help='Write JSON to this file instead of stdout')
    parser.add_argument('--indent', type=int, default=None, help='JSON indentation level')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function for command-line interface."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s',
                        stream=sys.stderr)

    try:
        settings = IngestionSettings.from_env()
        if args.max_files is not None:
            settings = dataclasses.replace(settings, max_files=args.max_files)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        ref = resolve_reference(args.repo_url, args.branch, default_branch=settings.default_branch)
        deadline = time.monotonic() + settings.request_deadline
        result = GitHubArchiveIngester(settings).ingest(ref, deadline=deadline)

        payload = result.model_dump_json(indent=args.indent)
        if args.output:
            args.output.write_text(payload, encoding='utf-8')
            logger.info(f"Wrote {result.file_count} documents to {args.output}")
        else:
            sys.stdout.write(payload + "\n")
    except InvalidRequestError as e:
        logger.error(f"Error: {e}")
        return 2
    except IngestionError as e:
        logger.error(f"Ingestion failed: {e}")
        return 1
    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
