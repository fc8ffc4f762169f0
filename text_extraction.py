#!/usr/bin/env python3
"""
Text Extraction Report

Sends a document to the compliance service for text extraction and,
optionally, runs data classification on every extracted stream. Prints (or
writes) one JSON report joining the streams with their classification
results.

Author: Compliance Tools Team
Date: 2026-10-18
Version: 1.0
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, Optional

from tqdm import tqdm

from config import APP_NAME, EXIT_FAILURE, EXIT_OK
from src.core.errors import ComplianceToolError
from src.core.report_assembler import (
    assemble_report,
    derive_streams,
    extraction_failure,
    serialize_report,
    stream_text,
)
from src.remote.compliance_session import ComplianceSession
from src.utils.cli import add_common_arguments, load_tool_config, run_script
from src.utils.file_utils import validate_input_file, validate_output_directory
from src.utils.logging_utils import get_logger, setup_logging
from src.utils.prompts import resolve_missing

logger = get_logger(__name__)


def classify_streams(session: ComplianceSession, extraction_result, show_progress: bool = True) -> Dict[str, object]:
    """
    Classify the text of every derived stream.

    Streams without extracted text are skipped, which leaves a null
    classification for them in the report.
    """
    classification_by_stream = {}
    streams = derive_streams(extraction_result)
    for name, stream in tqdm(streams, desc="Classifying streams", unit="stream",
                             disable=not show_progress, file=sys.stderr):
        text = stream_text(stream)
        if text is None:
            logger.info("Stream %s has no extracted text; skipping classification", name)
            continue
        classification_by_stream[name] = session.classify_text(text)
    return classification_by_stream


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f'{APP_NAME}: extract text from a document and optionally classify it',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Extract text and print the report
  %(prog)s invoice.pdf -u admin@contoso.com

  # Extract, classify every stream and save the report
  %(prog)s message.msg -u admin@contoso.com --classify -o report.json
        """
    )
    parser.add_argument('file', nargs='?', help='Document to extract (prompted when missing)')
    parser.add_argument('--classify', action='store_true',
                        help='Run data classification on every extracted stream')
    parser.add_argument('-o', '--output', help='Write the JSON report to this file instead of stdout')
    parser.add_argument('--no-progress', action='store_true', help='Hide the progress bar')
    add_common_arguments(parser)
    return parser


def main(args: argparse.Namespace) -> int:
    tool_config = load_tool_config(args)
    setup_logging(tool_config.log_level)

    # Everything local is settled before the session opens
    file_arg = resolve_missing(args.file, "Document to extract: ", "file")
    source = validate_input_file(file_arg)
    if args.output:
        validate_output_directory(Path(args.output).expanduser().parent)
    user = resolve_missing(tool_config.user_principal_name, "User principal name: ", "--user")

    data = source.read_bytes()
    classification_by_stream: Optional[Dict[str, object]] = None

    with ComplianceSession(user, tool_config.powershell_path) as session:
        extraction_result = session.extract_text(data)
        if args.classify and extraction_failure(extraction_result) is None:
            classification_by_stream = classify_streams(
                session, extraction_result, show_progress=not args.no_progress
            )
        elif args.classify:
            classification_by_stream = {}

    report = assemble_report(file_arg, extraction_result, classification_by_stream)
    text = serialize_report(report)

    if args.output:
        output_path = Path(args.output).expanduser()
        try:
            output_path.write_text(text + "\n", encoding="utf-8")
        except OSError as e:
            raise ComplianceToolError(f"Could not write report to {output_path}: {e}")
        print(f"Report saved to: {output_path}")
    else:
        print(text)

    if not report.succeeded:
        print(f"Error: {report.error}", file=sys.stderr)
        return EXIT_FAILURE
    return EXIT_OK


def cli(argv=None) -> int:
    return run_script(main, build_parser(), argv)


if __name__ == '__main__':
    sys.exit(cli())
