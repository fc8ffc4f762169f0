#!/usr/bin/env python3
"""
Keyword Dictionary Creation

Creates a keyword dictionary in the compliance service from a text or CSV
file of keywords (one per line and/or comma separated).

Author: Compliance Tools Team
Date: 2026-10-18
Version: 1.0
"""

import argparse
import sys
from typing import List

from config import (
    APP_NAME,
    DEFAULT_DICTIONARY_DESCRIPTION,
    DICTIONARY_IDENTITY_FIELDS,
    DICTIONARY_NAME_FIELDS,
    EXIT_OK,
    KEYWORD_ENCODING,
    KEYWORD_SEPARATOR,
)
from src.core.field_resolver import first_present
from src.remote.compliance_session import ComplianceSession
from src.utils.cli import add_common_arguments, load_tool_config, run_script
from src.utils.file_utils import read_keywords
from src.utils.logging_utils import get_logger, setup_logging
from src.utils.prompts import resolve_missing

logger = get_logger(__name__)


def encode_keywords(keywords: List[str]) -> bytes:
    """Keyword file data in the form the service expects (UTF-16LE, CRLF separated)"""
    return KEYWORD_SEPARATOR.join(keywords).encode(KEYWORD_ENCODING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f'{APP_NAME}: create a keyword dictionary from a keyword file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Create a dictionary from a text file with one keyword per line
  %(prog)s "Project Codenames" codenames.txt -u admin@contoso.com

  # With a description
  %(prog)s "Diseases" diseases.csv -u admin@contoso.com --description "Medical terms"
        """
    )
    parser.add_argument('name', nargs='?', help='Dictionary name (prompted when missing)')
    parser.add_argument('keywords_file', nargs='?', help='Keyword file (prompted when missing)')
    parser.add_argument('--description', default=DEFAULT_DICTIONARY_DESCRIPTION,
                        help='Dictionary description')
    add_common_arguments(parser)
    return parser


def main(args: argparse.Namespace) -> int:
    tool_config = load_tool_config(args)
    setup_logging(tool_config.log_level)

    name = resolve_missing(args.name, "Dictionary name: ", "name")
    keywords_file = resolve_missing(args.keywords_file, "Keyword file: ", "keywords_file")
    keywords = read_keywords(keywords_file)
    user = resolve_missing(tool_config.user_principal_name, "User principal name: ", "--user")
    logger.info("Read %d keywords from %s", len(keywords), keywords_file)

    with ComplianceSession(user, tool_config.powershell_path) as session:
        created = session.new_keyword_dictionary(name, args.description, encode_keywords(keywords))

    print(f"Created keyword dictionary: {first_present(created, DICTIONARY_NAME_FIELDS, name)}")
    print(f"  Identity: {first_present(created, DICTIONARY_IDENTITY_FIELDS, '(not returned)')}")
    print(f"  Keywords: {len(keywords)}")
    return EXIT_OK


def cli(argv=None) -> int:
    return run_script(main, build_parser(), argv)


if __name__ == '__main__':
    sys.exit(cli())
