#!/usr/bin/env python3
"""
Rule Package Export

Lists the sensitive information type rule packages of the tenant and exports
one of them to a file named after its display name. The package is chosen by
number or by exact name; the operator is asked when no selection was given.

Author: Compliance Tools Team
Date: 2026-10-18
Version: 1.0
"""

import argparse
import sys
from pathlib import Path
from typing import List

from config import (
    APP_NAME,
    EXIT_OK,
    RESULTS_SEPARATOR,
    RULEPACK_IDENTITY_FIELDS,
    RULEPACK_NAME_FIELDS,
    RULEPACK_PAYLOAD_FIELDS,
)
from src.core.field_resolver import first_present, resolve_field
from src.core.selection_resolver import (
    SelectableItem,
    build_selectable_items,
    format_selection_table,
    resolve_selection,
)
from src.remote.compliance_session import ComplianceSession
from src.utils.cli import add_common_arguments, load_tool_config, run_script
from src.utils.file_utils import validate_output_directory, write_export
from src.utils.logging_utils import get_logger, setup_logging
from src.utils.platform_utils import default_output_dir
from src.utils.prompts import resolve_missing

logger = get_logger(__name__)


def rule_package_items(rule_packages: List[object]) -> List[SelectableItem]:
    return build_selectable_items(rule_packages, RULEPACK_NAME_FIELDS, RULEPACK_IDENTITY_FIELDS)


def rule_package_payload(rule_package):
    """
    Find the exported XML of a rule package.

    Known payload fields are tried first, then every field is scanned for
    bytes or XML text.

    Raises:
        FieldNotFoundError: the package carries no payload
    """
    fields = {k: v for k, v in (rule_package or {}).items() if isinstance(v, (str, bytes))}
    return resolve_field(
        fields,
        RULEPACK_PAYLOAD_FIELDS,
        concept="rule package XML",
        scan_payloads=True,
        on_scan=lambda match: logger.info("Rule package payload found in field %s", match.name),
    )


def print_rule_packages(items: List[SelectableItem]) -> None:
    print(RESULTS_SEPARATOR)
    print(f"RULE PACKAGES: {len(items)}")
    print(RESULTS_SEPARATOR)
    print(format_selection_table(items))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=f'{APP_NAME}: list and export sensitive information type rule packages',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List the rule packages of the tenant
  %(prog)s -u admin@contoso.com --list

  # Export the second package of the list
  %(prog)s -u admin@contoso.com --select 2

  # Export a package by its exact name into a folder
  %(prog)s -u admin@contoso.com --select "Contoso Rules" --output-dir ./exports
        """
    )
    parser.add_argument('--list', action='store_true', help='Only list the rule packages')
    parser.add_argument('-s', '--select', help='Package number or exact name (prompted when missing)')
    parser.add_argument('-d', '--output-dir', help='Directory for the exported file (default: Documents)')
    parser.add_argument('--overwrite', action='store_true',
                        help='Replace an existing export instead of adding a timestamp')
    add_common_arguments(parser)
    return parser


def main(args: argparse.Namespace) -> int:
    tool_config = load_tool_config(args)
    setup_logging(tool_config.log_level)

    output_dir = None
    if not args.list:
        output_dir = validate_output_directory(tool_config.output_dir or default_output_dir())
    user = resolve_missing(tool_config.user_principal_name, "User principal name: ", "--user")

    with ComplianceSession(user, tool_config.powershell_path) as session:
        rule_packages = session.list_rule_packages()

    items = rule_package_items(rule_packages)
    if args.list or not args.select:
        print_rule_packages(items)
    if args.list:
        return EXIT_OK

    token = resolve_missing(args.select, "Rule package number or name: ", "--select")
    selected = resolve_selection(items, token)
    identity = first_present(selected.item, RULEPACK_IDENTITY_FIELDS, "no identity")
    logger.info("Selected rule package %s (%s)", selected.name, identity)

    payload = rule_package_payload(selected.item)
    path = write_export(output_dir, selected.name, payload, overwrite=args.overwrite)
    print(f"Exported '{selected.name}' to: {Path(path)}")
    return EXIT_OK


def cli(argv=None) -> int:
    return run_script(main, build_parser(), argv)


if __name__ == '__main__':
    sys.exit(cli())
