"""
Command-line plumbing shared by the helper scripts: common flags,
configuration layering, and mapping errors to operator messages and exit
codes.
"""

import argparse
import sys
from typing import Callable, List, Optional

from config import EXIT_CONFIGURATION, EXIT_FAILURE
from src.config.tool_config import ToolConfig, load_config
from src.core.errors import ComplianceToolError, ConfigurationError
from src.utils.logging_utils import get_logger, setup_logging

logger = get_logger(__name__)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument('-u', '--user', dest='user_principal_name',
                        help='User principal name used to sign in (prompted when missing)')
    parser.add_argument('--pwsh', dest='powershell_path',
                        help='PowerShell executable (default: detected)')
    parser.add_argument('--config', help='JSON configuration file')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show diagnostic messages')


def load_tool_config(args: argparse.Namespace) -> ToolConfig:
    """Configuration file + environment, then command-line flags on top"""
    tool_config = load_config(getattr(args, 'config', None))
    return tool_config.with_overrides(
        user_principal_name=getattr(args, 'user_principal_name', None),
        powershell_path=getattr(args, 'powershell_path', None),
        output_dir=getattr(args, 'output_dir', None),
        log_level='DEBUG' if getattr(args, 'verbose', False) else None,
    )


def run_script(main: Callable[[argparse.Namespace], int], parser: argparse.ArgumentParser,
               argv: Optional[List[str]] = None) -> int:
    """
    Parse arguments and run a script body.

    Every ComplianceToolError becomes a message on stderr; configuration
    errors exit with EXIT_CONFIGURATION, everything else with EXIT_FAILURE.
    """
    args = parser.parse_args(argv)
    setup_logging('DEBUG' if args.verbose else None)
    try:
        return main(args)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except ComplianceToolError as e:
        logger.debug("Failure details: %s", e.details)
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print("\nCancelled", file=sys.stderr)
        return EXIT_FAILURE
