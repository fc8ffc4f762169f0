"""
Interactive resolution of missing parameters.

Runs once, before any core logic: a script collects everything it needs
here so the resolvers and the report assembler never prompt.
"""

import sys
from typing import Callable, Optional, TextIO

from src.core.errors import ConfigurationError


def is_interactive(stream: Optional[TextIO] = None) -> bool:
    stream = stream or sys.stdin
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


def resolve_missing(value: Optional[str], prompt: str, parameter: str,
                    input_func: Callable[[str], str] = input,
                    interactive: Optional[bool] = None) -> str:
    """
    Return value, asking the operator for it when it is missing.

    Args:
        value: Value from the command line or configuration
        prompt: Text shown to the operator
        parameter: Flag name used in the error message
        input_func: Replaceable input function
        interactive: Force (or forbid) prompting; detected from stdin when None

    Raises:
        ConfigurationError: still missing and no answer could be obtained
    """
    if value is not None and value.strip():
        return value.strip()

    if interactive is None:
        interactive = is_interactive()
    if not interactive:
        raise ConfigurationError(f"Missing required parameter {parameter}")

    try:
        answer = input_func(prompt)
    except EOFError:
        answer = ""
    answer = (answer or "").strip()
    if not answer:
        raise ConfigurationError(f"Missing required parameter {parameter}")
    return answer
