#!/usr/bin/env python3
"""
Field Resolver

Finds values on loosely-typed remote objects. The compliance service exposes
different field subsets for the same concept depending on version and tenant,
so lookups go through an ordered list of candidate names and, for payloads,
an optional scan over every field.

Remote objects are plain mappings here; nothing in this module talks to the
service or touches the filesystem.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Sequence, Union

from src.core.errors import FieldNotFoundError

FieldValue = Union[str, bytes, Mapping[str, Any], list, int, float, bool, None]
RemoteObject = Mapping[str, FieldValue]


@dataclass(frozen=True)
class FieldMatch:
    """A field found on a remote object"""
    name: str
    value: FieldValue


def is_present(value: Any) -> bool:
    """
    Check whether a field value counts as present.

    Whitespace-only strings, zero-length bytes, empty containers and None
    are treated as absent. Any other value (numbers, booleans) is present.
    """
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (bytes, bytearray, list, tuple, Mapping)):
        return len(value) > 0
    return True


def looks_like_payload(value: Any) -> bool:
    """Non-empty bytes, or text that starts like an XML document."""
    if isinstance(value, (bytes, bytearray)):
        return len(value) > 0
    if isinstance(value, str):
        return value.lstrip().startswith("<")
    return False


def find_field(obj: Optional[RemoteObject], candidates: Sequence[str]) -> Optional[FieldMatch]:
    """
    Return the first candidate field holding a present value.

    Args:
        obj: Remote object (may be None)
        candidates: Field names, most preferred first

    Returns:
        FieldMatch or None
    """
    if not obj or not isinstance(obj, Mapping):
        return None
    for name in candidates:
        if name in obj and is_present(obj[name]):
            return FieldMatch(name, obj[name])
    return None


def scan_payload(obj: Optional[RemoteObject]) -> Optional[FieldMatch]:
    """Return the first field, in enumeration order, that looks like a payload."""
    if not obj or not isinstance(obj, Mapping):
        return None
    for name, value in obj.items():
        if looks_like_payload(value):
            return FieldMatch(name, value)
    return None


def resolve_field(obj: Optional[RemoteObject], candidates: Sequence[str],
                  concept: str = "field", scan_payloads: bool = False,
                  on_scan: Optional[Callable[[FieldMatch], None]] = None) -> FieldValue:
    """
    Resolve a value from the candidate list, optionally falling back to a
    payload scan.

    Args:
        obj: Remote object
        candidates: Field names, most preferred first
        concept: Human-readable name of what is being looked up, used in errors
        scan_payloads: Scan all fields for bytes/XML when no candidate matches
        on_scan: Called with the match when the value came from the scan

    Returns:
        The field value, never coerced (bytes stay bytes)

    Raises:
        FieldNotFoundError: nothing usable was found
    """
    match = find_field(obj, candidates)
    if match is None and scan_payloads:
        match = scan_payload(obj)
        if match is not None and on_scan is not None:
            on_scan(match)
    if match is None:
        raise FieldNotFoundError(concept, candidates, scanned=scan_payloads)
    return match.value


def first_present(obj: Optional[RemoteObject], candidates: Sequence[str], default: Any = None) -> Any:
    match = find_field(obj, candidates)
    return default if match is None else match.value
