"""
Custom exceptions for the compliance helper scripts.

Every failure a script can report to the operator derives from
ComplianceToolError, so the command-line entry points can map the whole
taxonomy to a message and an exit status in one place.
"""

from typing import Any, Dict, List, Optional, Sequence


class ComplianceToolError(Exception):
    """Base exception for all compliance helper errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ComplianceToolError):
    """Missing or invalid local input, raised before any remote call."""

    pass


class RemoteServiceError(ComplianceToolError):
    """The remote session or one of its calls failed."""

    def __init__(self, message: str, command: Optional[str] = None) -> None:
        super().__init__(message, {"command": command} if command else None)
        self.command = command


# =============================================================================
# Resolution Exceptions
# =============================================================================


class ResolutionError(ComplianceToolError):
    """Base exception for field and selection resolution failures."""

    pass


class FieldNotFoundError(ResolutionError):
    """None of the candidate fields held a usable value."""

    def __init__(self, concept: str, candidates: Sequence[str], scanned: bool = False) -> None:
        attempted = ", ".join(candidates) if candidates else "(none)"
        message = f"Could not find {concept}; tried fields: {attempted}"
        if scanned:
            message += " (payload scan found nothing)"
        super().__init__(message, {"candidates": list(candidates)})
        self.concept = concept
        self.candidates = list(candidates)


class SelectionOutOfRangeError(ResolutionError):
    """Numeric selection outside the displayed list."""

    def __init__(self, index: int, count: int) -> None:
        super().__init__(f"Selection {index} is out of range; choose a number between 1 and {count}")
        self.index = index
        self.count = count


class SelectionNotFoundError(ResolutionError):
    """Named selection matched nothing."""

    def __init__(self, token: str, suggestions: Optional[List[str]] = None) -> None:
        message = f"No item named '{token}'"
        if suggestions:
            message += "; did you mean: " + ", ".join(f"'{s}'" for s in suggestions)
        super().__init__(message)
        self.token = token
        self.suggestions = suggestions or []


class AmbiguousSelectionError(ResolutionError):
    """Named selection matched more than one item."""

    def __init__(self, token: str, indexes: Sequence[int]) -> None:
        numbers = ", ".join(str(i) for i in indexes)
        super().__init__(
            f"'{token}' matches {len(indexes)} items (numbers {numbers}); select by number instead"
        )
        self.token = token
        self.indexes = list(indexes)
