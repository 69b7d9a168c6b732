"""Structured configuration errors for the formstate engine.

Field errors produced by validators are opaque payloads and never raised.
The exceptions here cover only malformed configuration: field definitions
that cannot be turned into a FieldDefinition, duplicate names in a field set,
and malformed engine configuration. Each exception carries a list of
ConfigIssue entries so callers can report every problem at once.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class IssueCode(str, Enum):
    """Codes for configuration issues."""
    REQUIRED = "required"
    INVALID_TYPE = "invalid_type"
    INVALID_VALUE = "invalid_value"
    TOO_SHORT = "too_short"
    UNKNOWN_KEY = "unknown_key"
    DUPLICATE_NAME = "duplicate_name"


@dataclass(frozen=True)
class ConfigIssue:
    """A single problem found in a configuration mapping.

    Attributes:
        path: Dot-notation location of the problem (e.g., "2.listener.onChange")
        code: Specific issue code
        message: Human-readable description
        received: Optional - the offending value

    Examples:
        >>> issue = ConfigIssue(path="0.name", code=IssueCode.REQUIRED, message="Field '0.name' is required")
        >>> issue.to_dict()["code"]
        'required'
    """
    path: str
    code: IssueCode
    message: str
    received: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {
            "path": self.path,
            "code": self.code.value if isinstance(self.code, IssueCode) else self.code,
            "message": self.message,
        }
        if self.received is not None:
            result["received"] = self.received
        return result


class FormStateError(Exception):
    """Base class for formstate configuration errors.

    Attributes:
        issues: Structured list of problems that caused the error
    """

    def __init__(self, message: str, issues: Optional[Sequence[ConfigIssue]] = None):
        self.issues: List[ConfigIssue] = list(issues or [])
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": str(self),
            "issues": [issue.to_dict() for issue in self.issues],
        }


class FieldDefinitionError(FormStateError):
    """Raised when a field definition or a field set is malformed."""


class ConfigError(FormStateError):
    """Raised when engine configuration is malformed."""


__all__ = [
    "IssueCode",
    "ConfigIssue",
    "FormStateError",
    "FieldDefinitionError",
    "ConfigError",
]
