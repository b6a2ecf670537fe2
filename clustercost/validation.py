"""Input validators for values that end up on a kubectl or helm command line.

The ``validate_*`` functions follow the prompt convention: they return ``None``
when the value is acceptable and a message for the user otherwise. They never
raise. The ``check_*`` functions return a :class:`ValidationOutcome` carrying a
reason code for callers that need to branch on the failure.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

NAMESPACE_EMPTY = "Namespace cannot be empty."
NAMESPACE_SPACES = "Namespace cannot contain spaces."
SERVICE_NAME_EMPTY = "Service name is required."
SERVICE_NAME_SPACES = "Service name cannot contain spaces."
PORT_INVALID = "Enter a valid TCP port (1-65535)."
NAME_INVALID = (
    "Use lowercase letters, digits and '-' only, starting and ending with a "
    "letter or digit (max 63 characters)."
)

MIN_PORT = 1
MAX_PORT = 65535
DNS_LABEL_MAX_LENGTH = 63

_WHITESPACE = re.compile(r"\s")
_DNS_LABEL = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")
_NUMERIC = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class ValidationCode(str, Enum):
    """Machine-readable validation outcome."""

    OK = "ok"
    EMPTY = "empty"
    CONTAINS_SPACES = "contains_spaces"
    NOT_NUMERIC = "not_numeric"
    OUT_OF_RANGE = "out_of_range"
    INVALID_NAME = "invalid_name"


@dataclass(frozen=True)
class ValidationOutcome:
    """Result of a check: a reason code plus the message shown to the user."""

    code: ValidationCode
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.code is ValidationCode.OK


VALID = ValidationOutcome(ValidationCode.OK)


def _check_identifier(value: Optional[str], empty_message: str, spaces_message: str) -> ValidationOutcome:
    if value is None:
        return ValidationOutcome(ValidationCode.EMPTY, empty_message)
    trimmed = value.strip()
    if not trimmed:
        return ValidationOutcome(ValidationCode.EMPTY, empty_message)
    if _WHITESPACE.search(trimmed):
        return ValidationOutcome(ValidationCode.CONTAINS_SPACES, spaces_message)
    return VALID


def check_namespace(value: Optional[str]) -> ValidationOutcome:
    """Check a namespace: non-empty after trimming and free of whitespace."""
    return _check_identifier(value, NAMESPACE_EMPTY, NAMESPACE_SPACES)


def check_service_name(value: Optional[str]) -> ValidationOutcome:
    """Check a service name: non-empty after trimming and free of whitespace."""
    return _check_identifier(value, SERVICE_NAME_EMPTY, SERVICE_NAME_SPACES)


def check_port(value: Any) -> ValidationOutcome:
    """Check that a value is a TCP port in the range 1-65535.

    Text is trimmed and must be plain ASCII decimal notation. Anything that
    does not convert to a whole number is reported as not numeric; whole
    numbers outside the range are reported as out of range.
    """
    if isinstance(value, bool) or value is None:
        return ValidationOutcome(ValidationCode.NOT_NUMERIC, PORT_INVALID)

    raw = value.strip() if isinstance(value, str) else value
    if isinstance(raw, str) and not _NUMERIC.fullmatch(raw):
        return ValidationOutcome(ValidationCode.NOT_NUMERIC, PORT_INVALID)
    try:
        numeric = float(raw)
    except (TypeError, ValueError, OverflowError):
        return ValidationOutcome(ValidationCode.NOT_NUMERIC, PORT_INVALID)

    if math.isnan(numeric) or not numeric.is_integer():
        return ValidationOutcome(ValidationCode.NOT_NUMERIC, PORT_INVALID)
    if numeric < MIN_PORT or numeric > MAX_PORT:
        return ValidationOutcome(ValidationCode.OUT_OF_RANGE, PORT_INVALID)
    return VALID


def check_dns_label(value: Optional[str]) -> ValidationOutcome:
    """Check a name against the Kubernetes DNS-1123 label rules."""
    trimmed = (value or "").strip()
    if not trimmed:
        return ValidationOutcome(ValidationCode.EMPTY, NAME_INVALID)
    if len(trimmed) > DNS_LABEL_MAX_LENGTH or not _DNS_LABEL.match(trimmed):
        return ValidationOutcome(ValidationCode.INVALID_NAME, NAME_INVALID)
    return VALID


def validate_namespace(value: Optional[str]) -> Optional[str]:
    return check_namespace(value).message


def validate_service_name(value: Optional[str]) -> Optional[str]:
    return check_service_name(value).message


def validate_port(value: Any) -> Optional[str]:
    return check_port(value).message


def validate_dns_label(value: Optional[str]) -> Optional[str]:
    return check_dns_label(value).message


def parse_port(value: Any) -> int:
    """Convert a validated port value to an int.

    Raises:
        ValueError: The value is not a port in the range 1-65535
    """
    outcome = check_port(value)
    if not outcome.ok:
        raise ValueError(outcome.message)
    raw = value.strip() if isinstance(value, str) else value
    return int(float(raw))
