"""Interactive prompts built on questionary."""

from typing import Any, Callable, Optional, Sequence

import questionary
from questionary import Choice, Style

from .config import DASHBOARD_SERVICE, get_settings
from .errors import OperationCancelledError
from .validation import (
    parse_port,
    validate_dns_label,
    validate_namespace,
    validate_port,
    validate_service_name,
)

Validator = Callable[[Any], Optional[str]]

PROMPT_STYLE = Style(
    [
        ("qmark", "fg:#4FC3F7 bold"),
        ("question", "bold"),
        ("answer", "fg:#4FC3F7"),
        ("pointer", "fg:#4FC3F7 bold"),
        ("highlighted", "fg:#4FC3F7 bold"),
        ("instruction", "fg:#808080"),
    ]
)


def as_questionary_validator(*validators: Validator) -> Callable[[str], Any]:
    """Chain message-returning validators into questionary's True/message form."""

    def validate(text: str) -> Any:
        for validator in validators:
            message = validator(text)
            if message is not None:
                return message
        return True

    return validate


def enforce_not_cancelled(answer: Any) -> Any:
    """Turn questionary's None answer (Ctrl+C) into OperationCancelledError."""
    if answer is None:
        raise OperationCancelledError()
    return answer


def ask_text(message: str, default: str = "", validators: Sequence[Validator] = ()) -> str:
    answer = questionary.text(
        message,
        default=default,
        validate=as_questionary_validator(*validators),
        style=PROMPT_STYLE,
    ).ask()
    return enforce_not_cancelled(answer)


def ask_confirm(message: str, default: bool = True) -> bool:
    answer = questionary.confirm(message, default=default, style=PROMPT_STYLE).ask()
    return enforce_not_cancelled(answer)


def ask_select(message: str, options: Sequence[tuple[str, str]], default: Optional[str] = None) -> str:
    """Ask the user to pick one option.

    Args:
        message: Question to display
        options: (label, value) pairs in display order
        default: Value highlighted initially

    Returns:
        The chosen value
    """
    choices = [Choice(title=label, value=value) for label, value in options]
    values = [value for _, value in options]
    answer = questionary.select(
        message,
        choices=choices,
        default=default if default in values else None,
        style=PROMPT_STYLE,
    ).ask()
    return enforce_not_cancelled(answer)


def name_validators(validator: Validator) -> list[Validator]:
    """Base validator, plus the DNS-1123 label check when strict names are on."""
    validators = [validator]
    if get_settings().strict_names:
        validators.append(validate_dns_label)
    return validators


def ask_namespace(message: str, default: str) -> str:
    answer = ask_text(message, default=default, validators=name_validators(validate_namespace))
    return (answer or default).strip()


def ask_service_name(message: str = "Dashboard service name", default: str = DASHBOARD_SERVICE) -> str:
    answer = ask_text(message, default=default, validators=name_validators(validate_service_name))
    return (answer or default).strip()


def ask_port(message: str, default: int) -> int:
    answer = ask_text(message, default=str(default), validators=[validate_port])
    return parse_port(answer) if answer.strip() else default
