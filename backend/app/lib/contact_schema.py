import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from pydantic import BaseModel, ConfigDict

# Shared by the form model and the /api/contact handler; both sides must agree on what is valid.

FIELDS: Tuple[str, ...] = ("name", "email", "message")
NAME_PATTERN = r"^[a-zA-Z\s]+$"

_MISSING = object()


@dataclass(frozen=True)
class Check:
    kind: str  # min_length | max_length | pattern | email
    message: str
    value: Any = None


CONTRACT: Dict[str, Tuple[Check, ...]] = {
    "name": (
        Check("min_length", "Name must be at least 2 characters", 2),
        Check("max_length", "Name must be less than 100 characters", 100),
        Check("pattern", "Name can only contain letters and spaces", NAME_PATTERN),
    ),
    "email": (
        Check("email", "Please enter a valid email address"),
        Check("max_length", "Email must be less than 255 characters", 255),
    ),
    "message": (
        Check("min_length", "Message must be at least 10 characters", 10),
        Check("max_length", "Message must be less than 1000 characters", 1000),
    ),
}


class ContactSubmission(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    message: str


class FieldError(BaseModel):
    field: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    submission: Optional[ContactSubmission] = None
    errors: Tuple[FieldError, ...] = ()

    @property
    def ok(self) -> bool:
        return self.submission is not None and not self.errors

    def errors_by_field(self) -> Dict[str, List[str]]:
        grouped: Dict[str, List[str]] = {}
        for err in self.errors:
            grouped.setdefault(err.field, []).append(err.message)
        return grouped

    def details(self) -> List[Dict[str, str]]:
        return [err.model_dump() for err in self.errors]


def _type_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _is_email(value: str) -> bool:
    try:
        # ASCII-only addresses; ".test" domains allowed for fixtures
        validate_email(value, check_deliverability=False, allow_smtputf8=False, test_environment=True)
    except EmailNotValidError:
        return False
    return True


def _passes(check: Check, value: str) -> bool:
    if check.kind == "min_length":
        return len(value) >= check.value
    if check.kind == "max_length":
        return len(value) <= check.value
    if check.kind == "pattern":
        return re.fullmatch(check.value, value) is not None
    if check.kind == "email":
        return _is_email(value)
    raise ValueError(f"unknown check kind: {check.kind}")


def _check_field(name: str, value: Any) -> List[str]:
    if value is _MISSING:
        return ["Required"]
    if not isinstance(value, str):
        return [f"Expected string, received {_type_name(value)}"]
    return [check.message for check in CONTRACT[name] if not _passes(check, value)]


def validate_field(name: str, value: Any) -> List[str]:
    """Messages for every check `value` fails on field `name`; empty when the field is valid."""
    if name not in CONTRACT:
        raise KeyError(name)
    return _check_field(name, value)


def validate(candidate: Any) -> ValidationResult:
    """
    Check an untyped record against the contact contract.
    Returns a ValidationResult holding either a ContactSubmission or the
    per-field errors, in field order. Never raises for bad input.
    """
    if isinstance(candidate, ContactSubmission):
        candidate = candidate.model_dump()
    if not isinstance(candidate, Mapping):
        return ValidationResult(
            errors=(FieldError(field="body", message=f"Expected object, received {_type_name(candidate)}"),)
        )

    errors: List[FieldError] = []
    for name in FIELDS:
        for message in _check_field(name, candidate.get(name, _MISSING)):
            errors.append(FieldError(field=name, message=message))

    if errors:
        return ValidationResult(errors=tuple(errors))
    return ValidationResult(submission=ContactSubmission(**{name: candidate[name] for name in FIELDS}))


def describe_contract() -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name, checks in CONTRACT.items():
        fields[name] = {
            "type": "string",
            "required": True,
            "checks": [
                {"kind": c.kind, "value": c.value, "message": c.message} if c.value is not None
                else {"kind": c.kind, "message": c.message}
                for c in checks
            ],
        }
    return {"fields": fields, "order": list(FIELDS)}
