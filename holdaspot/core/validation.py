from enum import Enum
from typing import Optional, Type, TypeVar
import uuid

from holdaspot.core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def parse_uuid(value: Optional[str], label: str) -> uuid.UUID:
    """Parse an identifier, e.g. parse_uuid(raw, "facility") -> "Invalid facility ID format" on failure"""
    if not value:
        raise ValidationError(f"Missing required parameter: {label}_id")
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"Invalid {label} ID format")


def parse_choice(value: str, enum_cls: Type[E], label: str) -> E:
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f'"{m.value}"' for m in enum_cls)
        raise ValidationError(f"Invalid {label}. Must be one of {allowed}")


def require_param(value: Optional[str], name: str) -> str:
    if not value:
        raise ValidationError(f"Missing required parameter: {name}")
    return value
