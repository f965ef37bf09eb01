"""Field-level validation results.

Typed objects record validation failures per attribute in an ``Errors``
collection. Validation never raises on its own; ``ensure_valid()`` turns a
non-empty collection into ``ValidationFailed``.

Error Format:
{
    "field": "address.city",
    "constraint": "presence",
    "value": "",
    "message": "can't be blank"
}
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

VALIDATES_EACH_ATTR = "__validates_each__"

_JSON_SCALARS = (str, int, float, bool)


@dataclass(frozen=True, slots=True)
class ValidationErrorDetail:
    """Validation error for a single field.

    - field_path: attribute name, dotted for nested objects ("address.city")
    - constraint: kind of check that failed ("not_nil", "presence", "nested", ...)
    - actual_value: the offending value
    - message: human-readable message
    """
    field_path: str
    constraint: str
    actual_value: Any = None
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for API responses."""
        result = {"field": self.field_path, "constraint": self.constraint, "message": self.message}
        if isinstance(self.actual_value, _JSON_SCALARS):
            result["value"] = self.actual_value
        return result

    @property
    def full_message(self) -> str:
        return f"{self.field_path} {self.message}"


class Errors:
    """Ordered collection of field-level validation errors."""

    def __init__(self) -> None:
        self._details: list[ValidationErrorDetail] = []

    def add(
        self,
        attribute: str,
        message: str,
        *,
        constraint: str = "invalid",
        value: Any = None,
    ) -> ValidationErrorDetail:
        detail = ValidationErrorDetail(
            field_path=attribute, constraint=constraint, actual_value=value, message=message
        )
        self._details.append(detail)
        return detail

    def __getitem__(self, attribute: str) -> list[str]:
        return [d.message for d in self._details if d.field_path == attribute]

    def __contains__(self, attribute: object) -> bool:
        return any(d.field_path == attribute for d in self._details)

    def __iter__(self) -> Iterator[ValidationErrorDetail]:
        return iter(self._details)

    def __len__(self) -> int:
        return len(self._details)

    def __bool__(self) -> bool:
        return bool(self._details)

    @property
    def details(self) -> list[ValidationErrorDetail]:
        return list(self._details)

    def full_messages(self) -> list[str]:
        return [d.full_message for d in self._details]

    def to_dict(self) -> dict[str, list[str]]:
        grouped: dict[str, list[str]] = {}
        for detail in self._details:
            grouped.setdefault(detail.field_path, []).append(detail.message)
        return grouped

    def clear(self) -> None:
        self._details.clear()

    def __repr__(self) -> str:
        return f"<Errors {self.to_dict()}>"


def validates_each(*attributes: str) -> Callable[[F], F]:
    """Register a method as a custom check for the named attributes.

    The method is called as ``method(self, attribute, value)`` during
    ``validate()`` and reports failures with ``self.errors.add(...)``:

        @validates_each("email")
        def _email_has_at(self, attribute, value):
            if value and "@" not in value:
                self.errors.add(attribute, "is not an email")
    """
    def decorator(fn: F) -> F:
        setattr(fn, VALIDATES_EACH_ATTR, tuple(attributes))
        return fn
    return decorator
