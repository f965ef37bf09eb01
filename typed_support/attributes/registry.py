from __future__ import annotations

from collections.abc import Iterator, Mapping

from typed_support.core.errors import registry_frozen
from typed_support.core.logging import attributes_logger

from .definition import AttributeDefinition

log = attributes_logger()


class AttributeRegistry(Mapping[str, AttributeDefinition]):
    """Per-class store of attribute definitions, in declaration order.

    A subclass starts from ``derive()`` of its parent's registry, so
    additions on the subclass never reach the parent. Once frozen, the
    registry rejects further definitions.
    """

    __slots__ = ("owner", "_definitions", "_frozen")

    def __init__(self, owner: str, definitions: Mapping[str, AttributeDefinition] | None = None):
        self.owner = owner
        self._definitions: dict[str, AttributeDefinition] = dict(definitions or {})
        self._frozen = False

    def derive(self, owner: str) -> AttributeRegistry:
        return AttributeRegistry(owner, self._definitions)

    def define(self, definition: AttributeDefinition) -> None:
        if self._frozen:
            raise registry_frozen(definition.name, self.owner)
        redefined = definition.name in self._definitions
        self._definitions[definition.name] = definition
        log.debug(
            "attribute_defined",
            owner=self.owner,
            attribute=definition.name,
            kind=definition.kind.value,
            redefined=redefined,
        )

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def names(self) -> list[str]:
        return list(self._definitions)

    def __getitem__(self, name: str) -> AttributeDefinition:
        return self._definitions[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._definitions)

    def __len__(self) -> int:
        return len(self._definitions)

    def __repr__(self) -> str:
        state = " frozen" if self._frozen else ""
        return f"<AttributeRegistry {self.owner}{state} {self.names()}>"
