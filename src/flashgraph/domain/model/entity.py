"""
Base building blocks:
identity, periodic-field bookkeeping and reference markers.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, field, fields
from typing import TYPE_CHECKING, Any, ClassVar, Final
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from collections.abc import Callable

    from flashgraph.domain.model.enums import EntityType

PERIODIC: Final = "periodic"
REFERENCE: Final = "reference"
EXPORT: Final = "export"


def new_id() -> UUID:
    return uuid4()


def periodic(
    *,
    default: Any = None,
    default_factory: Callable[[], Any] | None = None,
    export: bool = True,
) -> Any:
    """Declare a field refreshed every cycle and cleared by ``Entity.reset``."""

    metadata = {PERIODIC: True, EXPORT: export}
    if default_factory is not None:
        return field(default_factory=default_factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def reference(*, default: Any = None, default_factory: Callable[[], Any] | None = None) -> Any:
    """Declare a shared or back reference; exported as identity references only."""

    metadata = {REFERENCE: True}
    if default_factory is not None:
        return field(default_factory=default_factory, repr=False, metadata=metadata)
    return field(default=default, repr=False, metadata=metadata)


def owned() -> Any:
    """Declare an owned, ordered child collection."""

    return field(default_factory=list, repr=False)


@dataclass(eq=False, kw_only=True)
class Entity:
    """Internal identity exists immediately in the domain.

    ``id`` is assigned once at construction and is independent of any key the
    monitoring sources use (hostnames, fed ids, geo slots).
    """

    id: UUID = field(default_factory=new_id)

    # class-level discriminator; subclasses must override
    ENTITY_TYPE: ClassVar[EntityType]

    @property
    def entity_type(self) -> EntityType:
        return self.ENTITY_TYPE

    @classmethod
    def periodic_fields(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if f.metadata.get(PERIODIC))

    def reset(self) -> None:
        """Zero every periodically updated field; identity and topology are kept."""

        self.reset_fields(*self.periodic_fields())

    def reset_fields(self, *names: str) -> None:
        by_name = {f.name: f for f in fields(self)}
        for name in names:
            spec = by_name.get(name)
            if spec is None or not spec.metadata.get(PERIODIC):
                raise ValueError(f"{type(self).__name__}.{name} is not a periodic field")
            if spec.default_factory is not MISSING:
                setattr(self, name, spec.default_factory())
            else:
                setattr(self, name, spec.default)
