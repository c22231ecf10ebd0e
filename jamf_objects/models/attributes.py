"""Declarative attribute definitions consumed by the object-model engine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Pattern, Tuple, Union


class Primitive(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    NUMBER = "number"
    BOOLEAN = "boolean"
    HASH = "hash"
    J_ID = "j_id"


class Identifier(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass(frozen=True)
class Attr:
    """One entry of an OBJECT_MODEL table.

    ``type`` is either a :class:`Primitive` tag or a nested object class
    whose constructor validates its own data. Everything else is optional
    metadata that drives validation, accessor generation and marshaling.
    """

    type: Union[Primitive, type]
    required: bool = False
    readonly: bool = False
    multi: bool = False
    identifier: Optional[Identifier] = None
    enum: Optional[Tuple[Any, ...]] = None
    validator: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    nil_ok: bool = True

    # string constraints
    pattern: Optional[Union[str, Pattern[str]]] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None

    # numeric constraints
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    exclusive_minimum: bool = False
    exclusive_maximum: bool = False
    multiple_of: Optional[float] = None

    # array constraints, multi-valued attributes only
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    unique_items: bool = False

    @property
    def is_nested(self) -> bool:
        return isinstance(self.type, type) and not isinstance(self.type, Primitive)

    @property
    def is_primary(self) -> bool:
        return self.identifier == Identifier.PRIMARY
