"""Schema-driven object model.

A subclass declares ``OBJECT_MODEL``, a mapping of attribute name to
:class:`~jamf_objects.models.attributes.Attr`. When the class is created
the schema is compiled exactly once into:

- a property per attribute (multi-valued getters return tuple snapshots),
- an ``is_<attr>`` predicate for boolean attributes,
- for multi-valued, writable attributes, the mutators ``<attr>_append``,
  ``<attr>_prepend``, ``<attr>_insert``, ``<attr>_delete``,
  ``<attr>_delete_at`` and ``<attr>_delete_if``,
- the same accessors again under every declared alias.

Setters validate first and only then touch storage, so a failed
validation never leaves an attribute half-updated. Every real change is
recorded in the unsaved-changes ledger as ``{"old": ..., "new": ...}``.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple
from xml.etree import ElementTree

from .. import validate
from ..exceptions import InvalidDataError, UnknownAttributeError, UnsupportedError
from ..utils.xml import dict_to_xml
from .attributes import Attr, Primitive

logger = logging.getLogger(__name__)


class JSONObject:
    """Base class for every schema-driven API object."""

    OBJECT_MODEL: Dict[str, Attr] = {}

    # Immutable kinds get no working setters at all.
    MUTABLE = True

    # Payload key of an extension-attribute list, for kinds that carry one.
    EXTENSION_ATTRIBUTES_KEY: Optional[str] = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        cls.parse_object_model()

    # ------------------------------------------------------------------
    # Schema compilation
    # ------------------------------------------------------------------
    @classmethod
    def object_model_parsed(cls) -> bool:
        return bool(cls.__dict__.get("_object_model_parsed", False))

    @classmethod
    def parse_object_model(cls) -> None:
        """Generate accessors for this class's OBJECT_MODEL. Safe to call repeatedly."""
        if cls.object_model_parsed():
            return
        if "OBJECT_MODEL" not in cls.__dict__:
            return

        primaries = [name for name, deets in cls.OBJECT_MODEL.items() if deets.is_primary]
        if len(primaries) > 1:
            raise UnsupportedError(f"{cls.__name__}: two identifiers marked as primary: {', '.join(primaries)}")

        for attr_name, attr_def in cls.OBJECT_MODEL.items():
            logger.debug("Creating accessors for attribute '%s' of %s", attr_name, cls.__name__)
            cls._create_accessors(attr_name, attr_def)
            cls._on_attribute_compiled(attr_name, attr_def)

        cls._object_model_parsed = True

    @classmethod
    def _on_attribute_compiled(cls, attr_name: str, attr_def: Attr) -> None:
        """Hook for subclasses that derive extra class-level helpers per attribute."""

    @classmethod
    def _create_accessors(cls, attr_name: str, attr_def: Attr) -> None:
        writable = cls.MUTABLE and not attr_def.readonly

        if attr_def.multi:
            def getter(self):
                return tuple(self._array(attr_name))
        else:
            def getter(self):
                return self._values.get(attr_name)

        if writable:
            def setter(self, value):
                self._set_attr(attr_name, value)
        else:
            def setter(self, value):
                reason = "read-only" if attr_def.readonly else f"immutable for {type(self).__name__} objects"
                raise UnsupportedError(f"Attribute '{attr_name}' is {reason}")

        prop = property(getter, setter, doc=f"The '{attr_name}' attribute.")
        names = (attr_name,) + tuple(attr_def.aliases)
        for name in names:
            setattr(cls, name, prop)

        if attr_def.type == Primitive.BOOLEAN and not attr_name.startswith("is"):
            setattr(cls, f"is_{attr_name}", property(getter))

        if attr_def.multi and writable:
            mutators = cls._array_mutators(attr_name)
            for name in names:
                for op, func in mutators.items():
                    setattr(cls, f"{name}_{op}", func)

    @classmethod
    def _array_mutators(cls, attr_name: str) -> Dict[str, Callable]:
        def append(self, value):
            item = self._validate(attr_name, value)
            self._mutate_array(attr_name, lambda arr: arr.append(item))

        def prepend(self, value):
            item = self._validate(attr_name, value)
            self._mutate_array(attr_name, lambda arr: arr.insert(0, item))

        def insert(self, index, value):
            size = len(self._values.get(attr_name) or [])
            if not isinstance(index, int) or not -size <= index <= size:
                raise InvalidDataError(f"Index {index} is out of range for {attr_name}")
            item = self._validate(attr_name, value)
            self._mutate_array(attr_name, lambda arr: arr.insert(index, item))

        def delete(self, value):
            def remove(arr):
                if value in arr:
                    arr.remove(value)
            self._mutate_array(attr_name, remove)

        def delete_at(self, index):
            removed = []

            def pop(arr):
                if -len(arr) <= index < len(arr):
                    removed.append(arr.pop(index))
            self._mutate_array(attr_name, pop)
            return removed[0] if removed else None

        def delete_if(self, predicate):
            def keep(arr):
                arr[:] = [i for i in arr if not predicate(i)]
            self._mutate_array(attr_name, keep)

        funcs = {
            "append": append,
            "prepend": prepend,
            "insert": insert,
            "delete": delete,
            "delete_at": delete_at,
            "delete_if": delete_if,
        }
        for op, func in funcs.items():
            func.__name__ = f"{attr_name}_{op}"
        return funcs

    # ------------------------------------------------------------------
    # Schema queries
    # ------------------------------------------------------------------
    @classmethod
    def mutable(cls) -> bool:
        return cls.MUTABLE

    @classmethod
    def required_attributes(cls) -> List[str]:
        return [name for name, deets in cls.OBJECT_MODEL.items() if deets.required]

    @classmethod
    def identifier_attributes(cls) -> List[str]:
        return [name for name, deets in cls.OBJECT_MODEL.items() if deets.identifier]

    @classmethod
    def primary_identifier_attribute(cls) -> Optional[str]:
        for name, deets in cls.OBJECT_MODEL.items():
            if deets.is_primary:
                return name
        return None

    @classmethod
    def attr_def(cls, attr_name: str) -> Attr:
        try:
            return cls.OBJECT_MODEL[attr_name]
        except KeyError:
            raise UnknownAttributeError(attr_name, cls) from None

    @classmethod
    def attr_key_for_alias(cls, name: str) -> Optional[str]:
        for attr_name, deets in cls.OBJECT_MODEL.items():
            if name == attr_name or name in deets.aliases:
                return attr_name
        return None

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    @classmethod
    def validate_attr(cls, attr_name: str, value: Any, cnx: Any = None, current: Any = None) -> Any:
        """Validate and coerce one value for ``attr_name``; multi-valued attributes take one item."""
        attr_def = cls.attr_def(attr_name)
        value = validate.attribute_value(value, attr_def, attr_name)
        if attr_def.required:
            validate.required(value, attr_name)
        if attr_def.identifier and not attr_def.is_primary and value is not None:
            cls._check_identifier_available(attr_name, value, cnx=cnx, current=current)
        return value

    @classmethod
    def _check_identifier_available(cls, attr_name: str, value: Any, cnx: Any = None, current: Any = None) -> None:
        """Uniqueness only matters inside a collection; plain objects skip it."""

    def _validate(self, attr_name: str, value: Any) -> Any:
        current = None if self.attr_def(attr_name).multi else self._values.get(attr_name)
        return self.validate_attr(attr_name, value, cnx=self.cnx, current=current)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    def __init__(self, data: Dict[str, Any], *, creating: bool = False, cnx: Any = None):
        if not isinstance(data, dict):
            raise InvalidDataError(f"Invalid {type(self).__name__} data - must be a dict")
        type(self).parse_object_model()

        self.cnx = cnx
        self.init_data = dict(data)
        self._values: Dict[str, Any] = {}
        self._unsaved_changes: Dict[str, Dict[str, Any]] = {}
        self._ext_attrs = None

        if creating:
            self._init_from_creating(data)
        else:
            self._parse_init_data(data)
        self._init_extension_attributes(data)

    def _init_from_creating(self, data: Dict[str, Any]) -> None:
        for attr_name, attr_def in self.OBJECT_MODEL.items():
            self._values[attr_name] = [] if attr_def.multi else None
        for key, value in data.items():
            if self.EXTENSION_ATTRIBUTES_KEY and key == self.EXTENSION_ATTRIBUTES_KEY:
                continue
            attr_name = self.attr_key_for_alias(key)
            if attr_name is None:
                raise UnknownAttributeError(key, type(self))
            setattr(self, attr_name, value)

    def _parse_init_data(self, data: Dict[str, Any]) -> None:
        for attr_name, attr_def in self.OBJECT_MODEL.items():
            if attr_name not in data:
                if attr_def.required:
                    raise InvalidDataError(f"Initialization must include the key '{attr_name}'")
                self._values[attr_name] = [] if attr_def.multi else None
                continue
            raw = data[attr_name]
            if attr_def.multi:
                self._values[attr_name] = [self._parse_single(v, attr_name, attr_def) for v in (raw or [])]
            else:
                self._values[attr_name] = self._parse_single(raw, attr_name, attr_def)

    def _parse_single(self, raw: Any, attr_name: str, attr_def: Attr) -> Any:
        if raw is None:
            return None
        if attr_def.enum is not None:
            return validate.in_enum(
                raw,
                attr_def.enum,
                msg=f"{raw} is not in the allowed values for attribute {attr_name}. "
                f"Must be one of: {', '.join(str(e) for e in attr_def.enum)}",
            )
        if attr_def.is_nested:
            klass = attr_def.type
            if isinstance(raw, klass):
                return raw
            if issubclass(klass, JSONObject):
                return klass(raw, cnx=self.cnx)
            return klass(raw)
        if attr_def.type == Primitive.J_ID:
            return str(raw)
        return raw

    def _init_extension_attributes(self, data: Dict[str, Any]) -> None:
        if not self.EXTENSION_ATTRIBUTES_KEY:
            return
        from .extension_attributes import ExtensionAttributes

        self._ext_attrs = ExtensionAttributes(data.get(self.EXTENSION_ATTRIBUTES_KEY) or [], owner=self)

    # ------------------------------------------------------------------
    # Mutation and the unsaved-changes ledger
    # ------------------------------------------------------------------
    def _array(self, attr_name: str) -> List[Any]:
        if not isinstance(self._values.get(attr_name), list):
            self._values[attr_name] = []
        return self._values[attr_name]

    def _set_attr(self, attr_name: str, new_value: Any) -> None:
        attr_def = self.attr_def(attr_name)
        if attr_def.multi:
            self._set_array(attr_name, attr_def, new_value)
            return
        new_value = self._validate(attr_name, new_value)
        old_value = self._values.get(attr_name)
        if new_value == old_value:
            return
        self._values[attr_name] = new_value
        self._note_unsaved_change(attr_name, old_value)

    def _set_array(self, attr_name: str, attr_def: Attr, new_value: Any) -> None:
        if not isinstance(new_value, (list, tuple)):
            raise InvalidDataError(f"Value for '{attr_name}' must be a list")
        new_value = [self._validate(attr_name, item) for item in new_value]
        validate.array_constraints(new_value, attr_def, attr_name)
        old_value = self._array(attr_name)
        if new_value == old_value:
            return
        self._values[attr_name] = new_value
        self._note_unsaved_change(attr_name, list(old_value))

    def _mutate_array(self, attr_name: str, mutation: Callable[[List[Any]], Any]) -> None:
        current = self._array(attr_name)
        working = list(current)
        mutation(working)
        if working == current:
            return
        validate.array_constraints(working, self.attr_def(attr_name), attr_name)
        self._values[attr_name] = working
        self._note_unsaved_change(attr_name, list(current))

    def _note_unsaved_change(self, attr_name: str, old_value: Any) -> None:
        if not self.mutable():
            return
        new_value = self._values.get(attr_name)
        if isinstance(new_value, list):
            new_value = list(new_value)
        if attr_name in self._unsaved_changes:
            self._unsaved_changes[attr_name]["new"] = new_value
        else:
            self._unsaved_changes[attr_name] = {"old": old_value, "new": new_value}

    def unsaved_changes(self) -> Dict[str, Any]:
        """Pending changes keyed by attribute, including nested objects and extension attributes."""
        if not self.mutable():
            return {}
        changes: Dict[str, Any] = {name: dict(change) for name, change in self._unsaved_changes.items()}
        for attr_name, attr_def in self.OBJECT_MODEL.items():
            if not attr_def.is_nested or attr_def.multi or attr_name in changes:
                continue
            value = self._values.get(attr_name)
            if isinstance(value, JSONObject):
                nested = value.unsaved_changes()
                if nested:
                    changes[attr_name] = nested
        if self._ext_attrs is not None:
            ea_changes = self._ext_attrs.unsaved_changes()
            if ea_changes:
                changes["ext_attrs"] = ea_changes
        return changes

    def has_unsaved_changes(self) -> bool:
        if not self.mutable():
            return False
        return bool(self.unsaved_changes())

    def clear_unsaved_changes(self) -> None:
        if not self.mutable():
            return
        for attr_name, attr_def in self.OBJECT_MODEL.items():
            if not attr_def.is_nested:
                continue
            value = self._values.get(attr_name)
            items = value if attr_def.multi else [value]
            for item in items or []:
                if isinstance(item, JSONObject):
                    item.clear_unsaved_changes()
        if self._ext_attrs is not None:
            self._ext_attrs.clear_unsaved_changes()
        self._unsaved_changes = {}

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_wire_format(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {}
        for attr_name, attr_def in self.OBJECT_MODEL.items():
            raw_value = self._values.get(attr_name)
            if attr_def.multi:
                data[attr_name] = self._multi_to_wire(raw_value)
            else:
                data[attr_name] = self._single_to_wire(raw_value)
        if self._ext_attrs is not None:
            data[self.EXTENSION_ATTRIBUTES_KEY] = self._ext_attrs.to_wire_format()
        return data

    def to_wire_format_changes_only(self) -> Dict[str, Any]:
        """Only the attributes with pending changes, for partial updates."""
        if not self.mutable():
            return {}
        data: Dict[str, Any] = {}
        for attr_name, change in self.unsaved_changes().items():
            if attr_name == "ext_attrs":
                data[self.EXTENSION_ATTRIBUTES_KEY] = self._ext_attrs.to_wire_format_changes_only()
                continue
            attr_def = self.OBJECT_MODEL[attr_name]
            if attr_def.readonly:
                continue
            if "new" not in change:
                # nested object reporting its own changes
                data[attr_name] = self._values[attr_name].to_wire_format_changes_only()
                continue
            if attr_def.multi:
                data[attr_name] = self._multi_to_wire(change["new"])
                continue
            cooked = self._single_to_wire(change["new"])
            if cooked is None:
                continue
            data[attr_name] = cooked
        return data

    @staticmethod
    def _single_to_wire(raw_value: Any) -> Any:
        if isinstance(raw_value, JSONObject):
            data = raw_value.to_wire_format()
            return None if isinstance(data, dict) and not data else data
        return raw_value

    @classmethod
    def _multi_to_wire(cls, raw_array: Optional[List[Any]]) -> List[Any]:
        cooked = (cls._single_to_wire(v) for v in (raw_array or []))
        return [v for v in cooked if v is not None]

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_wire_format(), **kwargs)

    def to_xml(self, tag: Optional[str] = None) -> ElementTree.Element:
        return dict_to_xml(tag or type(self).__name__.lower(), self.to_wire_format())

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------
    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_wire_format() == other.to_wire_format()

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        shown: Tuple[str, ...] = tuple(f"{k}={v!r}" for k, v in self._values.items() if v not in (None, []))
        return f"{type(self).__name__}({', '.join(shown)})"
