"""Extension attribute values carried inside other objects."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .. import validate
from ..exceptions import InvalidDataError, UnsupportedError
from .attributes import Attr, Primitive
from .json_object import JSONObject

logger = logging.getLogger(__name__)

VALUE_TYPES = ("String", "Integer", "Date")


def _coerce_date(val: Any, ea_name: str) -> str:
    if isinstance(val, datetime):
        return val.isoformat()
    if isinstance(val, date):
        return val.isoformat()
    try:
        return datetime.fromisoformat(str(val)).isoformat()
    except ValueError:
        raise InvalidDataError(f"Value for ext. attr. {ea_name} must be a date or ISO-8601 string") from None


class ExtensionAttributeValue(JSONObject):
    """The value of one extension attribute for the owning object.

    Every attribute is read-only through the normal accessors; use
    :meth:`new_value` to change the value.
    """

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, readonly=True),
        "name": Attr(Primitive.STRING, readonly=True),
        "type": Attr(Primitive.STRING, readonly=True, enum=VALUE_TYPES),
        "value": Attr(Primitive.STRING, readonly=True),
    }

    def new_value(self, new_val: Any) -> None:
        """Set the value, coercing it by the attribute's type. None unsets it."""
        if new_val is not None:
            if self.type == "Integer":
                new_val = str(validate.integer(new_val, f"Value for ext. attr. {self.name} must be an integer"))
            elif self.type == "Date":
                new_val = _coerce_date(new_val, self.name)
            else:
                new_val = str(new_val)
        old_val = self._values.get("value")
        if old_val == new_val:
            return
        self._values["value"] = new_val
        self._note_unsaved_change("value", old_val)

    def to_wire_format(self) -> Dict[str, Any]:
        return {k: v for k, v in super().to_wire_format().items() if v is not None}


def _original_value(ea: ExtensionAttributeValue) -> Any:
    change = ea.unsaved_changes().get("value")
    return change["old"] if change else ea.value


class ExtensionAttributes:
    """The list of extension attribute values belonging to one object, looked up by name."""

    def __init__(self, data: List[Dict[str, Any]], owner: Optional[JSONObject] = None):
        self.owner = owner
        cnx = getattr(owner, "cnx", None)
        self._items: List[ExtensionAttributeValue] = [ExtensionAttributeValue(d, cnx=cnx) for d in data]
        self._removed: Dict[str, ExtensionAttributeValue] = {}
        self._added: List[str] = []

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def names(self) -> List[str]:
        return [ea.name for ea in self._items]

    def _find(self, name: str) -> Optional[ExtensionAttributeValue]:
        for ea in self._items:
            if ea.name is not None and ea.name.casefold() == name.casefold():
                return ea
        return None

    def _check_mutable(self) -> None:
        if self.owner is not None and not self.owner.mutable():
            raise UnsupportedError(f"{type(self.owner).__name__} objects are not editable")

    def value(self, name: str) -> Any:
        ea = self._find(name)
        return None if ea is None else ea.value

    def set(self, name: str, new_val: Any) -> None:
        self._check_mutable()
        validate.non_empty_string(name, "Extension attribute names must be non-empty strings")
        ea = self._find(name)
        if ea is None:
            # a value removed since the last save comes back with its original value as 'old'
            ea = self._pop_removed(name)
            if ea is None:
                ea = ExtensionAttributeValue({"name": name}, cnx=getattr(self.owner, "cnx", None))
                self._added.append(name)
                logger.debug("Added extension attribute '%s'", name)
            self._items.append(ea)
        ea.new_value(new_val)

    def _pop_removed(self, name: str) -> Optional[ExtensionAttributeValue]:
        for removed_name in list(self._removed):
            if removed_name.casefold() == name.casefold():
                return self._removed.pop(removed_name)
        return None

    def remove(self, name: str) -> None:
        self._check_mutable()
        ea = self._find(name)
        if ea is None:
            return
        self._items.remove(ea)
        if ea.name in self._added:
            self._added.remove(ea.name)
        else:
            self._removed[ea.name] = ea

    def unsaved_changes(self) -> Dict[str, Any]:
        changes: Dict[str, Any] = {}
        for ea in self._items:
            if ea.has_unsaved_changes():
                changes[ea.name] = ea.unsaved_changes()["value"]
        for name, ea in self._removed.items():
            changes[name] = {"old": _original_value(ea), "new": None}
        return changes

    def has_unsaved_changes(self) -> bool:
        return bool(self.unsaved_changes())

    def clear_unsaved_changes(self) -> None:
        for ea in self._items:
            ea.clear_unsaved_changes()
        self._removed = {}
        self._added = []

    def to_wire_format(self) -> List[Dict[str, Any]]:
        return [ea.to_wire_format() for ea in self._items]

    def to_wire_format_changes_only(self) -> List[Dict[str, Any]]:
        # the server replaces the whole list, so any change sends all of it
        return self.to_wire_format() if self.has_unsaved_changes() else []
