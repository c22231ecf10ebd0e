"""Base classes for Jamf Pro API resources.

A :class:`CollectionResource` lives at ``<version>/<path>/<id>`` and can be
listed, fetched, created and deleted. A :class:`SingletonResource` lives at a
fixed path and can only be fetched and saved.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from .. import validate
from ..connection import resolve
from ..exceptions import NoSuchItemError, UnsupportedError
from ..models.attributes import Attr
from ..models.change_log import ChangeLog, ChangeLogEntry
from ..models.json_object import JSONObject

logger = logging.getLogger(__name__)


class Resource(JSONObject):
    """Something that can be fetched from and saved to the server."""

    RSRC_VERSION = "v1"
    RSRC_PATH: Optional[str] = None

    # "put" sends the whole object, "patch" only the pending changes
    UPDATE_METHOD = "put"

    # resources whose history is available at <rsrc_path>/history
    CHANGE_LOG = False

    def __init__(self, data: Dict[str, Any], *, creating: bool = False, cnx: Any = None):
        super().__init__(data, creating=creating, cnx=cnx)
        self._change_log: Optional[ChangeLog] = None

    @classmethod
    def base_path(cls) -> str:
        if not cls.RSRC_PATH:
            raise UnsupportedError(f"{cls.__name__} has no resource path")
        return f"{cls.RSRC_VERSION}/{cls.RSRC_PATH}"

    @property
    def rsrc_path(self) -> str:
        return self.base_path()

    @property
    def connection(self) -> Any:
        return resolve(self.cnx)

    def _validate_for_save(self) -> None:
        for attr_name in self.required_attributes():
            validate.required(self._values.get(attr_name), attr_name)

    def save(self) -> Any:
        """Write pending changes to the server and clear the ledger."""
        self._validate_for_save()
        result = self._save_to_server()
        self.clear_unsaved_changes()
        return result

    def _save_to_server(self) -> Any:
        return self._update_in_server()

    def _update_in_server(self) -> Any:
        cnx = self.connection
        if self.UPDATE_METHOD == "patch":
            return cnx.patch(self.rsrc_path, self.to_wire_format_changes_only())
        return cnx.put(self.rsrc_path, self.to_wire_format())

    # ------------------------------------------------------------------
    # Change log
    # ------------------------------------------------------------------
    def _history(self) -> ChangeLog:
        if not self.CHANGE_LOG:
            raise UnsupportedError(f"{type(self).__name__} objects do not have a change log")
        if self._change_log is None:
            self._change_log = ChangeLog(self.rsrc_path, self.connection)
        return self._change_log

    def change_log(self, refresh: bool = False) -> List[ChangeLogEntry]:
        return self._history().entries(refresh=refresh)

    def add_change_log_note(self, note: str) -> None:
        self._history().add_note(note)


class SingletonResource(Resource):
    """A resource with exactly one instance on the server, e.g. a settings page."""

    @classmethod
    def fetch(cls, cnx: Any = None) -> "SingletonResource":
        cnx = resolve(cnx)
        return cls(cnx.get(cls.base_path()) or {}, cnx=cnx)


class CollectionResource(Resource):
    """A resource with many instances, each identified by an ``id``."""

    LIST_KEY = "results"

    @classmethod
    def _on_attribute_compiled(cls, attr_name: str, attr_def: Attr) -> None:
        if not attr_def.identifier:
            return

        def all_values(klass, refresh: bool = False, cnx: Any = None) -> List[Any]:
            return [item.get(attr_name) for item in klass.all(refresh=refresh, cnx=cnx)]

        all_values.__name__ = f"all_{attr_name}s"
        for name in (attr_name,) + tuple(attr_def.aliases):
            setattr(cls, f"all_{name}s", classmethod(all_values))

    @classmethod
    def _check_identifier_available(cls, attr_name: str, value: Any, cnx: Any = None, current: Any = None) -> None:
        if current is not None and str(current).casefold() == str(value).casefold():
            return
        existing = [item.get(attr_name) for item in cls.all(refresh=True, cnx=cnx)]
        validate.doesnt_already_exist(
            existing,
            value,
            msg=f"A {cls.__name__} already exists with {attr_name} '{value}'",
        )

    # ------------------------------------------------------------------
    # Class-level lookups
    # ------------------------------------------------------------------
    @classmethod
    def all(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        """Summary data for every instance on the server, cached per connection."""
        cnx = resolve(cnx)
        if refresh:
            cnx.collection_cache.pop(cls, None)
        if cls not in cnx.collection_cache:
            raw = cnx.get(cls.base_path())
            if isinstance(raw, dict):
                raw = raw.get(cls.LIST_KEY, [])
            cnx.collection_cache[cls] = list(raw or [])
            logger.debug("Cached %d %s records", len(cnx.collection_cache[cls]), cls.__name__)
        return cnx.collection_cache[cls]

    @classmethod
    def map_all(cls, ident: str, to: str, refresh: bool = False, cnx: Any = None) -> Dict[Any, Any]:
        for key in (ident, to):
            if cls.attr_key_for_alias(key) is None:
                raise UnsupportedError(f"Unknown attribute '{key}' for {cls.__name__} objects")
        ident, to = cls.attr_key_for_alias(ident), cls.attr_key_for_alias(to)
        return {item.get(ident): item.get(to) for item in cls.all(refresh=refresh, cnx=cnx)}

    @classmethod
    def map_all_ids_to(cls, to: str, refresh: bool = False, cnx: Any = None) -> Dict[Any, Any]:
        return cls.map_all("id", to, refresh=refresh, cnx=cnx)

    @classmethod
    def valid_id(cls, ident: Any, refresh: bool = False, cnx: Any = None) -> Optional[str]:
        """Return the id of the instance matching ``ident`` in any identifier attribute."""
        if ident is None:
            return None
        wanted = str(ident).casefold()
        items = cls.all(refresh=refresh, cnx=cnx)
        for attr_name in cls.identifier_attributes():
            for item in items:
                value = item.get(attr_name)
                if value is not None and str(value).casefold() == wanted:
                    return str(item["id"])
        return None

    @classmethod
    def _id_for(cls, attr_name: str, value: Any, cnx: Any) -> Optional[str]:
        wanted = str(value).casefold()
        for item in cls.all(cnx=cnx):
            found = item.get(attr_name)
            if found is not None and str(found).casefold() == wanted:
                return str(item["id"])
        return None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    @classmethod
    def fetch(cls, ident: Any = None, cnx: Any = None, **ident_kw: Any) -> "CollectionResource":
        """Fetch one instance by any identifier, or by a named one: ``fetch(name="HQ")``."""
        cnx = resolve(cnx)
        if ident is not None:
            the_id = cls.valid_id(ident, cnx=cnx)
            searched = ident
        elif len(ident_kw) == 1:
            key, searched = next(iter(ident_kw.items()))
            attr_name = cls.attr_key_for_alias(key)
            if attr_name is None or attr_name not in cls.identifier_attributes():
                raise UnsupportedError(f"'{key}' is not an identifier for {cls.__name__} objects")
            the_id = cls._id_for(attr_name, searched, cnx)
        else:
            raise UnsupportedError("fetch needs exactly one identifier")

        if the_id is None:
            raise NoSuchItemError(f"No {cls.__name__} found matching '{searched}'")
        return cls(cnx.get(f"{cls.base_path()}/{the_id}"), cnx=cnx)

    @classmethod
    def create(cls, cnx: Any = None, **params: Any) -> "CollectionResource":
        """A new, unsaved instance. Required attributes are checked on save."""
        primary = cls.primary_identifier_attribute()
        if primary:
            params.pop(primary, None)
        return cls(params, creating=True, cnx=cnx)

    @classmethod
    def delete_ids(cls, *idents: Any, cnx: Any = None) -> List[Any]:
        """Delete instances by identifier; returns the idents that matched nothing."""
        cnx = resolve(cnx)
        not_found = []
        for ident in idents:
            the_id = cls.valid_id(ident, cnx=cnx)
            if the_id is None:
                not_found.append(ident)
                continue
            cnx.delete(f"{cls.base_path()}/{the_id}")
        cnx.flushcache(cls)
        return not_found

    @property
    def in_jss(self) -> bool:
        return self._values.get("id") is not None

    @property
    def rsrc_path(self) -> str:
        return f"{self.base_path()}/{self._values.get('id')}"

    def _save_to_server(self) -> Any:
        cnx = self.connection
        if self.in_jss:
            result = self._update_in_server()
        else:
            result = cnx.post(self.base_path(), self.to_wire_format())
            if isinstance(result, dict) and result.get("id") is not None:
                self._values["id"] = str(result["id"])
        cnx.flushcache(type(self))
        return result

    def delete(self) -> None:
        if not self.in_jss:
            return
        cnx = self.connection
        cnx.delete(self.rsrc_path)
        cnx.flushcache(type(self))
        self._values["id"] = None
