"""Base class for objects in the Classic API (``/JSSResource``).

Classic objects are read as JSON and written as XML. Lists of every object
of a class are cached per connection in ``cnx.c_collection_cache``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

from ..connection import resolve
from ..exceptions import AlreadyExistsError, AmbiguousError, MissingDataError, NoSuchItemError, UnsupportedError
from ..utils.xml import add_text_element, parse_string, to_string

logger = logging.getLogger(__name__)


class APIObject:
    """An object from the Classic API."""

    RSRC_BASE: Optional[str] = None
    RSRC_LIST_KEY: Optional[str] = None
    RSRC_OBJECT_KEY: Optional[str] = None

    # keys of the summary list that identify an object, besides id
    LOOKUP_KEYS = ("name",)

    def __init__(self, init_data: Optional[Dict[str, Any]] = None, *, cnx: Any = None):
        self.cnx = cnx
        self.init_data: Dict[str, Any] = dict(init_data or {})
        general = self.init_data.get("general") or {}
        self._id = self.init_data.get("id", general.get("id"))
        self._name = self.init_data.get("name", general.get("name"))
        self.in_jss = self._id is not None
        self.need_to_update = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, name={self._name!r})"

    @property
    def connection(self) -> Any:
        return resolve(self.cnx)

    @property
    def id(self) -> Optional[int]:
        return None if self._id is None else int(self._id)

    @property
    def name(self) -> Optional[str]:
        return self._name

    @name.setter
    def name(self, new_name: str) -> None:
        if not isinstance(new_name, str) or not new_name:
            raise MissingDataError("Name must be a non-empty string")
        if new_name == self._name:
            return
        self._name = new_name
        self.should_update()

    def should_update(self) -> None:
        """Mark the object as needing an update, once it exists on the server."""
        if self.in_jss:
            self.need_to_update = True

    # ------------------------------------------------------------------
    # Class-level lookups
    # ------------------------------------------------------------------
    @classmethod
    def _check_rsrc(cls) -> None:
        if not (cls.RSRC_BASE and cls.RSRC_LIST_KEY):
            raise UnsupportedError(f"{cls.__name__} is not a Classic API collection")

    @classmethod
    def all(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        cls._check_rsrc()
        cnx = resolve(cnx)
        if refresh:
            cnx.c_collection_cache.pop(cls, None)
        if cls not in cnx.c_collection_cache:
            raw = cnx.c_get(cls.RSRC_BASE) or {}
            cnx.c_collection_cache[cls] = list(raw.get(cls.RSRC_LIST_KEY) or [])
        return cnx.c_collection_cache[cls]

    @classmethod
    def all_ids(cls, refresh: bool = False, cnx: Any = None) -> List[int]:
        return [int(i["id"]) for i in cls.all(refresh=refresh, cnx=cnx)]

    @classmethod
    def all_names(cls, refresh: bool = False, cnx: Any = None) -> List[str]:
        return [i.get("name") for i in cls.all(refresh=refresh, cnx=cnx)]

    @classmethod
    def map_all_ids_to(cls, other_key: str, refresh: bool = False, cnx: Any = None) -> Dict[int, Any]:
        return {int(i["id"]): i.get(other_key) for i in cls.all(refresh=refresh, cnx=cnx)}

    @classmethod
    def valid_id(cls, ident: Any, refresh: bool = False, cnx: Any = None) -> Optional[int]:
        """The id of the object matching ``ident`` by id or any lookup key, or None."""
        if ident is None:
            return None
        items = cls.all(refresh=refresh, cnx=cnx)
        if isinstance(ident, int) or (isinstance(ident, str) and ident.isdigit()):
            wanted_id = int(ident)
            for item in items:
                if int(item["id"]) == wanted_id:
                    return wanted_id
        wanted = str(ident).casefold()
        found: List[int] = []
        for key in cls.LOOKUP_KEYS:
            for item in items:
                value = item.get(key)
                if value is not None and str(value).casefold() == wanted and int(item["id"]) not in found:
                    found.append(int(item["id"]))
        if len(found) > 1:
            raise AmbiguousError(f"'{ident}' matches more than one {cls.__name__}: ids {found}")
        return found[0] if found else None

    @classmethod
    def fetch(cls, ident: Any, cnx: Any = None) -> "APIObject":
        cnx = resolve(cnx)
        the_id = cls.valid_id(ident, cnx=cnx)
        if the_id is None:
            raise NoSuchItemError(f"No {cls.__name__} found matching '{ident}'")
        raw = cnx.c_get(f"{cls.RSRC_BASE}/id/{the_id}") or {}
        return cls(raw.get(cls.RSRC_OBJECT_KEY, raw), cnx=cnx)

    @classmethod
    def make(cls, name: str, cnx: Any = None) -> "APIObject":
        """A new object that doesn't exist on the server until :meth:`create` is called."""
        if not name:
            raise MissingDataError("New objects need a name")
        if name in cls.all_names(cnx=cnx):
            raise AlreadyExistsError(f"A {cls.__name__} named '{name}' already exists")
        return cls({"name": name}, cnx=cnx)

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------
    @property
    def rest_rsrc(self) -> str:
        return f"{self.RSRC_BASE}/id/{self.id}"

    def rest_xml(self) -> ElementTree.Element:
        root = ElementTree.Element(self.RSRC_OBJECT_KEY)
        add_text_element(root, "name", self.name)
        return root

    def create(self) -> int:
        if self.in_jss:
            raise AlreadyExistsError(f"This {type(self).__name__} already exists on the server")
        cnx = self.connection
        resp = cnx.c_post(f"{self.RSRC_BASE}/id/0", to_string(self.rest_xml()))
        self._id = self._id_from_response(resp)
        self.in_jss = True
        self.need_to_update = False
        cnx.flushcache(type(self))
        logger.debug("Created %s id %s", type(self).__name__, self._id)
        return self.id

    def update(self) -> Optional[int]:
        if not self.in_jss:
            raise NoSuchItemError(f"This {type(self).__name__} doesn't exist on the server yet, use create()")
        if not self.need_to_update:
            return self.id
        self.connection.c_put(self.rest_rsrc, to_string(self.rest_xml()))
        self.need_to_update = False
        self.connection.flushcache(type(self))
        return self.id

    def save(self) -> Optional[int]:
        return self.update() if self.in_jss else self.create()

    def delete(self) -> None:
        if not self.in_jss:
            return
        self.connection.c_delete(self.rest_rsrc)
        self.connection.flushcache(type(self))
        self._id = None
        self.in_jss = False
        self.need_to_update = False

    @staticmethod
    def _id_from_response(resp: Any) -> Optional[int]:
        if isinstance(resp, dict):
            found = resp.get("id")
            if found is None and len(resp) == 1:
                inner = next(iter(resp.values()))
                found = inner.get("id") if isinstance(inner, dict) else None
            return None if found is None else int(found)
        if isinstance(resp, str) and resp.strip():
            element = parse_string(resp)
            found = element.findtext("id")
            return None if found is None else int(found)
        return None
