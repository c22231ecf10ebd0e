"""Criteria for smart groups and advanced searches.

A :class:`Criteria` is an ordered list of :class:`Criterion` rules. Each
criterion's ``priority`` is always its position in the list, and no two
criteria may share a signature: the tuple (and_or, name, search_type, value).
"""
from __future__ import annotations

import functools
import logging
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple
from xml.etree import ElementTree

from ..exceptions import InvalidDataError, MissingDataError, NoSuchItemError
from ..utils.xml import add_text_element

logger = logging.getLogger(__name__)

SEARCH_TYPES = (
    "is",
    "is not",
    "like",
    "not like",
    "has",
    "does not have",
    "more than",
    "less than",
    "greater than",
    "greater than or equal",
    "less than or equal",
    "before (yyyy-mm-dd)",
    "after (yyyy-mm-dd)",
    "more than x days ago",
    "less than x days ago",
    "in more than x days",
    "in less than x days",
    "member of",
    "not member of",
    "current",
    "not current",
    "matches regex",
    "does not match regex",
)

AND_OR = ("and", "or")

INTEGER_SEARCH_TYPES = ("more than", "less than", "more than x days ago", "less than x days ago")
DATE_SEARCH_TYPES = ("before (yyyy-mm-dd)", "after (yyyy-mm-dd)")

INTEGER_VALUE_RE = re.compile(r"^\d+$")
DATE_VALUE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

PARENS = ("opening", "closing")


@functools.total_ordering
class Criterion:
    """One rule: ``<and_or> <name> <search_type> <value>``."""

    def __init__(
        self,
        name: Optional[str] = None,
        search_type: Optional[str] = None,
        value: Any = None,
        and_or: str = "and",
        priority: Optional[int] = None,
        opening_paren: bool = False,
        closing_paren: bool = False,
        paren: Optional[str] = None,
    ):
        self.priority = priority
        self.name = name
        self._and_or = None
        self._search_type = None
        self._value = None
        self.and_or = and_or or "and"
        if search_type is not None:
            self.search_type = search_type
        self.opening_paren = bool(opening_paren)
        self.closing_paren = bool(closing_paren)
        if paren is not None:
            self.paren = paren
        if value is not None:
            self.value = value

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Criterion":
        return cls(
            name=data.get("name"),
            search_type=data.get("search_type"),
            value=data.get("value"),
            and_or=data.get("and_or") or "and",
            priority=data.get("priority"),
            opening_paren=_truthy(data.get("opening_paren")),
            closing_paren=_truthy(data.get("closing_paren")),
        )

    @property
    def and_or(self) -> str:
        return self._and_or

    @and_or.setter
    def and_or(self, new_val: str) -> None:
        new_val = str(new_val).lower()
        if new_val not in AND_OR:
            raise InvalidDataError("and_or must be 'and' or 'or'")
        self._and_or = new_val

    @property
    def search_type(self) -> Optional[str]:
        return self._search_type

    @search_type.setter
    def search_type(self, new_val: str) -> None:
        if new_val not in SEARCH_TYPES:
            raise InvalidDataError(f"Invalid search_type '{new_val}'. Must be one of: {', '.join(SEARCH_TYPES)}")
        self._search_type = new_val

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, new_val: Any) -> None:
        text = "" if new_val is None else str(new_val)
        if self._search_type in INTEGER_SEARCH_TYPES and not INTEGER_VALUE_RE.match(text):
            raise InvalidDataError(f"Value must be an integer for search type '{self._search_type}'")
        if self._search_type in DATE_SEARCH_TYPES and not DATE_VALUE_RE.match(text):
            raise InvalidDataError(f"Value must be a date in the format yyyy-mm-dd for search type '{self._search_type}'")
        self._value = new_val

    @property
    def paren(self) -> Optional[str]:
        if self.opening_paren:
            return "opening"
        if self.closing_paren:
            return "closing"
        return None

    @paren.setter
    def paren(self, new_val: Optional[str]) -> None:
        if new_val is not None and new_val not in PARENS:
            raise InvalidDataError("paren must be 'opening', 'closing', or None")
        self.opening_paren = new_val == "opening"
        self.closing_paren = new_val == "closing"

    @property
    def signature(self) -> Tuple[str, str, str, str]:
        """What makes two criteria duplicates. Priority and parens don't count."""
        return tuple("" if v is None else str(v) for v in (self.and_or, self.name, self.search_type, self.value))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Criterion):
            return NotImplemented
        return self.signature == other.signature

    def __lt__(self, other: "Criterion") -> bool:
        if not isinstance(other, Criterion):
            return NotImplemented
        return self.signature < other.signature

    def __hash__(self) -> int:
        return hash(self.signature)

    def __repr__(self) -> str:
        return f"Criterion(priority={self.priority}, signature={','.join(self.signature)!r})"

    def to_xml(self) -> ElementTree.Element:
        crn = ElementTree.Element("criterion")
        add_text_element(crn, "priority", self.priority)
        add_text_element(crn, "and_or", self.and_or)
        add_text_element(crn, "name", self.name)
        add_text_element(crn, "search_type", self.search_type)
        add_text_element(crn, "value", self.value)
        add_text_element(crn, "opening_paren", self.opening_paren)
        add_text_element(crn, "closing_paren", self.closing_paren)
        return crn


def _truthy(val: Any) -> bool:
    if isinstance(val, str):
        return val.lower() == "true"
    return bool(val)


class Criteria:
    """An ordered, duplicate-free list of criteria belonging to a container."""

    def __init__(self, new_criteria: Optional[List[Criterion]] = None, container: Any = None):
        self.container = container
        self._criteria: List[Criterion] = []
        if new_criteria:
            self.criteria = new_criteria

    @classmethod
    def from_api(cls, raw: Optional[List[Dict[str, Any]]], container: Any = None) -> "Criteria":
        crit = cls(container=container)
        crit._criteria = sorted((Criterion.from_api(c) for c in raw or []), key=lambda c: c.priority or 0)
        crit._set_priorities()
        return crit

    def __iter__(self) -> Iterator[Criterion]:
        return iter(self._criteria)

    def __len__(self) -> int:
        return len(self._criteria)

    def __getitem__(self, priority: int) -> Criterion:
        return self._criteria[priority]

    @property
    def criteria(self) -> Tuple[Criterion, ...]:
        return tuple(self._criteria)

    @criteria.setter
    def criteria(self, new_criteria: List[Criterion]) -> None:
        if not isinstance(new_criteria, (list, tuple)) or not all(isinstance(c, Criterion) for c in new_criteria):
            raise InvalidDataError("Argument must be a list of Criterion instances")
        checked: List[Criterion] = []
        for crtn in new_criteria:
            self._criterion_ok(crtn, checked)
            checked.append(crtn)
        self._criteria = checked
        self._changed()

    def clear(self) -> None:
        self._criteria = []
        self._notify_container()

    def append_criterion(self, criterion: Criterion) -> None:
        self._criterion_ok(criterion)
        self._criteria.append(criterion)
        self._changed()

    def prepend_criterion(self, criterion: Criterion) -> None:
        self._criterion_ok(criterion)
        self._criteria.insert(0, criterion)
        self._changed()

    def insert_criterion(self, priority: int, criterion: Criterion) -> None:
        if not isinstance(priority, int) or not 0 <= priority <= len(self._criteria):
            raise NoSuchItemError(f"Can't insert a criterion at priority '{priority}'")
        self._criterion_ok(criterion)
        self._criteria.insert(priority, criterion)
        self._changed()

    def set_criterion(self, priority: int, criterion: Criterion) -> None:
        """Replace the criterion at ``priority``."""
        self._check_priority(priority)
        others = [c for i, c in enumerate(self._criteria) if i != priority]
        self._criterion_ok(criterion, others)
        self._criteria[priority] = criterion
        self._changed()

    def delete_criterion(self, priority: int) -> None:
        self._check_priority(priority)
        if len(self._criteria) == 1:
            raise MissingDataError("Criteria can't be empty")
        del self._criteria[priority]
        self._changed()

    def to_xml(self) -> ElementTree.Element:
        cr = ElementTree.Element("criteria")
        add_text_element(cr, "size", len(self._criteria))
        for crtn in self._criteria:
            cr.append(crtn.to_xml())
        return cr

    def _check_priority(self, priority: int) -> None:
        if not isinstance(priority, int) or not 0 <= priority < len(self._criteria):
            raise NoSuchItemError(f"No current criterion with priority '{priority}'")

    def _criterion_ok(self, criterion: Criterion, existing: Optional[List[Criterion]] = None) -> None:
        if not isinstance(criterion, Criterion):
            raise InvalidDataError("Criteria may only contain Criterion instances")
        existing = self._criteria if existing is None else existing
        sig = ",".join(criterion.signature)
        if any(c == criterion for c in existing):
            raise InvalidDataError(f"Duplicate criterion: {sig}")
        for attr in ("and_or", "name", "search_type"):
            if not getattr(criterion, attr):
                raise InvalidDataError(f"Missing {attr} for criterion: {sig}")
        if criterion.value is None:
            raise InvalidDataError(f"Missing value for criterion: {sig}")

    def _set_priorities(self) -> None:
        for idx, crtn in enumerate(self._criteria):
            crtn.priority = idx

    def _changed(self) -> None:
        self._set_priorities()
        self._notify_container()

    def _notify_container(self) -> None:
        if self.container is not None:
            self.container.should_update()
