"""ElementTree helpers for the Classic API's XML payloads."""
from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional
from xml.etree import ElementTree


def text_of(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def add_text_element(parent: ElementTree.Element, tag: str, value: Any) -> ElementTree.Element:
    element = ElementTree.SubElement(parent, tag)
    element.text = text_of(value)
    return element


def singular(tag: str) -> str:
    if tag.endswith("ies"):
        return tag[:-3] + "y"
    if tag.endswith("s"):
        return tag[:-1]
    return tag


def xml_list(list_tag: str, items: Iterable[Mapping[str, Any]], content: str = "id",
             item_tag: Optional[str] = None) -> ElementTree.Element:
    """Build ``<computers><computer><id>1</id></computer>...</computers>``."""
    container = ElementTree.Element(list_tag)
    item_tag = item_tag or singular(list_tag)
    for item in items:
        element = ElementTree.SubElement(container, item_tag)
        add_text_element(element, content, item[content])
    return container


def dict_to_xml(tag: str, data: Any) -> ElementTree.Element:
    """Convert nested dicts/lists into an element tree.

    Lists become repeated children named by the singular of the list's tag.
    """
    element = ElementTree.Element(tag)
    _fill(element, data)
    return element


def _fill(element: ElementTree.Element, data: Any) -> None:
    if isinstance(data, Mapping):
        for key, value in data.items():
            if value is None:
                continue
            child = ElementTree.SubElement(element, str(key))
            _fill(child, value)
    elif isinstance(data, (list, tuple)):
        child_tag = singular(element.tag)
        for item in data:
            child = ElementTree.SubElement(element, child_tag)
            _fill(child, item)
    else:
        element.text = text_of(data)


def to_string(element: ElementTree.Element) -> str:
    return ElementTree.tostring(element, encoding="unicode")


def parse_string(xml: str) -> ElementTree.Element:
    return ElementTree.fromstring(xml)


def strip_empty(items: List[Any]) -> List[Any]:
    """Drop None and 0 entries, which the server treats as 'no item'."""
    return [i for i in items if i not in (None, 0, "")]
