from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

from ..exceptions import InvalidDataError
from ..utils.xml import xml_list
from .criteriable import CriteriableObject


class AdvancedComputerSearch(CriteriableObject):
    RSRC_BASE = "advancedcomputersearches"
    RSRC_LIST_KEY = "advanced_computer_searches"
    RSRC_OBJECT_KEY = "advanced_computer_search"

    RESULT_KEY = "computers"

    def __init__(self, init_data: Optional[Dict[str, Any]] = None, *, cnx: Any = None):
        super().__init__(init_data, cnx=cnx)
        self._display_fields = [f["name"] for f in self.init_data.get("display_fields") or [] if f.get("name")]

    @property
    def display_fields(self) -> List[str]:
        return list(self._display_fields)

    @display_fields.setter
    def display_fields(self, new_fields: List[str]) -> None:
        if not isinstance(new_fields, (list, tuple)) or not all(isinstance(f, str) for f in new_fields):
            raise InvalidDataError("display_fields must be a list of field names")
        if list(new_fields) == self._display_fields:
            return
        self._display_fields = list(new_fields)
        self.should_update()

    @property
    def search_results(self) -> List[Dict[str, Any]]:
        """Results as of the last fetch."""
        return list(self.init_data.get(self.RESULT_KEY) or [])

    def rest_xml(self) -> ElementTree.Element:
        root = super().rest_xml()
        root.append(xml_list("display_fields", [{"name": f} for f in self._display_fields], content="name"))
        return root
