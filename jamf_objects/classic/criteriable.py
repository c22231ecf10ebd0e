from typing import Any, Dict, Optional
from xml.etree import ElementTree

from ..exceptions import InvalidDataError
from .api_object import APIObject
from .criteria import Criteria


class CriteriableObject(APIObject):
    """A Classic API object whose contents are defined by a :class:`Criteria` list."""

    def __init__(self, init_data: Optional[Dict[str, Any]] = None, *, cnx: Any = None):
        super().__init__(init_data, cnx=cnx)
        self._criteria = Criteria.from_api(self.init_data.get("criteria"), container=self)

    @property
    def criteria(self) -> Criteria:
        return self._criteria

    @criteria.setter
    def criteria(self, new_criteria: Criteria) -> None:
        if not isinstance(new_criteria, Criteria):
            raise InvalidDataError("A Criteria instance is required")
        new_criteria.container = self
        self._criteria = new_criteria
        self.should_update()

    def rest_xml(self) -> ElementTree.Element:
        root = super().rest_xml()
        root.append(self.criteria.to_xml())
        return root
