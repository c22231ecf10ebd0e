"""Computer and mobile device groups. Smart groups are defined by criteria."""
from typing import Any, Dict, List, Optional
from xml.etree import ElementTree

from ..exceptions import UnsupportedError
from ..utils.xml import add_text_element
from .criteriable import CriteriableObject


class Group(CriteriableObject):
    MEMBER_KEY: Optional[str] = None

    @property
    def is_smart(self) -> bool:
        return str(self.init_data.get("is_smart", False)).lower() == "true"

    @property
    def members(self) -> List[Dict[str, Any]]:
        return list(self.init_data.get(self.MEMBER_KEY) or [])

    @property
    def member_ids(self) -> List[int]:
        return [int(m["id"]) for m in self.members]

    def rest_xml(self) -> ElementTree.Element:
        if not self.is_smart and len(self.criteria):
            raise UnsupportedError("Static groups can't have criteria")
        root = super().rest_xml()
        add_text_element(root, "is_smart", self.is_smart)
        return root

    @classmethod
    def all_smart(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return [g for g in cls.all(refresh=refresh, cnx=cnx) if str(g.get("is_smart")).lower() == "true"]

    @classmethod
    def all_static(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return [g for g in cls.all(refresh=refresh, cnx=cnx) if str(g.get("is_smart")).lower() != "true"]


class ComputerGroup(Group):
    RSRC_BASE = "computergroups"
    RSRC_LIST_KEY = "computer_groups"
    RSRC_OBJECT_KEY = "computer_group"
    MEMBER_KEY = "computers"


class MobileDeviceGroup(Group):
    RSRC_BASE = "mobiledevicegroups"
    RSRC_LIST_KEY = "mobile_device_groups"
    RSRC_OBJECT_KEY = "mobile_device_group"
    MEMBER_KEY = "mobile_devices"
