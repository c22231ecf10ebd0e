"""Mobile devices in the Jamf Pro API.

The collection list only carries summary data. Everything else lives in a
separate, read-only details record fetched on demand with
:meth:`MobileDevice.details`.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from ..models.attributes import Attr, Identifier, Primitive
from ..models.json_object import JSONObject
from .resource import CollectionResource

logger = logging.getLogger(__name__)

IOS = "ios"
APPLETV = "appleTv"
ANDROID = "android"
UNKNOWN = "unknown"

TYPES = (IOS, APPLETV, ANDROID, UNKNOWN)

IPHONE = "iPhone"
IPOD = "iPod"
IPAD = "iPad"


class MobileDeviceLocation(JSONObject):
    MUTABLE = False

    OBJECT_MODEL = {
        "username": Attr(Primitive.STRING),
        "realName": Attr(Primitive.STRING),
        "emailAddress": Attr(Primitive.STRING),
        "position": Attr(Primitive.STRING),
        "phoneNumber": Attr(Primitive.STRING),
        "departmentId": Attr(Primitive.J_ID),
        "buildingId": Attr(Primitive.J_ID),
        "room": Attr(Primitive.STRING),
    }


class MobileDeviceDetails(JSONObject):
    """Inventory details for one mobile device. Not editable."""

    MUTABLE = False

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, readonly=True),
        "name": Attr(Primitive.STRING),
        "assetTag": Attr(Primitive.STRING),
        "serialNumber": Attr(Primitive.STRING),
        "udid": Attr(Primitive.STRING),
        "type": Attr(Primitive.STRING, enum=TYPES),
        "osVersion": Attr(Primitive.STRING),
        "osBuild": Attr(Primitive.STRING),
        "ipAddress": Attr(Primitive.STRING),
        "wifiMacAddress": Attr(Primitive.STRING),
        "managed": Attr(Primitive.BOOLEAN),
        "supervised": Attr(Primitive.BOOLEAN),
        "deviceOwnershipLevel": Attr(Primitive.STRING),
        "lastInventoryUpdateTimestamp": Attr(Primitive.STRING),
        "location": Attr(MobileDeviceLocation),
    }


class MobileDevice(CollectionResource):
    RSRC_VERSION = "v2"
    RSRC_PATH = "mobile-devices"
    UPDATE_METHOD = "patch"

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY, readonly=True),
        "name": Attr(Primitive.STRING, validator="non_empty_string"),
        "serialNumber": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, readonly=True),
        "wifiMacAddress": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, readonly=True),
        "udid": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, readonly=True),
        "phoneNumber": Attr(Primitive.STRING, readonly=True),
        "model": Attr(Primitive.STRING, readonly=True),
        "modelIdentifier": Attr(Primitive.STRING, readonly=True),
        "username": Attr(Primitive.STRING, readonly=True),
        "type": Attr(Primitive.STRING, readonly=True, enum=TYPES),
        "managementId": Attr(Primitive.STRING, readonly=True),
    }

    def __init__(self, data: Dict[str, Any], *, creating: bool = False, cnx: Any = None):
        super().__init__(data, creating=creating, cnx=cnx)
        self._details: Optional[MobileDeviceDetails] = None

    @classmethod
    def _all_where(cls, predicate, refresh: bool, cnx: Any) -> List[Dict[str, Any]]:
        return [d for d in cls.all(refresh=refresh, cnx=cnx) if predicate(d)]

    @classmethod
    def all_iphones(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return cls._all_where(lambda d: (d.get("model") or "").startswith(IPHONE), refresh, cnx)

    @classmethod
    def all_ipods(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return cls._all_where(lambda d: (d.get("model") or "").startswith(IPOD), refresh, cnx)

    @classmethod
    def all_ipads(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return cls._all_where(lambda d: (d.get("model") or "").startswith(IPAD), refresh, cnx)

    @classmethod
    def all_apple_tvs(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return cls._all_where(lambda d: d.get("type") == APPLETV, refresh, cnx)

    @classmethod
    def all_androids(cls, refresh: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        return cls._all_where(lambda d: d.get("type") == ANDROID, refresh, cnx)

    def details(self, refresh: bool = False) -> MobileDeviceDetails:
        """The device's inventory details, fetched on first use."""
        if self._details is None or refresh:
            logger.debug("Fetching details for mobile device %s", self.id)
            data = self.connection.get(f"{self.rsrc_path}/detail")
            self._details = MobileDeviceDetails(data or {}, cnx=self.cnx)
        return self._details
