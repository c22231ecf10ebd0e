"""Inventory preload records: data applied to a device when it enrolls."""
from typing import Any, Dict

from ..models.attributes import Attr, Identifier, Primitive
from ..models.change_log import ChangeLog
from .resource import CollectionResource

DEVICE_TYPE_COMPUTER = "Computer"
DEVICE_TYPE_MOBILE_DEV = "Mobile Device"
DEVICE_TYPE_UNKNOWN = "Unknown"

DEVICE_TYPES = (DEVICE_TYPE_COMPUTER, DEVICE_TYPE_MOBILE_DEV, DEVICE_TYPE_UNKNOWN)


class InventoryPreloadRecord(CollectionResource):
    RSRC_VERSION = "v2"
    RSRC_PATH = "inventory-preload/records"
    CHANGE_LOG = True

    EXTENSION_ATTRIBUTES_KEY = "extensionAttributes"

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY, readonly=True),
        "serialNumber": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, required=True),
        "deviceType": Attr(Primitive.STRING, required=True, enum=DEVICE_TYPES),
        "username": Attr(Primitive.STRING),
        "fullName": Attr(Primitive.STRING),
        "emailAddress": Attr(Primitive.STRING, validator="email_address"),
        "phoneNumber": Attr(Primitive.STRING),
        "position": Attr(Primitive.STRING),
        "department": Attr(Primitive.STRING),
        "building": Attr(Primitive.STRING),
        "room": Attr(Primitive.STRING),
        "poNumber": Attr(Primitive.STRING),
        "poDate": Attr(Primitive.STRING),
        "warrantyExpiration": Attr(Primitive.STRING),
        "appleCareId": Attr(Primitive.STRING),
        "lifeExpectancy": Attr(Primitive.STRING),
        "purchasePrice": Attr(Primitive.STRING),
        "purchasingContact": Attr(Primitive.STRING),
        "purchasingAccount": Attr(Primitive.STRING),
        "leaseExpiration": Attr(Primitive.STRING),
        "barCode1": Attr(Primitive.STRING),
        "barCode2": Attr(Primitive.STRING),
        "assetTag": Attr(Primitive.STRING),
    }

    def _history(self) -> ChangeLog:
        # preload records share one history for the whole collection
        if self._change_log is None:
            self._change_log = ChangeLog(f"{self.RSRC_VERSION}/inventory-preload", self.connection)
        return self._change_log

    @property
    def ext_attrs(self) -> Dict[str, Any]:
        return {ea.name: ea.value for ea in self._ext_attrs}

    def set_ext_attr(self, ea_name: str, new_val: Any) -> Any:
        self._ext_attrs.set(ea_name, new_val)
        return new_val

    def remove_ext_attr(self, ea_name: str) -> None:
        self._ext_attrs.remove(ea_name)
