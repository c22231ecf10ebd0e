from .building import Building
from .client_check_in import ClientCheckInSettings
from .department import Department
from .inventory_preload_record import InventoryPreloadRecord
from .mobile_device import MobileDevice, MobileDeviceDetails
from .resource import CollectionResource, Resource, SingletonResource

__all__ = [
    "Building",
    "ClientCheckInSettings",
    "CollectionResource",
    "Department",
    "InventoryPreloadRecord",
    "MobileDevice",
    "MobileDeviceDetails",
    "Resource",
    "SingletonResource",
]
