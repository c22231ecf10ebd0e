"""Managed computers and mobile devices, as the Classic API reports them."""
from typing import Any, Dict, List, Optional

from .api_object import APIObject


class Computer(APIObject):
    RSRC_BASE = "computers"
    RSRC_LIST_KEY = "computers"
    RSRC_OBJECT_KEY = "computer"
    LOOKUP_KEYS = ("name", "serial_number", "udid", "mac_address")

    # subsets needed to evaluate scopes without fetching the whole record
    SCOPE_SUBSETS = "General&Location&GroupsAccounts"

    @property
    def general(self) -> Dict[str, Any]:
        return self.init_data.get("general") or {}

    @property
    def location(self) -> Dict[str, Any]:
        return self.init_data.get("location") or {}

    @property
    def managed(self) -> bool:
        return bool((self.general.get("remote_management") or {}).get("managed"))

    @property
    def ip_address(self) -> Optional[str]:
        return self.general.get("last_reported_ip") or self.general.get("ip_address")

    @property
    def computer_groups(self) -> List[str]:
        """Names of the computer groups this computer belongs to."""
        accounts = self.init_data.get("groups_accounts") or {}
        return list(accounts.get("computer_group_memberships") or [])


class MobileDevice(APIObject):
    RSRC_BASE = "mobiledevices"
    RSRC_LIST_KEY = "mobile_devices"
    RSRC_OBJECT_KEY = "mobile_device"
    LOOKUP_KEYS = ("name", "serial_number", "udid", "wifi_mac_address")

    SCOPE_SUBSETS = "General&Location&MobileDeviceGroups"

    @property
    def general(self) -> Dict[str, Any]:
        return self.init_data.get("general") or {}

    @property
    def location(self) -> Dict[str, Any]:
        return self.init_data.get("location") or {}

    @property
    def managed(self) -> bool:
        return bool(self.general.get("managed"))

    @property
    def ip_address(self) -> Optional[str]:
        return self.general.get("ip_address")

    @property
    def mobile_device_groups(self) -> List[Dict[str, Any]]:
        return list(self.init_data.get("mobile_device_groups") or [])
