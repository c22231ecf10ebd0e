from .advanced_search import AdvancedComputerSearch
from .api_object import APIObject
from .criteria import Criteria, Criterion
from .devices import Computer, MobileDevice
from .groups import ComputerGroup, MobileDeviceGroup
from .ibeacon import IBeacon
from .ldap_server import LdapServer
from .mobile_device_configuration_profile import MobileDeviceConfigurationProfile
from .network_segment import NetworkSegment
from .policy import Policy
from .restricted_software import RestrictedSoftware
from .scope import Scope, ScopeSubject
from .user import User

__all__ = [
    "APIObject",
    "AdvancedComputerSearch",
    "Computer",
    "ComputerGroup",
    "Criteria",
    "Criterion",
    "IBeacon",
    "LdapServer",
    "MobileDevice",
    "MobileDeviceConfigurationProfile",
    "MobileDeviceGroup",
    "NetworkSegment",
    "Policy",
    "RestrictedSoftware",
    "Scope",
    "ScopeSubject",
    "User",
]
