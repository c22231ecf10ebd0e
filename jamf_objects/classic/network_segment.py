import ipaddress
import logging
from typing import Any, List

from .. import validate
from .api_object import APIObject

logger = logging.getLogger(__name__)


class NetworkSegment(APIObject):
    """A named range of IPv4 addresses."""

    RSRC_BASE = "networksegments"
    RSRC_LIST_KEY = "network_segments"
    RSRC_OBJECT_KEY = "network_segment"

    @property
    def starting_address(self) -> str:
        return self.init_data.get("starting_address")

    @property
    def ending_address(self) -> str:
        return self.init_data.get("ending_address")

    def include(self, ip: str) -> bool:
        address = ipaddress.IPv4Address(validate.ip_address(ip))
        return ipaddress.IPv4Address(self.starting_address) <= address <= ipaddress.IPv4Address(self.ending_address)

    @classmethod
    def network_segments_for_ip(cls, ip: str, refresh: bool = False, cnx: Any = None) -> List[int]:
        """Ids of every segment whose range contains ``ip``."""
        address = ipaddress.IPv4Address(validate.ip_address(ip))
        found = []
        for seg in cls.all(refresh=refresh, cnx=cnx):
            start, end = seg.get("starting_address"), seg.get("ending_address")
            if not (start and end):
                continue
            if ipaddress.IPv4Address(start) <= address <= ipaddress.IPv4Address(end):
                found.append(int(seg["id"]))
        logger.debug("IP %s is in network segments %s", ip, found)
        return found
