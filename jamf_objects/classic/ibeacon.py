from .api_object import APIObject


class IBeacon(APIObject):
    RSRC_BASE = "ibeacons"
    RSRC_LIST_KEY = "ibeacons"
    RSRC_OBJECT_KEY = "ibeacon"
