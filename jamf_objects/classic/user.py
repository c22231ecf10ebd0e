from .api_object import APIObject


class User(APIObject):
    """A local Jamf Pro user record (not an admin account)."""

    RSRC_BASE = "users"
    RSRC_LIST_KEY = "users"
    RSRC_OBJECT_KEY = "user"
    LOOKUP_KEYS = ("name", "email")
