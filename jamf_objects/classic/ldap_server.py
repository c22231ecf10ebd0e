"""LDAP servers configured in Jamf Pro, used to look up directory users and groups."""
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from ..connection import resolve
from ..exceptions import NoSuchItemError
from .api_object import APIObject


class LdapServer(APIObject):
    RSRC_BASE = "ldapservers"
    RSRC_LIST_KEY = "ldap_servers"
    RSRC_OBJECT_KEY = "ldap_server"

    @classmethod
    def _find(cls, server_id: int, kind: str, name: str, cnx: Any) -> List[Dict[str, Any]]:
        raw = resolve(cnx).c_get(f"{cls.RSRC_BASE}/id/{server_id}/{kind}/{quote(str(name))}") or {}
        return list(raw.get(f"ldap_{kind}s") or [])

    @classmethod
    def find_user(cls, server_id: int, user: str, exact: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        found = cls._find(server_id, "user", user, cnx)
        return [u for u in found if u.get("username") == user] if exact else found

    @classmethod
    def find_group(cls, server_id: int, group: str, exact: bool = False, cnx: Any = None) -> List[Dict[str, Any]]:
        found = cls._find(server_id, "group", group, cnx)
        return [g for g in found if g.get("groupname") == group] if exact else found

    @classmethod
    def server_for_user(cls, user: str, cnx: Any = None) -> Optional[int]:
        for server_id in cls.all_ids(refresh=True, cnx=cnx):
            if cls.find_user(server_id, user, exact=True, cnx=cnx):
                return server_id
        return None

    @classmethod
    def server_for_group(cls, group: str, cnx: Any = None) -> Optional[int]:
        for server_id in cls.all_ids(refresh=True, cnx=cnx):
            if cls.find_group(server_id, group, exact=True, cnx=cnx):
                return server_id
        return None

    @classmethod
    def user_in_ldap(cls, user: str, cnx: Any = None) -> bool:
        return cls.server_for_user(user, cnx=cnx) is not None

    @classmethod
    def group_in_ldap(cls, group: str, cnx: Any = None) -> bool:
        return cls.server_for_group(group, cnx=cnx) is not None

    @classmethod
    def check_membership(cls, ldap_server: Any, user: str, group: str, cnx: Any = None) -> bool:
        """True if ``user`` is a member of ``group`` on the given server."""
        server_id = cls.valid_id(ldap_server, cnx=cnx)
        if server_id is None:
            raise NoSuchItemError(f"No LdapServer matching '{ldap_server}'")
        rsrc = f"{cls.RSRC_BASE}/id/{server_id}/group/{quote(str(group))}/user/{quote(str(user))}"
        raw = resolve(cnx).c_get(rsrc) or {}
        return bool(raw.get("ldap_users"))
