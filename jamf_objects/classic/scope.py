"""Scopes of Classic API objects such as policies and configuration profiles.

A scope has three realms:

- targets: computers or mobile devices, their groups, buildings and
  departments, or everything via the ``all_<targets>`` flag,
- limitations: network segments, iBeacons, LDAP/local users and LDAP user
  groups that narrow the targets,
- exclusions: anything from the other two realms, subtracted at the end.

An item can't be both included (as a target or limitation) and excluded.

The Classic API never reports Jamf users or user groups used as targets or
exclusions, so they can't be managed here; saving a scope for a kind of
object that might have them set in the web UI will silently remove them on
the server. A warning is logged when that could happen.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Dict, List, Optional, Sequence
from xml.etree import ElementTree

from pydantic import BaseModel, Field

from ..config.settings import get_settings
from ..connection import resolve
from ..exceptions import AlreadyExistsError, InvalidDataError, NoSuchItemError
from ..resources.building import Building
from ..resources.department import Department
from ..utils.xml import add_text_element, strip_empty, xml_list
from .devices import Computer, MobileDevice
from .groups import ComputerGroup, MobileDeviceGroup
from .ibeacon import IBeacon
from .ldap_server import LdapServer
from .network_segment import NetworkSegment
from .user import User

logger = logging.getLogger(__name__)

JAMF_LDAP_USERS = "jamf_ldap_users"
LDAP_USER_GROUPS = "ldap_user_groups"

SCOPING_CLASSES = {
    "computers": Computer,
    "computer_groups": ComputerGroup,
    "mobile_devices": MobileDevice,
    "mobile_device_groups": MobileDeviceGroup,
    "buildings": Building,
    "departments": Department,
    "network_segments": NetworkSegment,
    "ibeacons": IBeacon,
    JAMF_LDAP_USERS: None,
    LDAP_USER_GROUPS: None,
}

LDAP_JAMF_USER_KEYS = ("user", "users", "ldap_user", "ldap_users", "jamf_ldap_user", "jamf_ldap_users")
LDAP_GROUP_KEYS = ("user_group", "user_groups", "ldap_user_group", "ldap_user_groups")

TARGETS_AND_GROUPS = {"computers": "computer_groups", "mobile_devices": "mobile_device_groups"}

INCLUSIONS = ("buildings", "departments")
LIMITATIONS = ("ibeacons", "network_segments", JAMF_LDAP_USERS, LDAP_USER_GROUPS)
EXCLUSIONS = INCLUSIONS + LIMITATIONS

# api keys for the realms that hold names rather than ids
NAME_KEYS_IN_API = {JAMF_LDAP_USERS: "users", LDAP_USER_GROUPS: "user_groups"}

DEFAULT_SCOPE = {
    "all_computers": True,
    "all_mobile_devices": True,
    "limitations": {},
    "exclusions": {},
}

DATA_LOSS_WARNING = (
    "Saving the scope of %s %s: the Classic API does not report Jamf users or user groups "
    "used as targets or exclusions, so any set in the web UI will be removed"
)


def pluralize_key(key: str) -> str:
    key = str(key)
    if key in LDAP_JAMF_USER_KEYS:
        return JAMF_LDAP_USERS
    if key in LDAP_GROUP_KEYS:
        return LDAP_USER_GROUPS
    return key if key.endswith("s") else f"{key}s"


def _truthy(val: Any) -> bool:
    if isinstance(val, str):
        return val.lower() == "true"
    return bool(val)


def _ids(items: Optional[Sequence[Any]]) -> List[int]:
    return [int(i["id"]) for i in items or [] if i and i.get("id") is not None]


def _names(items: Optional[Sequence[Any]]) -> List[str]:
    return [str(i["name"]) for i in items or [] if i and i.get("name") is not None]


class ScopeSubject(BaseModel):
    """The data about one computer or mobile device needed to evaluate a scope."""

    id: int
    managed: bool = False
    group_ids: List[int] = Field(default_factory=list)
    building: Optional[str] = None
    department: Optional[str] = None
    ip_address: Optional[str] = None
    username: Optional[str] = None


class Scope:
    """The targets, limitations and exclusions of a scopable object."""

    def __init__(
        self,
        target_key: str,
        raw_scope: Optional[Dict[str, Any]] = None,
        container: Any = None,
        warn_data_loss: Optional[bool] = None,
    ):
        target_key = pluralize_key(target_key)
        if target_key not in TARGETS_AND_GROUPS:
            raise InvalidDataError(f"The target key of a Scope must be one of: {', '.join(TARGETS_AND_GROUPS)}")
        raw_scope = copy.deepcopy(raw_scope) if raw_scope is not None else copy.deepcopy(DEFAULT_SCOPE)

        self.container = container
        self.warn_data_loss = get_settings().scope_data_loss_warnings if warn_data_loss is None else warn_data_loss
        self.unable_to_verify_ldap_entries = False
        self.need_to_update = False

        self.target_key = target_key
        self.target_class = SCOPING_CLASSES[target_key]
        self.group_key = TARGETS_AND_GROUPS[target_key]
        self.group_class = SCOPING_CLASSES[self.group_key]
        self.target_keys = (target_key, self.group_key) + INCLUSIONS
        self.exclusion_keys = (target_key, self.group_key) + EXCLUSIONS
        self.all_key = f"all_{target_key}"

        self.all_targets = _truthy(raw_scope.get(self.all_key, False))
        self.targets: Dict[str, List[Any]] = {k: _ids(raw_scope.get(k)) for k in self.target_keys}
        self.limitations = self._parse_realm(raw_scope.get("limitations") or {}, LIMITATIONS)
        self.exclusions = self._parse_realm(raw_scope.get("exclusions") or {}, self.exclusion_keys)

    @staticmethod
    def _parse_realm(raw: Dict[str, Any], keys: Sequence[str]) -> Dict[str, List[Any]]:
        realm = {}
        for key in keys:
            if key in NAME_KEYS_IN_API:
                realm[key] = _names(raw.get(NAME_KEYS_IN_API[key]))
            else:
                realm[key] = _ids(raw.get(key))
        return realm

    def __repr__(self) -> str:
        owner = f"{type(self.container).__name__} id {getattr(self.container, 'id', None)}" if self.container else "nothing"
        return f"<Scope of {self.target_key} for {owner}>"

    @property
    def cnx(self) -> Any:
        return getattr(self.container, "cnx", None)

    @property
    def inclusions(self) -> Dict[str, List[Any]]:
        return self.targets

    @property
    def direct_targets(self) -> List[int]:
        return self.targets[self.target_key]

    @property
    def group_targets(self) -> List[int]:
        return self.targets[self.group_key]

    @property
    def direct_exclusions(self) -> List[int]:
        return self.exclusions[self.target_key]

    @property
    def group_exclusions(self) -> List[int]:
        return self.exclusions[self.group_key]

    # ------------------------------------------------------------------
    # Targets
    # ------------------------------------------------------------------
    def include_all(self, clear: bool = False) -> None:
        """Target everything. With ``clear``, also drop all limitations and exclusions."""
        self.targets = {k: [] for k in self.target_keys}
        self.all_targets = True
        if clear:
            self.limitations = {k: [] for k in LIMITATIONS}
            self.exclusions = {k: [] for k in self.exclusion_keys}
        self._changed()

    set_all_targets = include_all

    def set_targets(self, key: str, idents: List[Any]) -> None:
        """Replace the targets of one kind; an empty list removes them all."""
        key = pluralize_key(key)
        new_ids = self._validate_list("target", key, idents)
        for ident, item_id in zip(idents, new_ids):
            if item_id in self.exclusions.get(key, []):
                raise AlreadyExistsError(f"Can't set {key} target to '{ident}' because it's already an explicit exclusion.")
        if sorted(new_ids, key=str) == sorted(self.targets[key], key=str):
            return
        self.targets[key] = new_ids
        self.all_targets = False
        self._changed()

    set_target = set_targets
    set_inclusion = set_targets
    set_inclusions = set_targets

    def add_target(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        item_id = self._validate_item("target", key, ident)
        if item_id in self.targets[key]:
            return
        if item_id in self.exclusions.get(key, []):
            raise AlreadyExistsError(f"Can't set {key} target to '{ident}' because it's already an explicit exclusion.")
        self.targets[key].append(item_id)
        self.all_targets = False
        self._changed()

    add_inclusion = add_target

    def remove_target(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        if key in (JAMF_LDAP_USERS, LDAP_USER_GROUPS):
            return
        item_id = self._validate_item("target", key, ident, error_if_not_found=False)
        if item_id is None or item_id not in self.targets[key]:
            return
        self.targets[key].remove(item_id)
        self._changed()

    remove_inclusion = remove_target

    # ------------------------------------------------------------------
    # Limitations
    # ------------------------------------------------------------------
    def set_limitations(self, key: str, idents: List[Any]) -> None:
        key = pluralize_key(key)
        new_ids = self._validate_list("limitation", key, idents)
        for ident, item_id in zip(idents, new_ids):
            if item_id in self.exclusions.get(key, []):
                raise AlreadyExistsError(f"Can't set {key} limitation to '{ident}' because it's already an explicit exclusion.")
        if sorted(new_ids, key=str) == sorted(self.limitations[key], key=str):
            return
        self.limitations[key] = new_ids
        self._changed()

    set_limitation = set_limitations

    def add_limitation(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        item_id = self._validate_item("limitation", key, ident)
        if item_id in self.limitations[key]:
            return
        if item_id in self.exclusions.get(key, []):
            raise AlreadyExistsError(f"Can't set {key} limitation to '{ident}' because it's already an explicit exclusion.")
        self.limitations[key].append(item_id)
        self._changed()

    def remove_limitation(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        item_id = self._validate_item("limitation", key, ident, error_if_not_found=False)
        if item_id is None or item_id not in self.limitations[key]:
            return
        self.limitations[key].remove(item_id)
        self._changed()

    # ------------------------------------------------------------------
    # Exclusions
    # ------------------------------------------------------------------
    def _check_not_included(self, key: str, ident: Any, item_id: Any) -> None:
        if item_id in self.targets.get(key, []):
            raise AlreadyExistsError(f"Can't exclude {key} '{ident}' because it's already explicitly included.")
        if item_id in self.limitations.get(key, []):
            raise AlreadyExistsError(f"Can't exclude {key} '{ident}' because it's already an explicit limitation.")

    def set_exclusions(self, key: str, idents: List[Any]) -> None:
        key = pluralize_key(key)
        new_ids = self._validate_list("exclusion", key, idents)
        for ident, item_id in zip(idents, new_ids):
            self._check_not_included(key, ident, item_id)
        if sorted(new_ids, key=str) == sorted(self.exclusions[key], key=str):
            return
        self.exclusions[key] = new_ids
        self._changed()

    set_exclusion = set_exclusions

    def add_exclusion(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        item_id = self._validate_item("exclusion", key, ident)
        if item_id in self.exclusions[key]:
            return
        self._check_not_included(key, ident, item_id)
        self.exclusions[key].append(item_id)
        self._changed()

    def remove_exclusion(self, key: str, ident: Any) -> None:
        key = pluralize_key(key)
        item_id = self._validate_item("exclusion", key, ident, error_if_not_found=False)
        if item_id is None or item_id not in self.exclusions[key]:
            return
        self.exclusions[key].remove(item_id)
        self._changed()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def _realm_keys(self, realm: str) -> Sequence[str]:
        if realm == "target":
            return self.target_keys
        if realm == "limitation":
            return LIMITATIONS
        if realm == "exclusion":
            return self.exclusion_keys
        raise ValueError("Unknown realm, must be 'target', 'limitation', or 'exclusion'")

    def _validate_list(self, realm: str, key: str, idents: Any) -> List[Any]:
        if not isinstance(idents, (list, tuple)):
            raise InvalidDataError(f"List must be a list of {key} identifiers, it may be empty.")
        return [self._validate_item(realm, key, ident) for ident in idents]

    def _validate_item(self, realm: str, key: str, ident: Any, error_if_not_found: bool = True) -> Any:
        """Resolve ``ident`` to the id (or name, for LDAP realms) stored in the scope."""
        possible_keys = self._realm_keys(realm)
        if key not in possible_keys:
            raise InvalidDataError(f"{realm} key must be one of: {', '.join(possible_keys)}")

        if key == JAMF_LDAP_USERS:
            found = self._verify_ldap_entry(ident, is_group=False)
        elif key == LDAP_USER_GROUPS:
            found = self._verify_ldap_entry(ident, is_group=True)
        else:
            found = SCOPING_CLASSES[key].valid_id(ident, cnx=self.cnx)
            if isinstance(found, str) and found.isdigit():
                found = int(found)

        if found is None and error_if_not_found:
            raise NoSuchItemError(f"No existing {key} matching '{ident}'")
        return found

    def _verify_ldap_entry(self, ident: Any, is_group: bool) -> Optional[str]:
        name = str(ident)
        if is_group:
            if LdapServer.group_in_ldap(name, cnx=self.cnx):
                return name
        elif name in User.all_names(refresh=True, cnx=self.cnx) or LdapServer.user_in_ldap(name, cnx=self.cnx):
            return name
        if not LdapServer.all_ids(cnx=self.cnx):
            # nothing to check against; the server decides on save
            logger.debug("No LDAP servers available to verify '%s'", name)
            self.unable_to_verify_ldap_entries = True
            return name
        return None

    def _changed(self) -> None:
        self.need_to_update = True
        if self.container is not None:
            self.container.should_update()

    # ------------------------------------------------------------------
    # XML
    # ------------------------------------------------------------------
    def scope_xml(self, warn_data_loss: Optional[bool] = None) -> ElementTree.Element:
        """The ``<scope>`` element for the container's XML."""
        warn = self.warn_data_loss if warn_data_loss is None else warn_data_loss
        if warn and getattr(self.container, "SCOPE_DATA_LOSS_RISK", False):
            logger.warning(DATA_LOSS_WARNING, type(self.container).__name__, getattr(self.container, "id", None))

        scope = ElementTree.Element("scope")
        add_text_element(scope, self.all_key, self.all_targets)
        for key in self.target_keys:
            scope.append(xml_list(key, [{"id": i} for i in strip_empty(self.targets[key])]))

        limitations = ElementTree.SubElement(scope, "limitations")
        for key in LIMITATIONS:
            limitations.append(self._realm_list_xml(key, self.limitations[key]))

        exclusions = ElementTree.SubElement(scope, "exclusions")
        for key in self.exclusion_keys:
            exclusions.append(self._realm_list_xml(key, self.exclusions[key]))
        return scope

    @staticmethod
    def _realm_list_xml(key: str, items: List[Any]) -> ElementTree.Element:
        items = strip_empty(items)
        if key in NAME_KEYS_IN_API:
            return xml_list(NAME_KEYS_IN_API[key], [{"name": n} for n in items], content="name")
        return xml_list(key, [{"id": i} for i in items])

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------
    def in_scope(self, machine: Any) -> bool:
        """Is the computer or mobile device in this scope right now?

        ``machine`` may be a fetched Computer/MobileDevice, a
        :class:`ScopeSubject`, or any identifier of one. For an identifier
        only the needed subsets of the record are fetched.

        iBeacon regions are transient and never reported in inventory, so
        iBeacon limitations and exclusions are ignored.
        """
        subject = self.subject_for(machine)
        target = self.is_target(subject)
        within = self.within_limitations(subject)
        excluded = self.is_excluded(subject)
        logger.debug("Scope check for %s: target=%s within=%s excluded=%s", subject.id, target, within, excluded)
        return target and within and not excluded

    def scoped_machines(self) -> Dict[int, str]:
        """id => name of every target-class machine currently in scope."""
        return {
            int(item["id"]): item.get("name")
            for item in self.target_class.all(cnx=self.cnx)
            if self.in_scope(int(item["id"]))
        }

    def subject_for(self, machine: Any) -> ScopeSubject:
        if isinstance(machine, ScopeSubject):
            return machine
        if isinstance(machine, (Computer, MobileDevice)):
            if not isinstance(machine, self.target_class):
                raise InvalidDataError(f"Targets of this scope must be {self.target_class.__name__}")
            return self._subject_from_object(machine)
        return self._subject_from_object(self._fetch_subsets(machine))

    def _fetch_subsets(self, ident: Any) -> Any:
        klass = self.target_class
        the_id = klass.valid_id(ident, cnx=self.cnx)
        if the_id is None:
            raise NoSuchItemError(f"No {klass.__name__} matching '{ident}'")
        raw = resolve(self.cnx).c_get(f"{klass.RSRC_BASE}/id/{the_id}/subset/{klass.SCOPE_SUBSETS}") or {}
        return klass(raw.get(klass.RSRC_OBJECT_KEY, raw), cnx=self.cnx)

    def _subject_from_object(self, machine: Any) -> ScopeSubject:
        if isinstance(machine, Computer):
            names_to_ids = {name: gid for gid, name in self.group_class.map_all_ids_to("name", cnx=self.cnx).items()}
            group_ids = [names_to_ids[n] for n in machine.computer_groups if n in names_to_ids]
        else:
            group_ids = _ids(machine.mobile_device_groups)
        location = machine.location
        return ScopeSubject(
            id=machine.id,
            managed=machine.managed,
            group_ids=group_ids,
            building=location.get("building") or None,
            department=location.get("department") or None,
            ip_address=machine.ip_address or None,
            username=location.get("username") or None,
        )

    def is_target(self, subject: ScopeSubject) -> bool:
        if not subject.managed:
            return False
        return bool(
            self.all_targets
            or self._directly_scoped(subject, "target")
            or self._in_groups(subject, "target")
            or self._in_buildings(subject, "target")
            or self._in_departments(subject, "target")
        )

    def within_limitations(self, subject: ScopeSubject) -> bool:
        """False only if some populated limitation category explicitly fails."""
        checks = (self._in_network_segments, self._in_ldap_users, self._in_ldap_user_groups)
        return not any(check(subject, "limitation") is False for check in checks)

    def is_excluded(self, subject: ScopeSubject) -> bool:
        checks = (
            self._directly_scoped,
            self._in_groups,
            self._in_buildings,
            self._in_departments,
            self._in_network_segments,
            self._in_ldap_users,
            self._in_ldap_user_groups,
        )
        return any(check(subject, "exclusion") for check in checks)

    # Each check below returns None when its list is empty: no opinion.
    def _list_for(self, part: str, key: str) -> List[Any]:
        if part == "target":
            return self.targets.get(key, [])
        if part == "limitation":
            return self.limitations.get(key, [])
        return self.exclusions.get(key, [])

    def _directly_scoped(self, subject: ScopeSubject, part: str) -> bool:
        return subject.id in self._list_for(part, self.target_key)

    def _in_groups(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        scope_list = self._list_for(part, self.group_key)
        if not scope_list:
            return None
        return bool(set(subject.group_ids) & set(scope_list))

    def _in_named_directory(self, name: Optional[str], scope_list: List[Any], klass: Any) -> Optional[bool]:
        if not scope_list:
            return None
        if not name:
            return False
        names_to_ids = {v: k for k, v in klass.map_all_ids_to("name", cnx=self.cnx).items()}
        found = names_to_ids.get(name)
        return found is not None and int(found) in scope_list

    def _in_buildings(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        return self._in_named_directory(subject.building, self._list_for(part, "buildings"), Building)

    def _in_departments(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        return self._in_named_directory(subject.department, self._list_for(part, "departments"), Department)

    def _in_network_segments(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        scope_list = self._list_for(part, "network_segments")
        if not scope_list:
            return None
        if not subject.ip_address:
            return False
        machine_segs = NetworkSegment.network_segments_for_ip(subject.ip_address, cnx=self.cnx)
        return bool(set(machine_segs) & set(scope_list))

    def _in_ldap_users(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        scope_list = self._list_for(part, JAMF_LDAP_USERS)
        if not scope_list:
            return None
        return subject.username in scope_list

    def _in_ldap_user_groups(self, subject: ScopeSubject, part: str) -> Optional[bool]:
        scope_list = self._list_for(part, LDAP_USER_GROUPS)
        if not scope_list:
            return None
        if not subject.username:
            return False
        for group in scope_list:
            server = LdapServer.server_for_group(group, cnx=self.cnx)
            if server is None:
                continue
            if LdapServer.check_membership(server, subject.username, group, cnx=self.cnx):
                return True
        return False
