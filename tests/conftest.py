import copy
from typing import Any, Dict, List, Optional, Tuple

import pytest

from jamf_objects.config.settings import reset_settings
from jamf_objects.connection import set_connection
from jamf_objects.exceptions import NoSuchItemError


class FakeConnection:
    """Serves canned payloads by path and records every request."""

    def __init__(self, routes: Optional[Dict[str, Any]] = None, c_routes: Optional[Dict[str, Any]] = None):
        self.routes: Dict[str, Any] = dict(routes or {})
        self.c_routes: Dict[str, Any] = dict(c_routes or {})
        self.errors: Dict[Tuple[str, str], Exception] = {}
        self.requests: List[Tuple[str, str, Any]] = []
        self.collection_cache: Dict[type, Any] = {}
        self.c_collection_cache: Dict[type, Any] = {}
        self.next_id = 100
        self.cnx = self

    def flushcache(self, klass=None):
        if klass is None:
            self.collection_cache.clear()
            self.c_collection_cache.clear()
            return
        self.collection_cache.pop(klass, None)
        self.c_collection_cache.pop(klass, None)

    def _record(self, method: str, path: str, body: Any = None) -> None:
        self.requests.append((method, path, body))
        error = self.errors.get((method, path))
        if error is not None:
            raise error

    @staticmethod
    def _lookup(routes: Dict[str, Any], path: str) -> Any:
        if path not in routes:
            raise NoSuchItemError(f"GET {path} failed: 404")
        return copy.deepcopy(routes[path])

    def writes(self, method: str) -> List[Tuple[str, Any]]:
        return [(path, body) for m, path, body in self.requests if m == method]

    # Jamf Pro API
    def get(self, path):
        self._record("GET", path)
        return self._lookup(self.routes, path)

    def post(self, path, body=None):
        self._record("POST", path, body)
        self.next_id += 1
        return {"id": str(self.next_id), "href": f"{path}/{self.next_id}"}

    def put(self, path, body=None):
        self._record("PUT", path, body)
        return body

    def patch(self, path, body=None):
        self._record("PATCH", path, body)
        return body

    def delete(self, path):
        self._record("DELETE", path)

    # Classic API
    def c_get(self, path):
        self._record("C_GET", path)
        return self._lookup(self.c_routes, path)

    def c_post(self, path, xml=None):
        self._record("C_POST", path, xml)
        self.next_id += 1
        return f"<response><id>{self.next_id}</id></response>"

    def c_put(self, path, xml=None):
        self._record("C_PUT", path, xml)
        return xml

    def c_delete(self, path):
        self._record("C_DELETE", path)


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for var in ("JAMF_URL", "JAMF_USERNAME", "JAMF_PASSWORD", "SCOPE_DATA_LOSS_WARNINGS", "LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def cnx():
    fake = FakeConnection()
    set_connection(fake)
    yield fake
    set_connection(None)


@pytest.fixture
def directory(cnx):
    """A connection that knows a small Jamf Pro server's directories."""
    cnx.routes.update(
        {
            "v1/buildings": {"totalCount": 1, "results": [{"id": "3", "name": "HQ"}]},
            "v1/departments": {"totalCount": 1, "results": [{"id": "4", "name": "IT"}]},
        }
    )
    cnx.c_routes.update(
        {
            "computers": {"computers": [{"id": 42, "name": "mac42"}, {"id": 43, "name": "mac43"}]},
            "computergroups": {"computer_groups": [{"id": 7, "name": "Lab Macs", "is_smart": False}]},
            "mobiledevices": {"mobile_devices": [{"id": 9, "name": "ipad9"}]},
            "mobiledevicegroups": {"mobile_device_groups": [{"id": 11, "name": "Carts", "is_smart": True}]},
            "networksegments": {
                "network_segments": [
                    {"id": 1, "name": "HQ", "starting_address": "10.0.0.1", "ending_address": "10.0.0.254"},
                    {"id": 2, "name": "Branch", "starting_address": "10.1.0.1", "ending_address": "10.1.0.254"},
                ]
            },
            "ibeacons": {"ibeacons": [{"id": 5, "name": "Lobby"}]},
            "users": {"users": [{"id": 1, "name": "jdoe"}]},
            "ldapservers": {"ldap_servers": []},
            "policies": {"policies": [{"id": 1, "name": "Install Office"}]},
        }
    )
    return cnx
