import logging
from typing import Any, Dict, Optional
from xml.etree import ElementTree

from ..exceptions import ConflictError, InvalidDataError
from ..utils.xml import add_text_element
from .api_object import APIObject
from .scope import Scope

logger = logging.getLogger(__name__)


class ScopableObject(APIObject):
    """A Classic API object with a :class:`Scope`.

    Classic scopable objects keep their name in a ``<general>`` element;
    subclasses add their own general fields in :meth:`_add_general_xml`.
    """

    SCOPE_TARGET_KEY: Optional[str] = None

    # True for kinds whose Jamf user/user group targets are lost on save
    SCOPE_DATA_LOSS_RISK = False

    def __init__(self, init_data: Optional[Dict[str, Any]] = None, *, cnx: Any = None,
                 warn_data_loss: Optional[bool] = None):
        super().__init__(init_data, cnx=cnx)
        self._scope = Scope(
            self.SCOPE_TARGET_KEY,
            self.init_data.get("scope"),
            container=self,
            warn_data_loss=warn_data_loss,
        )

    @property
    def general(self) -> Dict[str, Any]:
        return self.init_data.get("general") or {}

    @property
    def scope(self) -> Scope:
        return self._scope

    @scope.setter
    def scope(self, new_scope: Scope) -> None:
        if not isinstance(new_scope, Scope):
            raise InvalidDataError("A Scope instance is required")
        if new_scope.target_key != self.SCOPE_TARGET_KEY:
            raise InvalidDataError(f"Scope object must have target_key of '{self.SCOPE_TARGET_KEY}'")
        new_scope.container = self
        self._scope = new_scope
        self.should_update()

    def _add_general_xml(self, general: ElementTree.Element) -> None:
        pass

    def rest_xml(self) -> ElementTree.Element:
        root = ElementTree.Element(self.RSRC_OBJECT_KEY)
        general = ElementTree.SubElement(root, "general")
        add_text_element(general, "name", self.name)
        self._add_general_xml(general)
        root.append(self.scope.scope_xml())
        return root

    def update(self) -> Optional[int]:
        try:
            resp = super().update()
        except ConflictError as err:
            if self.scope.unable_to_verify_ldap_entries:
                raise InvalidDataError("Potentially non-existent LDAP user or group in new scope values.") from err
            raise
        self.scope.need_to_update = False
        return resp
