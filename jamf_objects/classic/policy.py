from typing import Any
from xml.etree import ElementTree

from .. import validate
from ..utils.xml import add_text_element
from .scopable import ScopableObject


class Policy(ScopableObject):
    RSRC_BASE = "policies"
    RSRC_LIST_KEY = "policies"
    RSRC_OBJECT_KEY = "policy"

    SCOPE_TARGET_KEY = "computers"
    SCOPE_DATA_LOSS_RISK = True

    @property
    def enabled(self) -> bool:
        return validate.boolean(str(self.general.get("enabled", False)))

    @enabled.setter
    def enabled(self, new_val: Any) -> None:
        new_val = validate.boolean(new_val)
        if new_val == self.enabled:
            return
        self.init_data.setdefault("general", {})["enabled"] = new_val
        self.should_update()

    def _add_general_xml(self, general: ElementTree.Element) -> None:
        add_text_element(general, "enabled", self.enabled)
