from typing import Any
from xml.etree import ElementTree

from .. import validate
from ..utils.xml import add_text_element
from .scopable import ScopableObject


class RestrictedSoftware(ScopableObject):
    RSRC_BASE = "restrictedsoftware"
    RSRC_LIST_KEY = "restricted_software"
    RSRC_OBJECT_KEY = "restricted_software"

    SCOPE_TARGET_KEY = "computers"

    @property
    def process_name(self) -> str:
        return self.general.get("process_name")

    @process_name.setter
    def process_name(self, new_val: str) -> None:
        new_val = validate.non_empty_string(new_val, "process_name must be a non-empty string")
        if new_val == self.process_name:
            return
        self.init_data.setdefault("general", {})["process_name"] = new_val
        self.should_update()

    @property
    def kill_process(self) -> bool:
        return validate.boolean(str(self.general.get("kill_process", False)))

    @kill_process.setter
    def kill_process(self, new_val: Any) -> None:
        new_val = validate.boolean(new_val)
        if new_val == self.kill_process:
            return
        self.init_data.setdefault("general", {})["kill_process"] = new_val
        self.should_update()

    def _add_general_xml(self, general: ElementTree.Element) -> None:
        add_text_element(general, "process_name", self.process_name)
        add_text_element(general, "kill_process", self.kill_process)
