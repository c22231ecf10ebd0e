from xml.etree import ElementTree

from ..utils.xml import add_text_element
from .scopable import ScopableObject


class MobileDeviceConfigurationProfile(ScopableObject):
    RSRC_BASE = "mobiledeviceconfigurationprofiles"
    RSRC_LIST_KEY = "configuration_profiles"
    RSRC_OBJECT_KEY = "configuration_profile"

    SCOPE_TARGET_KEY = "mobile_devices"
    SCOPE_DATA_LOSS_RISK = True

    @property
    def description(self) -> str:
        return self.general.get("description")

    @description.setter
    def description(self, new_val: str) -> None:
        if new_val == self.description:
            return
        self.init_data.setdefault("general", {})["description"] = new_val
        self.should_update()

    def _add_general_xml(self, general: ElementTree.Element) -> None:
        add_text_element(general, "description", self.description)
