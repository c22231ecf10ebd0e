from ..models.attributes import Attr, Primitive
from .resource import SingletonResource

CHECK_IN_FREQUENCIES = (5, 15, 30, 60)


class ClientCheckInSettings(SingletonResource):
    """Server-wide computer check-in settings."""

    RSRC_VERSION = "v3"
    RSRC_PATH = "check-in"
    CHANGE_LOG = True

    OBJECT_MODEL = {
        "checkInFrequency": Attr(Primitive.INTEGER, enum=CHECK_IN_FREQUENCIES),
        "createHooks": Attr(Primitive.BOOLEAN),
        "hookLog": Attr(Primitive.BOOLEAN),
        "hookPolicies": Attr(Primitive.BOOLEAN),
        "createStartupScript": Attr(Primitive.BOOLEAN),
        "startupLog": Attr(Primitive.BOOLEAN),
        "startupPolicies": Attr(Primitive.BOOLEAN),
        "startupSsh": Attr(Primitive.BOOLEAN),
        "enableLocalConfigurationProfiles": Attr(Primitive.BOOLEAN),
    }
