from ..models.attributes import Attr, Identifier, Primitive
from .resource import CollectionResource


class Department(CollectionResource):
    RSRC_PATH = "departments"
    CHANGE_LOG = True

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY, readonly=True),
        "name": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, required=True, validator="non_empty_string"),
    }
