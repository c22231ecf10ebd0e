from ..models.attributes import Attr, Identifier, Primitive
from .resource import CollectionResource


class Building(CollectionResource):
    """A building, which computers and mobile devices can be assigned to."""

    RSRC_PATH = "buildings"
    CHANGE_LOG = True

    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY, readonly=True),
        "name": Attr(Primitive.STRING, identifier=Identifier.SECONDARY, required=True, validator="non_empty_string"),
        "streetAddress1": Attr(Primitive.STRING, aliases=("street",)),
        "streetAddress2": Attr(Primitive.STRING),
        "city": Attr(Primitive.STRING),
        "stateProvince": Attr(Primitive.STRING, aliases=("state", "province")),
        "zipPostalCode": Attr(Primitive.STRING, aliases=("zip", "postal_code")),
        "country": Attr(Primitive.STRING),
    }
