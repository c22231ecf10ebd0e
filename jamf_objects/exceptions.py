"""Error kinds raised by jamf_objects."""


class JamfError(Exception):
    """Base class for every error raised by this library."""


class InvalidDataError(JamfError):
    """A value failed type, enum, format or structural validation."""


class MissingDataError(JamfError):
    """Required data is absent or empty."""


class NoSuchItemError(JamfError):
    """An identifier could not be resolved to a known item."""


class AlreadyExistsError(JamfError):
    """An item conflicts with one that is already present."""


class AmbiguousError(JamfError):
    """A lookup matched more than one item."""


class UnsupportedError(JamfError):
    """The operation is structurally forbidden for this class or instance."""


class UnknownAttributeError(UnsupportedError):
    """An attribute name is not part of the class schema."""

    def __init__(self, attr_name: str, klass: type):
        self.attr_name = attr_name
        self.klass = klass
        super().__init__(f"Unknown attribute: {attr_name} for {klass.__name__} objects")


class APIRequestError(JamfError):
    """The server rejected a request."""

    def __init__(self, message: str, status_code: int = 0):
        self.status_code = status_code
        super().__init__(message)


class BadRequestError(APIRequestError):
    pass


class AuthenticationError(APIRequestError):
    pass


class AuthorizationError(APIRequestError):
    pass


class ConflictError(APIRequestError):
    pass
