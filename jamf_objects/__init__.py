"""Python objects for the Jamf Pro and Classic APIs."""

from .connection import Connection, get_connection, set_connection
from .exceptions import (
    AlreadyExistsError,
    AmbiguousError,
    APIRequestError,
    InvalidDataError,
    JamfError,
    MissingDataError,
    NoSuchItemError,
    UnknownAttributeError,
    UnsupportedError,
)
from .utils.telemetry import setup_logging

__version__ = "0.1.0"

__all__ = [
    "APIRequestError",
    "AlreadyExistsError",
    "AmbiguousError",
    "Connection",
    "InvalidDataError",
    "JamfError",
    "MissingDataError",
    "NoSuchItemError",
    "UnknownAttributeError",
    "UnsupportedError",
    "get_connection",
    "set_connection",
    "setup_logging",
]
