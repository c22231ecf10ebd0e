"""Pure validation and coercion helpers.

Each function either returns the (possibly coerced) value or raises
:class:`~jamf_objects.exceptions.InvalidDataError`. None of them mutate
their input.
"""
from __future__ import annotations

import ipaddress
import re
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Sequence

from .exceptions import AlreadyExistsError, InvalidDataError, MissingDataError
from .models.attributes import Primitive

if TYPE_CHECKING:
    from .models.attributes import Attr

MAC_ADDR_RE = re.compile(r"^[a-f0-9]{2}(:[a-f0-9]{2}){5}$", re.IGNORECASE)
UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")
INTEGER_RE = re.compile(r"^-?\d+$")
FLOAT_RE = re.compile(r"^-?\d*\.\d+$")
TRUE_RE = re.compile(r"^(t(rue)?|y(es)?)$", re.IGNORECASE)
FALSE_RE = re.compile(r"^(f(alse)?|no?)$", re.IGNORECASE)


def _is_int(val: Any) -> bool:
    return isinstance(val, int) and not isinstance(val, bool)


# ----------------------------------------------------------------------
# Primitive types
# ----------------------------------------------------------------------
def string(val: Any, msg: Optional[str] = None, to_s: bool = False) -> str:
    if to_s and val is not None:
        val = str(val)
    if isinstance(val, str):
        return val
    raise InvalidDataError(msg or "Value must be a String")


def integer(val: Any, msg: Optional[str] = None) -> int:
    if isinstance(val, str) and INTEGER_RE.match(val.strip()):
        val = int(val.strip())
    if _is_int(val):
        return val
    raise InvalidDataError(msg or "Value must be an integer")


def float_value(val: Any, msg: Optional[str] = None) -> float:
    if _is_int(val):
        return float(val)
    if isinstance(val, str) and (FLOAT_RE.match(val.strip()) or INTEGER_RE.match(val.strip())):
        return float(val.strip())
    if isinstance(val, float):
        return val
    raise InvalidDataError(msg or "Value must be a floating point number")


def number(val: Any, msg: Optional[str] = None):
    if _is_int(val) or isinstance(val, float):
        return val
    if isinstance(val, str):
        if INTEGER_RE.match(val.strip()):
            return int(val.strip())
        if FLOAT_RE.match(val.strip()):
            return float(val.strip())
    raise InvalidDataError(msg or "Value must be a number")


def boolean(val: Any, msg: Optional[str] = None) -> bool:
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        if TRUE_RE.match(val):
            return True
        if FALSE_RE.match(val):
            return False
    raise InvalidDataError(msg or "Value must be boolean True or False, or an equivalent string")


def mapping(val: Any, msg: Optional[str] = None) -> dict:
    if isinstance(val, dict):
        return val
    raise InvalidDataError(msg or "Value must be a dict")


def j_id(val: Any, msg: Optional[str] = None) -> str:
    """Jamf Pro API ids are numeric strings; accept ints or digit strings."""
    if _is_int(val) and val >= 0:
        return str(val)
    if isinstance(val, str) and val.isdigit():
        return val
    raise InvalidDataError(msg or f"Value must be a valid Jamf id: '{val}'")


PRIMITIVES = {
    Primitive.STRING: string,
    Primitive.INTEGER: integer,
    Primitive.FLOAT: float_value,
    Primitive.NUMBER: number,
    Primitive.BOOLEAN: boolean,
    Primitive.HASH: mapping,
}


# ----------------------------------------------------------------------
# Formats
# ----------------------------------------------------------------------
def non_empty_string(val: Any, msg: Optional[str] = None) -> str:
    if isinstance(val, str) and val:
        return val
    raise InvalidDataError(msg or "Value must be a non-empty String")


def uuid(val: Any, msg: Optional[str] = None) -> str:
    if isinstance(val, str) and UUID_RE.match(val):
        return val
    raise InvalidDataError(msg or "Value must be a valid uuid")


def mac_address(val: Any, msg: Optional[str] = None) -> str:
    if isinstance(val, str) and MAC_ADDR_RE.match(val):
        return val
    raise InvalidDataError(msg or f"Not a valid MAC address: '{val}'")


def ip_address(val: Any, msg: Optional[str] = None) -> str:
    try:
        ipaddress.IPv4Address(str(val).strip())
    except ValueError:
        raise InvalidDataError(msg or f"Not a valid IPv4 address: '{val}'") from None
    return str(val).strip()


def email_address(val: Any, msg: Optional[str] = None) -> str:
    val = "" if val is None else str(val)
    if EMAIL_RE.match(val):
        return val
    raise InvalidDataError(msg or f"'{val}' is not formatted as a valid email address")


def in_enum(val: Any, enum: Iterable[Any], msg: Optional[str] = None) -> Any:
    enum = tuple(enum)
    if val in enum:
        return val
    raise InvalidDataError(msg or f"Value must be one of: {', '.join(str(e) for e in enum)}")


def matches_pattern(val: str, pattern, msg: Optional[str] = None) -> str:
    if re.search(pattern, val):
        return val
    raise InvalidDataError(msg or f"String does not match pattern: {getattr(pattern, 'pattern', pattern)}")


def not_nil(val: Any, attr_name: Optional[str] = None, msg: Optional[str] = None) -> Any:
    if val is not None:
        return val
    raise InvalidDataError(msg or f"{attr_name}: value may not be None")


# ----------------------------------------------------------------------
# Ranges and lengths
# ----------------------------------------------------------------------
def minimum(val, min, exclusive: bool = False, msg: Optional[str] = None):
    if (val > min) if exclusive else (val >= min):
        return val
    raise InvalidDataError(msg or f"value must be {'>' if exclusive else '>='} {min}")


def maximum(val, max, exclusive: bool = False, msg: Optional[str] = None):
    if (val < max) if exclusive else (val <= max):
        return val
    raise InvalidDataError(msg or f"value must be {'<' if exclusive else '<='} {max}")


def multiple_of(val, multiplier, msg: Optional[str] = None):
    if not isinstance(multiplier, (int, float)) or multiplier <= 0:
        raise ValueError("multiplier must be a positive number")
    if not isinstance(val, (int, float)) or isinstance(val, bool):
        raise InvalidDataError("Value must be a number")
    if val % multiplier == 0:
        return val
    raise InvalidDataError(msg or f"value must be a multiple of {multiplier}")


def min_length(val, min: int, msg: Optional[str] = None):
    if len(val) >= min:
        return val
    raise InvalidDataError(msg or f"length of value must be >= {min}")


def max_length(val, max: int, msg: Optional[str] = None):
    if len(val) <= max:
        return val
    raise InvalidDataError(msg or f"length of value must be <= {max}")


def min_items(val: Sequence, min: int, msg: Optional[str] = None):
    if len(val) >= min:
        return val
    raise InvalidDataError(msg or f"value must contain at least {min} items")


def max_items(val: Sequence, max: int, msg: Optional[str] = None):
    if len(val) <= max:
        return val
    raise InvalidDataError(msg or f"value must contain no more than {max} items")


def unique_array(val: Sequence, msg: Optional[str] = None):
    seen: List[Any] = []
    for item in val:
        if item in seen:
            raise InvalidDataError(msg or "value must contain only unique items")
        seen.append(item)
    return val


def array_constraints(val: Sequence, attr_def: "Attr", attr_name: Optional[str] = None):
    """Check the structural constraints declared for a multi-valued attribute."""
    label = f"{attr_name}: " if attr_name else ""
    if attr_def.min_items is not None:
        min_items(val, attr_def.min_items, msg=f"{label}value must contain at least {attr_def.min_items} items")
    if attr_def.max_items is not None:
        max_items(val, attr_def.max_items, msg=f"{label}value must contain no more than {attr_def.max_items} items")
    if attr_def.unique_items:
        unique_array(val, msg=f"{label}value must contain only unique items")
    return val


# ----------------------------------------------------------------------
# Attribute values
# ----------------------------------------------------------------------
def _primitive_constraints(val: Any, attr_def: "Attr") -> Any:
    if isinstance(val, str):
        if attr_def.pattern is not None:
            matches_pattern(val, attr_def.pattern)
        if attr_def.min_length is not None:
            min_length(val, attr_def.min_length)
        if attr_def.max_length is not None:
            max_length(val, attr_def.max_length)
    elif isinstance(val, (int, float)) and not isinstance(val, bool):
        if attr_def.minimum is not None:
            minimum(val, attr_def.minimum, exclusive=attr_def.exclusive_minimum)
        if attr_def.maximum is not None:
            maximum(val, attr_def.maximum, exclusive=attr_def.exclusive_maximum)
        if attr_def.multiple_of is not None:
            multiple_of(val, attr_def.multiple_of)
    return val


def attribute_value(val: Any, attr_def: "Attr", attr_name: Optional[str] = None) -> Any:
    """Validate one value for an attribute, applying the first rule that fits.

    Priority: custom validator, enum, primitive type, Jamf id format,
    nested-object construction, passthrough.
    """
    if val is None:
        if attr_def.nil_ok or attr_def.required:
            return None
        return not_nil(val, attr_name=attr_name)

    if attr_def.validator:
        validator = globals().get(attr_def.validator)
        if not callable(validator):
            raise ValueError(f"Unknown validator '{attr_def.validator}' for attribute {attr_name}")
        return validator(val)
    if attr_def.enum is not None:
        return in_enum(val, attr_def.enum)
    if attr_def.type in PRIMITIVES:
        return _primitive_constraints(PRIMITIVES[attr_def.type](val), attr_def)
    if attr_def.type == Primitive.J_ID:
        return j_id(val)
    if attr_def.is_nested:
        klass = attr_def.type
        return val if isinstance(val, klass) else klass(val)
    return val


def required(val: Any, attr_name: str) -> Any:
    if val is None or (isinstance(val, (str, list, tuple, dict)) and len(val) == 0):
        raise MissingDataError(f"Required attribute '{attr_name}' may not be None or empty")
    return val


def doesnt_already_exist(existing_values: Iterable[Any], val: Any, msg: Optional[str] = None) -> Any:
    """Fail if ``val`` matches any of ``existing_values``, ignoring case for strings."""
    for existing in existing_values:
        if existing == val or (
            isinstance(existing, str) and isinstance(val, str) and existing.casefold() == val.casefold()
        ):
            raise AlreadyExistsError(msg or f"An item already exists with the value '{val}'")
    return val
