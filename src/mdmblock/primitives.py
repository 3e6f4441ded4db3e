from __future__ import annotations

from enum import Enum


class PrimitiveType(str, Enum):
    """Scalar type tags whose values can be compared for equality.

    Blocking is only supported on these types. Composite types such as
    ``HumanName`` or ``Identifier`` are never compared.
    """

    # string-like
    STRING = "string"
    CODE = "code"
    MARKDOWN = "markdown"
    ID = "id"
    URI = "uri"
    URL = "url"
    CANONICAL = "canonical"
    OID = "oid"
    UUID = "uuid"
    BASE64_BINARY = "base64Binary"

    BOOLEAN = "boolean"

    # numeric
    INTEGER = "integer"
    UNSIGNED_INT = "unsignedInt"
    POSITIVE_INT = "positiveInt"
    INTEGER64 = "integer64"
    DECIMAL = "decimal"

    # temporal
    DATE = "date"
    DATE_TIME = "dateTime"
    TIME = "time"
    INSTANT = "instant"


_PRIMITIVE_TAGS = frozenset(t.value for t in PrimitiveType)


def is_primitive(type_tag: str) -> bool:
    """Return whether ``type_tag`` names a scalar type.

    The lookup is exact and case-sensitive. Unknown tags, including the
    empty string and tags of future types, are treated as non-primitive.

    Examples:
        >>> is_primitive("dateTime")
        True
        >>> is_primitive("HumanName")
        False
    """
    if isinstance(type_tag, PrimitiveType):
        return True
    return type_tag in _PRIMITIVE_TAGS
