"""dson: extensible value conversion and JSON-compatible serialization.

``convert(value, target)`` turns decoded or host-bridged values into a
requested type; ``serialize(value)`` produces the wire-ready tree.  Types
participate by implementing :class:`Convertible` or by registering a
:class:`ConvertibleAdapter`.
"""

from dson.convertible import (
    CONVERTIBLE_REGISTRY,
    Convertible,
    ConvertibleAdapter,
    get_convertible,
    is_convertible,
    register_convertible,
)
from dson.dispatch import Converter, convert, satisfies, serialize, try_convert
from dson.domain.host import (
    HostArray,
    HostBool,
    HostMapping,
    HostNull,
    HostNumber,
    HostOpaque,
    HostString,
    HostValue,
    bridge,
    unbridge,
)
from dson.errors import (
    ConversionError,
    ConvertibleFailed,
    NoConversionPossible,
    SerializationFailed,
)
from dson.result import ConversionErrorInfo, ConversionResult

__version__ = "0.1.0"

__all__ = [
    "CONVERTIBLE_REGISTRY",
    "ConversionError",
    "ConversionErrorInfo",
    "ConversionResult",
    "Convertible",
    "ConvertibleAdapter",
    "ConvertibleFailed",
    "Converter",
    "HostArray",
    "HostBool",
    "HostMapping",
    "HostNull",
    "HostNumber",
    "HostOpaque",
    "HostString",
    "HostValue",
    "NoConversionPossible",
    "SerializationFailed",
    "bridge",
    "convert",
    "get_convertible",
    "is_convertible",
    "register_convertible",
    "satisfies",
    "serialize",
    "try_convert",
    "unbridge",
]
