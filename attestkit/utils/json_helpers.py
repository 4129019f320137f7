from decimal import Decimal
import json
from types import MappingProxyType
from typing import Any, Mapping


def _default(obj: Any) -> Any:
    """Encode the value types that appear in a resolved configuration."""
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, (bytes, bytearray)):
        return "0x" + bytes(obj).hex()
    if isinstance(obj, Mapping):
        return dict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def dumps(msg: Any, **kwargs: Any) -> str:
    """
    Serialize a message to JSON string.

    Args:
        msg: The message to serialize; decimals, byte strings and read-only
            mappings are accepted
        **kwargs: Passed through to ``json.dumps``

    Returns:
        JSON string representation of the message
    """
    return json.dumps(msg, default=_default, **kwargs)


def loads(data: str) -> Any:
    """
    Deserialize a JSON string to Python object.

    Args:
        data: JSON string to deserialize

    Returns:
        Python object from JSON string
    """
    return json.loads(data)


def freeze(value: Any) -> Any:
    """Return a read-only copy of a decoded JSON value."""
    if isinstance(value, Mapping):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze`, producing plain dicts and lists."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, tuple):
        return [thaw(item) for item in value]
    return value
