"""
Field resolution for attestkit configuration.

A ``FieldSpec`` declares one configuration input. ``resolve_field`` and
``resolve_field_silent`` resolve a single field against a source mapping;
``resolve_fields`` resolves a whole table in dependency order.

Example:
    spec = FieldSpec("WHISPER_POLL_INTERVAL", SemanticType.INTEGER, required=False, default=5000)
    values = resolve_fields(os.environ, [spec])
"""

from dataclasses import dataclass
from graphlib import CycleError, TopologicalSorter
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .base import CoercionError, ConfigError, MissingRequiredField
from .coercion import SemanticType, coerce

logger = logging.getLogger(__name__)


class _Unspecified:
    """Marker for a required field that has no value in its source."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSPECIFIED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Unspecified, ())


UNSPECIFIED = _Unspecified()


@dataclass(frozen=True)
class FieldSpec:
    """Declarative description of one configuration input."""

    name: str
    type: SemanticType = SemanticType.TEXT
    required: bool = True
    default: Any = None
    path: Tuple[str, ...] = ()
    depends_on: Tuple[str, ...] = ()
    required_when: Optional[Callable[[Mapping[str, Any]], bool]] = None
    numeric_base: int = 10
    secret: bool = False

    def __post_init__(self):
        if self.required and self.required_when is None and self.default is not None:
            raise ConfigError(f"Field {self.name} is required and cannot declare a default")
        if self.required_when is not None and not self.depends_on:
            raise ConfigError(f"Field {self.name} has a requiredness predicate but no dependencies")

    @property
    def is_dependent(self) -> bool:
        return bool(self.depends_on)

    def is_required(self, resolved: Mapping[str, Any]) -> bool:
        """Requiredness of this field given the values resolved so far."""
        if self.required_when is None:
            return self.required
        return bool(self.required_when(resolved))


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


def _coerce_value(name: str, value: Any, type_: SemanticType, numeric_base: int, silent: bool) -> Any:
    # Values from a decoded JSON document are already typed
    if not isinstance(value, str):
        return value
    try:
        return coerce(value, type_, numeric_base)
    except CoercionError as e:
        if silent and SemanticType(type_) is SemanticType.JSON:
            logger.warning(f"Parsing JSON env failed for {name}: {e}")
            return None
        raise CoercionError(f"Environment variable {name}: {e}", name=name, raw=value)


def _resolve(
    source: Mapping[str, Any],
    name: str,
    type_: SemanticType,
    required: bool,
    default: Any,
    numeric_base: int,
    silent: bool,
) -> Any:
    value = source.get(name)
    if _is_absent(value):
        if required:
            if silent:
                return UNSPECIFIED
            raise MissingRequiredField(name)
        return default
    return _coerce_value(name, value, type_, numeric_base, silent)


def resolve_field(
    source: Mapping[str, Any],
    name: str,
    type_: SemanticType = SemanticType.TEXT,
    required: bool = True,
    default: Any = None,
    numeric_base: int = 10,
) -> Any:
    """
    Resolve one field, raising on any failure.

    Args:
        source: Mapping of field names to raw values (usually ``os.environ``)
        name: Field name
        type_: Semantic type to coerce into
        required: Whether an absent value is an error
        default: Value used when an optional field is absent
        numeric_base: Base used for integer fields

    Returns:
        The coerced value, the default, or None

    Raises:
        MissingRequiredField: If a required field is absent
        CoercionError: If the value cannot be coerced
    """
    return _resolve(source, name, type_, required, default, numeric_base, silent=False)


def resolve_field_silent(
    source: Mapping[str, Any],
    name: str,
    type_: SemanticType = SemanticType.TEXT,
    required: bool = True,
    default: Any = None,
    numeric_base: int = 10,
) -> Any:
    """
    Resolve one field without failing on absence.

    An absent required field yields ``UNSPECIFIED`` and an unparseable JSON
    value is logged and yields None. Other coercion failures still raise.
    """
    return _resolve(source, name, type_, required, default, numeric_base, silent=True)


def resolve_spec(
    source: Mapping[str, Any], spec: FieldSpec, resolved: Mapping[str, Any], silent: bool, defaults: bool = True
) -> Any:
    """Resolve a ``FieldSpec`` using the already-resolved values for its requiredness."""
    resolver = resolve_field_silent if silent else resolve_field
    return resolver(
        source,
        spec.name,
        spec.type,
        required=spec.is_required(resolved),
        default=spec.default if defaults else None,
        numeric_base=spec.numeric_base,
    )


def dependency_order(specs: Iterable[FieldSpec]) -> List[FieldSpec]:
    """
    Order specs so independent fields come first and every dependent field
    follows the fields it depends on.

    Raises:
        ConfigError: On an undeclared dependency or a dependency cycle
    """
    specs = list(specs)
    by_name = {spec.name: spec for spec in specs}
    independent = [spec for spec in specs if not spec.is_dependent]

    sorter = TopologicalSorter()
    for spec in specs:
        if not spec.is_dependent:
            continue
        for dep in spec.depends_on:
            if dep not in by_name:
                raise ConfigError(f"Field {spec.name} depends on undeclared field {dep}")
        sorter.add(spec.name, *spec.depends_on)
    try:
        order = list(sorter.static_order())
    except CycleError as e:
        raise ConfigError(f"Dependency cycle between fields: {e.args[1]}")

    dependent = [by_name[name] for name in order if by_name[name].is_dependent]
    return independent + dependent


def resolve_fields(
    source: Mapping[str, Any], specs: Iterable[FieldSpec], silent: bool = False, defaults: bool = True
) -> Dict[str, Any]:
    """
    Resolve a table of fields in two phases.

    Independent fields resolve first; dependent fields then resolve in
    dependency order with their requiredness evaluated against the values
    resolved before them.

    Args:
        source: Mapping of field names to raw or already-typed values
        specs: Field specs to resolve
        silent: Use silent resolution for every field
        defaults: Apply field defaults; without them an absent optional field is None

    Returns:
        Mapping of field name to resolved value
    """
    resolved: Dict[str, Any] = {}
    for spec in dependency_order(specs):
        resolved[spec.name] = resolve_spec(source, spec, resolved, silent, defaults)
    return resolved
