"""
Draft validation for inspection use cases.

Rules are evaluated per field before a record is ever constructed:

  name            : string, at least 2 characters (raw length, no trimming)
  inspectionType  : required, one of the InspectionType values
  anomalies       : non-empty list, each element one of the Anomaly values

Each field reports only its first failing rule, so callers can render one
inline message per field.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .schema import Anomaly, InspectionType

MIN_NAME_LENGTH = 2

NAME_REQUIRED = "Use case name is required."
NAME_NOT_STRING = "Use case name must be a string."
NAME_TOO_SHORT = f"Use case name must be at least {MIN_NAME_LENGTH} characters."
TYPE_REQUIRED = "Please select an inspection type."
ANOMALIES_NOT_LIST = "Anomalies must be a list of anomaly values."
ANOMALIES_EMPTY = "Please select at least one anomaly to detect."

_MISSING = object()

_TYPE_VALUES = [t.value for t in InspectionType]
_ANOMALY_VALUES = [a.value for a in Anomaly]


class UseCaseValidationError(ValueError):
    """Raised when a draft fails validation; carries one message per failing field."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        summary = "; ".join(f"{k}: {v}" for k, v in self.errors.items())
        super().__init__(f"Invalid inspection use case: {summary}")


@dataclass
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)
    cleaned: Optional[Tuple[str, InspectionType, List[Anomaly]]] = None

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[Tuple[str, str]]:
        """The first failing (field, message) pair, if any."""
        for item in self.errors.items():
            return item
        return None


def _lookup(draft: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in draft:
            return draft[name]
    return _MISSING


def _check_name(value: Any) -> Optional[str]:
    if value is _MISSING or value is None:
        return NAME_REQUIRED
    if not isinstance(value, str):
        return NAME_NOT_STRING
    if len(value) < MIN_NAME_LENGTH:
        return NAME_TOO_SHORT
    return None


def _check_inspection_type(value: Any) -> Optional[str]:
    if value is _MISSING or value is None or value == "":
        return TYPE_REQUIRED
    if isinstance(value, InspectionType):
        return None
    if not isinstance(value, str) or value not in _TYPE_VALUES:
        return f"Invalid inspection type '{value}'. Expected one of: {', '.join(_TYPE_VALUES)}."
    return None


def _check_anomalies(value: Any) -> Optional[str]:
    # A bare string is iterable but is not a selection of anomalies
    if value is _MISSING or not isinstance(value, (list, tuple)):
        return ANOMALIES_NOT_LIST
    if len(value) == 0:
        return ANOMALIES_EMPTY
    for item in value:
        if isinstance(item, Anomaly):
            continue
        if not isinstance(item, str) or item not in _ANOMALY_VALUES:
            return f"Invalid anomaly '{item}'. Expected one of: {', '.join(_ANOMALY_VALUES)}."
    return None


def validate_draft(draft: Mapping[str, Any]) -> ValidationResult:
    """
    Validate a draft use case.

    Accepts ``inspectionType`` (form field name) or ``inspection_type``.
    Returns a ValidationResult; ``cleaned`` is only populated when every rule passes.
    """
    result = ValidationResult()
    if not isinstance(draft, Mapping):
        result.errors["name"] = NAME_REQUIRED
        result.errors["inspectionType"] = TYPE_REQUIRED
        result.errors["anomalies"] = ANOMALIES_NOT_LIST
        return result

    name = _lookup(draft, "name")
    inspection_type = _lookup(draft, "inspectionType", "inspection_type")
    anomalies = _lookup(draft, "anomalies")

    checks = [
        ("name", _check_name(name)),
        ("inspectionType", _check_inspection_type(inspection_type)),
        ("anomalies", _check_anomalies(anomalies)),
    ]
    for field_name, message in checks:
        if message:
            result.errors[field_name] = message

    if result.valid:
        # Order and duplicates are preserved as submitted
        result.cleaned = (
            name,
            InspectionType(inspection_type),
            [Anomaly(a) for a in anomalies],
        )
    return result
