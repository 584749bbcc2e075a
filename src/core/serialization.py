"""
Blob encoding for the use-case slot.

The slot holds a JSON array of objects shaped as:

    {"id": str, "name": str, "inspectionType": str,
     "anomalies": [str], "createdAt": str}

``createdAt`` was historically written either as ISO-8601 or as the
JavaScript ``Date.toString()`` form, so both are accepted on read.
"""

import re
from datetime import datetime, timezone
from typing import Any, List, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from util.logging import logger

from .schema import Anomaly, InspectionType, InspectionUseCase

# "Mon Oct 19 2026 10:00:00 GMT+0200 (Central European Summer Time)"
_JS_DATE_RE = re.compile(
    r"^\w{3} (\w{3} \d{1,2} \d{4} \d{2}:\d{2}:\d{2}) GMT([+-]\d{4})(?: \(.*\))?$"
)


class SlotReadError(Exception):
    """Raised when a stored blob exists but cannot be deserialized."""


def parse_timestamp(value: Any) -> Any:
    """Convert stored createdAt strings into aware datetimes; other values pass through."""
    if not isinstance(value, str):
        return value

    text = value.strip()
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        match = _JS_DATE_RE.match(text)
        if not match:
            raise ValueError(f"unrecognized timestamp format: {value!r}")
        parsed = datetime.strptime(f"{match.group(1)} {match.group(2)}", "%b %d %Y %H:%M:%S %z")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class StoredUseCase(BaseModel):
    """Wire model for one persisted use case."""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    inspection_type: InspectionType = Field(alias="inspectionType")
    anomalies: List[Anomaly] = Field(min_length=1)
    created_at: datetime = Field(alias="createdAt")

    @field_validator("created_at", mode="before")
    @classmethod
    def created_at_must_be_timestamp(cls, v):
        return parse_timestamp(v)

    @field_validator("created_at")
    @classmethod
    def created_at_must_be_aware(cls, v):
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @classmethod
    def from_use_case(cls, use_case: InspectionUseCase) -> "StoredUseCase":
        return cls(
            id=use_case.id,
            name=use_case.name,
            inspection_type=use_case.inspection_type,
            anomalies=list(use_case.anomalies),
            created_at=use_case.created_at,
        )

    def to_use_case(self) -> InspectionUseCase:
        return InspectionUseCase(
            id=self.id,
            name=self.name,
            inspection_type=self.inspection_type,
            anomalies=list(self.anomalies),
            created_at=self.created_at,
        )


_collection = TypeAdapter(List[StoredUseCase])
_raw_collection = TypeAdapter(List[Any])


def decode_use_cases(blob: Union[str, bytes]) -> List[InspectionUseCase]:
    """
    Deserialize a slot blob.

    Raises SlotReadError when the blob is not UTF-8 JSON or not an array.
    Array elements that do not form a valid use case are logged and skipped,
    so one bad record never hides the others.
    """
    if isinstance(blob, bytes):
        try:
            blob = blob.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SlotReadError(f"slot value is not valid UTF-8: {e}") from e

    try:
        items = _raw_collection.validate_json(blob)
    except ValidationError as e:
        raise SlotReadError(f"{e.error_count()} error(s) decoding use cases: {e.errors()[0]['msg']}") from e

    use_cases = []
    for index, item in enumerate(items):
        try:
            use_cases.append(StoredUseCase.model_validate(item).to_use_case())
        except ValidationError as e:
            logger.log_record_skipped(index, e.errors()[0]['msg'])
    return use_cases


def encode_use_cases(use_cases: List[InspectionUseCase]) -> str:
    """Serialize use cases into the slot's JSON array layout."""
    stored = [StoredUseCase.from_use_case(u) for u in use_cases]
    return _collection.dump_json(stored, by_alias=True).decode("utf-8")
