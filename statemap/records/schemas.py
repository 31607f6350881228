"""
Statemap Record Schemas — Pydantic Models

These models are the statemap "on-disk format": the exact JSON shape the
statemap renderer reads. Every model forbids unknown fields, so a record
carrying anything the renderer does not know about is rejected outright.

Wire rules:
- Header:  {"start":[s,ns],"title":..,"host":..,"entityKind":..,"states":{..}}
- Datum:   {"time":"<u64>","entity":..,"state":<u32>,"tag":..}
- `time` travels as a decimal STRING so 64-bit nanosecond values survive
  JSON decoders that read every number as a double.
"""

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_serializer,
    field_validator,
    model_validator,
)

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1
NANOS_PER_SECOND = 1_000_000_000

# Validation context for records read from external JSON. Internally built
# records carry `time` as an int; wire records must carry it as a string.
WIRE_CONTEXT: Dict[str, Any] = {"wire": True}

_STRICT = ConfigDict(extra="forbid", strict=True)

HEADER_KEYS = frozenset({"start", "title", "host", "entityKind", "states"})


def _time_from_wire(value: Any, info: ValidationInfo) -> Any:
    """Accept a decimal string (wire) or an int (in-process) for `time`."""
    if isinstance(value, str):
        if not (value.isascii() and value.isdigit()):
            raise ValueError("illegal time value")
        return int(value)
    if info.context and info.context.get("wire"):
        raise ValueError("time must be encoded as a decimal string")
    return value


class StateDefinition(BaseModel):
    """One entry of the state registry: the numeric code and optional color.

    Color is never assigned here; the renderer picks one for states
    that arrive without it.
    """
    model_config = _STRICT

    color: Optional[str] = Field(None, description="Display color, filled in downstream")
    value: int = Field(..., ge=0, description="Numeric state code")


class StateDatum(BaseModel):
    """
    A single state change of one entity.

    `time` is absolute nanoseconds since the Unix epoch while the record
    sits in a TimelineStore, and an offset from the header start once the
    EmissionCursor has rewritten it.
    """
    model_config = _STRICT

    time: int = Field(..., ge=0, le=U64_MAX, description="Nanoseconds (absolute or offset)")
    entity: str = Field(..., description="Entity name")
    state: int = Field(..., ge=0, le=U32_MAX, description="Code from the state registry")
    tag: Optional[str] = Field(None, description="Tag for this state, if any")

    @field_validator("time", mode="before")
    @classmethod
    def parse_time(cls, v: Any, info: ValidationInfo) -> Any:
        return _time_from_wire(v, info)

    @field_serializer("time")
    def serialize_time(self, v: int) -> str:
        return str(v)


class StatemapHeader(BaseModel):
    """
    Statemap metadata record, always emitted first.

    `start` stays empty while the timeline is being built and is filled
    exactly once, as [seconds, nanoseconds], when emission begins.
    """
    model_config = _STRICT

    start: List[int] = Field(default_factory=list, description="[seconds, nanoseconds] of the earliest datum")
    title: str = Field(..., description="Statemap title")
    host: Optional[str] = Field(None, description="Host the data was collected on")
    entity_kind: Optional[str] = Field(None, alias="entityKind", description="What an entity is (e.g. 'CPU')")
    states: Dict[str, StateDefinition] = Field(default_factory=dict, description="State name -> definition")

    @model_validator(mode="before")
    @classmethod
    def reject_unknown_keys(cls, data: Any) -> Any:
        """Only the wire names are accepted; `entity_kind` is not one of them."""
        if isinstance(data, dict):
            unknown = set(data) - HEADER_KEYS
            if unknown:
                raise ValueError(f"unknown header field(s): {sorted(unknown)}")
        return data

    @field_validator("start")
    @classmethod
    def validate_start(cls, v: List[int]) -> List[int]:
        """Start is either unset or a [seconds, nanoseconds] pair."""
        if not v:
            return v
        if len(v) != 2:
            raise ValueError("start must be [seconds, nanoseconds]")
        seconds, nanos = v
        if seconds < 0 or not 0 <= nanos < NANOS_PER_SECOND:
            raise ValueError("start out of range")
        return v


class EntityDescription(BaseModel):
    """Free-text description attached to an entity."""
    model_config = _STRICT

    entity: str
    description: str


class EntityEvent(BaseModel):
    """A point event (as opposed to a state) on an entity, optionally aimed at a target."""
    model_config = _STRICT

    time: int = Field(..., ge=0, le=U64_MAX)
    entity: str
    event: str
    target: Optional[str] = None

    @field_validator("time", mode="before")
    @classmethod
    def parse_time(cls, v: Any, info: ValidationInfo) -> Any:
        return _time_from_wire(v, info)

    @field_serializer("time")
    def serialize_time(self, v: int) -> str:
        return str(v)


class StateTag(BaseModel):
    """Binds a tag string to the state code it qualifies."""
    model_config = _STRICT

    state: int = Field(..., ge=0, le=U32_MAX)
    tag: str
