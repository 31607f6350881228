"""
Statemap — build a per-entity state timeline and emit it as statemap JSON.

Public API:
- TimelineStore: accumulates state changes, assigns state codes
- EmissionCursor: consumes a store, yields the header then every datum
- CalendarTime: nanosecond-precision timestamp input
- parse_record and friends: strict readers for statemap records
"""

from .emission import CursorState, EmissionCursor
from .errors import (
    InvalidTimestamp,
    MalformedInput,
    SerializationFailure,
    StatemapError,
    StoreConsumed,
)
from .records import (
    EntityDescription,
    EntityEvent,
    StateDatum,
    StateDefinition,
    StatemapHeader,
    StateTag,
    parse_datum,
    parse_description,
    parse_event,
    parse_header,
    parse_record,
    parse_tag,
)
from .timeline import CalendarTime, TimelineStore, to_epoch_nanos

__all__ = [
    "TimelineStore",
    "EmissionCursor",
    "CursorState",
    "CalendarTime",
    "to_epoch_nanos",
    "StatemapHeader",
    "StateDefinition",
    "StateDatum",
    "EntityDescription",
    "EntityEvent",
    "StateTag",
    "parse_header",
    "parse_datum",
    "parse_description",
    "parse_event",
    "parse_tag",
    "parse_record",
    "StatemapError",
    "InvalidTimestamp",
    "SerializationFailure",
    "MalformedInput",
    "StoreConsumed",
]
