"""
Records Module — Statemap On-Disk Format

Public API:
- StatemapHeader, StateDefinition, StateDatum: records the emitter writes
- EntityDescription, EntityEvent, StateTag: auxiliary records of the format
- parse_*: strict parsers for records read from external JSON
"""

from .parser import (
    parse_datum,
    parse_description,
    parse_event,
    parse_header,
    parse_record,
    parse_tag,
)
from .schemas import (
    NANOS_PER_SECOND,
    U32_MAX,
    U64_MAX,
    EntityDescription,
    EntityEvent,
    StateDatum,
    StateDefinition,
    StatemapHeader,
    StateTag,
)

__all__ = [
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
    "NANOS_PER_SECOND",
    "U32_MAX",
    "U64_MAX",
]
