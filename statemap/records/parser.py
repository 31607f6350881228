"""
Strict parsers for statemap records read from external JSON.

A record is accepted whole or not at all: any missing field, type
mismatch, unknown field or non-decimal `time` raises MalformedInput.
"""

import json
import logging
from typing import Any, Dict, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from ..errors import MalformedInput
from .schemas import (
    WIRE_CONTEXT,
    EntityDescription,
    EntityEvent,
    StateDatum,
    StatemapHeader,
    StateTag,
)

logger = logging.getLogger(__name__)

RawRecord = Union[str, bytes]
Record = Union[StatemapHeader, StateDatum, EntityDescription, EntityEvent, StateTag]

M = TypeVar("M", bound=BaseModel)


def _validate(model: Type[M], raw: RawRecord) -> M:
    try:
        return model.model_validate_json(raw, context=WIRE_CONTEXT)
    except ValidationError as exc:
        logger.debug(f"[RecordParser] rejected {model.__name__}: {exc.error_count()} error(s)")
        raise MalformedInput(f"Invalid {model.__name__} record: {exc}") from exc


def _validate_payload(model: Type[M], payload: Dict[str, Any]) -> M:
    try:
        return model.model_validate(payload, context=WIRE_CONTEXT)
    except ValidationError as exc:
        logger.debug(f"[RecordParser] rejected {model.__name__}: {exc.error_count()} error(s)")
        raise MalformedInput(f"Invalid {model.__name__} record: {exc}") from exc


def parse_header(raw: RawRecord) -> StatemapHeader:
    """Parse a statemap metadata (header) record."""
    return _validate(StatemapHeader, raw)


def parse_datum(raw: RawRecord) -> StateDatum:
    """Parse a state data record; `time` must be a decimal string."""
    return _validate(StateDatum, raw)


def parse_description(raw: RawRecord) -> EntityDescription:
    return _validate(EntityDescription, raw)


def parse_event(raw: RawRecord) -> EntityEvent:
    return _validate(EntityEvent, raw)


def parse_tag(raw: RawRecord) -> StateTag:
    return _validate(StateTag, raw)


def parse_record(raw: RawRecord) -> Record:
    """
    Parse any statemap record, choosing the schema from its keys.

    Dispatch order:
        "states"/"start"  → StatemapHeader
        "event"           → EntityEvent
        "description"     → EntityDescription
        "time"            → StateDatum
        otherwise         → StateTag

    Args:
        raw: One JSON object as text or bytes.

    Returns:
        The validated record model.

    Raises:
        MalformedInput: If the text is not a JSON object or fails its schema.
    """
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedInput(f"Record is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise MalformedInput(f"Record must be a JSON object, got {type(payload).__name__}")

    keys = payload.keys()
    if "states" in keys or "start" in keys:
        model = StatemapHeader
    elif "event" in keys:
        model = EntityEvent
    elif "description" in keys:
        model = EntityDescription
    elif "time" in keys:
        model = StateDatum
    else:
        model = StateTag
    return _validate_payload(model, payload)
