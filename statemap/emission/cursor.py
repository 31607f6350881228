"""
Emission Cursor — Lazy Statemap Writer

Turns a consumed TimelineStore into the statemap line stream:

    pull #1   → header, with `start` computed from the watermark
    pull #2.. → one StateDatum per pull, `time` rewritten to an offset
    then      → StopIteration, forever

State machine:

    NOT_STARTED ──pull──▶ HEADER_EMITTED ──pull──▶ STREAMING ──drained──▶ EXHAUSTED
         │                      │                                            ▲
         └── (no entities) ─────┴────────────────────────────────────────────┘

The header pull also positions the cursor on the first entity, but that
entity's first datum waits for the next pull. Entities are walked in the
order of the underlying dict, which callers must not rely on; data within
one entity always comes out in registration (FIFO) order.
"""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Deque, Dict, Iterator, Optional

from pydantic import BaseModel
from pydantic_core import PydanticSerializationError

from ..errors import SerializationFailure
from ..records.schemas import NANOS_PER_SECOND, StateDatum, StatemapHeader

if TYPE_CHECKING:
    from ..timeline.store import TimelineStore

logger = logging.getLogger(__name__)


class CursorState(str, Enum):
    """Lifecycle of an EmissionCursor."""
    NOT_STARTED = "NOT_STARTED"
    HEADER_EMITTED = "HEADER_EMITTED"
    STREAMING = "STREAMING"
    EXHAUSTED = "EXHAUSTED"


class EmissionCursor:
    """
    One-shot, forward-only producer of statemap JSON strings.

    Built only from a TimelineStore's contents; see TimelineStore.into_cursor().
    """

    def __init__(
        self,
        header: StatemapHeader,
        watermark: Optional[int],
        entities: Dict[str, Deque[StateDatum]],
    ):
        self._header = header
        # An empty store has no watermark; its header starts at [0, 0].
        self._watermark = watermark if watermark is not None else 0
        self._entity_iter: Iterator[Deque[StateDatum]] = iter(entities.values())
        self._current: Optional[Deque[StateDatum]] = None
        self._state = CursorState.NOT_STARTED

    @classmethod
    def from_store(cls, store: "TimelineStore") -> "EmissionCursor":
        """Consume `store` and return its cursor."""
        return store.into_cursor()

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def header(self) -> StatemapHeader:
        """The header; `start` is populated once the first pull has happened."""
        return self._header

    @property
    def watermark(self) -> int:
        return self._watermark

    def __iter__(self) -> "EmissionCursor":
        return self

    def __next__(self) -> str:
        if self._state is CursorState.NOT_STARTED:
            return self._emit_header()

        while self._current is not None:
            if self._current:
                datum = self._current.popleft()
                datum.time -= self._watermark
                self._state = CursorState.STREAMING
                return self._serialize(datum)
            self._current = next(self._entity_iter, None)

        if self._state is not CursorState.EXHAUSTED:
            logger.debug("[EmissionCursor] all entities drained")
            self._state = CursorState.EXHAUSTED
        raise StopIteration

    def _emit_header(self) -> str:
        """Finalize `start` and serialize the header; runs exactly once."""
        seconds, nanos = divmod(self._watermark, NANOS_PER_SECOND)
        self._header.start = [seconds, nanos]

        self._current = next(self._entity_iter, None)
        if self._current is None:
            self._state = CursorState.EXHAUSTED
        else:
            self._state = CursorState.HEADER_EMITTED

        logger.debug(
            f"[EmissionCursor] header '{self._header.title}' start={self._header.start}"
        )
        return self._serialize(self._header)

    def _serialize(self, record: BaseModel) -> str:
        try:
            return record.model_dump_json(by_alias=True)
        except PydanticSerializationError as exc:
            self._state = CursorState.EXHAUSTED
            self._current = None
            logger.error(f"[EmissionCursor] failed to serialize {type(record).__name__}: {exc}")
            raise SerializationFailure(
                f"Cannot serialize {type(record).__name__}: {exc}"
            ) from exc
