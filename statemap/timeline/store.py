"""
Timeline Store — Per-Entity State Accumulator

Collects state changes for named entities before a statemap is emitted.

The store owns three things:
    1. The state registry: state name -> numeric code, assigned in order of
       first appearance (0, 1, 2, ...) and never reassigned.
    2. One FIFO deque of StateDatum per entity, created on the entity's
       first state change.
    3. The watermark: the earliest absolute timestamp seen so far, kept
       current on every registration.

A statemap needs a single fixed start time before any datum can be written
as an offset, so the store is consumed when it is turned into an
EmissionCursor. Once consumed it refuses further use.

Usage:
    store = TimelineStore("cpu states", host="db01", entity_kind="CPU")
    store.register_event("cpu0", "idle", datetime(2024, 1, 1, tzinfo=timezone.utc))
    for line in store.into_cursor():
        print(line)
"""

import logging
from collections import deque
from typing import Deque, Dict, Iterator, Optional, Tuple

from pydantic import ValidationError

from ..config import Settings, settings as default_settings
from ..emission.cursor import EmissionCursor
from ..errors import InvalidTimestamp, MalformedInput, StoreConsumed
from ..records.schemas import StateDatum, StateDefinition, StatemapHeader
from .clock import Timestamp, to_epoch_nanos

logger = logging.getLogger(__name__)


class TimelineStore:
    """
    Mutable builder for one statemap.

    Not thread-safe; callers sharing a store across threads must serialize
    access themselves.
    """

    def __init__(
        self,
        title: str,
        host: Optional[str] = None,
        entity_kind: Optional[str] = None,
    ):
        """
        Create an empty store.

        Args:
            title: Statemap title, written to the header verbatim.
            host: Optional host name for the header.
            entity_kind: Optional description of what an entity is.
        """
        self._header: Optional[StatemapHeader] = StatemapHeader(
            title=title,
            host=host,
            entityKind=entity_kind,
        )
        self._entities: Dict[str, Deque[StateDatum]] = {}
        self._watermark: Optional[int] = None
        self._event_count = 0
        self._consumed = False

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "TimelineStore":
        """Create a store whose header metadata comes from Settings."""
        config = config or default_settings
        return cls(
            config.STATEMAP_TITLE,
            host=config.STATEMAP_HOST,
            entity_kind=config.STATEMAP_ENTITY_KIND,
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_event(
        self,
        entity: str,
        state_name: str,
        when: Timestamp,
        tag: Optional[str] = None,
    ) -> None:
        """
        Record that `entity` entered `state_name` at `when`.

        The timestamp and the record are both validated before anything is
        touched, so a rejected call leaves the registry, watermark and
        entities exactly as they were.

        Args:
            entity: Entity name (e.g. "cpu0").
            state_name: State name; gets the next free code on first use.
            when: datetime (naive read as UTC) or CalendarTime.
            tag: Optional tag for this state change.

        Raises:
            InvalidTimestamp: If `when` is not a valid u64 nanosecond time.
            MalformedInput: If entity, state name or tag is not a string.
            StoreConsumed: If the store was already turned into a cursor.
        """
        self._ensure_open()

        try:
            time_ns = to_epoch_nanos(when)
        except InvalidTimestamp:
            logger.warning(f"[TimelineStore] {entity}: rejected timestamp {when!r}")
            raise

        if not isinstance(state_name, str):
            raise MalformedInput(f"State name must be a string, got {type(state_name).__name__}")

        states = self._header.states
        definition = states.get(state_name)
        code = definition.value if definition is not None else len(states)

        # Build the datum before mutating anything so a rejected entity or
        # tag cannot leave a phantom state code, entity or watermark behind.
        try:
            datum = StateDatum(time=time_ns, entity=entity, state=code, tag=tag)
        except ValidationError as exc:
            logger.warning(f"[TimelineStore] rejected state change for {entity!r}: {exc.error_count()} error(s)")
            raise MalformedInput(f"Invalid state change for entity {entity!r}: {exc}") from exc

        if definition is None:
            states[state_name] = StateDefinition(value=code)
            logger.debug(f"[TimelineStore] state {state_name!r} -> code {code}")

        if self._watermark is None or time_ns < self._watermark:
            self._watermark = time_ns

        sequence = self._entities.get(entity)
        if sequence is None:
            sequence = self._entities[entity] = deque()
            logger.debug(f"[TimelineStore] new entity {entity!r}")

        sequence.append(datum)
        self._event_count += 1

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def consumed(self) -> bool:
        return self._consumed

    @property
    def watermark(self) -> Optional[int]:
        """Earliest absolute timestamp registered, or None if empty."""
        self._ensure_open()
        return self._watermark

    @property
    def states(self) -> Dict[str, int]:
        """Copy of the registry as {state name: code}."""
        self._ensure_open()
        return {name: d.value for name, d in self._header.states.items()}

    @property
    def entities(self) -> Tuple[str, ...]:
        self._ensure_open()
        return tuple(self._entities)

    @property
    def event_count(self) -> int:
        self._ensure_open()
        return self._event_count

    # ------------------------------------------------------------------
    # Ownership transfer
    # ------------------------------------------------------------------

    def into_cursor(self) -> EmissionCursor:
        """
        Consume the store and return the cursor that emits it.

        The cursor takes the header, watermark and entity sequences; the
        store drops its references and rejects any further use.
        """
        self._ensure_open()
        header, watermark, entities = self._header, self._watermark, self._entities

        logger.info(
            f"[TimelineStore] '{header.title}': emitting {self._event_count} "
            f"state(s) across {len(entities)} entity(ies)"
        )

        self._consumed = True
        self._header = None
        self._entities = {}
        self._watermark = None
        return EmissionCursor(header, watermark, entities)

    def __iter__(self) -> Iterator[str]:
        return self.into_cursor()

    def _ensure_open(self) -> None:
        if self._consumed:
            raise StoreConsumed("TimelineStore was already converted into an EmissionCursor")
