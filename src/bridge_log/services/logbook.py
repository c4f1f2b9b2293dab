"""Ledger state containers, write-behind persistence and the rollover timer."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Protocol

from bridge_log.domain.fuel import FuelComputation
from bridge_log.domain.logbook import (
    CanonicalState,
    DayRecord,
    EditScope,
    EntryDraft,
    EntryKey,
    LogEntry,
    MovementKind,
    Note,
    PositionDraft,
    VesselDetails,
    VesselMode,
    WeatherSnapshot,
)
from bridge_log.services import backup, ledger, rollover
from bridge_log.services.calendar import Clock, now_timestamp, pretty_date, today_iso
from bridge_log.services.scheduling import Debouncer, Scheduler
from bridge_log.services.schema import (
    DEFAULT_LOCATION_LABEL,
    Invalid,
    default_state,
    normalize,
)
from bridge_log.services.weather import WeatherService

_logger = logging.getLogger(__name__)

StateListener = Callable[[CanonicalState], None]
Transition = Callable[[CanonicalState], CanonicalState]


class StateRepository(Protocol):
    """Persistence interface: one state row per identity."""

    def get_state(self, identity: str) -> object | None:
        """Return the raw stored state for an identity, if present."""

    def put_state(self, identity: str, state: CanonicalState) -> None:
        """Store the full state for an identity, raising on failure."""


class BackupImportError(ValueError):
    """A backup file could not be read; the ledger was not changed."""


class StateLoadError(RuntimeError):
    """Stored state could not be read; nothing was cached for the identity."""


@dataclass
class PersistenceStatus:
    """Outcome of the most recent write attempt."""

    last_saved_at: str | None = None
    last_error: str | None = None


@dataclass
class StateWriter:
    """Debounced write-behind subscriber for one identity's state.

    A burst of changes produces one write carrying the latest state. Failed
    writes are logged and retried only by the next change.
    """

    identity: str
    repository: StateRepository
    debouncer: Debouncer
    clock: Clock
    status: PersistenceStatus = field(default_factory=PersistenceStatus)

    def __call__(self, state: CanonicalState) -> None:
        self.debouncer.call(lambda: self.write(state))

    def write(self, state: CanonicalState) -> bool:
        """Write ``state`` now and record the outcome."""
        stamped = replace(state, updated_at=now_timestamp(self.clock))
        try:
            self.repository.put_state(self.identity, stamped)
        except Exception as exc:
            _logger.exception("Failed to save state for %s", self.identity)
            self.status.last_error = f"{type(exc).__name__}: {exc}"
            return False
        self.status.last_saved_at = stamped.updated_at
        self.status.last_error = None
        return True


@dataclass
class LogbookService:
    """Owns one identity's ledger state and applies transitions in order.

    Each operation is a pure transition of the current state; listeners see
    every committed state, never a partial one.
    """

    identity: str
    state: CanonicalState
    clock: Clock
    weather_service: WeatherService
    default_location_label: str = DEFAULT_LOCATION_LABEL
    weather_error: str | None = None
    _listeners: list[StateListener] = field(default_factory=list, repr=False)

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def dispatch(self, transition: Transition) -> CanonicalState:
        """Apply ``transition`` and notify listeners if the state changed."""
        next_state = transition(self.state)
        if next_state is self.state:
            return self.state
        self.state = next_state
        for listener in list(self._listeners):
            listener(next_state)
        return next_state

    def todays_entries(self) -> list[LogEntry]:
        return ledger.todays_entries(self.state)

    def todays_notes(self) -> list[Note]:
        return ledger.todays_notes(self.state)

    def todays_fuel(self) -> FuelComputation:
        return ledger.todays_fuel(self.state)

    def add_entry(self, draft: EntryDraft) -> LogEntry:
        state = self.dispatch(
            lambda current: ledger.add_entry(current, draft, self.clock)
        )
        return state.log[0]

    def add_movement(self, kind: MovementKind) -> LogEntry:
        state = self.dispatch(
            lambda current: ledger.add_movement(current, kind, self.clock)
        )
        return state.log[0]

    def add_note(self, text: str) -> Note:
        state = self.dispatch(
            lambda current: ledger.add_note(current, text, self.clock)
        )
        return state.notes[0]

    def edit_entry(
        self, scope: EditScope, day: str, key: EntryKey, replacement: LogEntry
    ) -> None:
        self.dispatch(
            lambda current: ledger.edit_entry(current, scope, day, key, replacement)
        )
        _logger.info("Entry updated for %s (%s %s)", self.identity, scope.value, day)

    def delete_entry(
        self,
        scope: EditScope,
        day: str,
        key: EntryKey,
        confirm: Callable[[str], bool],
    ) -> bool:
        """Delete an entry after confirmation; return False when declined."""
        before = self.state
        after = self.dispatch(
            lambda current: ledger.delete_entry(current, scope, day, key, confirm)
        )
        if after is before:
            return False
        _logger.info("Entry deleted for %s (%s %s)", self.identity, scope.value, day)
        return True

    def save_day(self) -> DayRecord:
        """Archive the live day now, keeping the live date."""
        state = self.dispatch(rollover.save_day)
        record = state.history[0]
        _logger.info("Saved day %s to history for %s", record.date, self.identity)
        return record

    def tick(self) -> bool:
        """Roll the day over when the local calendar date has moved on."""
        today = today_iso(self.clock)
        rolled = False

        def transition(current: CanonicalState) -> CanonicalState:
            nonlocal rolled
            next_state, rolled = rollover.roll_over(current, today)
            return next_state

        self.dispatch(transition)
        if rolled:
            _logger.info(
                "Auto-saved at midnight for %s → %s",
                self.identity,
                pretty_date(today),
            )
        return rolled

    def import_backup(self, data: bytes) -> CanonicalState:
        """Replace the whole state with a backup's contents."""
        restored = backup.import_backup(data, self.clock, self.default_location_label)
        if isinstance(restored, Invalid):
            _logger.warning("Invalid backup for %s: %s", self.identity, restored.reason)
            raise BackupImportError(restored.reason)
        _logger.info("Restore complete for %s", self.identity)
        return self.dispatch(lambda _current: restored)

    def export_backup(self) -> bytes:
        return backup.export_backup(self.state, self.clock)

    def set_position(self, position: PositionDraft) -> None:
        self.dispatch(lambda current: ledger.set_position(current, position))

    def set_vessel(self, vessel: VesselDetails) -> None:
        self.dispatch(lambda current: ledger.set_vessel(current, vessel))

    def set_watchkeeper(self, watchkeeper: str) -> None:
        self.dispatch(lambda current: ledger.set_watchkeeper(current, watchkeeper))

    def set_live_day(
        self, location: str | None = None, mode: VesselMode | None = None
    ) -> None:
        self.dispatch(lambda current: ledger.set_live_day(current, location, mode))

    async def apply_position(self) -> WeatherSnapshot | None:
        """Use the typed position for weather and refresh it."""
        self.dispatch(ledger.apply_position)
        return await self.refresh_weather()

    async def set_coordinates(self, lat: float, lon: float) -> WeatherSnapshot | None:
        """Store a geolocation fix and refresh the weather for it."""
        self.dispatch(lambda current: ledger.set_coordinates(current, lat, lon))
        return await self.refresh_weather()

    async def refresh_weather(self) -> WeatherSnapshot | None:
        """Fetch weather for the stored coordinates.

        Returns the new snapshot, or ``None`` when there are no coordinates,
        the refresh was throttled, or the lookup failed.
        """
        lat, lon = self.state.coordinates.lat, self.state.coordinates.lon
        if lat is None or lon is None:
            return None
        try:
            snapshot = await self.weather_service.fetch(self.identity, lat, lon)
        except Exception as exc:
            _logger.warning("Weather fetch failed for %s: %s", self.identity, exc)
            self.weather_error = f"{type(exc).__name__}: {exc}"
            return None
        if snapshot is None:
            return None
        self.weather_error = None
        self.dispatch(lambda current: ledger.set_weather(current, snapshot))
        return snapshot


@dataclass
class LogbookRegistry:
    """Holds exactly one ledger per identity, loaded on first use."""

    repository: StateRepository
    weather_service: WeatherService
    clock: Clock
    scheduler: Scheduler
    save_debounce_seconds: float = 0.7
    default_location_label: str = DEFAULT_LOCATION_LABEL
    _ledgers: dict[str, LogbookService] = field(default_factory=dict, repr=False)
    _writers: dict[str, StateWriter] = field(default_factory=dict, repr=False)

    def get(self, identity: str) -> LogbookService:
        """Return the identity's ledger, loading it from storage if needed.

        Raises ``StateLoadError`` when storage cannot be read; the next call
        tries the load again.
        """
        existing = self._ledgers.get(identity)
        if existing is not None:
            return existing
        state = self._load(identity)
        service = LogbookService(
            identity=identity,
            state=state,
            clock=self.clock,
            weather_service=self.weather_service,
            default_location_label=self.default_location_label,
        )
        writer = StateWriter(
            identity=identity,
            repository=self.repository,
            debouncer=Debouncer(self.scheduler, self.save_debounce_seconds),
            clock=self.clock,
        )
        service.subscribe(writer)
        self._ledgers[identity] = service
        self._writers[identity] = writer
        return service

    def persistence_status(self, identity: str) -> PersistenceStatus:
        writer = self._writers.get(identity)
        return writer.status if writer else PersistenceStatus()

    def identities(self) -> list[str]:
        return list(self._ledgers)

    def tick_all(self) -> int:
        """Run the rollover check for every loaded ledger."""
        return sum(1 for service in list(self._ledgers.values()) if service.tick())

    def flush_writes(self) -> int:
        """Write every pending debounced state now; return how many were written."""
        return sum(
            1 for writer in list(self._writers.values()) if writer.debouncer.flush()
        )

    def _load(self, identity: str) -> CanonicalState:
        try:
            raw = self.repository.get_state(identity)
        except Exception as exc:
            _logger.exception("Failed to load state for %s", identity)
            raise StateLoadError(f"Stored state for {identity} is unavailable") from exc
        if raw is None:
            return default_state(self.clock, self.default_location_label)
        state = normalize(raw, self.clock, self.default_location_label)
        if isinstance(state, Invalid):
            _logger.warning(
                "Stored state for %s is invalid: %s", identity, state.reason
            )
            return default_state(self.clock, self.default_location_label)
        return state


async def run_rollover_timer(
    registry: LogbookRegistry, interval_seconds: float
) -> None:
    """Check every loaded ledger for a date change every ``interval_seconds``."""
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            registry.tick_all()
        except Exception:
            _logger.exception("Rollover check failed")
