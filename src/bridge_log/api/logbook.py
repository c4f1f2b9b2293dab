"""Logbook API endpoints, one ledger per vessel identity."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.responses import Response

from bridge_log.api.models import (
    CoordinatesRequest,
    EditEntryRequest,
    EntryFields,
    LiveDayRequest,
    MovementRequest,
    NoteRequest,
    PositionRequest,
    VesselRequest,
    WatchkeeperRequest,
)
from bridge_log.domain.logbook import EditScope, EntryKey
from bridge_log.services.backup import backup_filename
from bridge_log.services.calendar import pretty_date
from bridge_log.services.ledger import EntryNotFoundError, LedgerValidationError
from bridge_log.services.logbook import (
    BackupImportError,
    LogbookService,
    StateLoadError,
)
from bridge_log.services.schema import (
    entry_payload,
    fuel_summary_payload,
    to_payload,
)

if TYPE_CHECKING:
    from bridge_log.containers import AppContainer

router = APIRouter(prefix="/vessels/{identity}", tags=["logbook"])


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include the shared API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


def get_logbook(identity: str, request: Request) -> LogbookService:
    container: AppContainer = request.app.state.container
    try:
        return container.logbooks.get(identity)
    except StateLoadError as exc:
        raise HTTPException(
            status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc


@contextmanager
def _ledger_errors() -> Iterator[None]:
    try:
        yield
    except LedgerValidationError as exc:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except EntryNotFoundError as exc:
        raise HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("", dependencies=[Depends(require_token)])
async def get_state(
    request: Request, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Return the full ledger state with collaborator status."""
    container: AppContainer = request.app.state.container
    persistence = container.logbooks.persistence_status(logbook.identity)
    return {
        "state": to_payload(logbook.state),
        "status": {
            "lastSavedAt": persistence.last_saved_at,
            "saveError": persistence.last_error,
            "weatherError": logbook.weather_error,
        },
    }


@router.get("/today", dependencies=[Depends(require_token)])
async def get_today(
    logbook: LogbookService = Depends(get_logbook),
) -> dict[str, object]:
    """Return the live day's entries, notes and on-demand fuel figures."""
    state = logbook.state
    entries = logbook.todays_entries()
    fuel = logbook.todays_fuel()
    return {
        "date": state.live_day.date,
        "prettyDate": pretty_date(state.live_day.date),
        "location": state.live_day.location,
        "mode": state.live_day.mode.value,
        "locLabel": state.location_label,
        "weather": state.last_weather,
        "entries": [
            {**entry_payload(entry), "fuelUsed": used}
            for entry, used in zip(entries, fuel.per_entry_used, strict=True)
        ],
        "notes": [
            {"date": note.date, "time": note.time, "text": note.text}
            for note in logbook.todays_notes()
        ],
        "fuel": {
            "usedLitres": fuel.used_sum,
            "lastTotalFuel": fuel.last_total_fuel,
        },
    }


@router.get("/history", dependencies=[Depends(require_token)])
async def get_history(
    logbook: LogbookService = Depends(get_logbook),
) -> dict[str, object]:
    """Return archived days, newest first."""
    return {"history": to_payload(logbook.state)["history"]}


@router.post(
    "/entries",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_token)],
)
async def add_entry(
    payload: EntryFields, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Add an observation at the current position."""
    with _ledger_errors():
        entry = logbook.add_entry(payload.to_draft())
    return {"entry": entry_payload(entry)}


@router.put("/entries", dependencies=[Depends(require_token)])
async def edit_entry(
    payload: EditEntryRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Replace an entry; archived edits recompute later fuel summaries."""
    with _ledger_errors():
        logbook.edit_entry(
            payload.scope, payload.day, payload.key.to_key(), payload.entry.to_entry()
        )
    return {"status": "ok"}


@router.delete("/entries", dependencies=[Depends(require_token)])
async def delete_entry(  # noqa: PLR0913
    scope: EditScope,
    day: str,
    date: str,
    time: str,
    position: str,
    confirm: bool = False,
    logbook: LogbookService = Depends(get_logbook),
) -> dict[str, object]:
    """Delete an entry; ``confirm`` must be true for anything to happen."""
    key = EntryKey(date=date, time=time, position=position)
    with _ledger_errors():
        deleted = logbook.delete_entry(scope, day, key, lambda _prompt: confirm)
    return {"status": "deleted" if deleted else "cancelled"}


@router.post("/movements", dependencies=[Depends(require_token)])
async def add_movement(
    payload: MovementRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Log a movement shortcut and update the vessel mode."""
    entry = logbook.add_movement(payload.kind)
    return {"entry": entry_payload(entry), "mode": logbook.state.live_day.mode.value}


@router.post("/notes", dependencies=[Depends(require_token)])
async def add_note(
    payload: NoteRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    with _ledger_errors():
        note = logbook.add_note(payload.text)
    return {"note": {"date": note.date, "time": note.time, "text": note.text}}


@router.post("/save-day", dependencies=[Depends(require_token)])
async def save_day(logbook: LogbookService = Depends(get_logbook)) -> dict[str, object]:
    """Archive the live day without advancing the date."""
    record = logbook.save_day()
    return {
        "date": record.date,
        "entries": len(record.entries),
        "fuelSummary": fuel_summary_payload(record.fuel_summary),
    }


@router.put("/position", dependencies=[Depends(require_token)])
async def set_position(
    payload: PositionRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    logbook.set_position(payload.to_draft())
    return {"status": "ok"}


@router.post("/position/apply", dependencies=[Depends(require_token)])
async def apply_position(
    logbook: LogbookService = Depends(get_logbook),
) -> dict[str, object]:
    """Use the typed position as weather coordinates."""
    with _ledger_errors():
        weather = await logbook.apply_position()
    return {"locLabel": logbook.state.location_label, "weather": weather}


@router.put("/coordinates", dependencies=[Depends(require_token)])
async def set_coordinates(
    payload: CoordinatesRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Store a geolocation fix and refresh the weather."""
    weather = await logbook.set_coordinates(payload.lat, payload.lon)
    return {"locLabel": logbook.state.location_label, "weather": weather}


@router.post("/weather/refresh", dependencies=[Depends(require_token)])
async def refresh_weather(
    logbook: LogbookService = Depends(get_logbook),
) -> dict[str, object]:
    weather = await logbook.refresh_weather()
    return {
        "weather": weather,
        "refreshed": weather is not None,
        "error": logbook.weather_error,
    }


@router.put("/vessel", dependencies=[Depends(require_token)])
async def set_vessel(
    payload: VesselRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    logbook.set_vessel(payload.to_details())
    return {"status": "ok"}


@router.put("/watchkeeper", dependencies=[Depends(require_token)])
async def set_watchkeeper(
    payload: WatchkeeperRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    logbook.set_watchkeeper(payload.watchkeeper)
    return {"status": "ok"}


@router.put("/day", dependencies=[Depends(require_token)])
async def set_live_day(
    payload: LiveDayRequest, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    logbook.set_live_day(location=payload.location, mode=payload.mode)
    return {"status": "ok"}


@router.get("/backup", dependencies=[Depends(require_token)])
async def export_backup(
    request: Request, logbook: LogbookService = Depends(get_logbook)
) -> Response:
    """Download the ledger as a backup file."""
    container: AppContainer = request.app.state.container
    filename = backup_filename(container.clock)
    return Response(
        content=logbook.export_backup(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/backup", dependencies=[Depends(require_token)])
async def import_backup(
    request: Request, logbook: LogbookService = Depends(get_logbook)
) -> dict[str, object]:
    """Replace the ledger with an uploaded backup file."""
    data = await request.body()
    try:
        state = logbook.import_backup(data)
    except BackupImportError as exc:
        raise HTTPException(
            status.HTTP_400_BAD_REQUEST, detail="Invalid backup file"
        ) from exc
    return {"status": "ok", "history": len(state.history), "log": len(state.log)}
