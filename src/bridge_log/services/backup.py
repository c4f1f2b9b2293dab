"""Backup export and import."""

import json

from bridge_log.domain.logbook import CanonicalState
from bridge_log.services.calendar import Clock, now_timestamp
from bridge_log.services.schema import (
    BACKUP_TAG,
    DEFAULT_LOCATION_LABEL,
    Invalid,
    normalize,
    to_payload,
)

SCHEMA_VERSION = 3


def build_envelope(state: CanonicalState, clock: Clock) -> dict[str, object]:
    """Wrap a state in the versioned backup envelope."""
    return {
        "tag": BACKUP_TAG,
        "schemaVersion": SCHEMA_VERSION,
        "savedAt": now_timestamp(clock),
        "payload": to_payload(state),
    }


def export_backup(state: CanonicalState, clock: Clock) -> bytes:
    """Return the backup file contents as pretty-printed UTF-8 JSON."""
    return json.dumps(
        build_envelope(state, clock), indent=2, ensure_ascii=False
    ).encode("utf-8")


def backup_filename(clock: Clock) -> str:
    """Return a timestamped name, e.g. ``bridge-log-backup-20261019-1342.json``."""
    return f"bridge-log-backup-{clock.now().strftime('%Y%m%d-%H%M')}.json"


def import_backup(
    data: bytes,
    clock: Clock,
    default_location_label: str = DEFAULT_LOCATION_LABEL,
) -> CanonicalState | Invalid:
    """Decode backup bytes (enveloped or bare state) into a canonical state."""
    try:
        raw = json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError):
        return Invalid("backup file is not valid JSON")
    return normalize(raw, clock, default_location_label)
