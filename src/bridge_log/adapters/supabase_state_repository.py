"""Supabase-backed ledger state repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from bridge_log.domain.logbook import CanonicalState
from bridge_log.services.logbook import StateRepository
from bridge_log.services.schema import to_payload


@dataclass
class SupabaseStateRepository(StateRepository):
    """Stores each identity's whole ledger as one JSON row."""

    client: Client
    table: str = "blp_state"

    def get_state(self, identity: str) -> object | None:
        """Return the stored state payload for an identity, if present."""
        response = (
            self.client.table(self.table)
            .select("state")
            .eq("user_id", identity)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return response.data[0].get("state")

    def put_state(self, identity: str, state: CanonicalState) -> None:
        """Upsert the identity's row with the full state."""
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "user_id": identity,
                    "state": to_payload(state),
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                },
                on_conflict="user_id",
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to save state for {identity}")
