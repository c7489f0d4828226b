"""Clip metadata on the Supabase ``videos`` table."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from supabase import Client

from screenclip.clips.models import (
    ClipRecord,
    ProcessingStatus,
    Visibility,
    allowed_prior_statuses,
)
from screenclip.clips.store import (
    ClipStore,
    check_owner,
    check_transition,
    normalize_patch,
    validate_new_clip,
)
from screenclip.errors import DatabaseError, NotFound, StatusRegression

logger = logging.getLogger(__name__)

# record field -> column
_COLUMNS = {
    "owner_id": "user_id",
    "storage_reference": "file_path",
}


def _to_columns(fields: Dict[str, Any]) -> Dict[str, Any]:
    row = {}
    for key, value in fields.items():
        if isinstance(value, (Visibility, ProcessingStatus)):
            value = value.value
        row[_COLUMNS.get(key, key)] = value
    return row


def _from_row(row: Dict[str, Any]) -> ClipRecord:
    return ClipRecord(
        id=str(row["id"]),
        owner_id=str(row["user_id"]),
        title=row.get("title") or "",
        storage_reference=row.get("file_path") or "",
        visibility=row.get("visibility") or Visibility.PRIVATE,
        processing_status=row.get("processing_status") or ProcessingStatus.PENDING,
        created_at=row["created_at"],
        updated_at=row.get("updated_at") or row["created_at"],
    )


class SupabaseClipStore(ClipStore):
    def __init__(self, client: Client, table: str = "videos"):
        self._client = client
        self._table = table

    def _execute(self, query, action: str):
        try:
            return query.execute()
        except Exception as e:
            logger.error("Supabase %s on %s failed: %s", action, self._table, e)
            raise DatabaseError(f"Failed to {action} video: {e}") from e

    def create(self, owner_id, title, storage_reference, visibility=Visibility.PRIVATE,
               status=ProcessingStatus.PENDING) -> ClipRecord:
        validate_new_clip(owner_id, title, storage_reference)
        row = _to_columns({
            "owner_id": owner_id,
            "title": title.strip(),
            "storage_reference": storage_reference,
            "visibility": Visibility(visibility),
            "processing_status": ProcessingStatus(status),
        })
        response = self._execute(self._client.table(self._table).insert(row), "create")
        if not response.data:
            raise DatabaseError("Insert returned no row")
        return _from_row(response.data[0])

    def get(self, clip_id: str) -> ClipRecord:
        response = self._execute(
            self._client.table(self._table).select("*").eq("id", clip_id).limit(1),
            "read",
        )
        if not response.data:
            raise NotFound(f"Clip {clip_id} not found")
        return _from_row(response.data[0])

    def list_for_owner(self, owner_id: str) -> List[ClipRecord]:
        response = self._execute(
            self._client.table(self._table)
            .select("*")
            .eq("user_id", owner_id)
            .order("created_at", desc=True),
            "list",
        )
        return [_from_row(row) for row in response.data or []]

    def update(self, clip_id, patch, actor_id: Optional[str] = None) -> ClipRecord:
        clean = normalize_patch(patch)
        current = self.get(clip_id)
        check_owner(current, actor_id)
        check_transition(current, clean)

        row = _to_columns(clean)
        row["updated_at"] = datetime.now(timezone.utc).isoformat()
        query = self._client.table(self._table).update(row).eq("id", clip_id)

        new_status = clean.get("processing_status")
        if new_status is not None:
            # Conditional write: the row only changes if its status still allows the move.
            prior = sorted(s.value for s in allowed_prior_statuses(new_status))
            query = query.in_("processing_status", prior)

        response = self._execute(query, "update")
        if not response.data:
            latest = self.get(clip_id)
            raise StatusRegression(
                f"Clip {clip_id} moved to {latest.processing_status.value} concurrently"
            )
        return _from_row(response.data[0])

    def delete(self, clip_id, actor_id: Optional[str] = None) -> ClipRecord:
        current = self.get(clip_id)
        check_owner(current, actor_id)
        self._execute(self._client.table(self._table).delete().eq("id", clip_id), "delete")
        return current
