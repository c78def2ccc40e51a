"""Resume version repository for lineage metadata."""

from typing import Any, Optional

from ..models import ResumeVersion


class ResumeVersionRepository:
    """Merge-upserts of per-version rendering metadata."""

    def __init__(self, db):
        self.db = db

    def get(self, user_id: str, resume_id: str, version_id: str) -> Optional[ResumeVersion]:
        return self.db.get(ResumeVersion, (user_id, resume_id, version_id))

    def merge(self, user_id: str, resume_id: str, version_id: str, **fields: Any) -> ResumeVersion:
        """Create the row or update it in place.

        Fields passed as None leave the stored value untouched, matching a
        merge write rather than an overwrite.
        """
        row = self.get(user_id, resume_id, version_id)
        if row is None:
            row = ResumeVersion(user_id=user_id, resume_id=resume_id, version_id=version_id)
            self.db.add(row)
        for name, value in fields.items():
            if value is not None:
                setattr(row, name, value)
        self.db.flush()
        return row
