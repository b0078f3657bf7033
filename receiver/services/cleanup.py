from __future__ import annotations

import time
from dataclasses import dataclass

from receiver.core.file_storage import TempFileStorage


@dataclass(frozen=True)
class CleanupService:
    """Handle cleanup of orphaned temp files."""

    storage: TempFileStorage

    def delete_stale_temp_files(self, older_than_hours: int) -> int:
        """Delete temp files older than a given age in hours and return count."""
        if older_than_hours <= 0:
            return 0

        now = time.time()
        threshold_s = older_than_hours * 3600
        deleted = 0

        for item in self.storage.files():
            age_s = now - item.stat().st_mtime
            if age_s >= threshold_s:
                self.storage.discard(item)
                deleted += 1

        return deleted
