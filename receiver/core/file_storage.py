import logging
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = "multipart-receiver"


class TempFileStorage:
    """Handle temporary storage of in-flight uploads."""

    def __init__(self, base_dir: Path) -> None:
        """Initialize storage rooted at the temp directory."""
        self._base_dir = Path(base_dir)
        self._base_dir.mkdir(parents=True, exist_ok=True)

    def create(self) -> Path:
        """Create an empty, uniquely named temp file and return its path."""
        handle = tempfile.NamedTemporaryFile(
            dir=self._base_dir,
            prefix=TEMP_PREFIX,
            delete=False,
        )
        handle.close()
        return Path(handle.name)

    def discard(self, file_path: Path) -> None:
        """Remove a temp file, logging instead of raising when it cannot be removed."""
        try:
            file_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove temp file %s: %s", file_path, exc)

    def files(self) -> list[Path]:
        """List temp files owned by the receiver."""
        return [p for p in self._base_dir.glob(f"{TEMP_PREFIX}*") if p.is_file()]
