from pathlib import Path
from typing import Protocol

STATIC_DIR = Path(__file__).resolve().parent.parent / "static"


class AssetNotFoundError(RuntimeError):
    """Raised when a bundled asset cannot be read."""


class AssetStore(Protocol):
    """Read-only access to the bundled static assets."""

    def read(self, name: str) -> bytes:
        """Return the bytes of a bundled asset."""
        ...


class PackageAssetStore:
    """Serve assets from a directory shipped with the package."""

    def __init__(self, root: Path = STATIC_DIR) -> None:
        """Initialize the store with its asset directory."""
        self._root = Path(root)

    @property
    def root(self) -> Path:
        """Directory the assets are read from."""
        return self._root

    def read(self, name: str) -> bytes:
        """Return the bytes of an asset, verbatim."""
        try:
            return (self._root / name).read_bytes()
        except OSError as exc:
            raise AssetNotFoundError(f"cannot read asset '{name}': {exc}") from exc
