import hashlib
from pathlib import Path
from typing import Protocol

DEFAULT_CHUNK_SIZE = 1024 * 1024


class Digest(Protocol):
    """The incremental hash interface shared by hashlib objects."""

    def update(self, data: bytes, /) -> None: ...

    def hexdigest(self) -> str: ...


def new_digest() -> Digest:
    """Return a fresh content digest (SHA-1, used for equality only)."""
    return hashlib.sha1()


def file_digest(file_path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Hash a file on disk and return the lowercase hex digest."""
    digest = new_digest()
    with file_path.open("rb") as handle:
        while chunk := handle.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def split_extension(file_name: str) -> tuple[str, str]:
    """Split a name at its last dot, keeping the dot on the extension."""
    stem, dot, extension = file_name.rpartition(".")
    if not dot:
        return file_name, ""
    return stem, f".{extension}"
