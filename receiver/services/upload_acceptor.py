from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from receiver.core.errors import (
    DuplicateContentError,
    InvalidFileNameError,
    MissingFileError,
    ResourceError,
)
from receiver.core.file_storage import TempFileStorage
from receiver.core.hashing import DEFAULT_CHUNK_SIZE, file_digest, new_digest, split_extension

logger = logging.getLogger(__name__)

HASH_PREFIX_LENGTH = 7
# Leaves room for the "_<7 hex>" suffix within the usual 255-byte name limit.
MAX_NAME_BYTES = 255 - 1 - HASH_PREFIX_LENGTH


@dataclass(frozen=True)
class AcceptedUpload:
    """Represent an upload that has been moved into the target directory."""

    path: Path
    digest: str
    size: int


class UploadSession:
    """Own one in-flight upload: its temp file, running digest and declared name.

    File parts are written to the temp file as they arrive. Parts without a
    filename are ignored. Every file part lands in the same temp file and the
    last declared filename is the one kept.
    """

    def __init__(self, storage: TempFileStorage, tmp_path: Path, out: BinaryIO) -> None:
        """Initialize the session around an open temp file."""
        self._storage = storage
        self._tmp_path = tmp_path
        self._out = out
        self._digest = new_digest()
        self._file_name = ""
        self._size = 0
        self._part_size = 0
        self._in_file_part = False

    @property
    def tmp_path(self) -> Path:
        """Path of the temp file backing this session."""
        return self._tmp_path

    @property
    def file_name(self) -> str:
        """Cleaned name of the last file part seen, or an empty string."""
        return self._file_name

    @property
    def size(self) -> int:
        """Total number of bytes written so far."""
        return self._size

    def start_part(self, filename: str) -> None:
        """Begin a part; only parts with a filename contribute data."""
        self._in_file_part = bool(filename)
        self._part_size = 0
        if self._in_file_part:
            self._file_name = clean_name(filename)

    def write(self, data: bytes) -> None:
        """Append part data to the temp file and the digest."""
        if not self._in_file_part or not data:
            return
        try:
            self._out.write(data)
        except OSError as exc:
            raise ResourceError(str(exc)) from exc
        self._digest.update(data)
        self._part_size += len(data)
        self._size += len(data)

    def end_part(self) -> None:
        """Close the current part."""
        if self._in_file_part:
            logger.info("Written %d bytes to %s", self._part_size, self._tmp_path)
        self._in_file_part = False

    def hexdigest(self) -> str:
        """Lowercase hex digest of everything written so far."""
        return self._digest.hexdigest()

    def close(self) -> None:
        """Flush and close the temp file, keeping it on disk."""
        if self._out.closed:
            return
        try:
            self._out.close()
        except OSError as exc:
            raise ResourceError(str(exc)) from exc

    def abort(self) -> None:
        """Close and delete the temp file. Safe to call more than once."""
        try:
            self.close()
        except ResourceError as exc:
            logger.warning("Could not close temp file %s: %s", self._tmp_path, exc)
        self._storage.discard(self._tmp_path)


class UploadAcceptor:
    """Turn upload sessions into safely named files in the target directory.

    An existing file with the same name and the same digest makes the upload
    a duplicate; different content gets a ``name_<7 hex>.ext`` sibling instead.
    The final move never replaces a file that is already there.
    """

    def __init__(
        self,
        target_dir: Path,
        storage: TempFileStorage,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        """Initialize the acceptor with its target directory and temp storage."""
        self._target_dir = Path(target_dir)
        self._target_dir.mkdir(parents=True, exist_ok=True)
        self._storage = storage
        self._chunk_size = chunk_size

    def open(self) -> UploadSession:
        """Create the temp file for a new upload."""
        try:
            tmp_path = self._storage.create()
        except OSError as exc:
            raise ResourceError(f"cannot create temp file: {exc}") from exc

        try:
            out = tmp_path.open("wb")
        except OSError as exc:
            self._storage.discard(tmp_path)
            raise ResourceError(f"cannot open temp file: {exc}") from exc
        return UploadSession(self._storage, tmp_path, out)

    def commit(self, session: UploadSession) -> AcceptedUpload:
        """Move a finished session into place, or raise after deleting its temp file."""
        try:
            session.close()
            if not session.file_name:
                raise MissingFileError()
            digest = session.hexdigest()
            destination = self.resolve(session.file_name, digest)
            self._link(session.tmp_path, destination, session.file_name)
        except Exception:
            session.abort()
            raise

        self._storage.discard(session.tmp_path)
        logger.info("Created %s (%d bytes, sha1 %s)", destination, session.size, digest)
        return AcceptedUpload(path=destination, digest=digest, size=session.size)

    def resolve(self, file_name: str, file_hash: str) -> Path:
        """Return the destination path for a file name and its hex digest."""
        candidate = self._target_dir / file_name
        if not _exists(candidate):
            return candidate

        try:
            existing_hash = file_digest(candidate, self._chunk_size)
        except OSError as exc:
            raise ResourceError(f"cannot verify existing file '{file_name}': {exc}") from exc

        if existing_hash == file_hash:
            raise DuplicateContentError(file_name)

        stem, extension = split_extension(file_name)
        return self._target_dir / f"{stem}_{file_hash[:HASH_PREFIX_LENGTH]}{extension}"

    def _link(self, tmp_path: Path, destination: Path, file_name: str) -> None:
        """Link the temp file into place without ever replacing an existing file."""
        try:
            os.link(tmp_path, destination)
        except FileExistsError as exc:
            raise DuplicateContentError(file_name) from exc
        except OSError as exc:
            raise ResourceError(str(exc)) from exc


def _exists(path: Path) -> bool:
    """Report whether something is at path; a stat failure other than "not found" counts as present."""
    try:
        path.stat()
    except FileNotFoundError:
        return False
    except OSError as exc:
        logger.warning("Cannot stat %s: %s", path, exc)
        return True
    return True


def clean_name(raw_name: str) -> str:
    """Lower-case a declared filename and drop any directory components."""
    name = raw_name.lower().replace("\\", "/").rsplit("/", 1)[-1]
    if name in ("", ".", "..") or "\x00" in name:
        raise InvalidFileNameError(raw_name)
    if len(name.encode("utf-8", "surrogateescape")) > MAX_NAME_BYTES:
        raise InvalidFileNameError(raw_name)
    return name
