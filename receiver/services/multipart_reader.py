"""Incremental multipart parsing that feeds an upload session.

The body is handed over chunk by chunk as it arrives from the client. Part
data goes straight into the session's temp file, so nothing is buffered in
memory or spooled anywhere else.
"""

from __future__ import annotations

from python_multipart.exceptions import MultipartParseError
from python_multipart.multipart import MultipartParser, parse_options_header

from receiver.core.errors import ProtocolError
from receiver.services.upload_acceptor import UploadSession


def boundary_from_content_type(content_type: str) -> bytes:
    """Return the multipart boundary declared by a Content-Type header."""
    media_type, params = parse_options_header(content_type)
    if not media_type.lower().startswith(b"multipart/"):
        raise ProtocolError("request Content-Type isn't multipart/form-data")
    boundary = params.get(b"boundary")
    if not boundary:
        raise ProtocolError("no multipart boundary param in Content-Type")
    return boundary


def _decode(value: bytes) -> str:
    """Decode a header parameter, falling back to latin-1 for non UTF-8 clients."""
    try:
        return value.decode("utf-8")
    except UnicodeDecodeError:
        return value.decode("latin-1")


class MultipartUploadReader:
    """Parse a multipart body and stream its parts into an UploadSession."""

    def __init__(self, session: UploadSession, boundary: bytes) -> None:
        """Initialize the parser callbacks around a session."""
        self._session = session
        self._ended = False
        self._header_field = b""
        self._header_value = b""
        self._headers: dict[bytes, bytes] = {}
        self._parser = MultipartParser(
            boundary,
            callbacks={
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
                "on_end": self._on_end,
            },
        )

    def write(self, chunk: bytes) -> None:
        """Feed the next chunk of the body."""
        try:
            self._parser.write(chunk)
        except MultipartParseError as exc:
            raise ProtocolError(str(exc)) from exc

    def finish(self) -> None:
        """Signal the end of the body; it must have reached its closing boundary."""
        self._parser.finalize()
        if not self._ended:
            raise ProtocolError("multipart body ended before its closing boundary")

    def _on_part_begin(self) -> None:
        self._headers = {}

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers[self._header_field.lower()] = self._header_value
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        """Start the part in the session with its declared filename, if any."""
        disposition = self._headers.get(b"content-disposition", b"")
        _, options = parse_options_header(disposition)
        filename = options.get(b"filename", b"")
        self._session.start_part(_decode(filename))

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        self._session.write(data[start:end])

    def _on_part_end(self) -> None:
        self._session.end_part()

    def _on_end(self) -> None:
        self._ended = True
