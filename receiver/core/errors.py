class UploadError(RuntimeError):
    """Base class for failures while accepting an upload."""

    status_code = 500


class ProtocolError(UploadError):
    """Raised when the request body is not a readable multipart stream."""


class ResourceError(UploadError):
    """Raised when the filesystem refuses a create, write, hash or move."""


class DuplicateContentError(UploadError):
    """Raised when the target name is already taken by the same content."""

    status_code = 400

    def __init__(self, file_name: str) -> None:
        super().__init__(f"'{file_name}' already exists")
        self.file_name = file_name


class MissingFileError(UploadError):
    """Raised when no part of the request carries a filename."""

    status_code = 400

    def __init__(self) -> None:
        super().__init__("no file in request")


class InvalidFileNameError(UploadError):
    """Raised when a declared filename has no usable final component."""

    status_code = 400

    def __init__(self, file_name: str) -> None:
        super().__init__(f"'{file_name}' is not a valid file name")
        self.file_name = file_name
