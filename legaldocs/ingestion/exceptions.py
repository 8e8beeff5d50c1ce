class IngestionError(Exception):
    """Base exception for upload admission errors."""


class FileTooLargeError(IngestionError):
    """Raised when a file exceeds the size ceiling of the owner's tier."""

    def __init__(self, file_size: int, max_file_size: int) -> None:
        self.file_size = file_size
        self.max_file_size = max_file_size
        super().__init__(
            f"File is {file_size} bytes; the limit for this account is {max_file_size} bytes"
        )
