from __future__ import annotations


class UploadError(Exception):
    """A failed upload stage.

    `user_message` is the short text shown to the uploader; it never carries
    storage-engine detail.
    """

    stage: str = "upload"
    user_message: str = "Upload failed"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)


class EmptyContent(UploadError):
    stage = "address"
    user_message = "Empty file"


class DisallowedExtension(UploadError):
    stage = "validate"

    def __init__(self, filename: str, allowed: list[str]):
        self.filename = filename
        self.allowed = list(allowed)
        self.user_message = (
            f"ERROR: File extension not allowed. Allowed extensions: {self.allowed}"
        )
        super().__init__(f"File extension not allowed: {filename}")


class FileWriteError(UploadError):
    stage = "file"
    user_message = "Failed to save file"


_PERSISTENCE_MESSAGES = {
    "receipt": "Failed to store receipt",
    "tags": "Failed to write tags",
    "associations": "Failed to write receipt ID <-> tag IDs associations",
}


class PersistenceError(UploadError):
    """A database stage failed.

    Failures in the `tags` and `associations` stages happen after the receipt
    row was committed, so `receipt_id` is set and the receipt may have no tags.
    """

    def __init__(
        self,
        stage: str,
        *,
        filename: str | None = None,
        receipt_id: int | None = None,
    ):
        self.stage = stage
        self.filename = filename
        self.receipt_id = receipt_id
        self.user_message = _PERSISTENCE_MESSAGES.get(stage, "Database error")
        super().__init__(f"Persistence failed at stage {stage!r}")

    @property
    def receipt_committed(self) -> bool:
        return self.receipt_id is not None
