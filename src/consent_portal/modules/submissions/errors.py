"""
Submission Errors

Exceptions raised by the upload receiver and the submission coordinator.
Each carries the error code and HTTP status used by the router.
"""


class SubmissionServiceError(Exception):
    """Base exception for submission errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidSubmissionError(SubmissionServiceError):
    """Raised when form fields are missing, malformed or consent was not given."""

    def __init__(self, message: str = "Missing required form data."):
        super().__init__(
            message=message,
            error_code="INVALID_SUBMISSION",
            status_code=400,
        )


class InvalidUploadError(SubmissionServiceError):
    """Raised when a file part has the wrong type, is too large, or there are too many."""

    def __init__(self, message: str = "Invalid file type."):
        super().__init__(
            message=message,
            error_code="INVALID_UPLOAD",
            status_code=400,
        )


class StorageError(SubmissionServiceError):
    """Raised when writing a part to disk fails."""

    def __init__(self):
        super().__init__(
            message="An error occurred while storing the uploaded files.",
            error_code="STORAGE_FAILED",
            status_code=500,
        )


class SubmissionFailedError(SubmissionServiceError):
    """
    Raised when the database transaction fails.

    The message is fixed: internal details are logged, never returned.
    """

    def __init__(self):
        super().__init__(
            message="An error occurred during submission.",
            error_code="SUBMISSION_FAILED",
            status_code=500,
        )
