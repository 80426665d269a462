class SignageError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class ValidationError(SignageError):
    kind = "validation_error"
    status_code = 400


class NotFound(SignageError):
    kind = "not_found"
    status_code = 404


class StorageFailure(SignageError):
    kind = "storage_failure"
    status_code = 500
