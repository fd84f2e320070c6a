class StoreError(Exception):
    """Raised by a store when an operation could not be completed."""


class StoreUnavailableError(StoreError):
    pass


class InvalidPathError(StoreError, ValueError):
    pass


class ApiError(StoreError):
    def __init__(self, status_code: int, detail=None):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"API error {status_code}: {detail}")


class SessionClosedError(RuntimeError):
    pass
