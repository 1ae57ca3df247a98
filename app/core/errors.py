from fastapi import status


class ServiceError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class InsufficientStockError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, requested: int, available: int, batch_number: str | None = None) -> None:
        label = f" in batch {batch_number}" if batch_number else ""
        super().__init__(f"Cannot sell {requested} units; only {available} available{label}")
        self.requested = requested
        self.available = available


class ConflictError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenError(AuthError):
    status_code = status.HTTP_403_FORBIDDEN
