class AppError(Exception):
    """Base class for errors rendered as ``{"message", "details"}`` responses."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None, details: dict | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class OptimizerError(AppError):
    """An optimization request that cannot run as submitted, e.g. locks on unknown sections."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details=details)


class ResourceNotFoundError(AppError):
    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConfigurationError(AppError):
    """Settings that leave the service unable to run, such as a zero-sized optimizer pool."""
