"""Custom service layer errors."""


class ServiceError(Exception):
    """Base error for service-layer failures."""


class ValidationError(ServiceError):
    """Raised when a business rule validation fails."""


class NotFoundError(ServiceError):
    """Raised when an entity is not found."""


class ConcurrencyError(ServiceError):
    """Raised when a conditional update keeps losing to concurrent writers."""


class ConfigurationError(ServiceError):
    """Raised when the backend connection is not configured."""
