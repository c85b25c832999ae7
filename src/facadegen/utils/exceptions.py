"""
Custom exceptions for facadegen.

This module defines all custom exceptions used throughout the package. The
four generation kinds (PromptBlockedError, IncompleteResponseError,
InvalidPlanFormatError, ImageGenerationFailedError) share GenerationError as
their base so callers can catch every terminal generation failure at once.
"""


class FacadegenError(Exception):
    """Base exception for all facadegen errors."""

    pass


class ValidationError(FacadegenError):
    """Raised when input validation fails."""

    def __init__(self, message: str, field: str = "") -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation (optional)
        """
        self.field = field
        super().__init__(message)


class APIError(FacadegenError):
    """Raised when an API call fails."""

    def __init__(self, message: str, status_code: int = 0, response: str = "") -> None:
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code (if applicable)
            response: Raw API response (if available)
        """
        self.status_code = status_code
        self.response = response
        super().__init__(message)


class NetworkError(FacadegenError):
    """Raised when a network operation fails."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize network error.

        Args:
            message: Error message
            original_error: The underlying exception that caused this error
        """
        self.original_error = original_error
        super().__init__(message)


class RequestTimeoutError(FacadegenError):
    """Raised when a request to the generation service times out."""

    pass


class ConfigurationError(FacadegenError):
    """Raised when there is a configuration problem."""

    pass


class ImageProcessingError(FacadegenError):
    """Raised when a local image cannot be read or decoded."""

    def __init__(self, message: str, image_path: str = "") -> None:
        """
        Initialize image processing error.

        Args:
            message: Error message
            image_path: Path to the image that caused the error
        """
        self.image_path = image_path
        super().__init__(message)


class GenerationError(FacadegenError):
    """Base for terminal failures of a generation operation."""

    pass


class PromptBlockedError(GenerationError):
    """Raised when the service rejects the request on content-policy grounds."""

    def __init__(self, message: str, reason: str = "") -> None:
        """
        Initialize prompt blocked error.

        Args:
            message: Error message
            reason: Block reason or finish reason reported by the service
        """
        self.reason = reason
        super().__init__(message)


class IncompleteResponseError(GenerationError):
    """Raised when a multi-part response lacks the expected image or text part."""

    pass


class InvalidPlanFormatError(GenerationError):
    """Raised when the technical plan text is not a JSON array of plan items."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        """
        Initialize invalid plan format error.

        Args:
            message: Error message
            raw_text: The unparsable text returned by the service
        """
        self.raw_text = raw_text
        super().__init__(message)


class ImageGenerationFailedError(GenerationError):
    """Raised when no usable image was returned."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        """
        Initialize image generation failure.

        Args:
            message: Error message
            original_error: The transport or decoding error behind the failure, if any
        """
        self.original_error = original_error
        super().__init__(message)
