"""Mandrill API error classes."""

from typing import Optional


class ProviderCallError(Exception):
    """A call to the Mandrill API failed.

    Carries the provider error ``name`` and numeric ``code`` when the API
    returned a structured error body.
    """

    def __init__(
        self,
        message: str,
        name: Optional[str] = None,
        code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.name = name
        self.code = code


class InvalidKeyError(ProviderCallError):
    """The provided API key is not a valid Mandrill API key."""

    pass


class ValidationError(ProviderCallError):
    """The parameters passed to the API call are invalid or not provided."""

    pass


class UnknownTemplateError(ProviderCallError):
    """The requested template does not exist."""

    pass


class UnknownMessageError(ProviderCallError):
    """The requested message does not exist."""

    pass


class PaymentRequiredError(ProviderCallError):
    """The requested feature requires payment."""

    pass


class ServiceUnavailableError(ProviderCallError):
    """The subsystem providing this API call is down for maintenance."""

    pass


class HttpError(ProviderCallError):
    """The request never produced a response (timeout, connection failure)."""

    pass


# Provider error names mapped to exception classes
ERROR_MAP: dict[str, type[ProviderCallError]] = {
    "Invalid_Key": InvalidKeyError,
    "ValidationError": ValidationError,
    "Unknown_Template": UnknownTemplateError,
    "Unknown_Message": UnknownMessageError,
    "PaymentRequired": PaymentRequiredError,
    "ServiceUnavailable": ServiceUnavailableError,
}


def cast_error(body: dict) -> ProviderCallError:
    """Build the exception matching a Mandrill error response body."""
    name = body.get("name")
    error_class = ERROR_MAP.get(name, ProviderCallError)
    return error_class(
        body.get("message") or "Unknown Mandrill error",
        name=name,
        code=body.get("code"),
    )
