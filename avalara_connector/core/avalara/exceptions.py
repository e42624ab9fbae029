"""Avalara-specific exceptions for error handling."""
from __future__ import annotations
from typing import Any, Optional


class AvalaraError(Exception):
    """Base exception for all Avalara operations."""
    pass


class AvalaraTransportError(AvalaraError):
    """The request never produced an HTTP response (DNS, connection, timeout).

    Attributes:
        url: Target URL of the failed request
    """

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"error sending request to {url}: {reason}")


class UnexpectedStatusError(AvalaraError):
    """Non-2xx response whose body is not a structured Avalara error.

    Attributes:
        status_code: HTTP status code
    """

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"unexpected status code: {status_code}")


class AvalaraAPIError(AvalaraError):
    """Structured error returned by the AvaTax REST API.

    Mirrors the ``{"error": {...}}`` body documented for every endpoint.

    Attributes:
        code: Error code (e.g. AuthenticationException)
        message: Human readable message
        target: Field or header the error refers to
        details: Free-form detail text
        status_code: HTTP status code (None for client-side decode errors)
    """

    def __init__(
        self,
        code: str,
        message: str = "",
        target: str = "",
        details: str = "",
        status_code: Optional[int] = None,
    ):
        self.code = code
        self.message = message
        self.target = target
        self.details = details
        self.status_code = status_code
        super().__init__(
            f"AvalaraError: {message} (Code: {code}, Target: {target}, Details: {details})"
        )

    @classmethod
    def from_response_body(cls, body: Any, status_code: Optional[int] = None) -> Optional["AvalaraAPIError"]:
        """Build an error from a decoded error body, or None when it is not one."""
        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if not isinstance(error, dict) or not error.get("code"):
            return None
        return cls(
            code=str(error["code"]),
            message=error.get("message") or "",
            target=error.get("target") or "",
            details=_flatten_details(error.get("details")),
            status_code=status_code,
        )


class AvalaraFormatError(AvalaraAPIError):
    """A 2xx response whose body does not fit the expected schema."""

    CODE = "FormatException"
    MESSAGE = "The server returned the response in an unexpected format"

    def __init__(self, details: str):
        super().__init__(code=self.CODE, message=self.MESSAGE, details=details)


class ConfigurationError(AvalaraError):
    """Connector configuration is missing, invalid, or rejected by Avalara."""
    pass


class SyncError(AvalaraError):
    """Listing a resource kind failed; the original error is chained.

    Attributes:
        resource_type: Resource type id being synced (user, role)
    """

    def __init__(self, resource_type: str, message: str):
        self.resource_type = resource_type
        super().__init__(f"avalara-connector: {message}")


def _flatten_details(details: Any) -> str:
    # The API documents details as a string; the test double sends [{"message": ...}].
    if details is None:
        return ""
    if isinstance(details, list):
        parts = []
        for item in details:
            if isinstance(item, dict):
                parts.append(str(item.get("message", "")))
            else:
                parts.append(str(item))
        return "; ".join(p for p in parts if p)
    return str(details)
