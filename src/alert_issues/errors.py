from __future__ import annotations


class AlertIssuesError(Exception):
    pass


class DecodeError(AlertIssuesError):
    """The inbound webhook body is not a valid Alertmanager notification."""


class TransportError(AlertIssuesError):
    """The issue tracker could not be reached or rejected the request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class UnsupportedStatus(AlertIssuesError):
    def __init__(self, status: str) -> None:
        super().__init__(f"Unsupported notification status: {status!r}")
        self.status = status
