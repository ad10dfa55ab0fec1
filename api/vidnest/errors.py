"""Typed failures raised by the engagement and access-control core.

Every error carries a reason ``code`` (echoed to clients as ``error``), a safe
``message`` and the HTTP status it maps to. Messages never include password
hashes or raw database errors.
"""

from __future__ import annotations


class VidnestError(Exception):
    """Base exception for all domain and infrastructure failures."""

    code = "Error"
    http_status = 500

    def __init__(self, message: str, code: str | None = None, http_status: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status

    def to_response(self) -> dict:
        return {"message": self.message, "error": self.code}


# ─── Validation (400) ───────────────────────────────────────────


class InvalidInput(VidnestError):
    code = "InvalidInput"
    http_status = 400


# ─── Session resolution (401) ───────────────────────────────────


class Unauthenticated(VidnestError):
    code = "Unauthenticated"
    http_status = 401

    def __init__(self, message: str = "Authentication required. Please log in."):
        super().__init__(message)


class InvalidToken(Unauthenticated):
    code = "InvalidToken"

    def __init__(self, message: str = "Invalid authentication token"):
        super().__init__(message)


class ExpiredToken(Unauthenticated):
    code = "ExpiredToken"

    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message)


class AccountNotFound(Unauthenticated):
    code = "AccountNotFound"

    def __init__(self, message: str = "User account not found. Please register."):
        super().__init__(message)


class InvalidCredentials(Unauthenticated):
    code = "InvalidCredentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


# ─── Ownership (403) ────────────────────────────────────────────


class Unauthorized(VidnestError):
    code = "Unauthorized"
    http_status = 403

    def __init__(self, message: str = "Only the owner can modify this resource"):
        super().__init__(message)


# ─── Missing resources (404) ────────────────────────────────────


class NotFound(VidnestError):
    code = "NotFound"
    http_status = 404

    def __init__(self, resource_type: str, resource_id: object | None = None):
        if resource_id is None:
            message = f"{resource_type} not found"
        else:
            message = f"{resource_type} '{resource_id}' not found"
        super().__init__(message)
        self.resource_type = resource_type
        self.resource_id = resource_id


class ChannelNotFound(NotFound):
    code = "ChannelNotFound"

    def __init__(self, handle: str):
        super().__init__("Channel", handle)


# ─── Conflicts (409) ────────────────────────────────────────────


class Conflict(VidnestError):
    code = "Conflict"
    http_status = 409


class AlreadyExists(Conflict):
    code = "AlreadyExists"


class AlreadyFollowing(Conflict):
    code = "AlreadyFollowing"

    def __init__(self, message: str = "You are already subscribed to this channel"):
        super().__init__(message)


class NotFollowing(Conflict):
    code = "NotFollowing"

    def __init__(self, message: str = "You are not subscribed to this channel"):
        super().__init__(message)


class NothingToUndo(Conflict):
    code = "NothingToUndo"

    def __init__(self, message: str = "No like exists to remove"):
        super().__init__(message)


class HandleTaken(Conflict):
    code = "HandleTaken"

    def __init__(self, message: str = "A user with this email or username already exists"):
        super().__init__(message)


# ─── Infrastructure (503) ───────────────────────────────────────


class UpstreamFailure(VidnestError):
    code = "UpstreamFailure"
    http_status = 503


class MediaStoreError(UpstreamFailure):
    code = "MediaStoreError"
