"""Caller-input errors raised before any verification work begins."""

from __future__ import annotations


class InvalidSubjectIdError(ValueError):
    """Raised when a subject identifier is not a UUID."""


class InvalidClaimIdError(ValueError):
    """Raised when a claim identifier is blank or malformed."""


class InvalidTargetError(ValueError):
    """Raised when a claim target cannot be turned into a checkable resource."""


class UnsafeUrlError(InvalidTargetError):
    """Raised when a target URL points at a blocked network location."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Refusing to use {url!r}: {reason}")
        self.url = url
        self.reason = reason


class ClaimNotFoundError(LookupError):
    """Raised when a claim id is not present in a subject's claim list."""
