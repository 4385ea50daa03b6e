"""
Error types raised by the submission store.

Callers of the gateway only ever see ``SubmissionError`` subclasses, each
carrying a message fit to show to the person who filled in the form.
"""

from __future__ import annotations


class ConfigurationMissing(RuntimeError):
    """The Supabase endpoint or key is absent; the process cannot start."""


class SubmissionError(Exception):
    """Base class for every failure surfaced by the gateway."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidSubmission(SubmissionError):
    pass


class PermissionDenied(SubmissionError):
    pass


class DuplicateSubmission(SubmissionError):
    pass


class RemoteFailure(SubmissionError):
    pass
