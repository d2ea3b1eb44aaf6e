"""Error taxonomy shared by the scheduler, the ledger and the facade.

A plan that has not started yet is a resolved state, not an error, and has
no exception here.
"""

from __future__ import annotations


class FitcoachError(Exception):
    """Base class for errors raised to callers of the workout services."""


class NotFoundError(FitcoachError, LookupError):
    """A referenced plan, assignment or log entry does not exist."""


class ConflictError(FitcoachError):
    """A set completion already exists for that client, exercise, set and day."""


class InvalidInputError(FitcoachError, ValueError):
    """Input was rejected before any storage call was made."""
