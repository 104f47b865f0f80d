"""
Domain exceptions for the assignment lifecycle.

Transport failures are not wrapped: they surface as the ``requests``
exceptions raised by the transport, and ``TransportError`` is exported only
so callers can catch them by a domain-neutral name.
"""

from requests import RequestException

TransportError = RequestException


class AssignmentError(Exception):
    """Base class for domain rejections of an assignment request."""

    code = "rejected"


class ValidationError(AssignmentError, ValueError):
    """The request violates a domain invariant (e.g. cross-partner assignment)."""

    code = "validation"


class Conflict(AssignmentError):
    """An active assignment already exists for the operator / service point pair."""

    code = "conflict"
