#!/usr/bin/env python3
"""
Service-layer exceptions.

The core raises these; the boundary layer maps them to responses using the
http_status hint each class carries.
"""


class ServiceException(Exception):
    """Base exception for service layer errors."""
    http_status = 500


class NotFoundException(ServiceException):
    """Raised when a referenced entity does not exist."""
    http_status = 404


class ForbiddenException(ServiceException):
    """Raised when the acting user does not own the resource."""
    http_status = 403


class ConflictException(ServiceException):
    """Raised on a duplicate academic year, term, application or follow."""
    http_status = 409


class DuplicateApplicationException(ConflictException):
    """Raised when a learner applies to the same bursary twice."""
    pass


class InvalidStateException(ServiceException):
    """Raised when an operation is illegal for the entity's current state."""
    http_status = 409


class ValidationException(ServiceException):
    """Raised when input is well-formed but not acceptable for the operation."""
    http_status = 400
