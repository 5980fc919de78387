"""
Domain errors raised by use cases and read models.

The API layer maps them to HTTP statuses (see church_admin.main).
"""


class DomainError(Exception):
    """Base class of expected business failures"""
    pass


class ValidationError(DomainError, ValueError):
    """Missing required field, non-positive amount, bad filter value (400)"""
    pass


class NotFoundError(DomainError, LookupError):
    """Referenced goal / category / contribution does not exist (404)"""
    pass


class ConflictError(DomainError):
    """Operation blocked by dependent data, e.g. category still owns goals (409)"""
    pass
