"""Exceptions raised by activexml.

Validation errors reported by the remote API are not exceptions:
they are stored on the resource (see :attr:`Resource.errors`).
"""

__all__ = ["ActiveXMLError", "DecodeError", "UnknownResource"]


class ActiveXMLError(Exception):
    """base class for all errors of this package"""


class DecodeError(ActiveXMLError, ValueError):
    """a response body is not a well-formed XML document"""


class UnknownResource(ActiveXMLError, LookupError):
    """no resource has been declared under the given name"""
