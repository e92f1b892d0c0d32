"""Building resource URLs

All functions are pure: they only look at a :class:`~activexml.Schema`
and their arguments.
"""
from .codec import text_value

__all__ = [
    "resolve_prefix",
    "query_string",
    "collection_url",
    "member_url",
    "new_member_url",
]

_ABSOLUTE_MARKERS = ("http:", "https:")


def resolve_prefix(prefix, default_host):
    """Determine the absolute URL prefix of a resource

    Parameters
    ----------
    prefix: str or None
        an absolute URL, a path, or nothing
    default_host: str
        ``scheme://host[:port]`` to use for relative or missing prefixes

    Example
    -------

    >>> resolve_prefix('public/forum', 'http://www.example.com:8080')
    'http://www.example.com:8080/public/forum'
    >>> resolve_prefix('/public/forum', 'http://www.example.com:8080')
    'http://www.example.com:8080/public/forum'
    >>> resolve_prefix('http://api.test', 'http://www.example.com:8080')
    'http://api.test'
    """
    default_host = default_host.rstrip("/")
    if not prefix:
        return default_host
    if prefix.startswith(_ABSOLUTE_MARKERS):
        return prefix
    return default_host + ("" if prefix.startswith("/") else "/") + prefix


def query_string(params=None):
    """``?key=value&...`` for the given params, or an empty string.

    Note
    ----
    Keys and values are not escaped.
    """
    if not params:
        return ""
    return "?" + "&".join(
        "{}={}".format(key, text_value(value)) for key, value in params.items()
    )


def collection_url(schema, params=None):
    """``{prefix}/{plural}.xml``"""
    return "{0.prefix}/{0.plural}.xml".format(schema) + query_string(params)


def member_url(schema, id=None, params=None):
    """``{prefix}/{plural}/{id}.xml``.

    Without an id (``None`` or an empty string), only the query string
    is returned. ``0`` is an id.
    """
    if id is None or id == "":
        return query_string(params)
    return "{0.prefix}/{0.plural}/{1}.xml".format(schema, id) + query_string(
        params
    )


def new_member_url(schema, params=None):
    """``{prefix}/{plural}/new.xml``"""
    return "{0.prefix}/{0.plural}/new.xml".format(schema) + query_string(
        params
    )
