"""HTTP request/response values and request helpers"""
from base64 import b64encode
from collections.abc import Mapping
from functools import partial
from itertools import chain
from operator import attrgetter, methodcaller
from urllib.parse import urlencode

__all__ = [
    "Request",
    "Response",
    "basic_auth",
    "form_request",
    "GET",
    "POST",
    "PUT",
    "DELETE",
]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class _FrozenDict(Mapping):
    __slots__ = "_inner"

    def __init__(self, inner=()):
        self._inner = dict(inner)

    __len__ = property(attrgetter("_inner.__len__"))
    __iter__ = property(attrgetter("_inner.__iter__"))
    __getitem__ = property(attrgetter("_inner.__getitem__"))
    __repr__ = property(attrgetter("_inner.__repr__"))


class _ValueObject(object):
    __slots__ = ()

    def _asdict(self):
        return {a: getattr(self, a) for a in self.__slots__}

    def __eq__(self, other):
        if isinstance(other, self.__class__):
            return self._asdict() == other._asdict()
        return NotImplemented

    def __ne__(self, other):
        if isinstance(other, self.__class__):
            return self._asdict() != other._asdict()
        return NotImplemented

    def replace(self, **kwargs):
        """Create a copy with replaced fields"""
        return type(self)(**dict(self._asdict(), **kwargs))


class Request(_ValueObject):
    """An outgoing HTTP request.

    Parameters
    ----------
    method: str
        The http method
    url: str
        The full url, query string included
    content: bytes or None
        The request body
    headers: Mapping
        Request headers.
    """

    __slots__ = "method", "url", "content", "headers"
    __hash__ = None

    def __init__(self, method, url, content=None, headers=_FrozenDict()):
        self.method = method
        self.url = url
        self.content = content
        self.headers = headers

    def with_headers(self, headers):
        """Create a new request with added headers.
        The type of the existing header mapping is kept.

        Parameters
        ----------
        headers: Mapping
            the headers to add
        """
        merged = chain(self.headers.items(), headers.items())
        return self.replace(headers=type(self.headers)(merged))

    def __repr__(self):
        return "<Request: {0.method} {0.url}, headers={0.headers!r}>".format(
            self
        )


class Response(_ValueObject):
    """An HTTP response, as returned by any of the supported clients.

    Parameters
    ----------
    status_code: int
        The HTTP status code
    content: bytes or None
        The response body
    headers: Mapping
        The response headers. Client header types (case-insensitive or not)
        are kept as they are.
    """

    __slots__ = "status_code", "content", "headers"
    __hash__ = None

    def __init__(self, status_code, content=None, headers=_FrozenDict()):
        self.status_code = status_code
        self.content = content
        self.headers = headers

    @property
    def ok(self):
        """Whether the status is in the 2xx success range"""
        return 200 <= self.status_code < 300

    def header(self, name, default=None):
        """Look up a response header, ignoring case

        Parameters
        ----------
        name: str
            the header name, e.g. ``"Location"``
        default
            returned when the header is absent
        """
        value = self.headers.get(name)
        if value is not None:
            return value
        lowered = name.lower()
        for key, value in self.headers.items():
            if key.lower() == lowered:
                return value
        return default

    def __repr__(self):
        return ("<Response: {0.status_code}, headers={0.headers!r}>").format(
            self
        )


def basic_auth(credentials):
    """Create an HTTP basic authentication callable

    Parameters
    ----------
    credentials: ~typing.Tuple[str, str]
        The (username, password)-tuple

    Returns
    -------
    ~typing.Callable[[Request], Request]
        A callable which adds basic authentication to a :class:`Request`.
    """
    encoded = b64encode(":".join(credentials).encode("ascii")).decode()
    return methodcaller("with_headers", {"Authorization": "Basic " + encoded})


def form_request(method, url, params):
    """Create a request with a form-encoded body

    Parameters
    ----------
    method: str
        The http method
    url: str
        The requested url
    params: Mapping[str, str or list[str]]
        The form fields, already converted to wire strings.
        A list value repeats its key.

    Example
    -------

    >>> req = form_request("POST", "http://x/users.xml", {"user[name]": "A"})
    >>> req.content
    b'user%5Bname%5D=A'
    """
    return Request(
        method,
        url,
        content=urlencode(list(params.items()), doseq=True).encode("utf-8"),
        headers={"Content-Type": FORM_CONTENT_TYPE},
    )


GET = partial(Request, "GET")
GET.__doc__ = "Shortcut for a GET request"
POST = partial(Request, "POST")
POST.__doc__ = "Shortcut for a POST request"
PUT = partial(Request, "PUT")
PUT.__doc__ = "Shortcut for a PUT request"
DELETE = partial(Request, "DELETE")
DELETE.__doc__ = "Shortcut for a DELETE request"
