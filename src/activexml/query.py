"""Running queries: blocking, awaitable, or with a completion callback"""
import asyncio
import logging
import typing as t
import urllib.request
from functools import partial

from .clients import send, send_async
from .http import basic_auth

__all__ = [
    "Query",
    "execute",
    "execute_async",
    "dispatch",
]

T = t.TypeVar("T")

logger = logging.getLogger(__name__)


def _identity(obj):
    return obj


class Query(t.Generic[T]):
    """Abstract base class for query-like objects.
    Any object whose :meth:`~object.__iter__`
    returns a :class:`~activexml.http.Request`/:class:`~activexml.http.Response`
    generator implements it.

    All resource operations are written as queries.
    This keeps one implementation for both the blocking
    and the asynchronous way of running them.

    Note
    ----
    Generator iterators themselves also implement this interface
    (i.e. :meth:`~object.__iter__` returns the generator itself).

    Example
    -------

    >>> def user_count(prefix: str) -> Query[int]:
    ...    response = yield GET(prefix + '/users/count.xml')
    ...    return int(decode(response.content)['count'])
    ...
    >>> execute(user_count('http://localhost:3000'))
    42
    """

    def __iter__(self):
        """A generator iterator which resolves the query

        Returns
        -------
        ~typing.Generator[Request, Response, T]
        """
        raise NotImplementedError()

    def __execute__(self, client, auth):
        """Default blocking execution logic for a query.

        Parameters
        ----------
        client
            the client instance passed to :func:`execute`
        auth: ~typing.Callable[[Request], Request]
            a callable to authenticate a :class:`~activexml.http.Request`

        Returns
        -------
        T
            the query result
        """
        gen = iter(self)
        request = next(gen)
        while True:
            response = send(client, auth(request))
            try:
                request = gen.send(response)
            except StopIteration as e:
                return e.value

    async def __execute_async__(self, client, auth):
        """Default asynchronous execution logic for a query.

        Parameters
        ----------
        client
            the client instance passed to :func:`execute_async`
        auth: ~typing.Callable[[Request], Request]
            a callable to authenticate a :class:`~activexml.http.Request`

        Returns
        -------
        T
            the query result
        """
        gen = iter(self)
        request = next(gen)
        while True:
            response = await send_async(client, auth(request))
            try:
                request = gen.send(response)
            except StopIteration as e:
                return e.value


def _make_auth(auth):
    if auth is None:
        return _identity
    elif callable(auth):
        return auth
    else:
        return basic_auth(auth)


_DEFAULT_CLIENT = urllib.request.build_opener()


def execute(query, auth=None, client=_DEFAULT_CLIENT):
    """Execute a query, blocking until its result is available

    Parameters
    ----------
    query: Query[T]
        The query to resolve
    auth: ~typing.Tuple[str, str] \
        or ~typing.Callable[[Request], Request] or None
        This may be:

        * A (username, password)-tuple for basic authentication
        * A callable to authenticate requests.
        * ``None`` (no authentication)
    client
        The HTTP client to use.
        Its type must have been registered
        with :func:`~activexml.clients.send`.
        If not given, the built-in :mod:`urllib` module is used.

    Returns
    -------
    T
        the query result
    """
    exec_fn = getattr(type(query), "__execute__", Query.__execute__)
    return exec_fn(query, client, _make_auth(auth))


async def execute_async(query, auth=None, client=None):
    """Execute a query asynchronously, returning its result

    Parameters
    ----------
    query: Query[T]
        The query to resolve
    auth: ~typing.Tuple[str, str] \
        or ~typing.Callable[[Request], Request] or None
        Authentication, as in :func:`execute`
    client
        The HTTP client to use.
        Its type must have been registered
        with :func:`~activexml.clients.send_async`.
        If not given, the blocking :mod:`urllib` client is used
        in the event loop's default executor.

    Returns
    -------
    T
        the query result
    """
    exec_fn = getattr(
        type(query), "__execute_async__", Query.__execute_async__
    )
    return await exec_fn(
        query,
        _DEFAULT_CLIENT if client is None else client,
        _make_auth(auth),
    )


# running dispatched tasks, which the event loop only holds weakly
_pending = set()


def _deliver(callback, task):
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(
            "query failed, callback %r not called", callback, exc_info=exc
        )
        return
    callback(task.result())


def dispatch(query, callback, **kwargs):
    """Start a query on the running event loop,
    passing its result to ``callback`` once it is complete.

    Parameters
    ----------
    query: Query[T]
        The query to resolve
    callback: ~typing.Callable[[T], ~typing.Any]
        Called exactly once, on the event loop, with the query result.
        It is not called if the query raises.
    **kwargs
        arguments to pass to :func:`execute_async`

    Returns
    -------
    asyncio.Task
        the scheduled task. Awaiting it gives the query result.

    Raises
    ------
    RuntimeError
        if there is no running event loop
    """
    task = asyncio.get_running_loop().create_task(
        execute_async(query, **kwargs)
    )
    _pending.add(task)
    task.add_done_callback(_pending.discard)
    task.add_done_callback(partial(_deliver, callback))
    return task
