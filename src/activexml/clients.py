"""Sending requests with any of the supported HTTP clients"""
import asyncio
import logging
import urllib.request
from functools import singledispatch
from urllib.error import HTTPError

from .http import Response

__all__ = ["send", "send_async"]

logger = logging.getLogger(__name__)


@singledispatch
def send(client, request):
    """Given a client, send a :class:`~activexml.http.Request`,
    returning a :class:`~activexml.http.Response`.

    A :func:`~functools.singledispatch` function.
    Error statuses are returned as responses, not raised.

    Parameters
    ----------
    client: any registered client type
        The client with which to send the request.

        Client types registered by default:

        * :class:`urllib.request.OpenerDirector`
          (e.g. from :func:`~urllib.request.build_opener`)
        * :class:`requests.Session`
          (if `requests <https://requests.readthedocs.io/>`_ is installed)
        * :class:`httpx.Client`
          (if `httpx <https://www.python-httpx.org/>`_ is installed)

    request: Request
        The request to send

    Returns
    -------
    Response
        the resulting response


    Example of registering a new HTTP client:

    >>> @send.register(MyClientClass)
    ... def _send(client, request: Request) -> Response:
    ...     r = client.send(request)
    ...     return Response(r.status, r.read(), headers=r.get_headers())
    """
    raise TypeError("client {!r} not registered".format(client))


@singledispatch
def send_async(client, request):
    """Given a client, send a :class:`~activexml.http.Request`,
    returning an awaitable :class:`~activexml.http.Response`.

    A :func:`~functools.singledispatch` function.

    Parameters
    ----------
    client: any registered client type
        The client with which to send the request.

        Client types supported by default:

        * :class:`urllib.request.OpenerDirector`
          (the blocking call runs in the event loop's default executor)
        * :class:`aiohttp.ClientSession`
          (if `aiohttp <https://docs.aiohttp.org/>`_ is installed)
        * :class:`httpx.AsyncClient`
          (if `httpx <https://www.python-httpx.org/>`_ is installed)

    request: Request
        The request to send

    Returns
    -------
    ~typing.Awaitable[Response]
        the resulting response
    """
    raise TypeError("client {!r} not registered".format(client))


def _log_exchange(req, status):
    logger.debug("%s %s -> %s", req.method, req.url, status)


@send.register(urllib.request.OpenerDirector)
def _urllib_send(opener, req):
    """Send a request with an :mod:`urllib` opener"""
    raw_req = urllib.request.Request(
        req.url, req.content, headers=dict(req.headers)
    )
    raw_req.method = req.method
    try:
        res = opener.open(raw_req)
    except HTTPError as http_err:
        res = http_err
    _log_exchange(req, res.getcode())
    return Response(res.getcode(), content=res.read(), headers=res.headers)


@send_async.register(urllib.request.OpenerDirector)
async def _urllib_send_async(opener, req):
    """Send a request with an :mod:`urllib` opener, off the event loop"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, _urllib_send, opener, req)


try:
    import requests
except ImportError:  # pragma: no cover
    pass
else:

    @send.register(requests.Session)
    def _requests_send(session, req):
        """send a request with the `requests` library"""
        res = session.request(
            req.method,
            req.url,
            data=req.content,
            headers=dict(req.headers),
        )
        _log_exchange(req, res.status_code)
        return Response(res.status_code, res.content, headers=res.headers)


try:
    import aiohttp
except ImportError:  # pragma: no cover
    pass
else:

    @send_async.register(aiohttp.ClientSession)
    async def _aiohttp_send(session, req):
        """send a request with the `aiohttp` library"""
        async with session.request(
            req.method,
            req.url,
            data=req.content,
            headers=dict(req.headers),
        ) as resp:
            _log_exchange(req, resp.status)
            return Response(
                resp.status, content=await resp.read(), headers=resp.headers
            )


try:
    import httpx
except ImportError:  # pragma: no cover
    pass
else:

    @send.register(httpx.Client)
    def _httpx_send(client, req):
        """send a request with a blocking `httpx` client"""
        res = client.request(
            req.method,
            req.url,
            content=req.content,
            headers=dict(req.headers),
        )
        _log_exchange(req, res.status_code)
        return Response(res.status_code, res.content, headers=res.headers)

    @send_async.register(httpx.AsyncClient)
    async def _httpx_send_async(client, req):
        """send a request with an asynchronous `httpx` client"""
        res = await client.request(
            req.method,
            req.url,
            content=req.content,
            headers=dict(req.headers),
        )
        _log_exchange(req, res.status_code)
        return Response(res.status_code, res.content, headers=res.headers)
