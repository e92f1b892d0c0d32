"""
Remote REST+XML resources as local python objects.
The entire public API is available at root level::

    from activexml import Registry, Resource, execute, GET, Response, ...

Example
-------

>>> site = activexml.Registry('http://localhost:3000')
>>> User = site.model('User')
>>> ann = User.create({'name': 'Ann'})
>>> ann.id
42
"""
import logging

from . import clients, codec, http, inflector, reconcile, urls
from .clients import *  # noqa
from .errors import *  # noqa
from .fields import *  # noqa
from .http import *  # noqa
from .inflector import camelize, pluralize  # noqa
from .query import *  # noqa
from .registry import *  # noqa
from .resource import *  # noqa

__version__ = __import__("importlib.metadata").metadata.version(__name__)
__all__ = ["clients", "codec", "http", "inflector", "reconcile", "urls"]

logging.getLogger(__name__).addHandler(logging.NullHandler())
