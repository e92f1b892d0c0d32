"""Declaring resources, and the configuration they share"""
import logging
import typing as t
from dataclasses import dataclass, field

from .errors import UnknownResource
from .inflector import camelize, pluralize
from .query import dispatch, execute
from .resource import Resource
from .urls import resolve_prefix

__all__ = ["Schema", "Registry"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Schema:
    """The naming and URL template of a resource type.

    Parameters
    ----------
    name: str
        the display name, e.g. ``"User"``
    singular: str
        element name of one resource, e.g. ``"user"``
    plural: str
        element and path name of the collection, e.g. ``"users"``
    prefix: str
        the absolute URL the collection lives under
    has_many: frozenset
        association names which are always sequences
    has_one: frozenset
        association names which are always a single resource
    """

    name: str
    singular: str
    plural: str
    prefix: str
    has_many: t.FrozenSet[str] = field(default_factory=frozenset)
    has_one: t.FrozenSet[str] = field(default_factory=frozenset)


class Registry:
    """A set of declared resources, bound to one host and HTTP client.

    Parameters
    ----------
    default_host: str or ~typing.Callable[[], str]
        ``scheme://host[:port]`` for resources without an absolute prefix.
        A callable is asked each time a resource is declared.
    client
        HTTP client for blocking operations.
        See :func:`~activexml.clients.send` for supported types.
        Defaults to :mod:`urllib`.
    async_client
        HTTP client for operations given a callback.
        See :func:`~activexml.clients.send_async` for supported types.
    auth: ~typing.Tuple[str, str] \
        or ~typing.Callable[[Request], Request] or None
        Authentication for all requests, as in :func:`~activexml.execute`

    Example
    -------

    >>> site = Registry('http://localhost:3000')
    >>> User = site.model('User', has_many=['roles'])
    >>> User.find('first').name
    'Ann'
    """

    def __init__(
        self,
        default_host="http://localhost",
        client=None,
        async_client=None,
        auth=None,
    ):
        self._default_host = default_host
        self._schemas = {}
        self.client = client
        self.async_client = async_client
        self.auth = auth

    @property
    def default_host(self):
        host = self._default_host
        return host() if callable(host) else host

    def declare(
        self,
        name,
        singular=None,
        plural=None,
        prefix=None,
        has_many=(),
        has_one=(),
    ):
        """Declare a resource type

        Parameters
        ----------
        name: str
            the display name. Also the key to look the schema up by.
        singular: str or None
            the singular element name. Defaults to the lowercased name.
        plural: str or None
            the plural name. Defaults to the pluralized singular.
        prefix: str or None
            an absolute URL, or a path on the default host
        has_many: ~typing.Iterable[str]
            associations to always treat as sequences
        has_one: ~typing.Iterable[str]
            associations to always treat as a single resource

        Returns
        -------
        Schema
            the new schema
        """
        singular = singular or name.lower()
        schema = Schema(
            name=name,
            singular=singular,
            plural=pluralize(singular, plural),
            prefix=resolve_prefix(prefix, self.default_host),
            has_many=frozenset(has_many),
            has_one=frozenset(has_one),
        )
        self._schemas[name] = schema
        logger.debug("declared %r", schema)
        return schema

    def model(self, name, **options):
        """Declare a resource type, returning its template resource.

        The template is used like a class:
        ``User.find(1)``, ``User.build(...)``, ``User.create(...)``.

        Parameters
        ----------
        name: str
            the display name
        **options
            passed to :meth:`declare`

        Returns
        -------
        ~activexml.Resource
            a new, empty resource
        """
        return self.new_resource(self.declare(name, **options))

    def new_resource(self, schema):
        """A new, empty resource of the given schema, bound to this registry"""
        return Resource(schema, self)

    def __getitem__(self, name):
        try:
            return self._schemas[name]
        except KeyError:
            raise UnknownResource(name)

    def __contains__(self, name):
        return name in self._schemas

    def __iter__(self):
        return iter(self._schemas)

    def __len__(self):
        return len(self._schemas)

    def resolve(self, element_name, parent):
        """Find the schema of a nested resource element

        Declared schemas are matched on their singular form first,
        then on their plural (for fields holding a list), then on their
        name. If none matches, a schema is inferred
        which shares the parent's prefix. Inferred schemas are not stored.

        Parameters
        ----------
        element_name: str
            the element or field name, e.g. ``"comment"`` or ``"line-item"``
        parent: Schema
            the schema of the enclosing resource

        Returns
        -------
        Schema
        """
        singular = element_name.replace("-", "_")
        for schema in self._schemas.values():
            if schema.singular == singular:
                return schema
        for schema in self._schemas.values():
            if schema.plural == singular:
                return schema
        name = camelize(singular)
        if name in self._schemas:
            return self._schemas[name]
        logger.debug("no declared resource for %r, inferring", element_name)
        return Schema(
            name=name,
            singular=singular,
            plural=pluralize(singular),
            prefix=parent.prefix,
        )

    def execute(self, query, callback=None):
        """Run a query with this registry's client and authentication

        Parameters
        ----------
        query: ~activexml.Query[T]
            the query to run
        callback: ~typing.Callable[[T], ~typing.Any] or None
            if given, the query runs asynchronously on the running event
            loop and the callback receives the result.

        Returns
        -------
        T or asyncio.Task
            the result, or the scheduled task if a callback is given
        """
        if callback is None:
            kwargs = {} if self.client is None else {"client": self.client}
            return execute(query, auth=self.auth, **kwargs)
        return dispatch(
            query, callback, auth=self.auth, client=self.async_client
        )

    def __repr__(self):
        return "<Registry: {} [{}]>".format(
            self.default_host, ", ".join(self._schemas)
        )
