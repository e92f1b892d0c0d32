"""Resources: local, mutable copies of remote entities

Every remote operation is written once, as a query generator.
Without a callback it runs to completion before returning.
With a callback it is scheduled on the running event loop,
and the callback receives the result.
"""
import logging
import re
from collections.abc import Mapping

from . import codec, urls
from .errors import DecodeError
from .fields import is_association, tag
from .http import DELETE, GET, form_request
from .reconcile import errors_from_tree, to_params, to_tree, tree_to_attributes

__all__ = ["Resource", "FIRST", "ALL"]

logger = logging.getLogger(__name__)

FIRST = "first"
ALL = "all"

_INSTANCE_ATTRS = frozenset(["schema", "registry", "errors"])
_LOCATION_ID = re.compile(r"/([^/]*?)(\.\w+)?$")
_NUMERIC = re.compile(r"\s*(\d+)\s*")


def _parse_id(value):
    """an integer id from an int or a string of digits, otherwise None"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        match = _NUMERIC.fullmatch(value)
        if match:
            return int(match.group(1))
    return None


def _id_from_location(location):
    """The numeric id in the last segment of a ``Location`` URL

    >>> _id_from_location('http://localhost/users/42.xml')
    42
    >>> _id_from_location('http://localhost/users/new.xml') is None
    True
    """
    match = _LOCATION_ID.search(location)
    if match is None:
        return None
    digits = re.match(r"\d+", match.group(1))
    return int(digits.group()) if digits else None


class Resource:
    """A local copy of one remote entity.

    Fields are read and written as attributes (``user.name``),
    or by key (``user['name']``) for names which clash with methods.
    A field holds either a scalar, one nested resource,
    or a list of nested resources.

    A mapping assigned to a field becomes a nested resource,
    as does each mapping in an assigned list.

    A resource without an ``id`` is new: saving it creates it remotely.

    Remote operations given a ``callback`` return an :class:`asyncio.Task`
    at once and must be called from a coroutine or callback running on
    an event loop. Without a running loop they raise :class:`RuntimeError`.

    Instances are normally obtained from a template resource
    returned by :meth:`~activexml.Registry.model`,
    through :meth:`find`, :meth:`build` or :meth:`create`.

    Parameters
    ----------
    schema: ~activexml.Schema
        naming and location of the resource type
    registry: ~activexml.Registry
        resolves nested resources, and executes requests

    Attributes
    ----------
    errors: list[str]
        validation messages from the last :meth:`save`
    """

    def __init__(self, schema, registry):
        self.schema = schema
        self.registry = registry
        self.errors = []
        self._fields = {}

    # field access

    def __getattr__(self, name):
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._fields[name].value
        except KeyError:
            raise AttributeError(
                "{!r} has no field {!r}".format(self, name)
            ) from None

    def __setattr__(self, name, value):
        if (
            name.startswith("_")
            or name in _INSTANCE_ATTRS
            or hasattr(type(self), name)
        ):
            object.__setattr__(self, name, value)
        else:
            self._set_attribute(name, value)

    def __getitem__(self, name):
        return self._fields[name].value

    def __setitem__(self, name, value):
        self._set_attribute(name, value)

    def __contains__(self, name):
        return name in self._fields

    @property
    def id(self):
        """The identity, or ``None`` for a new resource"""
        field = self._fields.get("id")
        return None if field is None else field.value

    @id.setter
    def id(self, value):
        self._set_attribute("id", value)

    @property
    def properties(self):
        """The scalar fields, in the order they were first set"""
        return {
            name: field.value
            for name, field in self._fields.items()
            if not is_association(field)
        }

    @property
    def associations(self):
        """The nested resources (or lists of them), by field name"""
        return {
            name: field.value
            for name, field in self._fields.items()
            if is_association(field)
        }

    def attributes(self, include_associations=False):
        """The field values by name.
        Like ActiveRecord, associations are left out unless asked for.
        """
        if include_associations:
            return {name: field.value for name, field in self._fields.items()}
        return self.properties

    def new_record(self):
        return not self.id

    def valid(self):
        return not self.errors

    def set_attributes(self, attributes):
        """Assign fields one by one. Fields not mentioned are kept."""
        for name, value in attributes.items():
            self._set_attribute(name, value)
        return attributes

    def update_attributes(self, attributes, callback=None):
        """Assign fields one by one, then :meth:`save`"""
        self.set_attributes(attributes)
        return self.save(callback)

    def _set_attributes(self, attributes):
        """Replace all fields"""
        self._clear()
        for name, value in attributes.items():
            self._set_attribute(name, value)

    def _set_attribute(self, name, value):
        self._fields[name] = tag(self._nested(name, value))

    def _nested(self, name, value):
        """mappings, alone or in a list, become nested resources"""
        if isinstance(value, Mapping):
            return self._nested_resource(name, value)
        if isinstance(value, (list, tuple)) and any(
            isinstance(item, Mapping) for item in value
        ):
            return [
                self._nested_resource(name, item)
                if isinstance(item, Mapping)
                else item
                for item in value
            ]
        return value

    def _nested_resource(self, name, attributes):
        schema = self.registry.resolve(name, self.schema)
        resource = self.registry.new_resource(schema)
        resource.set_attributes(attributes)
        return resource

    def _clear(self):
        self._fields.clear()

    def to_xml(self):
        """This resource as an XML document, as ``bytes``"""
        return codec.encode(to_tree(self))

    def __repr__(self):
        if self.new_record():
            return "<{} (new)>".format(self.schema.name)
        return "<{} id={!r}>".format(self.schema.name, self.id)

    # remote operations

    def _execute(self, query, callback):
        return self.registry.execute(query, callback)

    def find(self, id, params=None, callback=None):
        """Fetch one or more resources

        Parameters
        ----------
        id: int or str
            a numeric id, ``"first"`` or ``"all"``
        params: ~typing.Mapping or None
            query parameters for the request URL
        callback: ~typing.Callable or None
            if given, runs asynchronously and passes the result to it

        Returns
        -------
        Resource or list[Resource] or None
            a list for ``"all"``; the first result or ``None`` for
            ``"first"``; the resource for an id. Anything else is rejected
            with ``None``, without a request.
        """
        if id in (FIRST, ALL):
            return self._execute(self._find_many_query(id, params), callback)
        number = _parse_id(id)
        if number is None:
            return None
        return self._execute(self._find_one_query(number, params), callback)

    def build(self, attributes=None, check_new=False):
        """A new, unsaved resource of the same type

        Parameters
        ----------
        attributes: ~typing.Mapping or None
            initial fields
        check_new: bool
            if true, first load defaults from the remote ``new`` template,
            blocking until it is loaded.
            The given attributes override these defaults.
        """
        resource = self.registry.new_resource(self.schema)
        if check_new:
            resource._execute(resource._load_template_query(), None)
        for name, value in (attributes or {}).items():
            resource._set_attribute(name, value)
        return resource

    def create(self, attributes=None, callback=None):
        """:meth:`build` and :meth:`save` a new resource.

        Returns the new resource, whether or not saving succeeded.
        """
        resource = self.build(attributes)
        return resource._execute(resource._create_query(), callback)

    def save(self, callback=None):
        """Create or update the remote resource

        Returns
        -------
        bool
            whether the request succeeded without validation errors
        """
        return self._execute(self._save_query(), callback)

    def destroy(self, id=None, callback=None):
        """Delete this resource, or the one with the given id.
        ``destroy(callback)`` is also accepted.

        Returns
        -------
        Resource or bool
            this resource on success, otherwise ``False``.
            ``False`` is returned without a request if there is no id.
        """
        if callable(id) and callback is None:
            id, callback = None, id
        target = id or self.id
        if not target:
            return False
        return self._execute(self._destroy_query(id, target), callback)

    def reload(self, callback=None):
        """Replace all fields with a fresh copy of the remote resource.
        A new resource is returned as-is.
        """
        if not self.id:
            return self
        return self._execute(self._reload_query(), callback)

    # queries

    def _decode_body(self, response):
        if not response.content or not response.content.strip():
            return None
        try:
            return codec.decode(response.content)
        except DecodeError as e:
            logger.warning(
                "ignoring undecodable %s response body: %s",
                self.schema.name,
                e,
            )
            return None

    def _decode_found(self, response):
        if not response.ok:
            logger.warning(
                "cannot find %s: status %s",
                self.schema.name,
                response.status_code,
            )
            return None
        return self._decode_body(response)

    def _from_tree(self, node):
        return self.build(
            tree_to_attributes(node, self.schema, self.registry)
        )

    def _collection_nodes(self, doc):
        wrapper = doc.get(self.schema.plural)
        if not isinstance(wrapper, dict):
            return []
        nodes = wrapper.get(self.schema.singular)
        if nodes is None:
            return []
        return nodes if isinstance(nodes, list) else [nodes]

    def _find_many_query(self, keyword, params):
        response = yield GET(urls.collection_url(self.schema, params))
        doc = self._decode_found(response)
        nodes = [] if doc is None else self._collection_nodes(doc)
        results = [self._from_tree(node) for node in nodes]
        if keyword == FIRST:
            return results[0] if results else None
        return results

    def _find_one_query(self, id, params):
        response = yield GET(urls.member_url(self.schema, id, params))
        doc = self._decode_found(response)
        if doc is None:
            return None
        resource = self._from_tree(doc.get(self.schema.singular))
        # the body may leave out the id
        if "id" not in resource:
            resource._set_attribute("id", id)
        return resource

    def _load_template_query(self):
        response = yield GET(urls.new_member_url(self.schema))
        doc = self._decode_body(response)
        if doc is not None and self.schema.singular in doc:
            self._set_attributes(
                tree_to_attributes(
                    doc[self.schema.singular], self.schema, self.registry
                )
            )

    def _save_query(self):
        self.errors = []
        if self.new_record():
            method, url = "POST", urls.collection_url(self.schema)
        else:
            method, url = "PUT", urls.member_url(self.schema, self.id)
        response = yield form_request(method, url, to_params(self))

        doc = self._decode_body(response)
        if doc is None:
            pass
        elif "errors" in doc:
            self.errors = errors_from_tree(doc["errors"])
        elif self.schema.singular in doc:
            self._set_attributes(
                tree_to_attributes(
                    doc[self.schema.singular], self.schema, self.registry
                )
            )

        if self.new_record() and response.status_code == 201:
            location = response.header("Location")
            if location:
                id = _id_from_location(location)
                if id is not None:
                    self._set_attribute("id", id)

        return response.ok and not self.errors

    def _create_query(self):
        yield from self._save_query()
        return self

    def _destroy_query(self, given_id, target):
        response = yield DELETE(urls.member_url(self.schema, target))
        if not response.ok:
            return False
        if not given_id or str(given_id) == str(self.id):
            self._fields.pop("id", None)
        return self

    def _reload_query(self):
        fresh = yield from self._find_one_query(self.id, None)
        if fresh is not None:
            self._set_attributes(fresh._fields)
        return self
