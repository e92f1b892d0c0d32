"""Reconciling decoded XML trees with resource fields

:func:`tree_to_attributes` decides for every child element of a resource
whether it is a (typed) scalar, a single nested resource,
or a sequence of nested resources.
The other functions go the opposite way,
from resource fields to request parameters or a tree.
"""
import logging
import re
from datetime import date, datetime
from decimal import Decimal
from functools import partial

from toolz import flip

from .codec import ATTR_PREFIX, TEXT_KEY, text_value
from .fields import HasMany, HasOne, Scalar

__all__ = [
    "tree_to_attributes",
    "errors_from_tree",
    "coerce",
    "to_params",
    "to_tree",
]

logger = logging.getLogger(__name__)

TYPE_KEY = ATTR_PREFIX + "type"
NIL_KEY = ATTR_PREFIX + "nil"

_DATETIME_FORMATS = [
    "%Y-%m-%dT%H:%M:%S%z",
    "%Y-%m-%dT%H:%M:%S.%f%z",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S%z",
    "%Y-%m-%d %H:%M:%S",
]
_datetime_parsers = [
    partial(flip(datetime.strptime), fmt) for fmt in _DATETIME_FORMATS
]


def _parse_datetime(text):
    text = text.strip()
    for parse in _datetime_parsers:
        try:
            return parse(text)
        except ValueError:
            continue
    raise ValueError("unknown datetime format: {!r}".format(text))


_INTEGER = re.compile(r"[+-]?[0-9]+")


def _parse_integer(text):
    text = text.strip()
    if not _INTEGER.fullmatch(text):
        raise ValueError("invalid integer: {!r}".format(text))
    return int(text)


def _parse_date(text):
    return datetime.strptime(text.strip(), "%Y-%m-%d").date()


def _parse_decimal(text):
    try:
        return Decimal(text.strip())
    except ArithmeticError:
        raise ValueError("invalid decimal: {!r}".format(text))


COERCIONS = {
    "integer": _parse_integer,
    "boolean": "true".__eq__,
    "datetime": _parse_datetime,
    "date": _parse_date,
    "float": float,
    "decimal": _parse_decimal,
}


def coerce(type_hint, text):
    """Convert element text according to its ``type`` attribute.

    Unknown types leave the text as-is.
    Text that does not parse is kept as the original string.

    >>> coerce('integer', '42')
    42
    >>> coerce('integer', 'forty-two')
    'forty-two'
    >>> coerce('boolean', 'yes')
    False
    """
    try:
        convert = COERCIONS[type_hint]
    except KeyError:
        return text
    try:
        return convert(text)
    except ValueError:
        logger.debug("cannot coerce %r to %s, keeping text", text, type_hint)
        return text


def _is_wire_key(key):
    return key.startswith(ATTR_PREFIX) or key == TEXT_KEY


def _child_keys(node):
    return [key for key in node if not _is_wire_key(key)]


def _is_leaf(node):
    return not isinstance(node, (dict, list)) or (
        isinstance(node, dict) and not _child_keys(node)
    )


def _field_name(key):
    return key.replace("-", "_")


def tree_to_attributes(node, schema, registry):
    """Convert the node of one resource into its fields

    Parameters
    ----------
    node: dict or str or None
        the decoded element of the resource, e.g. ``tree['user']``
    schema: ~activexml.Schema
        the schema of the resource
    registry: ~activexml.Registry
        used to look up the schemas of nested resources

    Returns
    -------
    dict[str, Scalar or HasOne or HasMany]
        the fields, in document order.
        Hyphens in element names become underscores.
    """
    if not isinstance(node, dict):
        return {}
    return {
        _field_name(key): _to_field(key, node[key], schema, registry)
        for key in _child_keys(node)
    }


def _to_field(key, value, schema, registry):
    if isinstance(value, list):
        return _repeated_field(key, value, schema, registry)
    if _is_leaf(value):
        return _leaf_field(value)
    name = _field_name(key)
    if name in schema.has_one:
        many = False
    elif name in schema.has_many or value.get(TYPE_KEY) == "array":
        many = True
    else:
        # the shape can't tell a has-one whose only field is
        # itself composite from a has-many
        keys = _child_keys(value)
        many = len(keys) == 1 and isinstance(value[keys[0]], (dict, list))
        logger.debug(
            "%s.%s looks like %s",
            schema.name,
            name,
            "has-many" if many else "has-one",
        )
    if many:
        return _has_many(value, schema, registry)
    return HasOne(_materialize(value, registry.resolve(key, schema), registry))


def _leaf_field(value):
    if not isinstance(value, dict):
        return Scalar(value)
    type_hint, text = value.get(TYPE_KEY), value.get(TEXT_KEY)
    if type_hint == "array":
        return HasMany([])
    if text is None:
        return Scalar(None)
    return Scalar(coerce(type_hint, text))


def _has_many(value, schema, registry):
    keys = _child_keys(value)
    if not keys:
        return HasMany([])
    child_key = keys[0]
    items = value[child_key]
    if not isinstance(items, list):
        items = [items]
    nested = registry.resolve(child_key, schema)
    return HasMany([_materialize(item, nested, registry) for item in items])


def _repeated_field(key, items, schema, registry):
    if all(_is_leaf(item) for item in items):
        return Scalar([_leaf_field(item).value for item in items])
    nested = registry.resolve(key, schema)
    return HasMany([_materialize(item, nested, registry) for item in items])


def _materialize(node, schema, registry):
    resource = registry.new_resource(schema)
    resource._set_attributes(tree_to_attributes(node, schema, registry))
    return resource


def errors_from_tree(node):
    """The messages of an ``<errors>`` element

    >>> errors_from_tree({'error': "Name can't be blank"})
    ["Name can't be blank"]
    """
    if not isinstance(node, dict):
        return []
    errors = node.get("error")
    if errors is None:
        return []
    if not isinstance(errors, list):
        errors = [errors]
    return [_error_text(error) for error in errors]


def _error_text(error):
    if isinstance(error, dict):
        return error.get(TEXT_KEY, "")
    return error or ""


def to_params(resource):
    """The form parameters to save a resource with.
    Only scalar properties are included, as ``singular[name]`` keys.
    A list of values is sent as a repeated ``singular[name][]`` key.

    Returns
    -------
    dict[str, str or list[str]]
    """
    singular = resource.schema.singular
    params = {}
    for name, value in resource.properties.items():
        if isinstance(value, list):
            key = "{}[{}][]".format(singular, name)
            params[key] = [text_value(item) for item in value]
        else:
            params["{}[{}]".format(singular, name)] = text_value(value)
    return params


_TYPE_NAMES = [
    (bool, "boolean"),
    (int, "integer"),
    (datetime, "datetime"),
    (date, "date"),
    (float, "float"),
    (Decimal, "decimal"),
]


def _scalar_node(value):
    if value is None:
        return {NIL_KEY: "true"}
    for cls, type_name in _TYPE_NAMES:
        if isinstance(value, cls):
            return {TYPE_KEY: type_name, TEXT_KEY: text_value(value)}
    return text_value(value)


def _resource_node(resource):
    node = {}
    for name, field in resource._fields.items():
        element = name.replace("_", "-")
        if isinstance(field, HasOne):
            node[element] = _resource_node(field.value)
        elif isinstance(field, HasMany):
            many = {TYPE_KEY: "array"}
            for nested in field.value:
                many.setdefault(nested.schema.singular, []).append(
                    _resource_node(nested)
                )
            node[element] = many
        elif isinstance(field.value, list):
            node[element] = [_scalar_node(item) for item in field.value]
        else:
            node[element] = _scalar_node(field.value)
    return node


def to_tree(resource):
    """Convert a resource into a tree which :func:`~activexml.codec.encode`
    can write, with ``type`` attributes for non-string scalars.
    """
    return {resource.schema.singular: _resource_node(resource)}
