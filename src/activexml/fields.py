"""Tagged field values of a resource

A resource keeps all its fields in one ordered mapping of
name to one of :class:`Scalar`, :class:`HasOne` or :class:`HasMany`.
"""
import typing as t
from collections.abc import Mapping
from dataclasses import dataclass

__all__ = ["Scalar", "HasOne", "HasMany", "tag", "is_association"]


@dataclass(frozen=True)
class Scalar:
    """a plain value: str, int, bool, datetime or None"""

    value: t.Any


@dataclass(frozen=True)
class HasOne:
    """a single nested resource (has-one or belongs-to)"""

    value: t.Any


@dataclass(frozen=True)
class HasMany:
    """an ordered sequence of nested resources"""

    value: t.List[t.Any]


_TAGS = (Scalar, HasOne, HasMany)


def is_association(field):
    return isinstance(field, (HasOne, HasMany))


def tag(value):
    """Wrap a plain value in the matching field type.

    Already tagged values are returned unchanged.
    A list is a sequence of resources, or a list of plain values
    which is sent as a repeated parameter.

    >>> tag(5)
    Scalar(value=5)
    >>> tag([])
    HasMany(value=[])
    >>> tag(['a', 'b'])
    Scalar(value=['a', 'b'])

    Raises
    ------
    TypeError
        for mappings (build them into resources first), or lists
        which mix resources and other values
    """
    # local import: resource.py depends on this module
    from .resource import Resource

    if isinstance(value, _TAGS):
        return value
    if isinstance(value, Resource):
        return HasOne(value)
    if isinstance(value, Mapping):
        raise TypeError(
            "cannot store a mapping as a field: {!r}".format(value)
        )
    if isinstance(value, (list, tuple)):
        if all(isinstance(item, Resource) for item in value):
            return HasMany(list(value))
        if any(isinstance(item, (Resource, Mapping)) for item in value):
            raise TypeError(
                "a list field holds either resources or plain values, "
                "got {!r}".format(value)
            )
        return Scalar(list(value))
    return Scalar(value)
