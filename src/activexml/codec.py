"""Conversion between XML documents and generic trees

A tree is made of plain python values:

* an element with only text becomes a ``str`` (``None`` when empty)
* an element with attributes or children becomes a ``dict``.
  Attributes are keyed with an ``@`` prefix, non-blank text with ``#text``,
  and children by their tag.
* a tag occurring more than once under the same parent becomes a ``list``

>>> decode(b'<user><name>Ann</name><age type="integer">5</age></user>')
{'user': {'name': 'Ann', 'age': {'@type': 'integer', '#text': '5'}}}
"""
from datetime import date, datetime

from lxml import etree

from .errors import DecodeError

__all__ = ["decode", "encode", "ATTR_PREFIX", "TEXT_KEY"]

ATTR_PREFIX = "@"
TEXT_KEY = "#text"

_PARSER_OPTIONS = dict(
    resolve_entities=False,
    remove_comments=True,
    remove_pis=True,
    no_network=True,
)
_PARSER = etree.XMLParser(**_PARSER_OPTIONS)
# text is re-encoded as UTF-8, whatever its encoding declaration says
_TEXT_PARSER = etree.XMLParser(encoding="utf-8", **_PARSER_OPTIONS)


def decode(content, force_array=()):
    """Parse an XML document into a tree

    Parameters
    ----------
    content: bytes or str
        the XML document
    force_array: ~typing.Collection[str]
        tags which always decode to a list, even if they occur once

    Returns
    -------
    dict
        a mapping of the root tag to its node

    Raises
    ------
    DecodeError
        if the content is blank or not well-formed XML
    """
    parser = _PARSER
    if isinstance(content, str):
        content, parser = content.encode("utf-8"), _TEXT_PARSER
    if not content or not content.strip():
        raise DecodeError("empty document")
    try:
        root = etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise DecodeError(str(e)) from e
    force_array = frozenset(force_array)
    tag = _localname(root)
    node = _parse_element(root, force_array)
    return {tag: [node] if tag in force_array else node}


def _localname(elem):
    return etree.QName(elem).localname


def _is_blank(text):
    return text is None or not text.strip()


def _parse_element(elem, force_array):
    # unresolved entity references are skipped
    children = [child for child in elem if isinstance(child.tag, str)]
    if not elem.attrib and not children:
        return elem.text if elem.text else None

    node = {ATTR_PREFIX + _attrname(k): v for k, v in elem.attrib.items()}
    texts = [elem.text] + [child.tail for child in children]
    text = "".join(t for t in texts if not _is_blank(t))
    if text:
        node[TEXT_KEY] = text

    counts = {}
    for child in children:
        tag = _localname(child)
        counts[tag] = counts.get(tag, 0) + 1
        value = _parse_element(child, force_array)
        _add_node(node, tag, counts[tag], value, force_array)
    return node


def _attrname(key):
    return etree.QName(key).localname


def _add_node(node, tag, count, value, force_array):
    if tag in force_array:
        node.setdefault(tag, []).append(value)
    elif count == 1:
        node[tag] = value
    elif count == 2:
        node[tag] = [node[tag], value]
    else:
        node[tag].append(value)


def encode(tree):
    """Serialize a tree into an XML document

    Parameters
    ----------
    tree: ~typing.Mapping[str, Any]
        a mapping with exactly one key: the root tag

    Returns
    -------
    bytes
        the UTF-8 encoded document, with XML declaration
    """
    if len(tree) != 1:
        raise ValueError(
            "a tree must have exactly one root, got {!r}".format(list(tree))
        )
    (tag, node), = tree.items()
    if isinstance(node, list):
        raise ValueError("the root node {!r} cannot be a list".format(tag))
    root = etree.Element(tag)
    _fill_element(root, node)
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8")


def _fill_element(elem, node):
    if node is None:
        return
    if not isinstance(node, dict):
        elem.text = text_value(node)
        return
    for key, value in node.items():
        if key == TEXT_KEY:
            elem.text = text_value(value)
        elif key.startswith(ATTR_PREFIX):
            elem.set(key[len(ATTR_PREFIX):], text_value(value))
        else:
            for item in value if isinstance(value, list) else [value]:
                _fill_element(etree.SubElement(elem, key), item)


def text_value(value):
    """The text representation of a scalar, as it is written on the wire

    >>> text_value(True)
    'true'
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)
