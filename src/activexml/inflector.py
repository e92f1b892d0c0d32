"""English pluralization of resource names"""
import re

__all__ = ["pluralize", "camelize", "UNCOUNTABLE", "PLURAL_RULES"]

UNCOUNTABLE = frozenset(
    [
        "equipment",
        "information",
        "rice",
        "money",
        "species",
        "series",
        "fish",
        "sheep",
        "moose",
    ]
)

# first match wins
PLURAL_RULES = [
    (re.compile(pattern, re.IGNORECASE), replacement)
    for pattern, replacement in [
        (r"(m)an$", r"\1en"),
        (r"(pe)rson$", r"\1ople"),
        (r"(child)$", r"\1ren"),
        (r"(ax|test)is$", r"\1es"),
        (r"(octop|vir)us$", r"\1i"),
        (r"(alias|status)$", r"\1es"),
        (r"(bu)s$", r"\1ses"),
        (r"(buffal|tomat)o$", r"\1oes"),
        (r"([ti])um$", r"\1a"),
        (r"sis$", "ses"),
        (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
        (r"(hive)$", r"\1s"),
        (r"([^aeiouy]|qu)y$", r"\1ies"),
        (r"^(ox)$", r"\1en"),
        (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
        (r"(x|ch|ss|sh)$", r"\1es"),
        (r"([ml])ouse$", r"\1ice"),
        (r"(quiz)$", r"\1zes"),
        (r"s$", "s"),
        (r"$", "s"),
    ]
]


def pluralize(word, plural=None):
    """The plural form of a noun

    Parameters
    ----------
    word: str
        the singular noun
    plural: str or None
        an explicit plural, returned as-is when given

    Example
    -------

    >>> pluralize('person')
    'people'
    >>> pluralize('fish')
    'fish'
    >>> pluralize('cactus', plural='cacti')
    'cacti'
    """
    if plural:
        return plural
    if word.lower() in UNCOUNTABLE:
        return word
    for pattern, replacement in PLURAL_RULES:
        if pattern.search(word):
            return pattern.sub(replacement, word, count=1)
    return word


def camelize(word):
    """Turn an element or attribute name into a resource name

    >>> camelize('line-item')
    'LineItem'
    """
    return "".join(
        part.capitalize() for part in re.split(r"[-_]", word) if part
    )
