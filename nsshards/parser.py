"""Tools for parsing XML data into Python models.

Parsing is tolerant: a child that is missing produces None,
while a child that is present but malformed raises ValueError.
"""

import datetime
import typing as t

import xml.etree.ElementTree as etree

from nsshards.exceptions import APIResponseInvalid

T = t.TypeVar("T")

# NS timestamps are whole seconds since this moment
UNIX_EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.timezone.utc)


class NodeParse:
    """Class to ease the transformation from XML data to a Python object."""

    def __init__(self, node: etree.Element) -> None:
        """Wraps a root node"""
        self.root = node

        child_tags: t.MutableMapping[str, t.MutableSequence[etree.Element]] = {}
        for child in node:
            if child.tag in child_tags:
                child_tags[child.tag].append(child)
            else:
                child_tags[child.tag] = [child]

        # 'Freeze' the child tags attribute so that it appears immutable
        self.child_tags: t.Mapping[str, t.Sequence[etree.Element]] = child_tags

    def has_name(self, name: str) -> bool:
        """Checks whether the given name is a tag of one of the child nodes."""
        return name in self.child_tags

    def from_name(self, name: str) -> t.Sequence[etree.Element]:
        """Returns a sequence of all nodes that have
        the given parameter as a tag.
        Runs in O(1) time since a map is pre-created.
        Raises KeyError if the tag doesnt exist.
        """
        return self.child_tags[name]

    def all(self, name: str) -> t.Sequence[etree.Element]:
        """Returns all nodes with the given tag, empty if there are none."""
        return self.child_tags.get(name, ())

    def first(self, name: str) -> etree.Element:
        """Returns the first node with the given tag.
        O(1) time complexity.
        """
        return self.from_name(name)[0]

    def simple(self, name: str) -> str:
        """Returns the text content of the first subnode with a matching tag"""
        return content(self.first(name))

    def optional(
        self, name: str, converter: t.Callable[[str], T] = str  # type: ignore
    ) -> t.Optional[T]:
        """Returns the converted text of the named child, or None if it is absent."""
        if not self.has_name(name):
            return None
        return converter(self.simple(name))

    def node(
        self, name: str, parser: t.Callable[[etree.Element], T]
    ) -> t.Optional[T]:
        """Returns the result of parsing the named child, or None if it is absent."""
        if not self.has_name(name):
            return None
        return parser(self.first(name))

    def children(
        self, name: str, child: str, key: t.Callable[[etree.Element], T]
    ) -> t.Optional[t.List[T]]:
        """Parses each `child` node under the named node, in document order.

        Returns None if the named node is absent, and an empty list if it has no
        matching children.
        """
        if not self.has_name(name):
            return None
        return [key(sub) for sub in self.first(name).findall(child)]

    def delimited(self, name: str, delimiter: str) -> t.Optional[t.List[str]]:
        """Splits the text of the named child, see `delimited`."""
        return self.optional(name, lambda text: delimited(text, delimiter))


def content(node: etree.Element) -> str:
    """Function to parse simple tags that contain the data as text"""
    return node.text if node.text else ""


def delimited(text: str, delimiter: str) -> t.List[str]:
    """Splits a delimited list, where the empty string is an empty list."""
    if text == "":
        return []
    return text.split(delimiter)


def percentage(text: str) -> float:
    """Parses a percentage, with or without a trailing '%'."""
    if text.endswith("%"):
        text = text[:-1]
    return float(text)


def timestamp(text: str) -> datetime.datetime:
    """Converts Unix time (in seconds) to an aware UTC datetime."""
    return UNIX_EPOCH + datetime.timedelta(seconds=int(text))


def attribute(
    node: etree.Element, name: str, converter: t.Callable[[str], T] = str  # type: ignore
) -> t.Optional[T]:
    """Returns the converted attribute of the node, or None if it is absent."""
    value = node.get(name)
    if value is None:
        return None
    return converter(value)


def as_xml(data: t.Union[str, bytes]) -> etree.Element:
    """Parse the given data as XML and returns the root node"""
    try:
        return etree.fromstring(data)
    except etree.ParseError as error:
        raise APIResponseInvalid(
            f"Tried to parse malformed data as XML. Error: {error}, Got data: {data!r}"
        ) from error
