"""Structure-preserving edits of POM text.

:class:`PomDocument` owns the raw text of one POM. A :class:`PatchTarget`
names an element by its position in the document (a locator), the literal
currently expected inside it and the literal to put there instead.
:func:`apply_patch` re-scans the *current* text with expat, which reports
the byte offset of every event, finds each element matching the locator
whose trimmed text is exactly the expected literal and swaps only those
bytes. Whitespace, comments, attribute quoting and everything else stay as
they were.

Patches are applied one after another; every application scans the buffer
left behind by the previous one, so no offset is ever reused.

A locator that finds nothing is not an error: the object model the caller
used may disagree with the raw text (``${...}`` expressions, inherited
values), and guessing would corrupt the file.
"""

from __future__ import annotations

from pathlib import Path
from xml.parsers import expat
from dataclasses import dataclass, field
from typing import Callable, Iterator, List, Optional, Tuple, Union

from pomkeeper.constants import DEPENDENCY_CONTAINER_PATHS
from pomkeeper.exceptions import ManifestParseError
from pomkeeper.models.coordinate import Coordinate
from pomkeeper.utils.filesystem import safe_read_file, safe_write_file
from pomkeeper.utils.logger import get_logger

logger = get_logger("patcher")

# Expands ``${...}`` in text found inside the profile with the given id
# (None outside any profile)
Resolver = Callable[[str, Optional[str]], str]

_WHITESPACE = b" \t\r\n"


# ---------------------------------------------------------------------------
# Event-stream scan
# ---------------------------------------------------------------------------


@dataclass
class _Element:
    tag: str
    parent: Optional["_Element"] = None
    children: List["_Element"] = field(default_factory=list)
    content_start: Optional[int] = None
    content_end: Optional[int] = None

    @property
    def path(self) -> str:
        names: List[str] = []
        node: Optional[_Element] = self
        while node is not None:
            names.append(node.tag)
            node = node.parent
        return "/".join(reversed(names))

    def child(self, tag: str) -> Optional["_Element"]:
        for node in self.children:
            if node.tag == tag:
                return node
        return None

    def iter(self) -> Iterator["_Element"]:
        yield self
        for node in self.children:
            yield from node.iter()

    def span(self, data: bytes) -> Optional[Tuple[int, int]]:
        """Byte span of the trimmed text of a leaf element."""
        if self.children or self.content_start is None or self.content_end is None:
            return None
        start, end = self.content_start, self.content_end
        while start < end and data[start] in _WHITESPACE:
            start += 1
        while end > start and data[end - 1] in _WHITESPACE:
            end -= 1
        return start, end

    def literal(self, data: bytes) -> Optional[str]:
        span = self.span(data)
        if span is None:
            return None
        return data[span[0]:span[1]].decode("utf-8")


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1]


def scan(data: bytes, *, source: Optional[str] = None) -> _Element:
    """Build a position-annotated element tree from raw POM bytes.

    Raises:
        ManifestParseError: The text is not well-formed XML.
    """
    parser = expat.ParserCreate(encoding="utf-8")
    stack: List[_Element] = []
    roots: List[_Element] = []

    def start_element(name: str, attrs: object) -> None:
        parent = stack[-1] if stack else None
        node = _Element(_local_name(name), parent=parent)
        if parent is None:
            roots.append(node)
        else:
            parent.children.append(node)
        stack.append(node)

    def end_element(name: str) -> None:
        node = stack.pop()
        if node.content_start is not None:
            node.content_end = parser.CurrentByteIndex

    def character_data(text: str) -> None:
        if stack and stack[-1].content_start is None and not stack[-1].children:
            stack[-1].content_start = parser.CurrentByteIndex

    parser.StartElementHandler = start_element
    parser.EndElementHandler = end_element
    parser.CharacterDataHandler = character_data

    try:
        parser.Parse(data, True)
    except expat.ExpatError as exc:
        raise ManifestParseError(
            f"Malformed POM: {expat.ErrorString(exc.code)}",
            file_path=source,
            line_number=exc.lineno,
        ) from exc

    if not roots or roots[0].tag != "project":
        raise ManifestParseError("Root element is not <project>", file_path=source)
    return roots[0]


# ---------------------------------------------------------------------------
# Locators
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DependencyLocator:
    """``<version>`` of every governed ``<dependency>`` with this groupId:artifactId."""

    coordinate: Coordinate

    def find(self, root: _Element, data: bytes, resolve: Resolver) -> List[_Element]:
        found: List[_Element] = []
        for node in root.iter():
            if node.tag != "dependency" or node.parent is None:
                continue
            if node.parent.path not in DEPENDENCY_CONTAINER_PATHS:
                continue
            if not self._identity_matches(node, data, resolve):
                continue
            version = node.child("version")
            if version is not None:
                found.append(version)
        return found

    def _identity_matches(self, node: _Element, data: bytes, resolve: Resolver) -> bool:
        expected = (
            ("groupId", self.coordinate.group_id),
            ("artifactId", self.coordinate.artifact_id),
        )
        profile_id = _enclosing_profile_id(node, data)
        for tag, value in expected:
            element = node.child(tag)
            text = element.literal(data) if element is not None else None
            if text is None or resolve(text, profile_id) != value:
                return False
        return True


def _enclosing_profile_id(node: _Element, data: bytes) -> Optional[str]:
    ancestor = node.parent
    while ancestor is not None:
        if ancestor.tag == "profile":
            id_element = ancestor.child("id")
            return id_element.literal(data) if id_element is not None else None
        ancestor = ancestor.parent
    return None


@dataclass(frozen=True)
class ParentLocator:
    """``project/parent/version``."""

    def find(self, root: _Element, data: bytes, resolve: Resolver) -> List[_Element]:
        parent = root.child("parent")
        version = parent.child("version") if parent is not None else None
        return [version] if version is not None else []


@dataclass(frozen=True)
class PropertyLocator:
    """``<name>`` under ``project/properties`` or under a profile's properties."""

    name: str
    profile_id: Optional[str] = None

    def find(self, root: _Element, data: bytes, resolve: Resolver) -> List[_Element]:
        if self.profile_id is None:
            scopes = [root]
        else:
            scopes = [
                profile
                for profile in self._profiles(root)
                if self._profile_id(profile, data) == self.profile_id
            ]

        found: List[_Element] = []
        for scope in scopes:
            properties = scope.child("properties")
            if properties is None:
                continue
            found.extend(node for node in properties.children if node.tag == self.name)
        return found

    @staticmethod
    def _profiles(root: _Element) -> List[_Element]:
        profiles = root.child("profiles")
        if profiles is None:
            return []
        return [node for node in profiles.children if node.tag == "profile"]

    @staticmethod
    def _profile_id(profile: _Element, data: bytes) -> Optional[str]:
        id_element = profile.child("id")
        return id_element.literal(data) if id_element is not None else None


Locator = Union[DependencyLocator, ParentLocator, PropertyLocator]


@dataclass(frozen=True)
class PatchTarget:
    """Replace ``old`` with ``new`` at every element ``locator`` finds."""

    locator: Locator
    old: str
    new: str


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def _identity(text: str, profile_id: Optional[str] = None) -> str:
    return text


class PomDocument:
    """Single owner of the text of one POM.

    Args:
        text: Raw POM content.
        path: File the text came from (used by :meth:`save`).
        resolve: Expands ``${...}`` in groupId/artifactId text while
            locating dependencies.
    """

    def __init__(
        self,
        text: str,
        *,
        path: Optional[Path] = None,
        resolve: Optional[Resolver] = None,
    ) -> None:
        self._original = text
        self._data = text.encode("utf-8")
        self.path = path
        self.resolve: Resolver = resolve or _identity

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "PomDocument":
        file_path = Path(path)
        return cls(safe_read_file(file_path), path=file_path)

    @property
    def data(self) -> bytes:
        """Current buffer as UTF-8 bytes; offsets from :meth:`scan` index into it."""
        return self._data

    @property
    def text(self) -> str:
        return self._data.decode("utf-8")

    @property
    def modified(self) -> bool:
        return self.text != self._original

    def scan(self) -> _Element:
        return scan(self._data, source=str(self.path) if self.path else None)

    def replace_spans(self, spans: List[Tuple[int, int]], replacement: str) -> None:
        """Replace byte ``spans`` of the current buffer, last span first."""
        encoded = replacement.encode("utf-8")
        data = self._data
        for start, end in sorted(spans, reverse=True):
            data = data[:start] + encoded + data[end:]
        self._data = data

    def save(self, path: Optional[Path] = None) -> Path:
        """Write the current text to ``path`` (default: where it was read)."""
        target = path or self.path
        if target is None:
            raise ValueError("PomDocument has no path to save to")
        safe_write_file(target, self.text)
        return target


def apply_patch(document: PomDocument, target: PatchTarget) -> bool:
    """Apply ``target`` to ``document``.

    Returns:
        ``True`` if at least one span was rewritten, ``False`` if nothing
        matched or ``old`` equals ``new``.
    """
    if target.old == target.new:
        return False

    data = document.data
    root = document.scan()

    spans: List[Tuple[int, int]] = []
    for element in target.locator.find(root, data, document.resolve):
        span = element.span(data)
        if span is None:
            continue
        if data[span[0]:span[1]].decode("utf-8") == target.old:
            spans.append(span)

    if not spans:
        logger.debug(
            "No element at %s holds %r; leaving text unchanged",
            target.locator,
            target.old,
        )
        return False

    document.replace_spans(spans, target.new)
    logger.debug(
        "Rewrote %d occurrence(s) at %s: %s -> %s",
        len(spans),
        target.locator,
        target.old,
        target.new,
    )
    return True
