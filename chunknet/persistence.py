"""
Network Persistence

Tag-delimited text description of a network, written in pre-order with one
line per node:

    <node><reference>3</reference>
          <contents>PATTERN</contents><image>PATTERN</image>
          <children><link><test>PATTERN</test><reference>4</reference></link></children>
          <followed-by><reference>7</reference></followed-by>
          <named-by><reference>9</reference></named-by></node>

children, followed-by and named-by are omitted when absent. A pattern is

    <pattern><modality>visual</modality><string>A</string><number>2</number>
             <finished>true</finished></pattern>

Reading is all-or-nothing: malformed text raises ParseError and no node
record is returned.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from html import escape, unescape
from io import StringIO
from typing import Dict, List, Optional, TextIO, Tuple
import logging
import re

from .errors import ParseError
from .network import DiscriminationNetwork, Link, Node
from .pattern import ListPattern, Modality


logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"<(/?)([a-z-]+)>|([^<]+)")


# =============================================================================
# SECTION 1: Writing
# =============================================================================

def _open(writer: TextIO, tag: str) -> None:
    writer.write(f"<{tag}>")


def _close(writer: TextIO, tag: str) -> None:
    writer.write(f"</{tag}>")


def _tagged(writer: TextIO, tag: str, value) -> None:
    writer.write(f"<{tag}>{escape(str(value), quote=False)}</{tag}>")


def write_pattern(pattern: ListPattern, writer: TextIO) -> None:
    """Write a pattern; only str and int items can be written."""
    _open(writer, "pattern")
    _tagged(writer, "modality", pattern.modality.value)
    for item in pattern:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise TypeError(f"Cannot write pattern item {item!r} of type {type(item).__name__}")
        if isinstance(item, str):
            _tagged(writer, "string", item)
        else:
            _tagged(writer, "number", item)
    _tagged(writer, "finished", "true" if pattern.is_finished() else "false")
    _close(writer, "pattern")


def _write_reference_block(writer: TextIO, tag: str, reference: int) -> None:
    _open(writer, tag)
    _tagged(writer, "reference", reference)
    _close(writer, tag)


def _write_one(node: Node, writer: TextIO) -> None:
    _open(writer, "node")
    _tagged(writer, "reference", node.reference)

    _open(writer, "contents")
    write_pattern(node.contents, writer)
    _close(writer, "contents")
    _open(writer, "image")
    write_pattern(node.image, writer)
    _close(writer, "image")

    if node.children:
        _open(writer, "children")
        for link in node.children:
            _open(writer, "link")
            _open(writer, "test")
            write_pattern(link.test, writer)
            _close(writer, "test")
            _tagged(writer, "reference", link.child)
            _close(writer, "link")
        _close(writer, "children")
    if node.followed_by is not None:
        _write_reference_block(writer, "followed-by", node.followed_by)
    if node.named_by is not None:
        _write_reference_block(writer, "named-by", node.named_by)
    _close(writer, "node")
    writer.write("\n")


def write_node(network: DiscriminationNetwork, handle: int, writer: TextIO) -> None:
    """Write the node at handle, then every node below it, in pre-order."""
    for current in network.preorder(handle):
        _write_one(network.node(current), writer)


def write_network(network: DiscriminationNetwork, writer: TextIO) -> None:
    """Write every root's subtree, roots in handle order."""
    for handle in sorted(network.roots.values()):
        write_node(network, handle, writer)


def dumps(network: DiscriminationNetwork) -> str:
    buffer = StringIO()
    write_network(network, buffer)
    return buffer.getvalue()


# =============================================================================
# SECTION 2: Reading
# =============================================================================

@dataclass
class NodeRecord:
    """Fields of one node as read from text."""
    reference: int
    contents: ListPattern
    image: ListPattern
    links: List[Tuple[ListPattern, int]] = field(default_factory=list)
    followed_by: Optional[int] = None
    named_by: Optional[int] = None

    def to_node(self) -> Node:
        return Node(
            reference=self.reference,
            contents=self.contents,
            image=self.image,
            children=[Link(test, child) for test, child in self.links],
            followed_by=self.followed_by,
            named_by=self.named_by,
        )


class _TagReader:
    """
    Token stream over tag-delimited text.

    Whitespace-only text between tags is layout and is skipped; the body
    of a <string> is read raw, whatever it holds.
    """

    def __init__(self, text: str):
        self._tokens: List[Tuple[str, str]] = []
        for match in _TOKEN_RE.finditer(text):
            closing, tag, body = match.groups()
            if tag is not None:
                self._tokens.append(("close" if closing else "open", tag))
            else:
                self._tokens.append(("text", unescape(body)))
        self._position = 0

    def _skip_layout(self) -> None:
        while (self._position < len(self._tokens) and
               self._tokens[self._position][0] == "text" and
               not self._tokens[self._position][1].strip()):
            self._position += 1

    def at_end(self) -> bool:
        self._skip_layout()
        return self._position >= len(self._tokens)

    def peek(self) -> Optional[Tuple[str, str]]:
        if self.at_end():
            return None
        return self._tokens[self._position]

    def peek_open(self, tag: str) -> bool:
        return self.peek() == ("open", tag)

    def _expect(self, kind: str, value: Optional[str] = None) -> str:
        token = self.peek()
        if token is None:
            raise ParseError(f"Unexpected end of input, expected {kind} {value or ''}".rstrip())
        if token[0] != kind or (value is not None and token[1] != value):
            raise ParseError(f"Expected {kind} {value or ''} but found {token[0]} {token[1]!r}")
        self._position += 1
        return token[1]

    def accept_open(self, tag: str) -> None:
        self._expect("open", tag)

    def accept_close(self, tag: str) -> None:
        self._expect("close", tag)

    def read_tagged(self, tag: str) -> str:
        self.accept_open(tag)
        value = self._expect("text")
        self.accept_close(tag)
        return value

    def read_raw(self, tag: str) -> str:
        """Body of tag exactly as written; empty when there is none."""
        self.accept_open(tag)
        value = ""
        if self._position < len(self._tokens) and self._tokens[self._position][0] == "text":
            value = self._tokens[self._position][1]
            self._position += 1
        self.accept_close(tag)
        return value

    def read_tagged_int(self, tag: str) -> int:
        text = self.read_tagged(tag)
        try:
            return int(text)
        except ValueError:
            raise ParseError(f"Expected integer in <{tag}>, found {text!r}") from None


def _read_pattern(reader: _TagReader) -> ListPattern:
    reader.accept_open("pattern")
    modality_name = reader.read_tagged("modality")
    try:
        modality = Modality(modality_name)
    except ValueError:
        raise ParseError(f"Unknown modality {modality_name!r}") from None

    pattern = ListPattern(modality)
    while True:
        if reader.peek_open("string"):
            pattern.add(reader.read_raw("string"))
        elif reader.peek_open("number"):
            pattern.add(reader.read_tagged_int("number"))
        else:
            break

    finished = reader.read_tagged("finished")
    if finished not in ("true", "false"):
        raise ParseError(f"Expected true or false in <finished>, found {finished!r}")
    if finished == "true":
        pattern.set_finished()
    reader.accept_close("pattern")
    return pattern


def _read_wrapped_pattern(reader: _TagReader, tag: str) -> ListPattern:
    reader.accept_open(tag)
    pattern = _read_pattern(reader)
    reader.accept_close(tag)
    return pattern


def _read_reference_block(reader: _TagReader, tag: str) -> int:
    reader.accept_open(tag)
    reference = reader.read_tagged_int("reference")
    reader.accept_close(tag)
    return reference


def _read_node(reader: _TagReader) -> NodeRecord:
    reader.accept_open("node")
    record = NodeRecord(
        reference=reader.read_tagged_int("reference"),
        contents=_read_wrapped_pattern(reader, "contents"),
        image=_read_wrapped_pattern(reader, "image"),
    )
    if reader.peek_open("children"):
        reader.accept_open("children")
        while reader.peek_open("link"):
            reader.accept_open("link")
            test = _read_wrapped_pattern(reader, "test")
            child = reader.read_tagged_int("reference")
            reader.accept_close("link")
            record.links.append((test, child))
        reader.accept_close("children")
    if reader.peek_open("followed-by"):
        record.followed_by = _read_reference_block(reader, "followed-by")
    if reader.peek_open("named-by"):
        record.named_by = _read_reference_block(reader, "named-by")
    reader.accept_close("node")
    return record


def read_node(stream: TextIO) -> NodeRecord:
    """Read exactly one node description from stream."""
    reader = _TagReader(stream.read())
    record = _read_node(reader)
    if not reader.at_end():
        raise ParseError(f"Unexpected trailing content after node {record.reference}")
    return record


def read_records(stream: TextIO) -> List[NodeRecord]:
    """Read every node description in stream."""
    reader = _TagReader(stream.read())
    records = []
    while not reader.at_end():
        records.append(_read_node(reader))
    return records


def read_network(stream: TextIO, **network_kwargs) -> DiscriminationNetwork:
    """
    Rebuild a network from the output of write_network.

    Handles are preserved. A node no link points to is taken as the root of
    its modality.

    Raises:
        ParseError: malformed text, missing or duplicated handles, links to
            unknown nodes, or two roots for one modality
    """
    records = read_records(stream)
    by_reference: Dict[int, NodeRecord] = {}
    for record in records:
        if record.reference in by_reference:
            raise ParseError(f"Duplicate node reference {record.reference}")
        by_reference[record.reference] = record

    if sorted(by_reference) != list(range(len(by_reference))):
        raise ParseError("Node references are not contiguous from 0")

    for record in records:
        targets = [child for _, child in record.links]
        targets += [r for r in (record.followed_by, record.named_by) if r is not None]
        for target in targets:
            if target not in by_reference:
                raise ParseError(f"Node {record.reference} refers to unknown node {target}")

    try:
        network = DiscriminationNetwork.from_nodes(
            (by_reference[reference].to_node() for reference in range(len(by_reference))),
            **network_kwargs)
    except ValueError as e:
        raise ParseError(str(e)) from e

    logger.debug("read network of %d nodes with %d roots", len(network), len(network.roots))
    return network


def loads(text: str, **network_kwargs) -> DiscriminationNetwork:
    return read_network(StringIO(text), **network_kwargs)
