"""
:mod:`nodematch` is a lenient HTML parser and simple DOM implementation
with ancestor-chain pattern matching.

Instead of selectors, patterns are written as markup fragments. A
fragment such as ``<form><div><a>`` describes a chain of node shapes;
a node in the tree matches when its own ancestor chain *ends with* that
chain, where each node in the tree must have the same type, tag and
namespace as its counterpart in the fragment and carry at least the
attributes written in the fragment.

:mod:`nodematch`

- is a single module;
- has no dependency outside `PSL <https://docs.python.org/3/library/>`_;
- walks trees with stateless, resumable steps (:func:`next_node`,
  :func:`prev_node`) that report how far each step moved up or down.

Simple example:

.. doctest::

   >>> import nodematch
   >>> html = '''
   ... <html>
   ... <body>
   ...   <div id="topbar">
   ...     <form method="GET" action="/search">
   ...       <div id="menu">
   ...         <a href="/doc/">Documents</a>
   ...         <a href="/pkg/">Packages</a>
   ...       </div>
   ...     </form>
   ...     <a href="/">Home</a>
   ...   </div>
   ... </body>
   ... </html>'''
   >>> root = nodematch.parse_html(html)
   >>> [node.text for node in root.find_all('<form><div><a>')]
   ['Documents', 'Packages']
   >>> root.find_all('<form><div id="elsewhere"><a>')
   []
   >>> [node.data for node in root.find_all('<a href="/">Home')]
   ['Home']
"""

import argparse
import html
import json
import logging
import sys
from collections import OrderedDict
from enum import Enum
from html.parser import HTMLParser
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import (
    IO,
    Generator,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

logger = logging.getLogger(__name__)


PatternLike = Union[str, "Node"]


class NodeType(Enum):
    """
    Node types.

    The set is closed; every :class:`Node` has exactly one of these.
    """

    ERROR = 0
    TEXT = 1
    DOCUMENT = 2
    ELEMENT = 3
    COMMENT = 4
    DOCTYPE = 5


Attribute = NamedTuple("Attribute", [("namespace", str), ("key", str), ("val", str)])
Attribute.__doc__ = """
Represents a single attribute as a ``(namespace, key, val)`` triple.

Attributes compare equal only if all three fields are equal.
"""


class Node(object):
    """
    Represents a DOM node.

    Parts of JavaScript's DOM ``Node`` API and ``Element`` API are
    mirrored here, with extensions. Instead of ``querySelector`` and
    ``querySelectorAll``, :meth:`find` and :meth:`find_all` take a
    markup fragment as the pattern (see :func:`find_all`).

    Sibling links are maintained alongside :attr:`children`, so
    :meth:`next_sibling()` and :meth:`previous_sibling()` are O(1).
    Always go through :meth:`append_child()` and :meth:`remove_child()`
    to modify the tree.

    Attributes:
        type       (:class:`NodeType`)
        data       (:class:`str`): tag name for elements, payload otherwise
        namespace  (:class:`str`): empty string when not namespaced
        attributes (:class:`List`\\[:class:`Attribute`])
        parent     (:class:`Optional`\\[:class:`Node`])
        children   (:class:`List`\\[:class:`Node`])
    """

    type = NodeType.ERROR  # type: NodeType

    def __init__(self, data: str = "", *, namespace: str = "") -> None:
        self.data = data  # type: str
        self.namespace = namespace  # type: str
        self.attributes = []  # type: List[Attribute]
        self.parent = None  # type: Optional[Node]
        self.children = []  # type: List[Node]
        self._prev = None  # type: Optional[Node]
        self._next = None  # type: Optional[Node]

    def __repr__(self) -> str:
        return "<%s %s>" % (self.type.name.lower(), repr(self.data))

    # HTML representation of the node. Meant to be implemented by
    # subclasses.
    def __str__(self) -> str:
        return ""

    @property
    def tag(self) -> Optional[str]:
        """Tag name for element nodes, ``None`` for everything else."""
        if self.type is NodeType.ELEMENT:
            return self.data
        return None

    def append_child(self, child: "Node") -> "Node":
        """Appends a parentless `child` as the last child. Returns `child`."""
        if child.parent is not None or child._prev is not None or child._next is not None:
            raise ValueError("node already has a parent or siblings: %s" % repr(child))
        last = self.last_child()
        if last is not None:
            last._next = child
            child._prev = last
        child.parent = self
        self.children.append(child)
        return child

    def remove_child(self, child: "Node") -> "Node":
        """Detaches `child` from this node. Returns `child`."""
        if child.parent is not self:
            raise ValueError("node is not a child of this node: %s" % repr(child))
        for index, node in enumerate(self.children):
            if node is child:
                del self.children[index]
                break
        if child._prev is not None:
            child._prev._next = child._next
        if child._next is not None:
            child._next._prev = child._prev
        child.parent = child._prev = child._next = None
        return child

    def find(self, pattern: PatternLike) -> Optional["Node"]:
        """Returns the first node in this subtree matching `pattern`, if any."""
        return find(self, pattern)

    def find_all(self, pattern: PatternLike) -> List["Node"]:
        """Returns all nodes in this subtree matching `pattern`. See :func:`find_all`."""
        return find_all(self, pattern)

    def matched_by(self, pattern: PatternLike) -> bool:
        """
        Checks whether this node is matched by `pattern`.

        See :func:`match`.
        """
        return match(self, _normalize_pattern(pattern))

    def walk(self, *, reverse: bool = False) -> Generator[Tuple["Node", int], None, None]:
        """Alias of :func:`walk` rooted at this node."""
        return walk(self, reverse=reverse)

    def first_child(self) -> Optional["Node"]:
        if self.children:
            return self.children[0]
        else:
            return None

    def first_element_child(self) -> Optional["Node"]:
        for child in self.children:
            if child.type is NodeType.ELEMENT:
                return child
        return None

    def last_child(self) -> Optional["Node"]:
        if self.children:
            return self.children[-1]
        else:
            return None

    def last_element_child(self) -> Optional["Node"]:
        for child in reversed(self.children):
            if child.type is NodeType.ELEMENT:
                return child
        return None

    def next_sibling(self) -> Optional["Node"]:
        return self._next

    def next_siblings(self) -> List["Node"]:
        siblings = []
        sibling = self._next
        while sibling is not None:
            siblings.append(sibling)
            sibling = sibling._next
        return siblings

    def next_element_sibling(self) -> Optional["Node"]:
        sibling = self._next
        while sibling is not None:
            if sibling.type is NodeType.ELEMENT:
                return sibling
            sibling = sibling._next
        return None

    def previous_sibling(self) -> Optional["Node"]:
        return self._prev

    def previous_siblings(self) -> List["Node"]:
        """
        Compared to the natural DOM order, the order of returned nodes
        are reversed. That is, the adjacent sibling (if any) is the
        first in the returned list.
        """
        siblings = []
        sibling = self._prev
        while sibling is not None:
            siblings.append(sibling)
            sibling = sibling._prev
        return siblings

    def previous_element_sibling(self) -> Optional["Node"]:
        sibling = self._prev
        while sibling is not None:
            if sibling.type is NodeType.ELEMENT:
                return sibling
            sibling = sibling._prev
        return None

    def ancestors(
        self, *, root: Optional["Node"] = None
    ) -> Generator["Node", None, None]:
        """
        Ancestors are generated in reverse order of depth, stopping at
        `root`.

        A :class:`RuntimeError` is raised if `root` is not in the
        ancestral chain.
        """
        if self is root:
            return
        ancestor = self.parent
        while ancestor is not root:
            if ancestor is None:
                raise RuntimeError("provided root node not found in ancestral chain")
            yield ancestor
            ancestor = ancestor.parent
        if root:
            yield root

    def descendants(self) -> Generator["Node", None, None]:
        """Descendants are generated in depth-first order."""
        node, _ = next_node(self, self)
        while node is not None:
            yield node
            node, _ = next_node(node, self)

    def attr(self, key: str) -> Optional[str]:
        """
        Returns the value of the first attribute named `key`, or
        ``None``. Attribute namespaces are not compared.
        """
        for attribute in self.attributes:
            if attribute.key == key:
                return attribute.val
        return None

    def attr_ns(self, namespace: str, key: str) -> Optional[str]:
        """Like :meth:`attr`, but the attribute namespace must match too."""
        for attribute in self.attributes:
            if attribute.key == key and attribute.namespace == namespace:
                return attribute.val
        return None

    @property
    def attrs(self) -> "OrderedDict[str, str]":
        """Attribute values keyed by name; the first of duplicate keys wins."""
        attrs = OrderedDict()  # type: OrderedDict[str, str]
        for attribute in self.attributes:
            attrs.setdefault(attribute.key, attribute.val)
        return attrs

    @property
    def html(self) -> str:
        """
        HTML representation of the node.

        (For a :class:`TextNode`, :attr:`html` returns the escaped version
        of the text.)
        """
        return str(self)

    def outer_html(self) -> str:
        """Alias of :attr:`html`."""
        return self.html

    def inner_html(self) -> str:
        """HTML representation of the node's children."""
        return "".join(child.html for child in self.children)

    @property
    def text(self) -> str:
        """The concatenation of all text nodes in this subtree. See :func:`flatten`."""
        return flatten(self)

    def text_content(self) -> str:
        """Alias of :attr:`text`."""
        return self.text


class DocumentNode(Node):
    """Represents the root of a parsed document."""

    type = NodeType.DOCUMENT

    def __str__(self) -> str:
        return self.inner_html()


class ElementNode(Node):
    """
    Represents an element node.

    `attrs` may hold ``(key, val)`` pairs or full ``(namespace, key,
    val)`` triples. Tag names and attribute keys are lowercased;
    attribute values are case-sensitive.
    """

    type = NodeType.ELEMENT

    def __init__(
        self,
        tag: str,
        attrs: Iterable[Sequence[str]] = (),
        *,
        namespace: str = "",
        children: Optional[Iterable[Node]] = None
    ) -> None:
        Node.__init__(self, tag.lower(), namespace=namespace)
        self.attributes = [_make_attribute(attr) for attr in attrs]
        for child in children or []:
            self.append_child(child)

    def __repr__(self) -> str:
        s = "<" + self.data
        if self.namespace:
            s = "<%s:%s" % (self.namespace, self.data)
        if self.attributes:
            s += " attrs=%s" % repr([tuple(a) for a in self.attributes])
        if self.children:
            s += " children=%s" % repr(self.children)
        s += ">"
        return s

    def __str__(self) -> str:
        """HTML representation of the node."""
        s = "<" + self.data
        for attribute in self.attributes:
            key = attribute.key
            if attribute.namespace:
                key = "%s:%s" % (attribute.namespace, key)
            s += ' %s="%s"' % (key, html.escape(attribute.val))
        if self.children:
            s += ">"
            s += "".join(str(child) for child in self.children)
            s += "</%s>" % self.data
        elif not self.namespace and _tag_is_void(self.data):
            s += "/>"
        else:
            s += "></%s>" % self.data
        return s


class TextNode(Node):
    """Represents a text node."""

    type = NodeType.TEXT

    def __init__(self, text: str) -> None:
        Node.__init__(self, text)

    # HTML-escaped form of the text node, except inside raw text
    # elements. Use text for the unescaped version.
    def __str__(self) -> str:
        if self.parent is not None and self.parent.tag in _RAW_TEXT_ELEMENTS:
            return self.data
        return html.escape(self.data)


class CommentNode(Node):
    """Represents a comment node."""

    type = NodeType.COMMENT

    def __init__(self, text: str) -> None:
        Node.__init__(self, text)

    def __str__(self) -> str:
        return "<!--%s-->" % self.data


class DoctypeNode(Node):
    """Represents a doctype declaration; :attr:`data` is the doctype name."""

    type = NodeType.DOCTYPE

    def __init__(self, name: str) -> None:
        Node.__init__(self, name)

    def __str__(self) -> str:
        return "<!DOCTYPE %s>" % self.data


class ErrorNode(Node):
    """
    Represents a failure to produce a node.

    :func:`leaf` returns one for fragments that do not parse, and since
    error nodes only compare equal to other error nodes, it matches
    nothing in a parsed tree.
    """

    type = NodeType.ERROR


def _make_attribute(attr: Sequence[str]) -> Attribute:
    if isinstance(attr, Attribute):
        return attr
    if len(attr) == 2:
        key, val = attr
        return Attribute("", key.lower(), val if val is not None else "")
    if len(attr) == 3:
        namespace, key, val = attr
        return Attribute(namespace, key.lower(), val if val is not None else "")
    raise ValueError("not an attribute pair or triple: %s" % repr(attr))


class DOMBuilderException(Exception):
    """
    Exception raised when :class:`DOMBuilder` detects a bad state.

    Attributes:
        pos (:class:`Tuple`\\[:class:`int`, :class:`int`]):
            Line number and offset in HTML input.
        why (:class:`str`):
            Reason of the exception.
    """

    def __init__(self, pos: Tuple[int, int], why: str) -> None:
        super().__init__(pos, why)
        self.pos = pos
        self.why = why

    def __str__(self) -> str:
        return "DOM builder aborted at %d:%d: %s" % (self.pos[0], self.pos[1], self.why)


class DOMBuilder(HTMLParser):
    """
    HTML parser / DOM builder.

    Subclasses :class:`html.parser.HTMLParser`.

    Consumes HTML and builds a :class:`Node` tree. Once finished, use
    :attr:`root` to access the :class:`DocumentNode`, or, when a
    `context` element was given, :attr:`fragment` to take the parsed
    top-level nodes.

    By default the builder recovers from malformed markup the way
    browsers commonly do (implied end tags, stray end tags ignored,
    unclosed elements left open, table parts outside tables dropped),
    recording each recovery in :attr:`errors`. With ``strict=True`` any
    tag mismatch raises :class:`DOMBuilderException` instead.

    Args:
        strict:  raise on malformed markup instead of recovering
        context: parse as the content of an element like this one
    """

    def __init__(self, *, strict: bool = False, context: Optional[Node] = None) -> None:
        super().__init__(convert_charrefs=True)
        self.strict = strict
        self.errors = []  # type: List[DOMBuilderException]
        if context is None:
            self._container = DocumentNode()  # type: Node
        else:
            self._container = ElementNode(
                context.data, context.attributes, namespace=context.namespace
            )
        self._fragment = context is not None
        self._stack = [self._container]  # type: List[Node]

    @property
    def _current(self) -> Node:
        return self._stack[-1]

    def _error(self, why: str) -> None:
        exc = DOMBuilderException(self.getpos(), why)
        if self.strict:
            raise exc
        logger.debug("recovered from malformed markup: %s", exc)
        self.errors.append(exc)

    def _is_open(self, tag: str) -> bool:
        return any(
            node.type is NodeType.ELEMENT and node.data == tag and not node.namespace
            for node in self._stack
        )

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        tag = tag.lower()
        parent = self._current
        foreign = parent.namespace and parent.tag != "foreignobject"
        if not self.strict and not foreign:
            if tag in ("html", "head", "body") and (self._fragment or self._is_open(tag)):
                self._error("unexpected start tag %s" % repr(tag))
                return
            if tag in _TABLE_PARTS and not self._is_open("table"):
                self._error("start tag %s outside of table" % repr(tag))
                return
            self._close_implied(tag)
            parent = self._current

        if tag in ("svg", "math"):
            namespace = tag
        elif parent.namespace and parent.tag != "foreignobject":
            namespace = parent.namespace
        else:
            namespace = ""
        if namespace:
            attributes = [_foreign_attribute(key, val) for key, val in attrs]
        else:
            attributes = [Attribute("", key, val or "") for key, val in attrs]

        node = ElementNode(tag, attributes, namespace=namespace)
        parent.append_child(node)
        self._stack.append(node)
        # Void elements never get children.
        if not namespace and _tag_is_void(tag):
            self._stack.pop()

    def _close_implied(self, tag: str) -> None:
        closes = _IMPLIED_END_TAGS.get(tag, ())
        while (
            len(self._stack) > 1
            and not self._current.namespace
            and self._current.data in closes
        ):
            self._stack.pop()
        if tag not in _CLOSES_P:
            return
        # An open <p> is closed unless a scope boundary comes first.
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node.namespace or node.data in _P_SCOPE_BOUNDARIES:
                return
            if node.data == "p":
                del self._stack[index:]
                return

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if len(self._stack) == 1:
            if self.strict or not _tag_is_void(tag):
                self._error("extra end tag: %s" % repr(tag))
            return
        if self._current.data == tag:
            self._stack.pop()
            return
        if self.strict:
            raise DOMBuilderException(
                self.getpos(),
                "expecting end tag %s, got %s" % (repr(self._current.data), repr(tag)),
            )
        for index in range(len(self._stack) - 1, 0, -1):
            if self._stack[index].data == tag:
                self._error("end tag %s closes unclosed elements" % repr(tag))
                del self._stack[index:]
                return
        self._error("stray end tag: %s" % repr(tag))

    # Make parser behavior for explicitly and implicitly void elements
    # (e.g., <hr> vs <hr/>) consistent. The self-closing flag is only
    # honored on foreign (SVG and MathML) elements.
    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        depth = len(self._stack)
        self.handle_starttag(tag, attrs)
        if len(self._stack) > depth and self._current.namespace:
            self._stack.pop()

    def handle_data(self, text: str) -> None:
        parent = self._current
        if parent.type is NodeType.DOCUMENT and _is_whitespace(text):
            return
        last = parent.last_child()
        if last is not None and last.type is NodeType.TEXT:
            last.data += text
        else:
            parent.append_child(TextNode(text))

    def handle_comment(self, comment: str) -> None:
        self._current.append_child(CommentNode(comment))

    def handle_decl(self, decl: str) -> None:
        if decl[:7].lower() == "doctype":
            self._current.append_child(DoctypeNode(decl[7:].strip().lower()))
        else:
            self.handle_comment(decl)

    def handle_pi(self, data: str) -> None:
        self.handle_comment("?" + data)

    def unknown_decl(self, data: str) -> None:
        if data.startswith("CDATA[") and self._current.namespace:
            self.handle_data(data[len("CDATA[") :])
        else:
            self.handle_comment("[%s]" % data)

    @property
    def root(self) -> Node:
        """
        Finishes processing and returns the document node.

        In strict mode, raises :class:`DOMBuilderException` if there is
        no root tag or the root tag is not closed yet.
        """
        if self.strict:
            if self._container.first_element_child() is None:
                raise DOMBuilderException(self.getpos(), "no root tag")
            if len(self._stack) > 1:
                raise DOMBuilderException(self.getpos(), "root tag not closed yet")
        return self._container

    @property
    def fragment(self) -> List[Node]:
        """
        Finishes processing and detaches the parsed top-level nodes from
        the context element.

        In strict mode, raises :class:`DOMBuilderException` if a tag is
        left unclosed.
        """
        if self.strict and len(self._stack) > 1:
            raise DOMBuilderException(
                self.getpos(), "tag not closed yet: %s" % repr(self._current.data)
            )
        return [self._container.remove_child(node) for node in list(self._container.children)]


def _foreign_attribute(key: str, val: Optional[str]) -> Attribute:
    prefix, sep, local = key.partition(":")
    if sep and prefix in ("xlink", "xml", "xmlns"):
        return Attribute(prefix, local, val or "")
    return Attribute("", key, val or "")


def parse_html(html: str, *, strict: bool = False, ParserClass: type = DOMBuilder) -> Node:
    """
    Parses HTML string, builds DOM, and returns the document node.

    In strict mode the parser may raise :class:`DOMBuilderException`.

    Args:
        html: input HTML string
        strict: reject malformed markup instead of recovering
        ParserClass: :class:`DOMBuilder` or a subclass

    Returns:
        The :class:`DocumentNode` holding every top-level node.
    """
    builder = ParserClass(strict=strict)  # type: DOMBuilder
    builder.feed(html)
    builder.close()
    return builder.root


def parse_fragment(
    html: str,
    context: Optional[Node] = None,
    *,
    strict: bool = False,
    ParserClass: type = DOMBuilder
) -> List[Node]:
    """
    Parses HTML string as the content of `context` and returns the
    top-level nodes, detached (their :attr:`Node.parent` is ``None``).

    `context` is never modified; it defaults to a generic element with
    no tag name, namespace or attributes.
    """
    if context is None:
        context = ElementNode("")
    builder = ParserClass(strict=strict, context=context)  # type: DOMBuilder
    builder.feed(html)
    builder.close()
    return builder.fragment


def compare(n1: Optional[Node], n2: Optional[Node]) -> bool:
    """
    Returns ``True`` if `n1` has the same type, data and namespace as
    `n2`, and the attributes of `n2` are equal to or a subset of the
    attributes of `n1`.
    """
    if n1 is None or n2 is None:
        return False
    if n1.type is not n2.type or n1.data != n2.data or n1.namespace != n2.namespace:
        return False
    present = set(n1.attributes)
    return all(attribute in present for attribute in n2.attributes)


def match(n1: Optional[Node], n2: Optional[Node]) -> bool:
    """
    Compares the chain of nodes from `n1` up to its root with the chain
    from `n2` up to its root, pairwise with :func:`compare`.

    The result is ``True`` when every pair compares equal until `n2`'s
    chain runs out; nodes above that in `n1`'s chain are unconstrained.
    If `n1`'s chain runs out first the result is ``False``. A missing
    `n2` never matches.
    """
    if n2 is None:
        return False
    while n1 is not None and n2 is not None:
        if not compare(n1, n2):
            return False
        n1 = n1.parent
        n2 = n2.parent
    return n2 is None


def leaf(fragment: str, *, ParserClass: type = DOMBuilder) -> Node:
    """
    Compiles an HTML fragment into a node suitable as the second argument
    of :func:`match`.

    The fragment is parsed as the content of a generic element (so
    ``<html>``, ``<head>`` and ``<body>`` tags are dropped), and starting
    from the first top-level node, :meth:`Node.first_child` is followed
    down to a leaf. That leaf is returned; its ancestors are the rest of
    the pattern.

    If the fragment fails to parse or yields no nodes, an
    :class:`ErrorNode` is returned instead. Note that table parts only
    parse inside a table, so ``<tr><td>`` yields an error node while
    ``<table><tr><td>`` is fine.
    """
    try:
        nodes = parse_fragment(fragment, ElementNode(""), ParserClass=ParserClass)
    except DOMBuilderException as e:
        logger.debug("cannot compile fragment %s: %s", repr(fragment), e)
        return ErrorNode()
    if not nodes:
        logger.debug("fragment %s produced no nodes", repr(fragment))
        return ErrorNode()
    node = nodes[0]
    while node.first_child() is not None:
        node = node.first_child()
    return node


def next_node(node: Optional[Node], root: Optional[Node] = None) -> Tuple[Optional[Node], int]:
    """
    Returns the next node in a depth-first traversal of the tree at
    `root`, where `node` is the current node, together with a delta
    indicating by how much it has descended or ascended the tree
    (descending being positive). When there are no more nodes it
    returns ``None``, along with the ascent accumulated so far.

    If `root` is ``None``, the walk is bounded by the first node found
    with no parent.
    """
    delta = 0
    if node is None:
        return None, delta
    child = node.first_child()
    if child is not None:
        return child, delta + 1
    while node.next_sibling() is None:
        if node.parent is None or node is root:
            return None, delta
        node = node.parent
        delta -= 1
    if node is root:
        return None, delta
    return node.next_sibling(), delta


def prev_node(node: Optional[Node], root: Optional[Node] = None) -> Tuple[Optional[Node], int]:
    """Like :func:`next_node`, but walks last children and previous siblings."""
    delta = 0
    if node is None:
        return None, delta
    child = node.last_child()
    if child is not None:
        return child, delta + 1
    while node.previous_sibling() is None:
        if node.parent is None or node is root:
            return None, delta
        node = node.parent
        delta -= 1
    if node is root:
        return None, delta
    return node.previous_sibling(), delta


def walk(root: Node, *, reverse: bool = False) -> Generator[Tuple[Node, int], None, None]:
    """
    Generates ``(node, depth)`` pairs for `root` and its descendants,
    `root` being at depth 0.

    With `reverse`, last children are visited first.
    """
    step = prev_node if reverse else next_node
    node, depth = root, 0  # type: Optional[Node], int
    while node is not None:
        yield node, depth
        node, delta = step(node, root)
        depth += delta


def _normalize_pattern(pattern: PatternLike) -> Node:
    if isinstance(pattern, str):
        return leaf(pattern)
    if isinstance(pattern, Node):
        return pattern
    raise ValueError("not a fragment or compiled pattern: %s" % repr(pattern))


def find_all(root: Optional[Node], pattern: PatternLike) -> List[Node]:
    """
    Locates the nodes matching `pattern` within `root`.

    `pattern` is first compiled with :func:`leaf` (unless it already is
    a node returned by it). Then `root` and its descendants are visited
    depth-first and every node `n` satisfying ``match(n, pattern)`` is
    returned. Since :func:`match` looks past `root` into its ancestors,
    a pattern may describe nodes above the subtree being searched.

    If there are no such nodes an empty list is returned.

    Note that the fragment must parse as the content of a generic
    element; see :func:`leaf`.
    """
    probe = _normalize_pattern(pattern)
    result = []
    node = root
    while node is not None:
        if match(node, probe):
            result.append(node)
        node, _ = next_node(node, root)
    return result


def find(root: Optional[Node], pattern: PatternLike) -> Optional[Node]:
    """Like :func:`find_all`, but returns the first match only (or ``None``)."""
    probe = _normalize_pattern(pattern)
    node = root
    while node is not None:
        if match(node, probe):
            return node
        node, _ = next_node(node, root)
    return None


def flatten(root: Optional[Node]) -> str:
    """Returns the concatenated data of all text nodes in the tree at `root`."""
    texts = []
    node = root
    while node is not None:
        if node.type is NodeType.TEXT:
            texts.append(node.data)
        node, _ = next_node(node, root)
    return "".join(texts)


# ANSI terminal colours.
RED, GREEN, YELLOW = "\033[31m", "\033[32m", "\033[33m"
BLUE, MAGENTA, CYAN = "\033[34m", "\033[35m", "\033[36m"
RESET = "\033[0m"


def format_node(node: Optional[Node], *, colour: bool = False) -> str:
    """
    Returns a human readable, one-line representation of `node`, with
    optional terminal colouring using ANSI escape codes.

    The representation begins with a capital letter indicating the node
    type: ``X`` error, ``T`` text, ``R`` document, ``E`` element, ``C``
    comment, ``D`` doctype.
    """
    if node is None:
        return ""

    def c(s: str, col: str) -> str:
        if not colour:
            return s
        # Colour each line separately so that line-oriented pagers keep it.
        return "\n".join(col + line + RESET for line in s.split("\n"))

    if node.type is NodeType.ELEMENT:
        attrs = ""
        for attribute in node.attributes:
            name = c(attribute.key, YELLOW)
            if attribute.namespace:
                name = c(attribute.namespace, YELLOW) + ":" + name
            val = json.dumps(attribute.val, ensure_ascii=False)
            attrs += " " + name + "=" + c(val, CYAN)
        name = c(node.data, RED)
        if node.namespace:
            name = c(node.namespace, RED) + ":" + name
        return c("E ", MAGENTA) + name + attrs
    if node.type is NodeType.TEXT:
        return c("T ", MAGENTA) + node.data
    if node.type is NodeType.COMMENT:
        return c("C ", MAGENTA) + c(node.data, GREEN)
    marker = {NodeType.ERROR: "X ", NodeType.DOCUMENT: "R ", NodeType.DOCTYPE: "D "}
    return c(marker[node.type], MAGENTA) + c(node.data, BLUE)


def print_tree(root: Optional[Node], file: Optional[IO[str]] = None, *, colour: bool = False) -> None:
    """
    Writes the tree at `root` to `file` (``sys.stdout`` by default), one
    :func:`format_node` line per node, indented by depth. Text nodes
    made up only of whitespace are skipped.

    Any exception raised by ``file.write`` propagates, and nothing more
    is written.
    """
    if file is None:
        file = sys.stdout
    indent, node = "", root
    while node is not None:
        if node.type is not NodeType.TEXT or not _is_whitespace(node.data):
            file.write("%s%s\n" % (indent, format_node(node, colour=colour)))
        node, delta = next_node(node, root)
        if delta == 1:
            indent += "  "
            continue
        while delta < 0:
            indent = indent[:-2]
            delta += 1


def show(root: Optional[Node]) -> None:
    """Prints the tree at `root` to ``sys.stdout`` in colour."""
    print_tree(root, sys.stdout, colour=True)


def _is_whitespace(s: str) -> bool:
    return not s.strip("\r\n\t ")


def _tag_is_void(tag: str) -> bool:
    """
    Checks whether the tag corresponds to a void element.

    https://www.w3.org/TR/html5/syntax.html#void-elements
    https://html.spec.whatwg.org/multipage/syntax.html#void-elements
    """
    return tag.lower() in (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    )


_RAW_TEXT_ELEMENTS = ("script", "style", "xmp", "iframe", "noembed", "noframes")

_TABLE_PARTS = ("caption", "col", "colgroup", "tbody", "td", "tfoot", "th", "thead", "tr")

# Start tag -> open elements it implicitly closes.
_IMPLIED_END_TAGS = {
    "li": ("li",),
    "dt": ("dt", "dd"),
    "dd": ("dt", "dd"),
    "option": ("option",),
    "tr": ("tr", "td", "th"),
    "td": ("td", "th"),
    "th": ("td", "th"),
    "tbody": ("tbody", "thead", "tfoot", "tr", "td", "th"),
    "thead": ("tbody", "thead", "tfoot", "tr", "td", "th"),
    "tfoot": ("tbody", "thead", "tfoot", "tr", "td", "th"),
}

# Elements that hide an outer <p> from the start tags below.
_P_SCOPE_BOUNDARIES = (
    "applet",
    "button",
    "caption",
    "html",
    "marquee",
    "object",
    "table",
    "td",
    "template",
    "th",
)

# Start tags that close an open <p>.
_CLOSES_P = (
    "address",
    "article",
    "aside",
    "blockquote",
    "div",
    "dl",
    "fieldset",
    "footer",
    "form",
    "h1",
    "h2",
    "h3",
    "h4",
    "h5",
    "h6",
    "header",
    "hr",
    "main",
    "nav",
    "ol",
    "p",
    "pre",
    "section",
    "table",
    "ul",
)


def _get_version() -> str:
    try:
        return version("nodematch")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="nodematch",
        description="Parse HTML and print its tree, or the nodes matching a fragment.",
        epilog=(
            "Examples:\n"
            "  nodematch page.html\n"
            "  curl -s https://example.com | nodematch -\n"
            "  nodematch page.html --find '<form><div><a>'\n"
            "  nodematch page.html --find '<ul><li>' --format text\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", help="HTML file to parse, or '-' to read from stdin")
    parser.add_argument(
        "--find",
        metavar="FRAGMENT",
        help="HTML fragment describing the nodes to output (defaults to the document)",
    )
    parser.add_argument(
        "--format",
        choices=["tree", "text", "html"],
        default="tree",
        help="Output format (default: tree)",
    )
    parser.add_argument(
        "--first", action="store_true", help="Only output the first matching node"
    )
    parser.add_argument(
        "--color",
        choices=["auto", "always", "never"],
        default="auto",
        help="Colourize tree output (default: auto, i.e. when stdout is a terminal)",
    )
    parser.add_argument(
        "--strict", action="store_true", help="Fail on malformed HTML instead of recovering"
    )
    parser.add_argument(
        "--version", action="version", version="nodematch %s" % _get_version()
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = _parse_args(argv)
    if args.path == "-":
        source = sys.stdin.read()
    else:
        source = Path(args.path).read_text()

    try:
        root = parse_html(source, strict=args.strict)
    except DOMBuilderException as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(2) from e

    nodes = root.find_all(args.find) if args.find else [root]
    if not nodes:
        raise SystemExit(1)
    if args.first:
        nodes = nodes[:1]

    out = sys.stdout
    if args.format == "tree":
        if args.color == "auto":
            colour = out.isatty()
        else:
            colour = args.color == "always"
        for node in nodes:
            print_tree(node, out, colour=colour)
    elif args.format == "text":
        out.write("\n".join(flatten(node) for node in nodes))
        out.write("\n")
    else:
        out.write("\n".join(node.html for node in nodes))
        out.write("\n")


if __name__ == "__main__":
    main()
