import io
import logging
import re
import sys
from concurrent.futures import ThreadPoolExecutor

import pytest

from nodematch import *


SAMPLE_HTML = """\
<html>
<head><!-- 1 -->
</head>
<body><!-- 2 -->
  <header><!-- 2.1 -->
  </header>
  <div id="body"><!-- 2.2 -->
    <main id="article"><!-- 2.2.1 -->
      <p id="p1"><!-- 2.2.1.1 -->
        Paragraph 1.
        <a href="/link1" title="internal link1"><!-- 2.2.1.1.1 -->
          Link 1.
        </a>
        <a href="/link2" title="internal link2"><!-- 2.2.1.1.2 -->
          Link 2.
        </a>
        <img src="/image.png" width="128" height="128"/><!-- 2.2.1.1.3 -->
      </p>
      <blockquote><!-- 2.2.1.2 -->
        <a href="/link3" title="internal link3"><!-- 2.2.1.2.1 -->
          Link 3.
        </a>
        <a href="https://example.com" hreflang="en-US" title="example.com link"><!-- 2.2.1.2.2 -->
          Example.
        </a>
      </blockquote>
      <p><!-- 2.2.1.3 -->
        Another paragraph.
      </p>
      <div data-desc="empty div"><!-- 2.2.1.4 --></div>
      <p data-desc="escapes"><!-- 2.2.1.5 -->
        Some escaped characters: &amp;&lt;&gt;&quot;&#x27;
      </p>
    </main>
    <nav id="sidebar" title="Navigation"><!-- 2.2.2 -->
    </nav>
    <aside id="ads"><!-- 2.2.3 -->
      <div class="first-party ad"><!-- 2.2.3.1 -->
      </div>
      <div class="ad first-party"><!-- 2.2.3.2 -->
      </div>
      <div class="ad"><!-- 2.2.3.3 -->
      </div>
      <div class="ad"><!-- 2.2.3.4 -->
      </div>
    </aside>
  </div>
  <footer><!-- 2.3 -->
  </footer>
</body>
</html>
"""

# A section of the golang.org front page.
GOLANG_HTML = """\
<!DOCTYPE html>
<html>
<head></head>
<body>
<div id="lowframe" style="position: fixed;"></div>
<!-- #lowframe -->
<div id="topbar">
<div class="container">
<div class="top-heading" id="heading-wide"><a href="/">The Go Programming Language</a></div>
<div class="top-heading" id="heading-narrow"><a href="/">Go</a></div>
<a href="#" id="menu-button"><span id="menu-button-arrow">&#9661;</span></a>
<form method="GET" action="/search">
<div id="menu">
<a href="/doc/">Documents</a>
<a href="/pkg/">Packages</a>
<a href="/project/">The Project</a>
<a href="/help/">Help</a>
<a href="/blog/">Blog</a>
<a href="http://play.golang.org/" id="menu-play">Play</a>
<input type="text" id="search" name="q" placeholder="Search">
</div>
</form>
</div>
</div>
</body>
</html>
"""

GOLANG_TREE = [
    "R ",
    "  D html",
    "  E html",
    "    E head",
    "    E body",
    '      E div id="lowframe" style="position: fixed;"',
    "      C  #lowframe ",
    '      E div id="topbar"',
    '        E div class="container"',
    '          E div class="top-heading" id="heading-wide"',
    '            E a href="/"',
    "              T The Go Programming Language",
    '          E div class="top-heading" id="heading-narrow"',
    '            E a href="/"',
    "              T Go",
    '          E a href="#" id="menu-button"',
    '            E span id="menu-button-arrow"',
    "              T ▽",
    '          E form method="GET" action="/search"',
    '            E div id="menu"',
    '              E a href="/doc/"',
    "                T Documents",
    '              E a href="/pkg/"',
    "                T Packages",
    '              E a href="/project/"',
    "                T The Project",
    '              E a href="/help/"',
    "                T Help",
    '              E a href="/blog/"',
    "                T Blog",
    '              E a href="http://play.golang.org/" id="menu-play"',
    "                T Play",
    '              E input type="text" id="search" name="q" placeholder="Search"',
]


# Stripped HTML comments are attached to the latest started element
# (not necessarily closed, possibly void) as annotation. If multiple
# annotations are found for a single element, the last one prevails.
class AnnotatedDOMBuilder(DOMBuilder):
    def handle_starttag(self, tag, attrs):
        depth = len(self._stack)
        super().handle_starttag(tag, attrs)
        if len(self._stack) > depth:
            self._last_started = self._current
        else:
            self._last_started = self._current.last_child()

    def handle_comment(self, comment):
        node = getattr(self, "_last_started", None)
        if isinstance(node, ElementNode):
            node.annotation = comment.strip()


class RejectingDOMBuilder(DOMBuilder):
    def handle_starttag(self, tag, attrs):
        raise DOMBuilderException(self.getpos(), "rejected %s" % repr(tag))


class FailingWriter:
    def __init__(self, fail_at):
        self.fail_at = fail_at
        self.writes = []

    def write(self, s):
        if len(self.writes) + 1 == self.fail_at:
            raise OSError("disk full")
        self.writes.append(s)


# Get annotations of a list of nodes.
def annotations(nodes):
    return [getattr(node, "annotation", None) for node in nodes]


def preorder(node):
    yield node
    for child in node.children:
        yield from preorder(child)


def postorder(node):
    for child in node.children:
        yield from postorder(child)
    yield node


@pytest.fixture(scope="module")
def tree():
    root = parse_html(SAMPLE_HTML, ParserClass=AnnotatedDOMBuilder)
    repr(root)
    return root


@pytest.fixture(scope="module")
def golang():
    return parse_html(GOLANG_HTML)


@pytest.mark.parametrize(
    "pattern,matches",
    [
        ("<header>", ["2.1"]),
        ('<div id="body">', ["2.2"]),
        ("<main>", ["2.2.1"]),
        ('<nav><main id="article">', []),
        ('<div id="body"><main>', ["2.2.1"]),
        ("<p><a>", ["2.2.1.1.1", "2.2.1.1.2"]),
        ("<a>", ["2.2.1.1.1", "2.2.1.1.2", "2.2.1.2.1", "2.2.1.2.2"]),
        ('<a title="internal link1">', ["2.2.1.1.1"]),
        ('<a title="internal">', []),
        ('<blockquote><a href="/link3">', ["2.2.1.2.1"]),
        ('<aside><div class="ad">', ["2.2.3.3", "2.2.3.4"]),
        ('<aside id="ads" class="ad"><div>', []),
        ('<p><img src="/image.png">', ["2.2.1.1.3"]),
        ("<span>", []),
        # <html> and <body> are dropped from fragments, leaving <header>.
        ("<html><body><header>", ["2.1"]),
        ("<tr><td>", []),
        ("", []),
    ],
)
def test_find(tree, pattern, matches):
    assert annotations(tree.find_all(pattern)) == matches
    if matches:
        assert tree.find(pattern).annotation == matches[0]
    else:
        assert tree.find(pattern) is None
    for node in tree.find_all(pattern):
        assert node.matched_by(pattern)


def test_find_in_subtree(tree):
    p1 = tree.find('<p id="p1">')
    assert annotations(p1.find_all("<a>")) == ["2.2.1.1.1", "2.2.1.1.2"]
    assert annotations(p1.find_all('<main id="article"><p><a>')) == [
        "2.2.1.1.1",
        "2.2.1.1.2",
    ]
    assert p1.find_all('<aside><div class="ad">') == []


def test_find_compiled_pattern(tree):
    probe = leaf("<p><a>")
    assert tree.find_all(probe) == tree.find_all("<p><a>")
    assert find(tree, probe) is tree.find_all(probe)[0]


def test_find_bad_pattern(tree):
    with pytest.raises(ValueError):
        find_all(tree, 42)


def test_find_none_root():
    assert find_all(None, "<a>") == []
    assert find(None, "<a>") is None


def test_concurrent_find(tree):
    patterns = ["<p><a>", "<a>", '<aside><div class="ad">'] * 8
    expected = [annotations(tree.find_all(pattern)) for pattern in patterns]
    with ThreadPoolExecutor(max_workers=4) as executor:
        results = list(executor.map(lambda p: annotations(tree.find_all(p)), patterns))
    assert results == expected


def test_golang_find(golang):
    anchors = find_all(golang, "<form><div><a>")
    assert [a.attr("href") for a in anchors] == [
        "/doc/",
        "/pkg/",
        "/project/",
        "/help/",
        "/blog/",
        "http://play.golang.org/",
    ]
    assert find_all(golang, '<form><div id="someotherid"><a>') == []

    texts = find_all(golang, '<a href="/">Go')
    assert len(texts) == 1
    assert texts[0].type is NodeType.TEXT
    assert texts[0].parent.parent.attr("id") == "heading-narrow"


def test_table_fragments():
    table = parse_fragment(
        "<table><tr><td>1</td><td>2</td><td>3</td><td>4</td></tr></table>"
    )[0]
    tr = table.first_child()
    assert tr.tag == "tr"
    # Table parts do not parse outside a table, but the pattern may
    # describe ancestors above the searched subtree.
    assert find_all(tr, "<td>") == []
    assert [td.text for td in find_all(tr, "<table><tr><td>")] == ["1", "2", "3", "4"]


def test_compare_reflexive(tree, golang):
    for root in (tree, golang):
        for node, _ in walk(root):
            assert compare(node, node)


def test_compare():
    full = ElementNode("a", [("a", "1"), ("b", "2")])
    partial = ElementNode("a", [("a", "1")])
    assert compare(full, partial)
    assert not compare(partial, full)

    assert not compare(full, None)
    assert not compare(None, full)
    assert not compare(None, None)

    assert not compare(TextNode("a"), ElementNode("a"))
    assert not compare(ElementNode("a"), ElementNode("b"))
    assert not compare(ElementNode("a", namespace="svg"), ElementNode("a"))
    assert not compare(
        ElementNode("a", [("xlink", "href", "#x")]), ElementNode("a", [("href", "#x")])
    )
    assert not compare(ElementNode("a", [("href", "/")]), ElementNode("a", [("href", "")]))
    assert compare(ErrorNode(), ErrorNode())
    assert not compare(ElementNode(""), ErrorNode())


def test_match():
    a = ElementNode("a")
    body = ElementNode("body", children=[ElementNode("div", children=[a])])
    div = body.first_child()

    probe = leaf("<div><a>")
    assert match(a, probe)
    assert not match(div, probe)
    assert not match(body, probe)

    # The candidate chain may not run out before the pattern.
    assert not match(ElementNode("a"), probe)
    assert match(a, leaf("<a>"))

    assert not match(None, probe)
    assert not match(a, None)


def test_leaf():
    node = leaf("<form><div><a>")
    assert node.tag == "a"
    assert node.parent.tag == "div"
    assert node.parent.parent.tag == "form"
    assert node.parent.parent.parent is None

    node = leaf('<a href="/">Go')
    assert node.type is NodeType.TEXT
    assert node.data == "Go"
    assert node.parent.attributes == [Attribute("", "href", "/")]

    # Only the first top-level node and first children are followed.
    node = leaf("<p><b>x</b><i>y</i></p><span>")
    assert node.data == "x"

    assert leaf("<a>") is not leaf("<a>")


@pytest.mark.parametrize("fragment", ["", "<tr><td>", "<html><body>", "</div>"])
def test_leaf_error(fragment, caplog):
    caplog.set_level(logging.DEBUG, logger="nodematch")
    node = leaf(fragment)
    assert node.type is NodeType.ERROR
    assert node.parent is None
    assert "produced no nodes" in caplog.text


def test_leaf_parser_failure(caplog):
    caplog.set_level(logging.DEBUG, logger="nodematch")
    node = leaf("<a>", ParserClass=RejectingDOMBuilder)
    assert isinstance(node, ErrorNode)
    assert "cannot compile fragment" in caplog.text


def test_walk(tree):
    nodes = [node for node, _ in walk(tree)]
    assert nodes == list(preorder(tree))
    assert nodes == [tree] + list(tree.descendants())
    for node, depth in walk(tree):
        assert depth == len(list(node.ancestors(root=tree)))


def test_walk_reverse(tree):
    # Reverse stepping visits last children first, which is post-order
    # backwards.
    assert [node for node, _ in walk(tree, reverse=True)] == list(
        reversed(list(postorder(tree)))
    )


def test_delta_sum(tree):
    for root in (tree, tree.find('<p id="p1">'), tree.find('<div data-desc="empty div">')):
        for step in (next_node, prev_node):
            total, node = 0, root
            while node is not None:
                node, delta = step(node, root)
                total += delta
            assert total == 0


def test_next_node_bounds(tree):
    header = tree.find("<header>")
    text = header.first_child()
    assert next_node(header, header) == (text, 1)
    assert next_node(text, header) == (None, -1)
    node, delta = next_node(text)
    assert node is header.next_sibling()
    assert delta == -1
    for node, _ in walk(header):
        assert node is header or header in list(node.ancestors())

    assert next_node(None) == (None, 0)
    assert prev_node(None) == (None, 0)
    assert next_node(ErrorNode()) == (None, 0)


def test_prev_node_bounds(tree):
    footer = tree.find("<footer>")
    assert prev_node(footer, footer) == (footer.last_child(), 1)
    assert prev_node(footer.last_child(), footer) == (None, -1)
    node, delta = prev_node(footer.last_child())
    assert node is footer.previous_sibling()
    assert delta == -1


def test_flatten(tree):
    for node, _ in walk(tree):
        if node.type is NodeType.TEXT:
            assert flatten(node) == node.data
        else:
            assert flatten(node) == "".join(flatten(child) for child in node.children)
    assert flatten(TextNode("x")) == "x"
    assert flatten(ElementNode("div")) == ""
    assert flatten(None) == ""
    assert parse_fragment("<p>a<!--b-->c</p>")[0].text == "ac"


def test_format_node_plain():
    assert format_node(None) == ""
    assert format_node(ErrorNode("oops")) == "X oops"
    assert format_node(TextNode("hi")) == "T hi"
    assert format_node(DocumentNode()) == "R "
    assert format_node(CommentNode(" c ")) == "C  c "
    assert format_node(DoctypeNode("html")) == "D html"
    assert (
        format_node(ElementNode("circle", [("xlink", "href", "#a")], namespace="svg"))
        == 'E svg:circle xlink:href="#a"'
    )
    assert format_node(ElementNode("a", [("title", 'say "hi"')])) == 'E a title="say \\"hi\\""'


def test_format_node_colour():
    assert format_node(ElementNode("a", [("href", "/")]), colour=True) == (
        MAGENTA + "E " + RESET
        + RED + "a" + RESET
        + " " + YELLOW + "href" + RESET
        + "=" + CYAN + '"/"' + RESET
    )
    assert format_node(CommentNode("a\nb"), colour=True) == (
        MAGENTA + "C " + RESET + GREEN + "a" + RESET + "\n" + GREEN + "b" + RESET
    )
    assert format_node(TextNode("x"), colour=True) == MAGENTA + "T " + RESET + "x"


def test_print_tree_skips_whitespace():
    root = parse_fragment("<div>\n  <a>x</a>\n</div>")[0]
    out = io.StringIO()
    print_tree(root, out)
    assert out.getvalue() == "E div\n  E a\n    T x\n"


def test_print_tree_golang(golang):
    out = io.StringIO()
    print_tree(golang, out)
    assert out.getvalue() == "\n".join(GOLANG_TREE) + "\n"


def test_print_tree_write_failure(golang):
    writer = FailingWriter(fail_at=3)
    with pytest.raises(OSError, match="disk full"):
        print_tree(golang, writer)
    assert writer.writes == ["R \n", "  D html\n"]


def test_show(capsys):
    show(ElementNode("br"))
    assert capsys.readouterr().out == MAGENTA + "E " + RESET + RED + "br" + RESET + "\n"


def test_parsing_void_elements():
    assert str(parse_html('<img src="/image.png"/>')) == '<img src="/image.png"/>'
    assert str(parse_html('<img src="/image.png">')) == '<img src="/image.png"/>'


@pytest.mark.parametrize(
    "html",
    [
        "",
        "<body><p>hello, world",
        "<p>hello, world</p></p>",
        "<p>hello, world</div>",
        '<img src="/image.png"></img>',
    ],
)
def test_malformed_html(html):
    with pytest.raises(DOMBuilderException):
        parse_html(html, strict=True)


@pytest.mark.parametrize(
    "html,expected",
    [
        ("", ""),
        ("<body><p>hello, world", "<body><p>hello, world</p></body>"),
        ("<p>hello, world</p></p>", "<p>hello, world</p>"),
        ("<p>hello, world</div>", "<p>hello, world</p>"),
        ('<img src="/image.png"></img>', '<img src="/image.png"/>'),
        ("<ul><li>one<li>two</ul>", "<ul><li>one</li><li>two</li></ul>"),
        ("<p>one<div>two</div>", "<p>one</p><div>two</div>"),
        ("<div><div><span>a</div>b</div>", "<div><div><span>a</span></div>b</div>"),
        (
            "<table><tr><td>1<td>2</table>",
            "<table><tr><td>1</td><td>2</td></tr></table>",
        ),
        (
            "<!DOCTYPE html><html><!-- c --><body>x</body></html>",
            "<!DOCTYPE html><html><!-- c --><body>x</body></html>",
        ),
        ('<svg><circle r="1"/></svg>', '<svg><circle r="1"></circle></svg>'),
        ("<div><tr><td>x</div>", "<div>x</div>"),
        ("<p><b>x<p>y", "<p><b>x</b></p><p>y</p>"),
        ("<p>a<span>b<div>c", "<p>a<span>b</span></p><div>c</div>"),
        (
            "<p><button>a<div>b</div></button>",
            "<p><button>a<div>b</div></button></p>",
        ),
        (
            "<p><table><tr><td><p>a<div>b",
            "<p></p><table><tr><td><p>a</p><div>b</div></td></tr></table>",
        ),
        ("Hello <b>world</b>\n", "Hello <b>world</b>"),
    ],
)
def test_lenient_html(html, expected):
    assert str(parse_html(html)) == expected


def test_document_level_text():
    root = parse_html("Hello <b>world</b>")
    assert root.text == "Hello world"
    assert root.first_child().type is NodeType.TEXT
    assert root.first_child().parent is root
    assert [node.type for node in parse_html("\n <p>x</p>\n").children] == [
        NodeType.ELEMENT
    ]


def test_builder_errors():
    builder = DOMBuilder()
    builder.feed("<p>x</div>")
    builder.close()
    assert len(builder.errors) == 1
    assert isinstance(builder.errors[0], DOMBuilderException)
    assert "stray end tag" in builder.errors[0].why
    assert str(builder.errors[0]).startswith("DOM builder aborted at 1:")
    assert builder.root.first_child().tag == "p"


def test_parse_fragment():
    nodes = parse_fragment("<a>x</a><b>")
    assert [node.tag for node in nodes] == ["a", "b"]
    for node in nodes:
        assert node.parent is None
        assert node.next_sibling() is None
        assert node.previous_sibling() is None

    assert [node.tag for node in parse_fragment("<html><body><p>x")] == ["p"]
    assert [node.data for node in parse_fragment("<tr><td>x")] == ["x"]

    context = ElementNode("table")
    nodes = parse_fragment("<tr><td>1", context)
    assert nodes[0].tag == "tr"
    assert nodes[0].first_child().tag == "td"
    assert context.children == []

    with pytest.raises(DOMBuilderException):
        parse_fragment("<div>", strict=True)


def test_foreign_content():
    svg = parse_fragment(
        '<svg><a xlink:href="#x"/><foreignObject><p>x</p></foreignObject></svg>'
    )[0]
    assert svg.namespace == "svg"
    a = svg.first_child()
    assert a.tag == "a"
    assert a.namespace == "svg"
    assert a.children == []
    assert a.attributes == [Attribute("xlink", "href", "#x")]
    assert a.attr_ns("xlink", "href") == "#x"
    assert a.attr("href") == "#x"
    p = a.next_sibling().first_child()
    assert p.tag == "p"
    assert p.namespace == ""

    assert find_all(svg, "<svg><a>") == [a]
    assert find_all(svg, "<a>") == []


def test_tree_walking(tree):
    body = tree.first_element_child().last_element_child()
    assert body.tag == "body"
    assert isinstance(body.first_child(), TextNode)
    assert isinstance(body.last_child(), TextNode)

    header = body.first_element_child()
    assert header.tag == "header"
    assert isinstance(header.next_sibling(), TextNode)

    div_body = header.next_element_sibling()
    assert div_body.attr("id") == "body"
    assert div_body.attr("title") is None
    assert [
        child.tag for child in div_body.children if child.type is NodeType.ELEMENT
    ] == ["main", "nav", "aside"]

    main = div_body.first_element_child()
    assert main.tag == "main"
    assert [
        sibling.tag
        for sibling in main.next_siblings()
        if sibling.type is NodeType.ELEMENT
    ] == ["nav", "aside"]

    aside = div_body.last_element_child()
    assert aside.tag == "aside"
    assert [
        sibling.tag
        for sibling in aside.previous_siblings()
        if sibling.type is NodeType.ELEMENT
    ] == ["nav", "main"]
    assert isinstance(aside.previous_sibling(), TextNode)

    nav = aside.previous_element_sibling()
    assert nav.tag == "nav"

    div_body = aside.parent
    assert div_body.attr("id") == "body"


def test_root_siblings(tree):
    assert tree.next_sibling() is None
    assert tree.next_element_sibling() is None
    assert tree.next_siblings() == []
    assert tree.previous_sibling() is None
    assert tree.previous_element_sibling() is None
    assert tree.previous_siblings() == []


def test_html(tree):
    sample_html_without_comments = "\n".join(
        re.sub(r"<!-- .* -->", "", line) for line in SAMPLE_HTML.splitlines()
    )
    assert tree.html == sample_html_without_comments
    assert tree.outer_html() == sample_html_without_comments
    m = re.match(r"<html>(?P<inner>.*)</html>", sample_html_without_comments, re.S)
    assert tree.first_element_child().inner_html() == m.group("inner")


def test_lone_text_node(tree):
    text = tree.find("<a>").first_child()
    assert text.data.strip() == "Link 1."
    assert text.tag is None
    assert text.first_child() is None
    assert text.last_child() is None
    assert text.next_sibling() is None
    assert text.previous_sibling() is None
    assert text.next_element_sibling() is None
    assert text.previous_element_sibling() is None


def test_empty_element(tree):
    div = tree.find('<div data-desc="empty div">')
    assert div.first_child() is None
    assert div.first_element_child() is None
    assert div.last_child() is None
    assert div.last_element_child() is None
    assert list(div.descendants()) == []


def test_text_content(tree):
    p = tree.find('<p data-desc="escapes">')
    assert p.text.strip() == "Some escaped characters: &<>\"'"
    assert p.text_content() == p.text


def test_text_node_identity():
    t1 = TextNode("abc")
    t2 = TextNode("abc")
    assert t1 == t1
    assert t1 != t2
    assert t1.text == t2.text
    assert compare(t1, t2)


def test_ancestors(tree):
    body = tree.first_element_child().last_element_child()
    main = tree.find("<main>")
    assert annotations(main.ancestors()) == ["2.2", "2", None, None]
    assert annotations(main.ancestors(root=body)) == ["2.2", "2"]
    assert annotations(main.ancestors(root=main)) == []
    with pytest.raises(Exception):
        list(body.ancestors(root=main))
    with pytest.raises(Exception):
        list(main.ancestors(root=tree.find("<p>")))


def test_attributes():
    a = ElementNode("A", [("HREF", "/1"), ("href", "/2"), ("xlink", "href", "/3")])
    assert a.tag == "a"
    assert a.attr("href") == "/1"
    assert a.attr("title") is None
    assert a.attr_ns("xlink", "href") == "/3"
    assert a.attr_ns("", "href") == "/1"
    assert a.attr_ns("xml", "href") is None
    assert list(a.attrs.items()) == [("href", "/1")]
    assert ElementNode("input", [("disabled", None)]).attr("disabled") == ""
    with pytest.raises(ValueError):
        ElementNode("a", [("x",)])


def test_tree_construction():
    ul = ElementNode("ul")
    a, b, c = ElementNode("li"), ElementNode("li"), ElementNode("li")
    for li in (a, b, c):
        assert ul.append_child(li) is li
    assert b.previous_sibling() is a
    assert b.next_sibling() is c

    assert ul.remove_child(b) is b
    assert ul.children == [a, c]
    assert a.next_sibling() is c
    assert c.previous_sibling() is a
    assert b.parent is None
    assert b.next_sibling() is None

    with pytest.raises(ValueError):
        ul.append_child(a)
    with pytest.raises(ValueError):
        ul.remove_child(b)


@pytest.fixture
def golang_file(tmp_path):
    path = tmp_path / "golang.html"
    path.write_text(GOLANG_HTML)
    return str(path)


def test_cli_text(golang_file, capsys):
    main([golang_file, "--find", "<form><div><a>", "--format", "text"])
    assert capsys.readouterr().out == (
        "Documents\nPackages\nThe Project\nHelp\nBlog\nPlay\n"
    )


def test_cli_first_html(golang_file, capsys):
    main([golang_file, "--find", '<div id="menu"><input>', "--format", "html", "--first"])
    assert capsys.readouterr().out == (
        '<input type="text" id="search" name="q" placeholder="Search"/>\n'
    )


def test_cli_tree(golang_file, capsys):
    main([golang_file, "--color", "never"])
    assert capsys.readouterr().out == "\n".join(GOLANG_TREE) + "\n"
    main([golang_file, "--find", "<span>", "--color", "always"])
    assert capsys.readouterr().out == format_node(
        find(parse_html(GOLANG_HTML), "<span>"), colour=True
    ) + "\n" + "  " + format_node(TextNode("▽"), colour=True) + "\n"


def test_cli_stdin(monkeypatch, capsys):
    monkeypatch.setattr(sys, "stdin", io.StringIO("<p>a</p><p>b</p>"))
    main(["-", "--find", "<p>", "--format", "text"])
    assert capsys.readouterr().out == "a\nb\n"


def test_cli_no_match(golang_file):
    with pytest.raises(SystemExit) as excinfo:
        main([golang_file, "--find", "<table>"])
    assert excinfo.value.code == 1


def test_cli_strict(tmp_path, capsys):
    path = tmp_path / "bad.html"
    path.write_text("<p>x</div>")
    with pytest.raises(SystemExit) as excinfo:
        main([str(path), "--strict"])
    assert excinfo.value.code == 2
    assert "expecting end tag 'p', got 'div'" in capsys.readouterr().err
