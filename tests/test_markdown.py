import asyncio

import pytest
from bs4 import BeautifulSoup

from fakes import FakeResponse, FakeSession
from pagechat.markdown import (
    Element,
    Other,
    Text,
    WebpageFetchError,
    convert,
    from_soup,
    html_to_markdown,
    parse_webpage_to_markdown,
    text_of,
)


def first_element(html):
    # html.parser keeps a fragment as written, without the implied <html> and <body> of lxml.
    soup = BeautifulSoup(html, "html.parser")
    return from_soup(soup.find())


@pytest.mark.parametrize("level", [1, 2, 3, 4, 5, 6])
def test_headings(level):
    node = first_element(f"<h{level}>Section title</h{level}>")
    assert convert(node) == "#" * level + " Section title\n\n"


def test_heading_flattens_nested_markup():
    assert convert(first_element("<h2>Hello <em>big</em> world</h2>")) == "## Hello big world\n\n"


def test_paragraph():
    assert convert(first_element("<p>Some <b>bold</b> text</p>")) == "Some bold text\n\n"


def test_link_has_no_trailing_newline():
    assert convert(first_element('<a href="https://example.com">Example</a>')) == "[Example](https://example.com)"


def test_link_without_href():
    assert convert(first_element("<a>anchor</a>")) == "[anchor]()"


def test_image():
    assert convert(first_element('<img src="cat.png" alt="A cat">')) == "![A cat](cat.png)"


def test_unordered_list():
    html = "<ul>\n  <li>apples</li>\n  <li>pears</li>\n  <li>plums</li>\n</ul>"
    assert convert(first_element(html)) == "- apples\n- pears\n- plums\n\n"


def test_ordered_list():
    html = "<ol><li>first</li><li>second</li><li>third</li></ol>"
    assert convert(first_element(html)) == "1. first\n2. second\n3. third\n\n"


def test_list_only_uses_direct_items():
    html = "<ul><li>outer<ul><li>inner</li></ul></li><p>not an item</p></ul>"
    assert convert(first_element(html)) == "- outerinner\n\n"


def test_empty_list():
    assert convert(first_element("<ol></ol>")) == "\n"


def test_unknown_tags_pass_through():
    wrapper = first_element('<div><p>para</p>loose text<span><a href="/x">link</a></span></div>')
    assert isinstance(wrapper, Element)

    expected = "".join(convert(child) for child in wrapper.children)
    assert convert(wrapper) == expected
    assert convert(wrapper) == "para\n\nloose text[link](/x)"


def test_text_is_verbatim():
    assert convert(Text("  spaced \n")) == "  spaced \n"


def test_other_contributes_nothing():
    assert convert(Other()) == ""


def test_tag_names_are_case_insensitive():
    assert convert(Element(tag_name="H1", children=(Text("Title"),))) == "# Title\n\n"
    assert convert(Element(tag_name="UL", children=(Element(tag_name="LI", children=(Text("x"),)),))) == "- x\n\n"


def test_text_of_skips_other_nodes():
    node = Element(tag_name="p", children=(Text("a"), Other(), Element(tag_name="i", children=(Text("b"),))))
    assert text_of(node) == "ab"


def test_comments_and_scripts_are_dropped():
    html = "<body><!-- hidden --><script>var x = 1;</script><style>p {}</style><p>shown</p></body>"
    assert html_to_markdown(html) == "shown\n\n"


def test_attributes_are_strings():
    node = first_element('<div class="a b" id="main"></div>')
    assert isinstance(node, Element)
    assert node.attributes == {"class": "a b", "id": "main"}


def test_document_uses_body_in_order():
    html = """<!DOCTYPE html>
<html><head><title>Ignored</title></head><body><h1>Title</h1><p>Intro</p><ul><li>one</li><li>two</li></ul><img src="i.png" alt="pic"></body></html>"""
    assert html_to_markdown(html) == "# Title\n\nIntro\n\n- one\n- two\n\n![pic](i.png)"


def test_document_keeps_whitespace_text():
    assert html_to_markdown("<html><body>\n<h1>T</h1>\n</body></html>") == "\n# T\n\n\n"


def test_document_with_implied_body():
    assert html_to_markdown("<!DOCTYPE html><p>no body</p>") == "no body\n\n"


def test_head_is_not_part_of_the_body():
    assert html_to_markdown("<html><head><title>T</title></head><p>x</p></html>") == "x\n\n"
    assert html_to_markdown("<html><head><title>T</title></head></html>") == ""


def test_implied_list_item_end_tags():
    assert html_to_markdown("<body><ul><li>a<li>b<li>c</ul></body>") == "- a\n- b\n- c\n\n"
    assert html_to_markdown("<body><ol><li>one<li>two</ol></body>") == "1. one\n2. two\n\n"


def test_implied_paragraph_end_tags():
    assert html_to_markdown("<body><p>one<p>two</body>") == "one\n\ntwo\n\n"
    assert html_to_markdown("<body>" + "<p>x" * 600 + "</body>") == "x\n\n" * 600


def test_script_text_inside_paragraph_is_dropped():
    assert html_to_markdown("<body><p>before<script>var x;</script>after</p></body>") == "beforeafter\n\n"


def test_deeply_nested_document():
    depth = 3000
    soup = BeautifulSoup("<div>" * depth + "<p>deep</p>" + "</div>" * depth, "html.parser")

    root = from_soup(soup.div)

    assert convert(root) == "deep\n\n"
    assert text_of(root) == "deep"


def test_deeply_nested_nodes():
    node = Text("leaf")
    for _ in range(5000):
        node = Element(tag_name="span", children=(Text("."), node))

    assert convert(node) == "." * 5000 + "leaf"
    assert text_of(Element(tag_name="p", children=(node,))) == "." * 5000 + "leaf"


def test_parse_webpage_to_markdown():
    session = FakeSession(pages={"https://example.com/": FakeResponse(200, text="<body><h2>Hi</h2></body>")})

    markdown = asyncio.run(parse_webpage_to_markdown(session, "https://example.com/", user_agent="pagechat-test"))

    assert markdown == "## Hi\n\n"
    assert session.requests == [{"method": "GET", "url": "https://example.com/", "headers": {"User-Agent": "pagechat-test"}}]


def test_parse_webpage_to_markdown_fails_on_404():
    session = FakeSession()

    with pytest.raises(WebpageFetchError, match="Not Found"):
        asyncio.run(parse_webpage_to_markdown(session, "https://example.com/missing"))
