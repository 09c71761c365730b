# pagechat -- Webpage-aware chat completions
#
# Copyright (C) 2025 Thomas Müller <contact@tom94.net>
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

"""
Conversion of HTML into the Markdown that is handed to the model as the result of the `parseWebpageToMarkdown` tool.

Only the tags that carry a page's structure are rendered: headings, paragraphs, links, images, and lists. Every other element is
transparent, i.e. its children are rendered in its place. Headings, paragraphs, link texts, and list items are rendered as their plain text;
markup nested inside of them is dropped.
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import TypeAlias, TypeGuard

import aiohttp
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PageElement, PreformattedString
from loguru import logger

from .common import PagechatError

HEADING_LEVELS = {"h1": 1, "h2": 2, "h3": 3, "h4": 4, "h5": 5, "h6": 6}

# The contents of these are code, not text. They are kept out of the tree entirely.
OPAQUE_TAGS = {"script", "style"}


class WebpageFetchError(PagechatError):
    pass


@dataclass(frozen=True)
class Element:
    tag_name: str
    attributes: dict[str, str] = field(default_factory=dict)
    children: tuple["Node", ...] = ()

    def attr(self, name: str) -> str:
        return self.attributes.get(name, "")


@dataclass(frozen=True)
class Text:
    content: str


@dataclass(frozen=True)
class Other:
    pass


Node: TypeAlias = Element | Text | Other


def _attribute_value(value: str | list[str]) -> str:
    # bs4 splits multi-valued attributes such as `class` into lists.
    if isinstance(value, list):
        return " ".join(value)
    return value


def _is_element(element: PageElement) -> TypeGuard[Tag]:
    return isinstance(element, Tag) and element.name.lower() not in OPAQUE_TAGS


def _leaf(element: PageElement) -> Text | Other:
    match element:
        case PreformattedString():
            # Comments, doctypes, CDATA sections, processing instructions
            return Other()
        case NavigableString():
            return Text(content=str(element))
        case _:
            return Other()


def from_soup(element: PageElement) -> Node:
    """
    Build our node tree from a parsed BeautifulSoup element.

    Real pages nest deeper than Python's recursion limit, so this walk and the ones below keep their own stack.
    """
    if not _is_element(element):
        return _leaf(element)

    stack: list[tuple[Tag, Iterator[PageElement], list[Node]]] = [(element, iter(element.children), [])]
    while True:
        tag, remaining, children = stack[-1]
        child = next(remaining, None)
        if child is None:
            _ = stack.pop()
            attributes = {name: _attribute_value(value) for name, value in tag.attrs.items()}
            node = Element(tag_name=tag.name, attributes=attributes, children=tuple(children))
            if not stack:
                return node
            stack[-1][2].append(node)
        elif _is_element(child):
            stack.append((child, iter(child.children), []))
        else:
            children.append(_leaf(child))


def text_of(node: Node) -> str:
    """
    Flattened text of a node: all text below it, concatenated in document order.
    """
    parts: list[str] = []
    stack: list[Node] = [node]
    while stack:
        match stack.pop():
            case Text(content=content):
                parts.append(content)
            case Element(children=children):
                stack.extend(reversed(children))
            case Other():
                pass

    return "".join(parts)


def list_items(element: Element) -> list[Element]:
    return [child for child in element.children if isinstance(child, Element) and child.tag_name.lower() == "li"]


def convert(node: Node) -> str:
    """
    Render a node and all of its descendants as Markdown.
    """
    parts: list[str] = []
    stack: list[Node] = [node]
    while stack:
        match stack.pop():
            case Text(content=content):
                parts.append(content)
            case Other():
                pass
            case Element() as element:
                markdown = convert_element(element)
                if markdown is None:
                    stack.extend(reversed(element.children))
                else:
                    parts.append(markdown)

    return "".join(parts)


def convert_element(element: Element) -> str | None:
    """
    Markdown of a structural element, or None if the element is transparent and its children are to be rendered in its place.
    """
    tag_name = element.tag_name.lower()
    match tag_name:
        case "h1" | "h2" | "h3" | "h4" | "h5" | "h6":
            return f"{'#' * HEADING_LEVELS[tag_name]} {text_of(element)}\n\n"
        case "p":
            return f"{text_of(element)}\n\n"
        case "a":
            return f"[{text_of(element)}]({element.attr('href')})"
        case "img":
            return f"![{element.attr('alt')}]({element.attr('src')})"
        case "ul":
            return "".join(f"- {text_of(item)}\n" for item in list_items(element)) + "\n"
        case "ol":
            return "".join(f"{i}. {text_of(item)}\n" for i, item in enumerate(list_items(element), start=1)) + "\n"
        case _:
            # Wrappers like div, span, section, or body carry no meaning of their own.
            return None


def convert_children(element: Element) -> str:
    return "".join(convert(child) for child in element.children)


def document_body(html: str) -> Element:
    """
    Parse a document and return its body. lxml applies the implied start and end tags of HTML, so any document with content has one. A
    document that only has a <head> has an empty body.
    """
    soup = BeautifulSoup(html, "lxml")
    body = soup.body
    if body is None:
        logger.debug("Document has no body content.")
        return Element(tag_name="body")

    root = from_soup(body)
    assert isinstance(root, Element)
    return root


def html_to_markdown(html: str) -> str:
    return convert_children(document_body(html))


async def fetch_webpage(session: aiohttp.ClientSession, url: str, user_agent: str | None = None) -> str:
    headers = {"User-Agent": user_agent} if user_agent else None
    async with session.get(url, headers=headers) as response:
        logger.debug(f"GET {url} -> {response.status} {response.reason}")
        if not response.ok:
            raise WebpageFetchError(f"Failed to fetch the webpage: {response.status} {response.reason}")

        return await response.text()


async def parse_webpage_to_markdown(session: aiohttp.ClientSession, url: str, user_agent: str | None = None) -> str:
    """
    Fetch the webpage at `url` and convert its body to Markdown.
    """
    markdown = html_to_markdown(await fetch_webpage(session, url, user_agent))
    num_lines = markdown.count("\n") + 1
    logger.info(f"Converted {url} to {num_lines} lines of markdown.")
    return markdown
