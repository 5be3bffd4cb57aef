"""
html_utils.py - Read-only tree helpers on top of BeautifulSoup

The LMS and generic HTML parsers need "the text of this element without
those children". Rather than cloning nodes and decomposing the unwanted
parts, the helpers here walk the tree and build the derived string, so the
parsed document is never modified.
"""

import html
import re
from typing import Callable, Iterable, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Comment, NavigableString, Tag

from quizsmith.text_utils import collapse_whitespace


Predicate = Callable[[Tag], bool]

HIDDEN_CLASSES = ("accesshide", "sr-only", "visually-hidden", "visuallyhidden")
VOID_TAGS = {"area", "base", "br", "col", "embed", "hr", "img", "input",
             "link", "meta", "source", "track", "wbr"}
BLOCK_TAGS = {"p", "div", "br", "li", "ul", "ol", "tr", "td", "th", "table",
              "h1", "h2", "h3", "h4", "h5", "h6", "label", "section", "fieldset"}
WRAPPER_TAGS = {"p", "div", "span", "br"}
TAG_NAME_RE = re.compile(r"<\s*([a-zA-Z][a-zA-Z0-9]*)")


def make_soup(markup: str) -> BeautifulSoup:
    return BeautifulSoup(markup, "lxml")


def classes_of(tag: Tag) -> List[str]:
    value = tag.get("class") or []
    if isinstance(value, str):
        value = value.split()
    return [c.lower() for c in value]


def has_class(tag: Tag, name: str) -> bool:
    return name in classes_of(tag)


def class_contains(fragment: str) -> Callable[[Optional[str]], bool]:
    """``class_`` filter matching any class containing ``fragment``"""
    fragment = fragment.lower()
    return lambda c: bool(c) and fragment in c.lower()


def is_hidden_label(tag: Tag) -> bool:
    return any(c in HIDDEN_CLASSES for c in classes_of(tag))


def never(tag: Tag) -> bool:
    return False


def any_of(*predicates: Predicate) -> Predicate:
    return lambda tag: any(p(tag) for p in predicates)


def _is_text(node) -> bool:
    return isinstance(node, NavigableString) and not isinstance(node, Comment)


def _contains_excluded(tag: Tag, exclude: Predicate) -> bool:
    return any(exclude(d) for d in tag.descendants if isinstance(d, Tag))


def text_excluding(tag: Tag, exclude: Predicate = never) -> str:
    """Whitespace-collapsed text of ``tag`` skipping excluded subtrees"""
    parts: List[str] = []

    def walk(node: Tag):
        for child in node.children:
            if _is_text(child):
                parts.append(str(child))
            elif isinstance(child, Tag):
                if exclude(child):
                    continue
                if child.name in BLOCK_TAGS:
                    parts.append(" ")
                walk(child)
                if child.name in BLOCK_TAGS:
                    parts.append(" ")

    walk(tag)
    return collapse_whitespace("".join(parts))


def _start_tag(tag: Tag) -> str:
    attrs = []
    for key, value in tag.attrs.items():
        if isinstance(value, (list, tuple)):
            value = " ".join(value)
        attrs.append(f'{key}="{html.escape(str(value), quote=True)}"')
    joined = (" " + " ".join(attrs)) if attrs else ""
    return f"<{tag.name}{joined}>"


def inner_html_excluding(tag: Tag, exclude: Predicate = never) -> str:
    """
    Inner HTML of ``tag`` with excluded subtrees left out.

    Inline markup (images, emphasis, sub/superscripts) is kept so that
    embedded images survive into question and option text.
    """
    parts: List[str] = []

    def render(node: Tag):
        for child in node.children:
            if isinstance(child, Comment):
                continue
            if isinstance(child, NavigableString):
                parts.append(child.output_ready(formatter="minimal"))
            elif isinstance(child, Tag):
                if exclude(child):
                    continue
                if not _contains_excluded(child, exclude):
                    parts.append(child.decode())
                    continue
                parts.append(_start_tag(child))
                if child.name not in VOID_TAGS:
                    render(child)
                    parts.append(f"</{child.name}>")

    render(tag)
    return "".join(parts).strip()


def find_first(tag: Tag, selectors: Iterable[str]) -> Optional[Tag]:
    """First match of the first CSS selector that matches anything"""
    for selector in selectors:
        found = tag.select_one(selector)
        if found is not None:
            return found
    return None


def has_explicit_checked(control: Optional[Tag]) -> bool:
    """
    True when the control carries a ``checked`` attribute in the markup.

    Only the serialized attribute counts; review pages are often saved after
    submission and re-parsed, and the attribute is what survives.
    """
    return control is not None and control.has_attr("checked")


def body_or_root(soup: BeautifulSoup) -> Tag:
    return soup.body or soup


def markup_to_text(markup: str) -> str:
    """Plain text of a markup fragment (entities decoded, whitespace collapsed)"""
    if not markup:
        return ""
    if "<" not in markup and "&" not in markup:
        return collapse_whitespace(markup)
    return collapse_whitespace(make_soup(markup).get_text(" "))


def display_markup(markup: str, text: str) -> str:
    """
    Markup when it carries something beyond wrapper tags (images, emphasis,
    sub/superscripts), otherwise the plain text.
    """
    tags = {name.lower() for name in TAG_NAME_RE.findall(markup or "")}
    if tags - WRAPPER_TAGS:
        return markup
    return text
