"""lxml helpers shared by the resolver and the extractors."""
from __future__ import annotations

from lxml import etree, html as lxml_html
from lxml.html import HtmlElement


def parse_html(raw_html: str | None) -> HtmlElement | None:
    """Parse a page into an lxml tree, or None when it cannot be parsed."""
    if not raw_html or not raw_html.strip():
        return None
    try:
        return lxml_html.fromstring(raw_html)
    except ValueError:
        # str input carrying an XML encoding declaration must be parsed as bytes
        try:
            return lxml_html.fromstring(raw_html.encode("utf-8"))
        except (etree.ParserError, etree.XMLSyntaxError, ValueError):
            return None
    except (etree.ParserError, etree.XMLSyntaxError):
        return None


def contains_pred(attr: str, *tokens: str) -> str:
    """XPath predicate body matching elements whose *attr* contains any token."""
    return " or ".join(f"contains(@{attr}, '{t}')" for t in tokens)


def text_of(el: HtmlElement) -> str:
    """Text of *el* and its descendants, one space between adjacent nodes."""
    return " ".join(el.itertext())


def first_text(el: HtmlElement, xpath: str) -> str:
    """Stripped text of the first node matched by *xpath*, or an empty string."""
    nodes = el.xpath(xpath)
    return text_of(nodes[0]).strip() if nodes else ""


def page_title(doc: HtmlElement) -> str:
    return " ".join(doc.xpath("//title//text()")).strip()


def meta_description(doc: HtmlElement) -> str | None:
    for xpath in ("//meta[@name='description']/@content", "//meta[@property='og:description']/@content"):
        values = [v.strip() for v in doc.xpath(xpath) if v and v.strip()]
        if values:
            return values[0]
    return None


def body_text(doc: HtmlElement) -> str:
    bodies = doc.xpath("//body")
    return text_of(bodies[0] if bodies else doc)
