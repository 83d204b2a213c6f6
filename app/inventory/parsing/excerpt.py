"""
BeautifulSoup-based reduction of a product page to a classifier excerpt.
"""

from __future__ import annotations

import json
import re

from bs4 import BeautifulSoup, Comment, Tag

WHITESPACE_RE = re.compile(r"\s+")

MAX_EXCERPT_CHARS = 3000
MAX_PRICE_ELEMENTS = 5
MAX_STOCK_ELEMENTS = 3
MAX_ELEMENT_CHARS = 300
MAX_CART_FORM_CHARS = 500
MAX_BODY_CHARS = 800
MAX_RAW_JSON_LD_CHARS = 500

PRICE_SELECTORS = (
    '[class*="price"]',
    '[class*="woocommerce-Price-amount"]',
    '[itemprop="price"]',
)
STOCK_SELECTORS = (
    '[class*="stock"]',
    '[class*="availability"]',
)


class PageExcerptExtractor:
    """
    Deterministic, signal-first page reduction.

    Sections are emitted in priority order (title, H1, meta, OpenGraph price,
    JSON-LD, price and stock elements, purchase form, body text) so that the
    final truncation only ever cuts the least informative tail.
    """

    @classmethod
    def extract(cls, html: str, *, max_chars: int = MAX_EXCERPT_CHARS) -> str:
        soup = BeautifulSoup(html, "html.parser")

        # JSON-LD lives in <script> tags, so read it before scripts are dropped.
        json_ld = cls.extract_json_ld(soup)
        cls._strip_noise(soup)

        title = cls._clean_text(soup.title.get_text(" ", strip=True)) if soup.title else ""
        h1_node = soup.find("h1")
        h1 = cls._clean_text(h1_node.get_text(" ", strip=True)) if isinstance(h1_node, Tag) else ""
        meta_description = cls._meta_content(soup, name=re.compile(r"^description$", re.IGNORECASE))
        og_price = cls._meta_content(soup, property="product:price:amount")
        price_elements = cls._render_matches(soup, PRICE_SELECTORS, per_selector=MAX_PRICE_ELEMENTS)
        stock_elements = cls._render_matches(soup, STOCK_SELECTORS, per_selector=MAX_STOCK_ELEMENTS)
        cart_form = soup.select_one('form[class*="cart"]')
        body_text = cls._clean_text(soup.get_text(" "))[:MAX_BODY_CHARS]

        parts = [
            f"PAGE TITLE: {title}",
            f"H1: {h1}" if h1 else "",
            f"META DESC: {meta_description}" if meta_description else "",
            f"OG Price: ${og_price}" if og_price else "",
            f"JSON-LD DATA:\n{json_ld}" if json_ld else "",
            f"PRICE ELEMENTS:\n{price_elements}" if price_elements else "",
            f"STOCK ELEMENTS:\n{stock_elements}" if stock_elements else "",
            f"CART FORM:\n{str(cart_form)[:MAX_CART_FORM_CHARS]}" if cart_form is not None else "",
            f"BODY TEXT EXCERPT: {body_text}",
        ]
        return "\n\n".join(part for part in parts if part)[:max_chars]

    @classmethod
    def extract_json_ld(cls, soup: BeautifulSoup) -> str:
        blocks: list[str] = []
        for node in soup.find_all("script", attrs={"type": "application/ld+json"}):
            content = node.get_text().strip()
            if not content:
                continue
            try:
                blocks.append(json.dumps(json.loads(content), separators=(",", ":"), ensure_ascii=False))
            except json.JSONDecodeError:
                blocks.append(content[:MAX_RAW_JSON_LD_CHARS])
        return "\n".join(blocks)

    @staticmethod
    def _strip_noise(soup: BeautifulSoup) -> None:
        for node in soup(["script", "style", "noscript"]):
            node.decompose()
        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

    @staticmethod
    def _meta_content(soup: BeautifulSoup, **attrs: object) -> str:
        node = soup.find("meta", attrs=attrs)
        if not isinstance(node, Tag):
            return ""
        content = node.get("content")
        return content.strip() if isinstance(content, str) else ""

    @classmethod
    def _render_matches(cls, soup: BeautifulSoup, selectors: tuple[str, ...], *, per_selector: int) -> str:
        lines: list[str] = []
        for selector in selectors:
            matches = soup.select(selector, limit=per_selector)
            if matches:
                lines.append(" ".join(cls._clean_text(str(node))[:MAX_ELEMENT_CHARS] for node in matches))
        return "\n".join(lines)

    @staticmethod
    def _clean_text(value: str) -> str:
        return WHITESPACE_RE.sub(" ", value).strip()


def extract_page_excerpt(html: str, *, max_chars: int = MAX_EXCERPT_CHARS) -> str:
    return PageExcerptExtractor.extract(html, max_chars=max_chars)
