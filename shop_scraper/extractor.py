from __future__ import annotations

from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from shop_scraper.models import CardResult, ExtractedProduct, MissingField
from shop_scraper.site_selectors import DEFAULT_SELECTORS, SiteSelectors

DEFAULT_ORIGIN = "https://shopee.com.my"


def canonicalize_url(href: str, origin: str = DEFAULT_ORIGIN) -> str:
    """Resolve a product href against the marketplace origin and drop its query string.

    Raises ValueError when the result is not an absolute http(s) URL.
    """
    absolute = urljoin(f"{origin.rstrip('/')}/", href.strip())
    parsed = urlparse(absolute)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(f"Cannot build an absolute product URL from {href!r}")
    # raises ValueError on a malformed port
    parsed.port
    return urlunparse(parsed._replace(query=""))


def _first_text(doc: BeautifulSoup, selector: str) -> str | None:
    element = doc.select_one(selector)
    if element is None:
        return None
    text = element.get_text().strip()
    return text or None


def _first_href(doc: BeautifulSoup, selector: str) -> str | None:
    element = doc.select_one(selector)
    if element is None:
        return None
    href = element.get("href")
    if not isinstance(href, str) or not href.strip():
        return None
    return href


def extract_card(
    fragment_html: str,
    shop_name: str,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
    origin: str = DEFAULT_ORIGIN,
) -> CardResult:
    # Each card is parsed on its own so selectors cannot match inside a neighbouring card.
    doc = BeautifulSoup(fragment_html, "html.parser")

    # Lookups run in a fixed order and stop at the first missing field.
    current = MissingField.NAME
    try:
        name = _first_text(doc, selectors.product_name)
        if name is None:
            return CardResult(missing=MissingField.NAME)

        current = MissingField.PRICE
        price = _first_text(doc, selectors.product_price)
        if price is None:
            return CardResult(missing=MissingField.PRICE)

        current = MissingField.URL
        href = _first_href(doc, selectors.product_url)
    except SelectorSyntaxError as exc:
        print(f"WARNING: Invalid CSS selector for product {current.value} in shop {shop_name}: {exc}")
        return CardResult(missing=current)

    if href is None:
        return CardResult(missing=MissingField.URL)
    try:
        url = canonicalize_url(href, origin)
    except ValueError as exc:
        print(f"WARNING: {exc} in shop {shop_name}")
        return CardResult(missing=MissingField.URL)

    return CardResult(
        product=ExtractedProduct(name=name, price=price, shop_name=shop_name, url=url)
    )
