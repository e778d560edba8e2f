from __future__ import annotations

from bs4 import BeautifulSoup
from soupsieve import SelectorSyntaxError

from shop_scraper.session import BrowserSession
from shop_scraper.site_selectors import DEFAULT_SELECTORS, SiteSelectors


def parse_page_numbers(controller_html: str, button_selector: str = DEFAULT_SELECTORS.page_button) -> set[int]:
    doc = BeautifulSoup(controller_html, "html.parser")
    page_numbers: set[int] = set()
    for button in doc.select(button_selector):
        text = button.get_text().strip()
        # prev/next arrows and "..." gaps are not page numbers
        if text.isdecimal():
            page_numbers.add(int(text))
    return page_numbers


async def probe_page_numbers(
    session: BrowserSession,
    shop_name: str,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
) -> set[int]:
    """Page numbers offered by the result page's controller.

    Only discovers them; the pages themselves are not visited.
    """
    controller = await session.find(selectors.page_controller)
    if controller is None:
        return set()
    controller_html = await session.fragment_html(controller)
    try:
        return parse_page_numbers(controller_html, selectors.page_button)
    except SelectorSyntaxError as exc:
        print(f"WARNING: Invalid CSS selector for page buttons in shop {shop_name}: {exc}")
        return set()
