from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlencode, urljoin, urlparse, urlunparse

from shop_scraper.config import EngineSettings
from shop_scraper.errors import FatalScrapeError, SessionError, ShopSkipped
from shop_scraper.extractor import extract_card
from shop_scraper.lazy_load import trigger_lazy_load
from shop_scraper.models import ExtractedProduct, ScrapeRunResult, ShopDescriptor, ShopExtractionStats
from shop_scraper.pagination import probe_page_numbers
from shop_scraper.session import BrowserSession
from shop_scraper.site_selectors import DEFAULT_SELECTORS, SiteSelectors


def build_search_url(settings: EngineSettings, shop: ShopDescriptor) -> str:
    try:
        base = urlparse(urljoin(f"{settings.origin.rstrip('/')}/", settings.search_path.lstrip("/")))
        if base.scheme not in {"http", "https"} or not base.netloc:
            raise ValueError(f"not an absolute URL: {settings.origin!r}")
        query = urlencode([("keyword", settings.keyword), ("shop", shop.shop_id)])
        return urlunparse(base._replace(query=query))
    except ValueError as exc:
        raise ShopSkipped(shop.shop_name, f"Error constructing search url ({exc})") from exc


async def select_language(
    session: BrowserSession,
    settings: EngineSettings,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
) -> None:
    """Dismiss the marketplace's first-visit language prompt. Nothing works until this succeeds."""
    try:
        await session.navigate(settings.origin)
    except SessionError as exc:
        raise FatalScrapeError(f"Error going to {settings.origin}: {exc}") from exc

    try:
        language_button = await session.wait_for_element(
            selectors.language_button, settings.language_wait_timeout_ms
        )
    except SessionError as exc:
        raise FatalScrapeError(
            f"Cannot find language button to click on initial page load: {exc}"
        ) from exc

    try:
        await session.click(language_button)
    except SessionError as exc:
        raise FatalScrapeError(f"Error clicking language button: {exc}") from exc


async def scrape_shop(
    session: BrowserSession,
    shop: ShopDescriptor,
    products: list[ExtractedProduct],
    settings: EngineSettings,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
) -> ShopExtractionStats:
    url = build_search_url(settings, shop)

    try:
        await session.navigate(url)
    except SessionError as exc:
        raise ShopSkipped(shop.shop_name, f"Error going to page ({exc})") from exc

    try:
        await session.wait_for_element(selectors.product_card, settings.card_wait_timeout_ms)
    except SessionError as exc:
        raise ShopSkipped(shop.shop_name, f"Product card does not appear on page ({exc})") from exc

    # Handles are positional, so this snapshot stays valid once lazy loading fills the cards in.
    try:
        cards = await session.find_all(selectors.product_card)
    except SessionError as exc:
        raise ShopSkipped(shop.shop_name, f"Error finding product cards on page ({exc})") from exc

    try:
        await trigger_lazy_load(session, settings.scroll_steps, settings.scroll_delay_seconds)
    except SessionError as exc:
        raise ShopSkipped(shop.shop_name, f"Error scrolling product grid ({exc})") from exc

    stats = ShopExtractionStats(shop_name=shop.shop_name)
    for card in cards:
        try:
            fragment = await session.fragment_html(card)
        except SessionError as exc:
            print(f"WARNING: Error getting HTML of product card for shop {shop.shop_name}: {exc}")
            stats.unreadable += 1
            continue

        result = extract_card(fragment, shop.shop_name, selectors, settings.origin)
        stats.record(result)
        if result.product is not None:
            products.append(result.product)

    try:
        stats.discovered_page_numbers |= await probe_page_numbers(session, shop.shop_name, selectors)
    except SessionError as exc:
        print(f"WARNING: Error reading page controller for shop {shop.shop_name}: {exc}")

    return stats


async def run(
    session: BrowserSession,
    shops: Sequence[ShopDescriptor],
    settings: EngineSettings | None = None,
    selectors: SiteSelectors = DEFAULT_SELECTORS,
    handshake: bool = True,
) -> ScrapeRunResult:
    settings = settings or EngineSettings()
    if handshake:
        await select_language(session, settings, selectors)

    result = ScrapeRunResult()
    for shop in shops:
        print(f"Scraping {shop.shop_name}")
        try:
            stats = await scrape_shop(session, shop, result.products, settings, selectors)
        except ShopSkipped as error:
            print(f"WARNING: {error}")
            result.skipped_shops.append(shop.shop_name)
            continue

        result.shop_stats.append(stats)
        print(stats.report())

    print("Scraping finished!")
    for stats in result.shop_stats:
        print(stats.summary_line())
    if result.skipped_shops:
        print(f"Skipped shops: {', '.join(result.skipped_shops)}")
    return result
