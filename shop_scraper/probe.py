from __future__ import annotations

import argparse
import asyncio
import re
from pathlib import Path

from bs4 import BeautifulSoup
from playwright.async_api import async_playwright

from shop_scraper.config import EngineSettings
from shop_scraper.lazy_load import trigger_lazy_load
from shop_scraper.models import ShopDescriptor
from shop_scraper.scraper import build_search_url, select_language
from shop_scraper.session import PlaywrightSession
from shop_scraper.site_selectors import SiteSelectors, load_selectors


def count_selector_matches(html: str, selectors: SiteSelectors, sample_cards: int = 10) -> dict[str, int]:
    doc = BeautifulSoup(html, "html.parser")
    cards = doc.select(selectors.product_card)
    sample = cards[:sample_cards]
    return {
        "product_card": len(cards),
        "product_name": sum(1 for card in sample if card.select_one(selectors.product_name) is not None),
        "product_price": sum(1 for card in sample if card.select_one(selectors.product_price) is not None),
        "product_url": sum(1 for card in sample if card.select_one(selectors.product_url) is not None),
        "page_controller": len(doc.select(selectors.page_controller)),
    }


def data_sqe_values(html: str) -> list[str]:
    return sorted(set(re.findall(r'data-sqe="([^"]+)"', html, flags=re.I)))


async def main() -> None:
    parser = argparse.ArgumentParser(description="Check how well the configured selectors match one shop page")
    parser.add_argument("--shop-id", required=True, help="Shop id to open")
    parser.add_argument("--keyword", default=EngineSettings.keyword, help="Search keyword")
    parser.add_argument("--selectors", default=None, help="Optional YAML file overriding CSS selectors")
    parser.add_argument("--headed", action="store_true", help="Run browser in headed mode")
    args = parser.parse_args()

    settings = EngineSettings(keyword=args.keyword)
    selectors = load_selectors(Path(args.selectors) if args.selectors else None)
    shop = ShopDescriptor(shop_id=args.shop_id, shop_name=f"shop {args.shop_id}")

    async with async_playwright() as p:
        browser = await p.firefox.launch(headless=not args.headed)
        page = await browser.new_page()
        session = PlaywrightSession(page)
        await select_language(session, settings, selectors)

        url = build_search_url(settings, shop)
        await session.navigate(url)
        await page.wait_for_timeout(3000)
        await trigger_lazy_load(session, settings.scroll_steps, settings.scroll_delay_seconds)

        print("url", page.url)
        print("title", await page.title())

        html = await page.content()
        print("html_len", len(html))
        for name, count in count_selector_matches(html, selectors).items():
            print("selector", name, count)
        print("data_sqe", data_sqe_values(html)[:40])

        await browser.close()


if __name__ == "__main__":
    asyncio.run(main())
