from __future__ import annotations

import argparse
import asyncio
import sys
import time
from pathlib import Path

from playwright.async_api import Browser, BrowserContext, Error as PlaywrightError, async_playwright

from shop_scraper.config import DEFAULT_CONFIG_PATH, EngineSettings, load_shop_list
from shop_scraper.errors import FatalScrapeError, ScrapeError, SessionError
from shop_scraper.output import OUTPUT_FORMATS, write_products
from shop_scraper.scraper import run
from shop_scraper.session import PlaywrightSession
from shop_scraper.site_selectors import load_selectors


def build_parser() -> argparse.ArgumentParser:
    defaults = EngineSettings()
    parser = argparse.ArgumentParser(description="Scrape product listings from marketplace shop pages using Playwright")
    parser.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML file listing the shops to scrape")
    parser.add_argument("--selectors", default=None, help="Optional YAML file overriding CSS selectors")
    parser.add_argument("--output", default="result.yaml", help="Output file for the scraped products")
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: picked from the output file suffix, YAML unless .json)",
    )
    parser.add_argument("--keyword", default=defaults.keyword, help="Search keyword used for every shop")
    parser.add_argument("--origin", default=defaults.origin, help="Marketplace origin URL")
    parser.add_argument(
        "--scroll-steps",
        type=int,
        default=defaults.scroll_steps,
        help="How many viewports to scroll so lazy-loaded cards render",
    )
    parser.add_argument(
        "--scroll-delay-ms",
        type=int,
        default=int(defaults.scroll_delay_seconds * 1000),
        help="Delay between scroll steps in milliseconds",
    )
    parser.add_argument(
        "--card-timeout-ms",
        type=int,
        default=defaults.card_wait_timeout_ms,
        help="How long to wait for the first product card before skipping a shop",
    )
    parser.add_argument(
        "--browser",
        choices=("firefox", "chromium"),
        default="firefox",
        help="Playwright browser engine",
    )
    parser.add_argument("--headed", action="store_true", help="Run browser in headed mode")
    return parser


def settings_from_args(args: argparse.Namespace) -> EngineSettings:
    return EngineSettings(
        origin=args.origin,
        keyword=args.keyword,
        scroll_steps=max(0, args.scroll_steps),
        scroll_delay_seconds=max(0, args.scroll_delay_ms) / 1000,
        card_wait_timeout_ms=max(1, args.card_timeout_ms),
    )


async def open_session(browser: Browser) -> tuple[BrowserContext, PlaywrightSession]:
    try:
        context = await browser.new_context()
        page = await context.new_page()
        session = PlaywrightSession(page)
        await session.fullscreen()
    except (PlaywrightError, SessionError) as exc:
        raise FatalScrapeError(f"Error preparing browser page: {exc}") from exc
    return context, session


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    start = time.perf_counter()

    try:
        shops = load_shop_list(Path(args.config))
        selectors = load_selectors(Path(args.selectors) if args.selectors else None)
        settings = settings_from_args(args)
        print(f"Total shops to scrape {len(shops)}")

        async with async_playwright() as playwright:
            browser_type = getattr(playwright, args.browser)
            try:
                browser = await browser_type.launch(headless=not args.headed)
            except Exception as exc:
                raise FatalScrapeError(
                    f"Playwright {args.browser} binaries are not installed. "
                    f"Run: python -m playwright install {args.browser}"
                ) from exc

            try:
                context, session = await open_session(browser)
                result = await run(session, shops, settings, selectors)
                try:
                    await context.close()
                except PlaywrightError as exc:
                    print(f"WARNING: Error closing browser context: {exc}")
            finally:
                await browser.close()
    except ScrapeError as error:
        if error.fatal:
            print(f"ERROR: {error}", file=sys.stderr)
        else:
            # recoverable errors are handled inside the shop loop; one reaching here is a bug
            print(f"ERROR: Unhandled scrape error: {error}", file=sys.stderr)
        return 1

    output_path = Path(args.output)
    try:
        write_products(output_path, result.products, args.format)
    except OSError as exc:
        print(f"ERROR: Error saving result to {output_path}: {exc}", file=sys.stderr)
        return 1
    print(f"Saved {len(result.products)} products to {output_path}")
    print(f"Time taken for program to run {time.perf_counter() - start:.2f}s")
    return 0


def entrypoint() -> None:
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    entrypoint()
