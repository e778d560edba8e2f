from __future__ import annotations

import asyncio

from shop_scraper.session import BrowserSession

SCROLL_FORWARD_SCRIPT = "() => window.scrollBy(0, window.innerHeight)"
DEFAULT_SCROLL_STEPS = 49
DEFAULT_SCROLL_DELAY_SECONDS = 0.02


async def trigger_lazy_load(
    session: BrowserSession,
    steps: int = DEFAULT_SCROLL_STEPS,
    delay_seconds: float = DEFAULT_SCROLL_DELAY_SECONDS,
) -> None:
    """Scroll one viewport at a time so the product grid renders every card's content.

    There is no completion check: cards below the last scrolled screen keep empty
    placeholders and will be counted as missing by the extractor.
    """
    for _ in range(steps):
        await session.execute_script(SCROLL_FORWARD_SCRIPT)
        await asyncio.sleep(delay_seconds)
