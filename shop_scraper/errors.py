from __future__ import annotations


class ScrapeError(RuntimeError):
    fatal = False


class FatalScrapeError(ScrapeError):
    """Aborts the whole run. Raised before or outside the per-shop loop."""

    fatal = True


class ConfigError(FatalScrapeError):
    pass


class SessionError(ScrapeError):
    """A browser operation failed (navigation, lookup, script, click)."""


class ElementWaitTimeout(SessionError):
    pass


class ShopSkipped(ScrapeError):
    """One shop could not be scraped; the loop moves on to the next one."""

    def __init__(self, shop_name: str, reason: str) -> None:
        super().__init__(f"{reason} for shop {shop_name}, continue to next shop")
        self.shop_name = shop_name
        self.reason = reason
