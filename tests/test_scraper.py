from __future__ import annotations

from dataclasses import replace

import pytest

from shop_scraper.config import EngineSettings
from shop_scraper.errors import FatalScrapeError, ShopSkipped
from shop_scraper.models import ShopDescriptor
from shop_scraper.scraper import build_search_url, run, scrape_shop, select_language
from shop_scraper.site_selectors import DEFAULT_SELECTORS
from tests.fakes import FakeSession, FakeShopPage, card_html

FAST = EngineSettings(scroll_delay_seconds=0)

SHOP_A = ShopDescriptor(shop_id="111", shop_name="Shop A", search_query="gpu", product_match=("RTX",))
SHOP_B = ShopDescriptor(shop_id="222", shop_name="Shop B")


def _shop_a_page() -> FakeShopPage:
    return FakeShopPage(
        cards=[
            card_html(name="RTX 3060", price="RM1,299.00", href="/RTX-3060-i.111.1?sp_atk=x"),
            card_html(name="RTX 3070", price=None),
            card_html(name="RTX 3080", price="RM3,199.00", href="/RTX-3080-i.111.3?sp_atk=y"),
        ],
        page_buttons=["<", "1", "2", "3", ">"],
    )


class TestBuildSearchUrl:
    def test_attaches_keyword_and_shop(self) -> None:
        url = build_search_url(EngineSettings(), SHOP_A)
        assert url == "https://shopee.com.my/search?keyword=graphics+card&shop=111"

    def test_bad_origin_skips_shop(self) -> None:
        with pytest.raises(ShopSkipped):
            build_search_url(EngineSettings(origin="not a url"), SHOP_A)


class TestSelectLanguage:
    @pytest.mark.asyncio
    async def test_clicks_language_button(self) -> None:
        session = FakeSession()
        await select_language(session, FAST)
        assert session.navigations == ["https://shopee.com.my"]
        assert [element.kind for element in session.clicks] == ["language"]

    @pytest.mark.asyncio
    async def test_missing_language_button_is_fatal(self) -> None:
        session = FakeSession(language_button=False)
        with pytest.raises(FatalScrapeError) as exc_info:
            await select_language(session, FAST)
        assert exc_info.value.fatal is True


class TestScrapeShop:
    @pytest.mark.asyncio
    async def test_counts_and_products(self) -> None:
        session = FakeSession({"111": _shop_a_page()})
        products = []
        stats = await scrape_shop(session, SHOP_A, products, FAST)

        assert stats.valid_count == 2
        assert stats.price_missing == 1
        assert stats.name_missing == 0
        assert stats.url_missing == 0
        assert stats.discovered_page_numbers == {1, 2, 3}
        assert [product.name for product in products] == ["RTX 3060", "RTX 3080"]
        assert products[0].url == "https://shopee.com.my/RTX-3060-i.111.1"
        assert len(session.scripts) == FAST.scroll_steps

    @pytest.mark.asyncio
    async def test_each_rejected_card_increments_one_counter(self) -> None:
        page = FakeShopPage(
            cards=[
                card_html(name=None, price=None, href=None),
                card_html(name=None),
                card_html(price=None, href=None),
                card_html(href=None),
                card_html(),
            ]
        )
        session = FakeSession({"111": page})
        stats = await scrape_shop(session, SHOP_A, [], FAST)
        assert (stats.valid_count, stats.name_missing, stats.price_missing, stats.url_missing) == (1, 2, 1, 1)
        assert stats.valid_count + stats.rejected_count == len(page.cards)

    @pytest.mark.asyncio
    async def test_unreadable_card_is_skipped(self) -> None:
        session = FakeSession({"111": FakeShopPage(cards=[card_html(), None, card_html(name="Second")])})
        products = []
        stats = await scrape_shop(session, SHOP_A, products, FAST)
        assert stats.valid_count == 2
        assert stats.unreadable == 1
        assert stats.rejected_count == 0

    @pytest.mark.asyncio
    async def test_navigation_failure_skips_shop(self) -> None:
        session = FakeSession({"111": FakeShopPage(navigation_fails=True)})
        with pytest.raises(ShopSkipped) as exc_info:
            await scrape_shop(session, SHOP_A, [], FAST)
        assert exc_info.value.shop_name == "Shop A"
        assert exc_info.value.fatal is False

    @pytest.mark.asyncio
    async def test_card_wait_timeout_skips_shop(self) -> None:
        session = FakeSession({"111": FakeShopPage(cards=[])})
        with pytest.raises(ShopSkipped):
            await scrape_shop(session, SHOP_A, [], FAST)
        # skipped before any scrolling
        assert session.scripts == []


    @pytest.mark.asyncio
    async def test_enumeration_failure_skips_shop(self) -> None:
        session = FakeSession({"111": FakeShopPage(cards=[card_html()], find_all_fails=True)})
        with pytest.raises(ShopSkipped) as exc_info:
            await scrape_shop(session, SHOP_A, [], FAST)
        assert "Error finding product cards" in exc_info.value.reason
        assert session.scripts == []

    @pytest.mark.asyncio
    async def test_scroll_failure_skips_shop(self) -> None:
        session = FakeSession({"111": FakeShopPage(cards=[card_html()], scroll_fails=True)})
        products = []
        with pytest.raises(ShopSkipped) as exc_info:
            await scrape_shop(session, SHOP_A, products, FAST)
        assert "Error scrolling product grid" in exc_info.value.reason
        assert products == []

    @pytest.mark.asyncio
    async def test_page_controller_error_keeps_products(self, capsys) -> None:
        page = _shop_a_page()
        page.find_fails = True
        session = FakeSession({"111": page})
        products = []
        stats = await scrape_shop(session, SHOP_A, products, FAST)
        assert stats.valid_count == 2
        assert stats.discovered_page_numbers == set()
        assert len(products) == 2
        assert "WARNING: Error reading page controller for shop Shop A" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_invalid_page_button_selector_keeps_products(self, capsys) -> None:
        selectors = replace(DEFAULT_SELECTORS, page_button="button[class=")
        session = FakeSession({"111": _shop_a_page()}, selectors=selectors)
        products = []
        stats = await scrape_shop(session, SHOP_A, products, FAST, selectors)
        assert stats.valid_count == 2
        assert stats.discovered_page_numbers == set()
        assert "Invalid CSS selector for page buttons in shop Shop A" in capsys.readouterr().out


class TestRun:
    @pytest.mark.asyncio
    async def test_two_shops_second_times_out(self, capsys) -> None:
        session = FakeSession({"111": _shop_a_page(), "222": FakeShopPage(cards=[])})

        result = await run(session, [SHOP_A, SHOP_B], FAST)

        assert [product.shop_name for product in result.products] == ["Shop A", "Shop A"]
        assert result.skipped_shops == ["Shop B"]
        assert len(result.shop_stats) == 1
        stats = result.shop_stats[0]
        assert stats.valid_count == 2
        assert stats.price_missing == 1

        out = capsys.readouterr().out
        assert "Scraping Shop A" in out
        assert "Scraping Shop B" in out
        assert "Shop A: valid=2, nameMissing=0, priceMissing=1, urlMissing=0, pages=[1, 2, 3]" in out
        assert "WARNING: Product card does not appear on page" in out
        assert "Scraping finished!" in out

        # language handshake first, then one navigation per shop in order
        assert session.navigations[0] == "https://shopee.com.my"
        assert "shop=111" in session.navigations[1]
        assert "shop=222" in session.navigations[2]

    @pytest.mark.asyncio
    async def test_results_follow_shop_then_card_order(self) -> None:
        session = FakeSession(
            {
                "111": FakeShopPage(cards=[card_html(name="A1"), card_html(name="A2")]),
                "222": FakeShopPage(cards=[card_html(name="B1")]),
            }
        )
        result = await run(session, [SHOP_A, SHOP_B], FAST)
        assert [product.name for product in result.products] == ["A1", "A2", "B1"]

    @pytest.mark.asyncio
    async def test_failing_first_shop_does_not_stop_the_run(self) -> None:
        session = FakeSession(
            {
                "111": FakeShopPage(navigation_fails=True),
                "222": FakeShopPage(cards=[card_html(name="B1")]),
            }
        )
        result = await run(session, [SHOP_A, SHOP_B], FAST)
        assert result.skipped_shops == ["Shop A"]
        assert [product.name for product in result.products] == ["B1"]

    @pytest.mark.asyncio
    async def test_invalid_page_button_selector_does_not_stop_the_run(self) -> None:
        selectors = replace(DEFAULT_SELECTORS, page_button="button[class=")
        session = FakeSession(
            {"111": _shop_a_page(), "222": FakeShopPage(cards=[card_html(name="B1")])},
            selectors=selectors,
        )
        result = await run(session, [SHOP_A, SHOP_B], FAST, selectors)
        assert [stats.shop_name for stats in result.shop_stats] == ["Shop A", "Shop B"]
        assert [product.name for product in result.products] == ["RTX 3060", "RTX 3080", "B1"]

    @pytest.mark.asyncio
    async def test_handshake_failure_aborts_before_any_shop(self) -> None:
        session = FakeSession({"111": _shop_a_page()}, language_button=False)
        with pytest.raises(FatalScrapeError):
            await run(session, [SHOP_A], FAST)
        assert session.navigations == ["https://shopee.com.my"]

    @pytest.mark.asyncio
    async def test_handshake_can_be_skipped(self) -> None:
        session = FakeSession({"111": _shop_a_page()}, language_button=False)
        result = await run(session, [SHOP_A], FAST, DEFAULT_SELECTORS, handshake=False)
        assert len(result.products) == 2
