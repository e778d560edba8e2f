from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum


@dataclass(frozen=True)
class ShopDescriptor:
    shop_id: str
    shop_name: str
    search_query: str = ""
    # Carried through from the shop list, not consulted during extraction.
    product_match: tuple[str, ...] = ()


@dataclass(frozen=True)
class ExtractedProduct:
    name: str
    price: str
    shop_name: str
    url: str

    def to_record(self) -> dict[str, str]:
        return asdict(self)


class MissingField(str, Enum):
    NAME = "name"
    PRICE = "price"
    URL = "url"


@dataclass(frozen=True)
class CardResult:
    product: ExtractedProduct | None = None
    missing: MissingField | None = None

    @property
    def ok(self) -> bool:
        return self.product is not None


@dataclass
class ShopExtractionStats:
    shop_name: str
    valid_count: int = 0
    name_missing: int = 0
    price_missing: int = 0
    url_missing: int = 0
    # cards whose HTML could not be read from the browser
    unreadable: int = 0
    discovered_page_numbers: set[int] = field(default_factory=set)

    def record(self, result: CardResult) -> None:
        if result.ok:
            self.valid_count += 1
        elif result.missing is MissingField.NAME:
            self.name_missing += 1
        elif result.missing is MissingField.PRICE:
            self.price_missing += 1
        elif result.missing is MissingField.URL:
            self.url_missing += 1

    @property
    def rejected_count(self) -> int:
        return self.name_missing + self.price_missing + self.url_missing

    def summary_line(self) -> str:
        pages = sorted(self.discovered_page_numbers)
        line = (
            f"{self.shop_name}: valid={self.valid_count}, nameMissing={self.name_missing}, "
            f"priceMissing={self.price_missing}, urlMissing={self.url_missing}, pages={pages}"
        )
        if self.unreadable:
            line += f", unreadable={self.unreadable}"
        return line

    def report(self) -> str:
        return (
            f"Valid product: {self.valid_count}\n"
            f"Name not found: {self.name_missing}\n"
            f"Price not found: {self.price_missing}\n"
            f"URL not found: {self.url_missing}\n"
            f"Pages found: {sorted(self.discovered_page_numbers) or '-'}\n"
        )


@dataclass
class ScrapeRunResult:
    products: list[ExtractedProduct] = field(default_factory=list)
    shop_stats: list[ShopExtractionStats] = field(default_factory=list)
    skipped_shops: list[str] = field(default_factory=list)
