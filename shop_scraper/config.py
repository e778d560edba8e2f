from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from shop_scraper.errors import ConfigError
from shop_scraper.models import ShopDescriptor

DEFAULT_CONFIG_PATH = Path("shop_list.yaml")


@dataclass(frozen=True)
class EngineSettings:
    origin: str = "https://shopee.com.my"
    search_path: str = "/search"
    keyword: str = "graphics card"
    scroll_steps: int = 49
    scroll_delay_seconds: float = 0.02
    card_wait_timeout_ms: int = 30000
    language_wait_timeout_ms: int = 30000


def _required_str(entry: dict, key: str, index: int) -> str:
    value = entry.get(key)
    # YAML reads unquoted numeric shop ids as int
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Invalid shop list entry #{index}: '{key}' must be a non-empty string.")
    return value.strip()


def parse_shop_list(raw: object) -> list[ShopDescriptor]:
    if not isinstance(raw, list):
        raise ConfigError("Invalid shop list: the file must contain a list of shops.")

    shops: list[ShopDescriptor] = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigError(f"Invalid shop list entry #{index}: expected a mapping.")

        if "product_match" not in entry:
            raise ConfigError(f"Invalid shop list entry #{index}: 'product_match' is required.")
        product_match = entry["product_match"]
        if product_match is None:
            product_match = []
        if not isinstance(product_match, list) or not all(isinstance(item, str) for item in product_match):
            raise ConfigError(f"Invalid shop list entry #{index}: 'product_match' must be a list of strings.")

        if "search_query" not in entry:
            raise ConfigError(f"Invalid shop list entry #{index}: 'search_query' is required.")
        search_query = entry["search_query"]
        if search_query is None:
            search_query = ""
        if not isinstance(search_query, str):
            raise ConfigError(f"Invalid shop list entry #{index}: 'search_query' must be a string.")

        shops.append(
            ShopDescriptor(
                shop_id=_required_str(entry, "shop_id", index),
                shop_name=_required_str(entry, "shop_name", index),
                search_query=search_query.strip(),
                product_match=tuple(product_match),
            )
        )
    return shops


def load_shop_list(path: Path = DEFAULT_CONFIG_PATH) -> list[ShopDescriptor]:
    try:
        raw_text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Error reading config file {path}: {exc}") from exc
    try:
        raw = yaml.safe_load(raw_text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Error parsing YAML config {path}: {exc}") from exc
    return parse_shop_list(raw)
