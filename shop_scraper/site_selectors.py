from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path

import soupsieve
import yaml
from soupsieve import SelectorSyntaxError

from shop_scraper.errors import ConfigError


@dataclass(frozen=True)
class SiteSelectors:
    """CSS selectors the engine relies on, grouped so markup drift is a data change."""

    language_button: str
    product_card: str
    product_name: str
    product_price: str
    product_url: str
    page_controller: str
    page_button: str


DEFAULT_SELECTORS = SiteSelectors(
    language_button="div.language-selection__list-item:nth-child(1) > button:nth-child(1)",
    product_card=".shopee-search-item-result__item",
    product_name=".Cve6sh",
    product_price=".vioxXd.rVLWG6",
    product_url="a[data-sqe='link']",
    page_controller=".shopee-page-controller",
    page_button="button",
)


def selectors_from_mapping(raw: object, base: SiteSelectors = DEFAULT_SELECTORS) -> SiteSelectors:
    if raw is None:
        return base
    if not isinstance(raw, dict):
        raise ConfigError("Invalid selector config: expected a mapping of field name to CSS selector.")

    known = {f.name for f in fields(SiteSelectors)}
    overrides: dict[str, str] = {}
    for key, value in raw.items():
        if key not in known:
            allowed = ", ".join(sorted(known))
            raise ConfigError(f"Unknown selector field '{key}'. Allowed fields: {allowed}.")
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Selector '{key}' must be a non-empty string.")
        selector = value.strip()
        try:
            soupsieve.compile(selector)
        except SelectorSyntaxError as exc:
            raise ConfigError(f"Selector '{key}' is not valid CSS: {exc}") from exc
        overrides[key] = selector
    return replace(base, **overrides)


def load_selectors(path: Path | None) -> SiteSelectors:
    if path is None:
        return DEFAULT_SELECTORS
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Error reading selector file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Error parsing selector file {path}: {exc}") from exc
    return selectors_from_mapping(raw)
