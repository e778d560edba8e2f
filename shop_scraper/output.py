from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path

import yaml

from shop_scraper.models import ExtractedProduct

OUTPUT_FORMATS = ("yaml", "json")


def resolve_format(output_path: Path, fmt: str | None = None) -> str:
    if fmt:
        normalized = fmt.strip().lower()
        if normalized not in OUTPUT_FORMATS:
            raise ValueError(f"Unsupported output format '{fmt}'. Use one of: {', '.join(OUTPUT_FORMATS)}.")
        return normalized
    return "json" if output_path.suffix.lower() == ".json" else "yaml"


def dump_products(products: Sequence[ExtractedProduct], fmt: str) -> str:
    records = [product.to_record() for product in products]
    if fmt == "json":
        return json.dumps(records, indent=2, ensure_ascii=False)
    return yaml.safe_dump(records, sort_keys=False, allow_unicode=True)


def write_products(output_path: Path, products: Sequence[ExtractedProduct], fmt: str | None = None) -> None:
    output_path.write_text(
        dump_products(products, resolve_format(output_path, fmt)),
        encoding="utf-8",
    )
