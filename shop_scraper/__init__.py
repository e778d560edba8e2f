from shop_scraper.models import ExtractedProduct, ShopDescriptor, ShopExtractionStats
from shop_scraper.scraper import run

__all__ = ["ExtractedProduct", "ShopDescriptor", "ShopExtractionStats", "run"]
