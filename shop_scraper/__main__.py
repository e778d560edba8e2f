from shop_scraper.cli import entrypoint

entrypoint()
