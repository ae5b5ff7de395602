# main.py
import asyncio
import logging
from storefront.config import Config, setup_logging
from storefront.database.record_store import open_store
from storefront.database.seed import load_seed_file, seed_catalog
from storefront.services import CategoryService, ProductService
from storefront.utils.formatters import format_price
from storefront.utils.messages import Messages

async def main():
    # Setup logging
    setup_logging()
    logger = logging.getLogger(__name__)

    store = await open_store()
    try:
        categories = CategoryService(store)
        products = ProductService(store)

        if Config.SEED_FILE:
            logger.info(f"Seeding catalog from {Config.SEED_FILE}")
            await seed_catalog(categories, products, load_seed_file(Config.SEED_FILE))

        collection = await products.collection()
        for name, items in collection.items():
            cheapest = min(item.price for item in items)
            logger.info(f"{name}: {len(items)} item(s) from {format_price(cheapest)}")
            for item in items:
                logger.debug(Messages.format_product(item))
    except Exception as e:
        logger.error(f"Error preparing catalog: {e}", exc_info=True)
        raise
    finally:
        await store.close()

def run():
    asyncio.run(main())

if __name__ == "__main__":
    run()
