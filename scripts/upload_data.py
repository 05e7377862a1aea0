"""
Seed the catalog store from a JSON file.

The file holds ``{"products": [...], "categories": [...]}``. Products are
stored under their zero-padded id; ids already present are skipped, so the
script can be re-run safely. The category list is overwritten.

Usage:
    python scripts/upload_data.py data/catalog.json
"""
import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from config.database import build_engine, build_session_factory, create_tables  # noqa: E402
from config.logging_config import setup_logging  # noqa: E402
from config.redis_config import UpstashRedisSync  # noqa: E402
from config.settings import settings  # noqa: E402
from repositories.category_repository import CategoryRepository  # noqa: E402
from repositories.product_repository import CatalogStore, ProductRepository  # noqa: E402
from schemas.product_schema import ProductSchema, pad_product_id  # noqa: E402
from services.cache_service import CacheService  # noqa: E402
from services.category_service import CategoryService  # noqa: E402
from services.review_service import average_rating  # noqa: E402
from utils.logging_utils import get_sanitized_logger  # noqa: E402

logger = get_sanitized_logger("upload_data")


def build_product(raw: dict) -> ProductSchema:
    """Product document from a raw record; aggregates are derived, never trusted from input."""
    product = ProductSchema.model_validate({**raw, "id": pad_product_id(raw["id"])})
    return product.model_copy(
        update={
            "average_rating": average_rating(r.rating for r in product.reviews),
            "total_reviews": len(product.reviews),
        }
    )


def upload_products(store: CatalogStore, products: list) -> int:
    uploaded = 0
    for raw in products:
        product = build_product(raw)
        if store.exists(product.id):
            logger.info(f"Product {product.id} already exists, skipping...")
            continue
        store.add(product)
        uploaded += 1
        logger.info(f"Document written with ID: {product.id}")
    return uploaded


def upload_categories(service: CategoryService, categories: list) -> None:
    """Overwrite the category list; cached copies are dropped with it."""
    logger.info("Starting upload of categories...")
    service.replace_all(categories)
    logger.info("Categories uploaded successfully!")


def build_cache() -> CacheService:
    return CacheService(
        UpstashRedisSync(settings.UPSTASH_REDIS_REST_URL, settings.UPSTASH_REDIS_REST_TOKEN),
        default_ttl=settings.REDIS_CACHE_TTL,
        enabled=settings.CACHE_ENABLED,
    )


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Upload products and categories to the catalog store")
    parser.add_argument("path", type=Path, help="JSON file with 'products' and 'categories'")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging()
    data = json.loads(args.path.read_text(encoding="utf-8"))

    engine = build_engine(args.database_url or settings.database_url, timeout=settings.STORE_TIMEOUT_SECONDS)
    create_tables(engine)
    session_factory = build_session_factory(engine)

    try:
        uploaded = upload_products(ProductRepository(session_factory), data.get("products", []))
        categories = CategoryService(CategoryRepository(session_factory), cache=build_cache())
        upload_categories(categories, data.get("categories", []))
    except Exception as e:
        logger.error(f"Failed to upload all data: {e}")
        return 1
    finally:
        engine.dispose()

    logger.info(f"All data uploaded successfully! ({uploaded} new products)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
