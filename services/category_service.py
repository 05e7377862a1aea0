"""Category service with Redis caching integration."""
from typing import List, Optional

from repositories.category_repository import CategoryRepository
from services.cache_service import CacheService
from utils.exceptions import InstanceNotFoundError
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)


class CategoryService:
    """Service for categories with aggressive caching (rarely changes)."""

    def __init__(self, repository: CategoryRepository, cache: Optional[CacheService] = None):
        self.repository = repository
        self.cache = cache or CacheService()
        self.cache_prefix = "categories"
        self.cache_ttl = 3600  # 1 hour

    def get_all(self) -> List[str]:
        """
        Category names in display order
        Key pattern: categories:list
        """
        cache_key = self.cache.build_key(self.cache_prefix, "list")
        return self.cache.get_or_set(cache_key, self._load_names, ttl=self.cache_ttl)

    def _load_names(self) -> List[str]:
        # an empty list is never cached: it raises instead
        names = [category.name for category in self.repository.find_all()]
        if not names:
            logger.warning("Categories not found")
            raise InstanceNotFoundError("Categories not found")
        return names

    def replace_all(self, names: List[str]) -> List[str]:
        self.repository.replace_all(names)
        self._invalidate_all_cache()
        return names

    def _invalidate_all_cache(self):
        pattern = f"{self.cache_prefix}:*"
        deleted_count = self.cache.delete_pattern(pattern)
        if deleted_count > 0:
            logger.info(f"Invalidated {deleted_count} category cache entries")
