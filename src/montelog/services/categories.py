"""Category listing, cached as a whole under the "categories" key."""

from __future__ import annotations

from montelog.cache import CacheKeys, CacheStore, read_through
from montelog.cache.aside import dumps
from montelog.config import Settings
from montelog.models import Category, CategoryList
from montelog.persistence import CategoryRepository, Database


class CategoryService:
    def __init__(self, database: Database, cache: CacheStore, settings: Settings):
        self.database = database
        self.cache = cache
        self.ttl = settings.category_ttl

    async def _load(self) -> list[Category]:
        async with self.database.session() as session:
            return await CategoryRepository(session).list_all()

    async def get_all_categories(self) -> list[Category]:
        return await read_through(
            self.cache,
            CacheKeys.categories(),
            self.ttl,
            self._load,
            serialize=lambda categories: dumps([c.model_dump() for c in categories]),
            deserialize=CategoryList.validate_json,
            cache_name="categories",
        )
