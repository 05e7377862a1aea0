"""Catalog store: the product-document port and its SQLAlchemy adapter."""
from abc import ABC, abstractmethod
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.orm.exc import StaleDataError

from models.product import ProductModel
from repositories.base_repository_impl import BaseRepositoryImpl
from schemas.product_schema import ProductSchema
from utils.exceptions import ConflictError, InstanceNotFoundError, InvalidInputError
from utils.logging_utils import get_sanitized_logger

logger = get_sanitized_logger(__name__)

ProductMutation = Callable[[ProductSchema], ProductSchema]


class CatalogStore(ABC):
    """Key-value store of product documents with equality queries and conditional updates."""

    @abstractmethod
    def get(self, product_id: str) -> ProductSchema:
        """Raises InstanceNotFoundError when the product does not exist."""

    @abstractmethod
    def query_by_equality(self, field: str, value) -> List[ProductSchema]:
        """Products whose ``field`` equals ``value``, in store key order."""

    @abstractmethod
    def scan(self) -> List[ProductSchema]:
        """Every product, in store key order."""

    @abstractmethod
    def transactional_update(self, product_id: str, mutate: ProductMutation) -> ProductSchema:
        """
        Read the product, apply ``mutate`` and write the result only if nobody
        else wrote the product in between. Raises ConflictError otherwise;
        errors raised by ``mutate`` abort the update and propagate.
        """

    @abstractmethod
    def add(self, product: ProductSchema) -> ProductSchema:
        """Insert a new product document."""

    @abstractmethod
    def exists(self, product_id: str) -> bool:
        pass


class ProductRepository(BaseRepositoryImpl, CatalogStore):
    QUERYABLE_FIELDS = ("category", "title", "id")

    def get(self, product_id: str) -> ProductSchema:
        with self.session() as session:
            model = session.get(ProductModel, product_id)
            if model is None:
                raise InstanceNotFoundError(f"Product {product_id} not found")
            return model.to_schema()

    def exists(self, product_id: str) -> bool:
        with self.session() as session:
            return session.get(ProductModel, product_id) is not None

    def query_by_equality(self, field: str, value) -> List[ProductSchema]:
        if field not in self.QUERYABLE_FIELDS:
            raise InvalidInputError(f"Cannot filter products by '{field}'")

        stmt = (
            select(ProductModel)
            .where(getattr(ProductModel, field) == value)
            .order_by(ProductModel.id)
        )
        with self.session() as session:
            return [model.to_schema() for model in session.scalars(stmt)]

    def scan(self) -> List[ProductSchema]:
        stmt = select(ProductModel).order_by(ProductModel.id)
        with self.session() as session:
            return [model.to_schema() for model in session.scalars(stmt)]

    def add(self, product: ProductSchema) -> ProductSchema:
        with self.session() as session:
            session.add(ProductModel.from_schema(product))
            session.commit()
        logger.info(f"Product {product.id} stored")
        return product

    def transactional_update(self, product_id: str, mutate: ProductMutation) -> ProductSchema:
        with self.session() as session:
            model = session.get(ProductModel, product_id)
            if model is None:
                raise InstanceNotFoundError(f"Product {product_id} not found")

            read_version = model.version_id
            updated = mutate(model.to_schema())
            if updated.id != product_id:
                raise InvalidInputError("A product update cannot change the product id")

            model.apply(updated)
            try:
                session.commit()
            except StaleDataError as e:
                session.rollback()
                logger.warning(
                    f"Concurrent write on product {product_id} (read version {read_version})"
                )
                raise ConflictError(f"Product {product_id} was modified concurrently") from e

            logger.debug(f"Product {product_id} updated to version {model.version_id}")
            return model.to_schema()
