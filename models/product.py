from sqlalchemy import JSON, Column, Float, Integer, String, Text

from models.base_model import base
from schemas.product_schema import ProductSchema
from schemas.review_schema import ReviewSchema


class ProductModel(base):
    """
    One product document.

    Reviews are embedded as a JSON map keyed by review id. ``version_id`` is
    SQLAlchemy's version counter: every UPDATE is issued as
    ``... WHERE id = :id AND version_id = :read_version`` and a concurrent
    writer makes it match zero rows (StaleDataError).
    """

    __tablename__ = "products"

    id = Column(String(32), primary_key=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False, default="")
    category = Column(String(100), nullable=False, default="", index=True)
    price = Column(Float, nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    tags = Column(JSON, nullable=False, default=list)
    images = Column(JSON, nullable=False, default=list)
    reviews = Column(JSON, nullable=False, default=dict)
    average_rating = Column(Float, nullable=False, default=0)
    total_reviews = Column(Integer, nullable=False, default=0)
    version_id = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version_id}

    def to_schema(self) -> ProductSchema:
        return ProductSchema(
            id=self.id,
            title=self.title,
            description=self.description or "",
            category=self.category or "",
            price=self.price,
            stock=self.stock,
            tags=list(self.tags or []),
            images=list(self.images or []),
            reviews=[ReviewSchema.model_validate(r) for r in (self.reviews or {}).values()],
            average_rating=self.average_rating,
            total_reviews=self.total_reviews,
        )

    def apply(self, product: ProductSchema) -> None:
        """Copy every document field from ``product`` (new objects, so JSON changes are detected)."""
        self.title = product.title
        self.description = product.description
        self.category = product.category
        self.price = product.price
        self.stock = product.stock
        self.tags = list(product.tags)
        self.images = list(product.images)
        self.reviews = {
            review.id: review.model_dump(mode="json", by_alias=True) for review in product.reviews
        }
        self.average_rating = product.average_rating
        self.total_reviews = product.total_reviews

    @classmethod
    def from_schema(cls, product: ProductSchema) -> "ProductModel":
        model = cls(id=product.id)
        model.apply(product)
        return model
