from sqlalchemy import Column, Integer, String

from models.base_model import base


class CategoryModel(base):
    __tablename__ = "categories"

    name = Column(String(100), primary_key=True)
    position = Column(Integer, nullable=False, default=0)
