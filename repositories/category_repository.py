from typing import List

from sqlalchemy import delete, select

from models.category import CategoryModel
from repositories.base_repository_impl import BaseRepositoryImpl
from schemas.category_schema import CategorySchema


class CategoryRepository(BaseRepositoryImpl):

    def find_all(self) -> List[CategorySchema]:
        stmt = select(CategoryModel).order_by(CategoryModel.position, CategoryModel.name)
        with self.session() as session:
            return [CategorySchema.model_validate(model) for model in session.scalars(stmt)]

    def replace_all(self, names: List[str]) -> List[CategorySchema]:
        """Overwrite the category list, keeping the given order."""
        with self.session() as session:
            session.execute(delete(CategoryModel))
            session.add_all(
                CategoryModel(name=name, position=position) for position, name in enumerate(names)
            )
            session.commit()
        return [CategorySchema(name=name, position=position) for position, name in enumerate(names)]
