from typing import List

from fastapi import APIRouter, Depends

from controllers.dependencies import get_category_service
from services.category_service import CategoryService


class CategoryController:

    def __init__(self):
        self.router = APIRouter(tags=["categories"])
        self.router.add_api_route("", self.get_categories, methods=["GET"], response_model=List[str])

    @staticmethod
    def get_categories(service: CategoryService = Depends(get_category_service)):
        return service.get_all()
