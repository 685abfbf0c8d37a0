from fastapi import APIRouter, Depends, Query
from app.database.supabase_client import get_service_supabase
from app.modules.categories.schemas import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryTreeNode,
    CategoryWithCount, AdminCategoryResponse, CategoryActivitiesPage, ReorderRequest
)
from app.modules.categories.service import CategoryService
from app.core.dependencies import require_admin
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/categories", tags=["categories"])


def get_category_service(supabase: Client = Depends(get_service_supabase)) -> CategoryService:
    return CategoryService(supabase)


@router.get("", response_model=List[CategoryResponse])
async def get_categories(service: CategoryService = Depends(get_category_service)):
    return service.get_categories()


@router.get("/tree", response_model=List[CategoryTreeNode])
async def get_category_tree(service: CategoryService = Depends(get_category_service)):
    """Categories nested under their parents"""
    return service.get_category_tree()


@router.get("/with-count", response_model=List[CategoryWithCount])
async def get_categories_with_count(service: CategoryService = Depends(get_category_service)):
    """Categories with published post and public activity counts"""
    return service.get_categories_with_count()


@router.get("/admin", response_model=List[AdminCategoryResponse])
async def get_admin_categories(
    user_data: Dict = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.get_admin_categories()


@router.post("/admin", response_model=CategoryResponse, status_code=201)
async def create_category(
    category: CategoryCreate,
    user_data: Dict = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.create_category(category)


@router.put("/admin/reorder")
async def reorder_categories(
    request: ReorderRequest,
    user_data: Dict = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    service.reorder_categories(request.ids)
    return {"success": True}


@router.put("/admin/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    update: CategoryUpdate,
    user_data: Dict = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    return service.update_category(category_id, update)


@router.delete("/admin/{category_id}", status_code=204)
async def delete_category(
    category_id: str,
    user_data: Dict = Depends(require_admin),
    service: CategoryService = Depends(get_category_service)
):
    """Delete a category (refused while posts, activities or subcategories reference it)"""
    service.delete_category(category_id)
    return None


@router.get("/{slug}", response_model=CategoryResponse)
async def get_category_by_slug(slug: str, service: CategoryService = Depends(get_category_service)):
    return service.get_category_by_slug(slug)


@router.get("/{slug}/activities", response_model=CategoryActivitiesPage)
async def get_activities_by_category(
    slug: str,
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=100),
    service: CategoryService = Depends(get_category_service)
):
    """Public activities of a category, paginated"""
    return service.get_activities_by_category(slug, page, limit)
