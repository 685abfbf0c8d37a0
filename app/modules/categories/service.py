import logging
from collections import Counter
from supabase import Client
from app.core.utils import (
    generate_slug, timestamped_slug, page_range, total_pages, utc_now_iso,
    CATEGORY_SLUG_MAX_LENGTH
)
from app.modules.categories.schemas import (
    CategoryCreate, CategoryUpdate, CategoryResponse, CategoryTreeNode,
    CategoryWithCount, AdminCategoryResponse, CategoryActivitiesPage
)
from typing import List, Optional, Dict, Any
from fastapi import HTTPException

logger = logging.getLogger(__name__)


def build_category_tree(rows: List[Dict[str, Any]]) -> List[CategoryTreeNode]:
    """Nest categories under their parents; categories whose parent is missing become roots."""
    nodes = {row["id"]: CategoryTreeNode(**row) for row in rows}
    roots = []
    for row in rows:
        node = nodes[row["id"]]
        parent_id = row.get("parent_id")
        if parent_id and parent_id in nodes and parent_id != row["id"]:
            nodes[parent_id].children.append(node)
        else:
            roots.append(node)
    return roots


class CategoryService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _all_rows(self) -> List[Dict[str, Any]]:
        result = self.supabase.table("categories")\
            .select("*")\
            .order("order_index")\
            .order("name")\
            .execute()
        return result.data or []

    def get_categories(self) -> List[CategoryResponse]:
        try:
            return [CategoryResponse(**row) for row in self._all_rows()]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch categories: {str(e)}")

    def get_category_tree(self) -> List[CategoryTreeNode]:
        try:
            return build_category_tree(self._all_rows())
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch categories: {str(e)}")

    def get_category_by_slug(self, slug: str) -> CategoryResponse:
        try:
            result = self.supabase.table("categories")\
                .select("*")\
                .eq("slug", slug)\
                .limit(1)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Category not found")
            return CategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _reference_counts(self, published_only: bool) -> tuple:
        posts = self.supabase.table("posts").select("category_id").not_.is_("category_id", "null")
        activities = self.supabase.table("activities").select("category_id").not_.is_("category_id", "null")
        if published_only:
            posts = posts.eq("status", "published").lte("published_at", utc_now_iso())
            activities = activities.eq("status", "public")
        post_counts = Counter(row["category_id"] for row in (posts.execute().data or []))
        activity_counts = Counter(row["category_id"] for row in (activities.execute().data or []))
        return post_counts, activity_counts

    def get_categories_with_count(self) -> List[CategoryWithCount]:
        """Categories with counts of published posts and public activities"""
        try:
            rows = self._all_rows()
            post_counts, activity_counts = self._reference_counts(published_only=True)
            return [
                CategoryWithCount(
                    **row,
                    post_count=post_counts.get(row["id"], 0),
                    activity_count=activity_counts.get(row["id"], 0),
                )
                for row in rows
            ]
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch categories: {str(e)}")

    def get_activities_by_category(self, slug: str, page: int = 1, limit: int = 12) -> CategoryActivitiesPage:
        category = self.get_category_by_slug(slug)
        try:
            start, end = page_range(page, limit)
            result = self.supabase.table("activities")\
                .select(
                    "id, created_at, user_id, title, description, thumbnail, type, play_count, tags, "
                    "profiles(display_name, avatar_url)",
                    count="exact"
                )\
                .eq("category_id", category.id)\
                .eq("status", "public")\
                .order("created_at", desc=True)\
                .range(start, end)\
                .execute()
            total = result.count or 0
            return CategoryActivitiesPage(
                activities=result.data or [],
                total=total,
                total_pages=total_pages(total, limit),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch activities: {str(e)}")

    # ============================================
    # Admin
    # ============================================

    def get_admin_categories(self) -> List[AdminCategoryResponse]:
        """All categories with post/activity counts (any status) and parent info"""
        try:
            rows = self._all_rows()
            by_id = {row["id"]: row for row in rows}
            post_counts, activity_counts = self._reference_counts(published_only=False)
            result = []
            for row in rows:
                parent = by_id.get(row.get("parent_id")) if row.get("parent_id") else None
                result.append(AdminCategoryResponse(
                    **row,
                    post_count=post_counts.get(row["id"], 0),
                    activity_count=activity_counts.get(row["id"], 0),
                    parent={"id": parent["id"], "name": parent["name"], "slug": parent["slug"]} if parent else None,
                ))
            return result
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to fetch categories: {str(e)}")

    def _unique_slug(self, source: str, exclude_id: Optional[str] = None) -> str:
        slug = generate_slug(source, CATEGORY_SLUG_MAX_LENGTH)
        if not slug:
            raise HTTPException(status_code=400, detail="Category name must contain letters or digits")
        query = self.supabase.table("categories").select("id").eq("slug", slug)
        if exclude_id:
            query = query.neq("id", exclude_id)
        if query.limit(1).execute().data:
            return timestamped_slug(slug)
        return slug

    def _check_parent(self, parent_id: str, category_id: Optional[str] = None) -> None:
        """Parent must exist and must not be the category itself or one of its descendants"""
        if category_id and parent_id == category_id:
            raise HTTPException(status_code=400, detail="Category cannot be its own parent")
        parents = {row["id"]: row.get("parent_id") for row in self._all_rows()}
        if parent_id not in parents:
            raise HTTPException(status_code=400, detail="Parent category not found")
        if category_id:
            seen = set()
            current = parents.get(parent_id)
            while current and current not in seen:
                if current == category_id:
                    raise HTTPException(status_code=400, detail="Category cannot be moved under its own descendant")
                seen.add(current)
                current = parents.get(current)

    def create_category(self, category: CategoryCreate) -> CategoryResponse:
        try:
            if category.parent_id:
                self._check_parent(category.parent_id)
            result = self.supabase.table("categories").insert({
                "name": category.name.strip(),
                "slug": self._unique_slug(category.slug or category.name),
                "description": category.description,
                "parent_id": category.parent_id,
                "order_index": category.order_index,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create category")
            logger.info(f"Created category {result.data[0]['slug']}")
            return CategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create category: {str(e)}")

    def update_category(self, category_id: str, update: CategoryUpdate) -> CategoryResponse:
        try:
            values = update.model_dump(exclude_unset=True)
            if values.get("parent_id"):
                self._check_parent(values["parent_id"], category_id)
            if values.get("slug"):
                values["slug"] = self._unique_slug(values["slug"], exclude_id=category_id)
            elif "slug" in values:
                del values["slug"]
            if values.get("name"):
                values["name"] = values["name"].strip()

            result = self.supabase.table("categories")\
                .update(values)\
                .eq("id", category_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Category not found")
            return CategoryResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to update category: {str(e)}")

    def _count(self, table: str, column: str, value: str) -> int:
        result = self.supabase.table(table)\
            .select("id", count="exact", head=True)\
            .eq(column, value)\
            .execute()
        return result.count or 0

    def delete_category(self, category_id: str) -> bool:
        """Delete a category that nothing references"""
        try:
            post_count = self._count("posts", "category_id", category_id)
            if post_count:
                raise HTTPException(status_code=409, detail=f"Cannot delete category: {post_count} posts use it")
            activity_count = self._count("activities", "category_id", category_id)
            if activity_count:
                raise HTTPException(status_code=409, detail=f"Cannot delete category: {activity_count} activities use it")
            child_count = self._count("categories", "parent_id", category_id)
            if child_count:
                raise HTTPException(status_code=409, detail=f"Cannot delete category: it has {child_count} subcategories")

            result = self.supabase.table("categories")\
                .delete()\
                .eq("id", category_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Category not found")
            return True
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to delete category: {str(e)}")

    def reorder_categories(self, ids: List[str]) -> bool:
        """order_index becomes each id's position in the list"""
        try:
            for index, category_id in enumerate(ids):
                self.supabase.table("categories")\
                    .update({"order_index": index})\
                    .eq("id", category_id)\
                    .execute()
            return True
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to reorder categories: {str(e)}")
