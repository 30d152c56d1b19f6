# ==============================================================================
# VISTA DE CATEGORÍAS
# ==============================================================================

from typing import Any, Dict, List

from vruksha_admin.models import Category
from vruksha_admin.views.resource_view import ResourceView


class CategoryView(ResourceView):
    """
    Categories page: list, create, edit, delete.

    Categories are single level, so only top-level categories can be chosen
    as parent, and never the category being edited.
    """

    label = 'Category'
    label_plural = 'categories'

    def blank_draft(self) -> Dict[str, Any]:
        return {'name': '', 'parent': '', 'icon': None}

    def draft_from(self, entity: Category) -> Dict[str, Any]:
        return {
            'name': entity.name,
            'parent': entity.parent.id if entity.parent else '',
            'icon': None,
        }

    def parent_options(self) -> List[Category]:
        dialog = self.dialog
        editing_id = dialog.target_id if dialog else None
        return [c for c in self.items if c.is_top_level and c.id != editing_id]

    def parent_name(self, category: Category) -> str:
        if category.parent is None:
            return ''
        if category.parent.name:
            return category.parent.name
        parent = self.find(category.parent.id)
        return parent.name if parent else category.parent.id

    def create(self, draft: Dict[str, Any]) -> Any:
        return self.service.create(draft)

    def update(self, entity_id: str, draft: Dict[str, Any]) -> Any:
        return self.service.update(entity_id, draft)

    def delete(self, entity_id: str) -> Any:
        return self.service.delete(entity_id)
