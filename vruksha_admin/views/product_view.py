# ==============================================================================
# VISTA DE PRODUCTOS
# ==============================================================================
# Besides the product list, the page loads the categories for the picker.
# A failure loading categories only empties the picker; the product list is
# unaffected.
# ==============================================================================

from typing import Any, Dict, List, Optional

from vruksha_admin.errors import ApiError, user_message
from vruksha_admin.models import Category, Product
from vruksha_admin.views.resource_view import ResourceView


def blank_variation() -> Dict[str, Any]:
    return {'weight': '', 'price': '', 'pcs': ''}


class ProductView(ResourceView):
    """
    Products page: list, create, edit, delete, variation rows.
    """

    label = 'Product'
    label_plural = 'products'

    def __init__(self, service: Any, category_service: Any, **kwargs):
        super().__init__(service, **kwargs)
        self.category_service = category_service
        self.categories: List[Category] = []

    def mount(self) -> None:
        super().mount()
        self.load_categories()

    def load_categories(self) -> None:
        try:
            categories = self.category_service.list_all()
        except ApiError as e:
            self.categories = []
            self.notify(user_message(e, 'Failed to fetch categories'), 'error')
            return
        if self.mounted:
            self.categories = categories

    def category_name(self, product: Product) -> str:
        if product.category is None:
            return ''
        if product.category.name:
            return product.category.name
        for category in self.categories:
            if category.id == product.category.id:
                return category.name
        return ''

    # =========================================================================
    # BORRADOR
    # =========================================================================

    def blank_draft(self) -> Dict[str, Any]:
        return {
            'name': '',
            'description': '',
            'category': '',
            'images': [],
            'variation': [blank_variation()],
        }

    def draft_from(self, entity: Product) -> Dict[str, Any]:
        return {
            'name': entity.name,
            'description': entity.description,
            'category': entity.category.id if entity.category else '',
            'images': [],
            'variation': [v.to_dict() for v in entity.variation] or [blank_variation()],
        }

    def add_variation(self) -> List[Dict[str, Any]]:
        draft = self.update_draft()
        draft['variation'] = list(draft['variation']) + [blank_variation()]
        return draft['variation']

    def remove_variation(self, index: int) -> List[Dict[str, Any]]:
        """Removes a row; the last remaining row is kept."""
        draft = self.update_draft()
        rows = list(draft['variation'])
        if len(rows) > 1 and 0 <= index < len(rows):
            rows.pop(index)
        draft['variation'] = rows
        return rows

    def set_variation(self, index: int, field_name: str, value: Any) -> Optional[Dict[str, Any]]:
        draft = self.update_draft()
        rows = list(draft['variation'])
        if not 0 <= index < len(rows):
            return None
        rows[index] = dict(rows[index], **{field_name: value})
        draft['variation'] = rows
        return rows[index]

    # =========================================================================
    # MUTACIONES
    # =========================================================================

    def create(self, draft: Dict[str, Any]) -> Any:
        return self.service.create(draft)

    def update(self, entity_id: str, draft: Dict[str, Any]) -> Any:
        return self.service.update(entity_id, draft)

    def delete(self, entity_id: str) -> Any:
        return self.service.delete(entity_id)
