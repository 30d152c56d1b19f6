# ==============================================================================
# SERVICIO DE CATEGORÍAS
# ==============================================================================
# GET /categories, GET /categories/{id}
# POST /categories (multipart), PUT /categories/{id} (multipart)
# DELETE /categories/{id}
#
# Multipart contract: "name" and "parent" as string parts, "icon" as a binary
# part. A blank parent is not sent on create. On update "parent" is always
# sent, empty when cleared, so a subcategory can go back to top level. On
# update the icon part is only sent when a new file was chosen.
# ==============================================================================

from typing import Any, Dict, List

from vruksha_admin.api_client import MultipartForm
from vruksha_admin.errors import DraftValidationError
from vruksha_admin.models import Category
from vruksha_admin.services.base import ResourceService, has_upload, validate_image


class CategoryService(ResourceService):
    """Operations on product categories."""

    def list_all(self) -> List[Category]:
        payload = self.client.get('/categories')
        return self._decode_list(payload, Category.from_dict, 'categories')

    def get(self, category_id: str) -> Category:
        payload = self.client.get(f'/categories/{category_id}')
        return Category.from_dict(self._unwrap(payload, 'category'))

    def create(self, draft: Dict[str, Any]) -> Any:
        """
        Args:
            draft: {'name': str, 'parent': id or '', 'icon': FileStorage}

        Returns:
            Backend response payload
        """
        form = self._build_form(draft, is_new=True)
        return self.client.post('/categories', form=form)

    def update(self, category_id: str, draft: Dict[str, Any]) -> Any:
        if draft.get('parent') and draft['parent'] == category_id:
            raise DraftValidationError('A category cannot be its own parent')
        form = self._build_form(draft, is_new=False)
        return self.client.put(f'/categories/{category_id}', form=form)

    def delete(self, category_id: str) -> Any:
        return self.client.delete(f'/categories/{category_id}')

    def _build_form(self, draft: Dict[str, Any], is_new: bool) -> MultipartForm:
        name = (draft.get('name') or '').strip()
        if not name:
            raise DraftValidationError('Category name is required')
        icon = draft.get('icon')
        validate_image(icon, 'Icon', required=is_new)

        form = MultipartForm()
        form.field('name', name)
        if draft.get('parent'):
            form.field('parent', draft['parent'])
        elif not is_new:
            form.field('parent', '')
        if has_upload(icon):
            form.file('icon', icon)
        return form
