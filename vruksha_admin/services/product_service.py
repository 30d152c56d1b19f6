# ==============================================================================
# SERVICIO DE PRODUCTOS
# ==============================================================================
# GET /products, GET /products/{id}, GET /products/category/{id}
# POST /products (multipart), PUT /products/{id} (multipart)
# DELETE /products/{id}
#
# Multipart contract:
#   name, description, category  → string parts
#   variation                    → ONE part with the JSON text of the list,
#                                  price and pcs already numeric
#   images                       → one binary part per file (repeated name)
# ==============================================================================

import math
from typing import Any, Dict, List, Union

from vruksha_admin.api_client import MultipartForm
from vruksha_admin.errors import DraftValidationError
from vruksha_admin.models import Product
from vruksha_admin.services.base import ResourceService, has_upload, validate_image


Number = Union[int, float]


def coerce_number(value: Any, label: str) -> Number:
    """
    Converts form input to a number: "100" → 100, "2.5" → 2.5.

    Raises:
        DraftValidationError: Empty, non numeric or negative input
    """
    if isinstance(value, bool):
        raise DraftValidationError(f'{label} must be a number')
    if isinstance(value, (int, float)):
        number = value
    else:
        text = str(value if value is not None else '').strip()
        if not text:
            raise DraftValidationError(f'{label} is required')
        try:
            number = int(text)
        except ValueError:
            try:
                number = float(text)
            except ValueError:
                raise DraftValidationError(f'{label} must be a number')
    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            raise DraftValidationError(f'{label} must be a number')
        if number.is_integer():
            number = int(number)
    if number < 0:
        raise DraftValidationError(f'{label} cannot be negative')
    return number


def normalize_variations(variations: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Validates the variation rows of a draft and coerces price/pcs.

    Raises:
        DraftValidationError: No rows or an invalid row
    """
    if not variations:
        raise DraftValidationError('At least one variation is required')
    result = []
    for index, row in enumerate(variations, start=1):
        weight = str(row.get('weight') or '').strip()
        if not weight:
            raise DraftValidationError(f'Variation {index}: weight is required')
        result.append({
            'weight': weight,
            'price': coerce_number(row.get('price'), f'Variation {index}: price'),
            'pcs': coerce_number(row.get('pcs'), f'Variation {index}: pieces'),
        })
    return result


class ProductService(ResourceService):
    """Operations on catalogue products."""

    def list_all(self) -> List[Product]:
        payload = self.client.get('/products')
        return self._decode_list(payload, Product.from_dict, 'products')

    def get(self, product_id: str) -> Product:
        payload = self.client.get(f'/products/{product_id}')
        return Product.from_dict(self._unwrap(payload, 'product'))

    def list_by_category(self, category_id: str) -> List[Product]:
        payload = self.client.get(f'/products/category/{category_id}')
        return self._decode_list(payload, Product.from_dict, 'products')

    def create(self, draft: Dict[str, Any]) -> Any:
        """
        Args:
            draft: {'name', 'description', 'category', 'variation': [...],
                    'images': [FileStorage, ...]}
        """
        return self.client.post('/products', form=self.build_form(draft))

    def update(self, product_id: str, draft: Dict[str, Any]) -> Any:
        return self.client.put(f'/products/{product_id}', form=self.build_form(draft))

    def delete(self, product_id: str) -> Any:
        return self.client.delete(f'/products/{product_id}')

    def build_form(self, draft: Dict[str, Any]) -> MultipartForm:
        name = (draft.get('name') or '').strip()
        if not name:
            raise DraftValidationError('Product name is required')
        category = draft.get('category') or ''
        if not category:
            raise DraftValidationError('Category is required')
        variation = normalize_variations(draft.get('variation') or [])
        images = [img for img in (draft.get('images') or []) if has_upload(img)]
        for image in images:
            validate_image(image, 'Images', required=False)

        form = MultipartForm()
        form.field('name', name)
        form.field('description', draft.get('description') or '')
        form.field('category', category)
        form.json_field('variation', variation)
        for image in images:
            form.file('images', image)
        return form
