# ==============================================================================
# VISTA DE SLIDERS
# ==============================================================================

from typing import Any, Dict

from vruksha_admin.services.base import has_upload
from vruksha_admin.views.resource_view import ResourceView


class SliderView(ResourceView):
    """Sliders can only be created and deleted."""

    label = 'Slider'
    label_plural = 'sliders'

    def blank_draft(self) -> Dict[str, Any]:
        return {'image': None}

    @property
    def preview_name(self) -> str:
        """File name of the chosen image, shown before submitting."""
        dialog = self.dialog
        if dialog is None or not has_upload(dialog.draft.get('image')):
            return ''
        return dialog.draft['image'].filename

    def create(self, draft: Dict[str, Any]) -> Any:
        return self.service.create(draft.get('image'))

    def delete(self, entity_id: str) -> Any:
        return self.service.delete(entity_id)
