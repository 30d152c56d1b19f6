# ==============================================================================
# SERVICIO DE SLIDERS (banners promocionales)
# ==============================================================================
# GET /sliders, GET /sliders/{id}
# POST /sliders (multipart: image)
# DELETE /sliders/{id}
# Sliders cannot be edited: replace = create + delete.
# ==============================================================================

from typing import Any, List

from vruksha_admin.api_client import MultipartForm
from vruksha_admin.models import Slider
from vruksha_admin.services.base import ResourceService, validate_image


class SliderService(ResourceService):

    def list_all(self) -> List[Slider]:
        payload = self.client.get('/sliders')
        return self._decode_list(payload, Slider.from_dict, 'sliders')

    def get(self, slider_id: str) -> Slider:
        payload = self.client.get(f'/sliders/{slider_id}')
        return Slider.from_dict(self._unwrap(payload, 'slider'))

    def create(self, image: Any) -> Any:
        """
        Args:
            image: werkzeug FileStorage with the banner image
        """
        validate_image(image, 'Slider', required=True)
        form = MultipartForm()
        form.file('image', image)
        return self.client.post('/sliders', form=form)

    def delete(self, slider_id: str) -> Any:
        return self.client.delete(f'/sliders/{slider_id}')
