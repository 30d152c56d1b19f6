# ==============================================================================
# VISTA DE USUARIOS (solo lectura)
# ==============================================================================

from vruksha_admin.views.resource_view import ResourceView


class UserView(ResourceView):

    label = 'User'
    label_plural = 'users'

    @property
    def business_count(self) -> int:
        return sum(1 for u in self.items if u.is_business)
