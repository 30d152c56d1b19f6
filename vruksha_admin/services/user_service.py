# ==============================================================================
# SERVICIO DE USUARIOS (clientes de la tienda)
# ==============================================================================
# GET /admin/users → {"users": [...]}
# Customer accounts are read-only in the console.
# ==============================================================================

from typing import List

from vruksha_admin.errors import DecodeError
from vruksha_admin.models import User
from vruksha_admin.services.base import ResourceService


class UserService(ResourceService):

    def list_all(self) -> List[User]:
        payload = self.client.get('/admin/users')
        if not isinstance(payload, dict) or 'users' not in payload:
            raise DecodeError('users: expected an object with a "users" list', path='/admin/users')
        return self._decode_list(payload['users'], User.from_dict, 'users')
