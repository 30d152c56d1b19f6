# ==============================================================================
# VISTA DE RECURSO - Máquina de estados list / create / edit / delete
# ==============================================================================
# Every management page follows the same cycle:
#
#   Idle ─mount→ Loading ─→ Loaded ─open_create/open_edit→ Editing(draft)
#                              ▲ │                              │
#                              │ └─request_delete→ Deleting      │ submit ok
#                              └────── cancel / refetch ─────────┘
#
# The state is ONE tagged value; there is no "dialog open" flag that could be
# true without a draft. Rules:
#   - a failed list fetch leaves Loaded with an EMPTY list (never stale)
#   - after a successful mutation the list is always fetched again
#   - a failed submit keeps Editing with the draft untouched
#   - delete only runs after resolve_delete(confirmed=True)
#   - results that arrive after unmount() (or after a newer fetch) are dropped
#   - a second submit while one is in flight is refused
# ==============================================================================

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from vruksha_admin.errors import ApiError, user_message


# ==============================================================================
# ESTADOS
# ==============================================================================

class DialogMode(str, Enum):
    CREATE = 'create'
    EDIT = 'edit'


@dataclass(frozen=True)
class Idle:
    name = 'idle'


@dataclass(frozen=True)
class Loading:
    name = 'loading'


@dataclass(frozen=True)
class Loaded:
    name = 'loaded'


@dataclass
class Editing:
    """
    Dialog open.

    Attributes:
        mode: CREATE or EDIT
        draft: Form values not yet submitted
        target_id: Entity being edited (None when creating)
        submitting: True while the create/update call is in flight
    """
    mode: DialogMode
    draft: Dict[str, Any] = field(default_factory=dict)
    target_id: Optional[str] = None
    submitting: bool = False
    name = 'editing'


@dataclass(frozen=True)
class Deleting:
    """Waiting for the user to confirm or cancel the deletion."""
    target_id: str
    name = 'deleting'


class InvalidTransition(Exception):
    """An action was requested in a state that does not allow it."""
    pass


Notifier = Callable[[str, str], None]


class ResourceView:
    """
    Base class for the management pages.

    Subclasses implement fetch(), blank_draft(), draft_from() and the
    mutations they support (create/update/delete).

    Uso:
        view = CategoryView(category_service, notify=flash)
        view.mount()
        view.open_edit('c1')
        view.update_draft(name='Fruits')
        view.submit()
    """

    label = 'Item'
    label_plural = 'items'

    def __init__(
        self,
        service: Any,
        notify: Optional[Notifier] = None,
        refresh_after_mutation: bool = True
    ):
        """
        Args:
            service: Resource service used by the hooks
            notify: Callable(message, category) for toasts (flask.flash)
            refresh_after_mutation: Fetch the list again after a successful
                mutation. The web routes disable it because they redirect to
                the list page, which fetches on mount.
        """
        self.service = service
        self.notifications: List[tuple] = []
        self._notify = notify
        self.refresh_after_mutation = refresh_after_mutation
        self.items: List[Any] = []
        self.last_error: Optional[str] = None
        self._state: Any = Idle()
        self._mounted = False
        self._generation = 0

    # =========================================================================
    # MENSAJES
    # =========================================================================

    @property
    def fetch_failed_message(self) -> str:
        return f'Failed to fetch {self.label_plural}'

    @property
    def operation_failed_message(self) -> str:
        return 'Operation failed'

    @property
    def delete_failed_message(self) -> str:
        return f'Failed to delete {self.label.lower()}'

    def success_message(self, action: str) -> str:
        return f'{self.label} {action} successfully'

    def notify(self, message: str, category: str = 'info') -> None:
        self.notifications.append((category, message))
        if self._notify is not None:
            self._notify(message, category)

    # =========================================================================
    # ESTADO
    # =========================================================================

    @property
    def state(self) -> Any:
        return self._state

    @property
    def is_loading(self) -> bool:
        return isinstance(self._state, Loading)

    @property
    def dialog(self) -> Optional[Editing]:
        return self._state if isinstance(self._state, Editing) else None

    @property
    def pending_delete(self) -> Optional[Any]:
        if isinstance(self._state, Deleting):
            return self.find(self._state.target_id)
        return None

    @property
    def editing_entity(self) -> Optional[Any]:
        dialog = self.dialog
        if dialog is None or dialog.target_id is None:
            return None
        return self.find(dialog.target_id)

    def _require(self, *states) -> None:
        if not isinstance(self._state, states):
            expected = ', '.join(s.__name__ for s in states)
            raise InvalidTransition(
                f'{type(self).__name__}: expected {expected}, current state is {type(self._state).__name__}'
            )

    def _is_stale(self, generation: int) -> bool:
        return not self._mounted or generation != self._generation

    # =========================================================================
    # CICLO DE VIDA
    # =========================================================================

    def mount(self) -> None:
        self._mounted = True
        self.refresh()

    def unmount(self) -> None:
        """Later results of in-flight calls are discarded."""
        self._mounted = False
        self._generation += 1

    @property
    def mounted(self) -> bool:
        return self._mounted

    def refresh(self) -> None:
        """Fetches the full list again. Failure resets it to empty."""
        if not self._mounted:
            return
        self._generation += 1
        generation = self._generation
        self._state = Loading()
        try:
            items = list(self.fetch())
        except ApiError as e:
            if self._is_stale(generation):
                return
            self.items = []
            self.last_error = user_message(e, self.fetch_failed_message)
            self.notify(self.last_error, 'error')
            self._state = Loaded()
            return
        if self._is_stale(generation):
            return
        self.items = items
        self.last_error = None
        self._state = Loaded()

    def find(self, entity_id: str) -> Optional[Any]:
        for item in self.items:
            if self.entity_id(item) == entity_id:
                return item
        return None

    # =========================================================================
    # DIÁLOGO CREAR / EDITAR
    # =========================================================================

    def open_create(self) -> Editing:
        self._require(Loaded)
        self._state = Editing(mode=DialogMode.CREATE, draft=self.blank_draft())
        return self._state

    def open_edit(self, entity_id: str) -> Optional[Editing]:
        """
        Opens the dialog with a draft projected from the entity.

        Returns:
            Editing state, or None if the entity is not in the list
        """
        self._require(Loaded)
        entity = self.find(entity_id)
        if entity is None:
            self.notify(f'{self.label} not found', 'warning')
            return None
        self._state = Editing(
            mode=DialogMode.EDIT,
            draft=self.draft_from(entity),
            target_id=entity_id
        )
        return self._state

    def update_draft(self, **fields: Any) -> Dict[str, Any]:
        self._require(Editing)
        self._state.draft.update(fields)
        return self._state.draft

    def cancel(self) -> None:
        """Closes the dialog or the delete confirmation, draft discarded."""
        self._require(Editing, Deleting)
        self._state = Loaded()

    def submit(self) -> bool:
        """
        Sends the draft (create or update).

        Returns:
            True on success; False on failure or when already submitting
        """
        self._require(Editing)
        dialog: Editing = self._state
        if dialog.submitting:
            return False

        dialog.submitting = True
        generation = self._generation
        try:
            if dialog.mode == DialogMode.CREATE:
                self.create(dialog.draft)
            else:
                self.update(dialog.target_id, dialog.draft)
        except ApiError as e:
            dialog.submitting = False
            if not self._is_stale(generation):
                self.notify(user_message(e, self.operation_failed_message), 'error')
            return False

        if self._is_stale(generation):
            return True
        action = 'created' if dialog.mode == DialogMode.CREATE else 'updated'
        self.notify(self.success_message(action), 'success')
        self._after_mutation()
        return True

    # =========================================================================
    # BORRADO CON CONFIRMACIÓN
    # =========================================================================

    def request_delete(self, entity_id: str) -> Optional[Any]:
        """
        Asks for confirmation. Nothing is deleted yet.

        Returns:
            The entity awaiting confirmation, or None if it does not exist
        """
        self._require(Loaded)
        entity = self.find(entity_id)
        if entity is None:
            self.notify(f'{self.label} not found', 'warning')
            return None
        self._state = Deleting(target_id=entity_id)
        return entity

    def resolve_delete(self, confirmed: bool) -> bool:
        """
        Args:
            confirmed: Explicit outcome of the confirmation component

        Returns:
            True if the entity was deleted
        """
        self._require(Deleting)
        target_id = self._state.target_id
        if not confirmed:
            self._state = Loaded()
            return False
        return self.run_action(
            lambda: self.delete(target_id),
            self.success_message('deleted'),
            self.delete_failed_message
        )

    # =========================================================================
    # ACCIONES
    # =========================================================================

    def run_action(self, call: Callable[[], Any], success: str, failure: str) -> bool:
        """
        Runs a mutation that is not a dialog submit (delete, status change,
        payment record). On failure the list is left untouched.
        """
        generation = self._generation
        try:
            call()
        except ApiError as e:
            if not self._is_stale(generation):
                self.notify(user_message(e, failure), 'error')
                self._state = Loaded()
            return False
        if self._is_stale(generation):
            return True
        self.notify(success, 'success')
        self._after_mutation()
        return True

    def _after_mutation(self) -> None:
        self._state = Loaded()
        if self.refresh_after_mutation:
            self.refresh()

    # =========================================================================
    # HOOKS
    # =========================================================================

    def fetch(self) -> List[Any]:
        return self.service.list_all()

    def entity_id(self, entity: Any) -> str:
        return entity.id

    def blank_draft(self) -> Dict[str, Any]:
        return {}

    def draft_from(self, entity: Any) -> Dict[str, Any]:
        return {}

    def create(self, draft: Dict[str, Any]) -> Any:
        raise NotImplementedError(f'{self.label} cannot be created from the console')

    def update(self, entity_id: str, draft: Dict[str, Any]) -> Any:
        raise NotImplementedError(f'{self.label} cannot be edited from the console')

    def delete(self, entity_id: str) -> Any:
        raise NotImplementedError(f'{self.label} cannot be deleted from the console')
