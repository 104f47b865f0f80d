"""
The operator's working point: which single assigned service point the UI
session currently acts through.
"""

from typing import Iterable, Optional

from portal_access.config import WORKING_POINT_KEY
from portal_access.models import Actor, Assignment, Role


def storage_key(operator_id: int) -> str:
    return f"{WORKING_POINT_KEY}_{operator_id}"


def get_selection(assignments: Iterable[Assignment], persisted: Optional[int]) -> Optional[int]:
    """Reduce (assignments, persisted selection) to the effective selection.

    A persisted point that is still actively assigned is kept. With nothing
    persisted, a single active assignment is selected automatically. A stale
    persisted point falls back to the first active assignment, or None.
    """
    active = list(dict.fromkeys(a.service_point_id for a in assignments if a.is_active))

    if persisted is not None and persisted in active:
        return persisted
    if persisted is None:
        return active[0] if len(active) == 1 else None
    return active[0] if active else None


class WorkingPointSelector:
    """Session-scoped selection with write-through to a key/value store."""

    def __init__(self, store, actor: Optional[Actor] = None):
        self.store = store
        self.operator_id: Optional[int] = None
        self.selected: Optional[int] = None
        if actor is not None:
            self.bind(actor)

    def bind(self, actor: Optional[Actor]) -> None:
        """Attach the selector to the current actor.

        When the actor stops being an operator, the previous operator's
        persisted selection is removed.
        """
        is_operator = actor is not None and actor.role_kind is Role.OPERATOR
        operator_id = actor.operator_id if is_operator else None

        if not is_operator and self.operator_id is not None:
            self.store.remove(storage_key(self.operator_id))

        if operator_id != self.operator_id:
            self.selected = None
        self.operator_id = operator_id

    def load(self) -> Optional[int]:
        """Read the persisted selection; unparseable values are discarded."""
        if self.operator_id is None:
            return None
        key = storage_key(self.operator_id)
        raw = self.store.get(key)
        if raw is None:
            return None
        try:
            return int(raw)
        except (TypeError, ValueError):
            self.store.remove(key)
            return None

    def current(self, assignments: Iterable[Assignment]) -> Optional[int]:
        """Effective selection for *assignments*; corrections are persisted."""
        if self.operator_id is None:
            self.selected = None
            return None

        persisted = self.load()
        selection = get_selection(assignments, persisted)
        if selection != persisted:
            self.set_selection(selection)
        self.selected = selection
        return selection

    def set_selection(self, service_point_id: Optional[int]) -> None:
        if self.operator_id is None:
            raise ValueError("Working point can only be selected by an operator.")

        key = storage_key(self.operator_id)
        if service_point_id is None:
            self.store.remove(key)
        else:
            self.store.set(key, str(int(service_point_id)))
        self.selected = service_point_id
