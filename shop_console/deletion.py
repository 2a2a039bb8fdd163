"""
Two-step delete for shops and products.

Targets are picked from a checkbox set, then shown back to the user for an
explicit confirmation. Nothing is sent before confirm(). One target goes to
the single-item endpoint, several go to the bulk endpoint in one call.
"""

from enum import Enum
from typing import Callable, Generic, Iterable, List, Optional, Protocol, Set, TypeVar

import structlog

from shop_console.exceptions import ShopConsoleError

logger = structlog.get_logger(__name__)


class HasId(Protocol):
    id: int


T = TypeVar("T", bound=HasId)


class DeletePhase(str, Enum):
    SELECTING = "selecting"
    CONFIRMING = "confirming"


class DeleteFlow(Generic[T]):
    def __init__(
        self,
        delete_one: Callable[[int], None],
        delete_many: Callable[[List[int]], None],
        error_message: str = "Failed to delete",
    ):
        self.delete_one = delete_one
        self.delete_many = delete_many
        self.error_message = error_message
        self.selected: Set[int] = set()
        self.phase = DeletePhase.SELECTING
        self.targets: List[T] = []
        self.deleting = False
        self.error: Optional[str] = None

    @property
    def is_confirming(self) -> bool:
        return self.phase is DeletePhase.CONFIRMING

    def is_selected(self, item_id: int) -> bool:
        return item_id in self.selected

    def toggle(self, item_id: int) -> None:
        if item_id in self.selected:
            self.selected.discard(item_id)
        else:
            self.selected.add(item_id)

    def set_selected(self, item_id: int, checked: bool) -> None:
        if checked:
            self.selected.add(item_id)
        else:
            self.selected.discard(item_id)

    def all_selected(self, visible: Iterable[T]) -> bool:
        ids = {item.id for item in visible}
        return bool(ids) and self.selected == ids

    def toggle_all(self, visible: Iterable[T]) -> None:
        """Select every visible item, or clear the selection if that is already the case."""
        visible = list(visible)
        if self.all_selected(visible):
            self.selected = set()
        else:
            self.selected = {item.id for item in visible}

    def clear_selection(self) -> None:
        self.selected = set()

    def request_confirmation(self, items: Iterable[T]) -> bool:
        """Move to the confirmation step with the selected items, in list order."""
        self.targets = [item for item in items if item.id in self.selected]
        if not self.targets:
            return False
        self.error = None
        self.phase = DeletePhase.CONFIRMING
        return True

    def request_single(self, item: T) -> None:
        self.selected = {item.id}
        self.request_confirmation([item])

    def cancel(self) -> None:
        self.phase = DeletePhase.SELECTING
        self.targets = []

    def confirm(self) -> bool:
        """
        Delete the confirmed targets.

        Returns True on success, after which the caller re-fetches. On failure
        the error is recorded and selection and confirmation state are kept.
        """
        if self.deleting or not self.targets:
            return False

        ids = [item.id for item in self.targets]
        self.deleting = True
        self.error = None
        try:
            if len(ids) == 1:
                self.delete_one(ids[0])
            else:
                self.delete_many(ids)
        except ShopConsoleError as e:
            logger.warning("Delete failed", ids=ids, error=e.message)
            self.error = self.error_message
            return False
        finally:
            self.deleting = False

        self.selected = set()
        self.targets = []
        self.phase = DeletePhase.SELECTING
        return True
