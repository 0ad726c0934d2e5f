"""Optimistic local snapshot of tower items.

Each mutation is a command: apply it to the local snapshot immediately, then
confirm it against the persistence repository. If the confirm fails, the
snapshot is restored to exactly what it was before the command and
`MutationFailed` is raised. The tower view can be built from the snapshot at
any moment, including right after a revert.
"""

import logging
from datetime import date, datetime
from typing import Callable, Dict, Iterable, List, Optional

from attentiontower.models.tower_item import TowerItem, TowerStatus, TowerEffort
from attentiontower.models.item_factory import create_item_base
from attentiontower.engine import transitions
from attentiontower.engine.partition import TowerPartition, build_tower_view
from attentiontower.capture.parser import SHARED_CLIENT, parse_tower_input, to_item_fields

logger = logging.getLogger(__name__)


class MutationFailed(RuntimeError):
    """Raised when the repository rejects a mutation (local state reverted)."""


class UnknownItem(KeyError):
    """Raised when a command targets an item missing from the snapshot."""


class TowerSnapshot:
    """Locally known tower items, keyed by id in insertion order."""

    def __init__(self, items: Optional[Iterable[TowerItem]] = None):
        self._items: Dict[str, TowerItem] = {}
        for item in items or []:
            self._items[item.id] = item

    def items(self) -> List[TowerItem]:
        return list(self._items.values())

    def get(self, item_id: str) -> TowerItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise UnknownItem(item_id) from None

    def put(self, item: TowerItem) -> None:
        self._items[item.id] = item

    def remove(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def checkpoint(self) -> Dict[str, TowerItem]:
        return dict(self._items)

    def restore(self, checkpoint: Dict[str, TowerItem]) -> None:
        self._items = dict(checkpoint)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: str) -> bool:
        return item_id in self._items


class OptimisticTower:
    """Applies tower commands locally first, then confirms with storage."""

    def __init__(
        self,
        snapshot: TowerSnapshot,
        repository,
        user_id: str,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.snapshot = snapshot
        self.repository = repository
        self.user_id = user_id
        self.clock = clock

    def view(self, now: Optional[datetime] = None) -> TowerPartition:
        """Build the tower view from the current snapshot."""
        return build_tower_view(self.snapshot.items(), now or self.clock())

    def _run(self, description: str, apply_local: Callable[[], None], confirm: Callable[[], None]) -> None:
        checkpoint = self.snapshot.checkpoint()
        apply_local()
        try:
            confirm()
        except Exception as e:
            self.snapshot.restore(checkpoint)
            logger.error(f"Reverted {description}: {type(e).__name__}: {str(e)}")
            raise MutationFailed(f"Failed to {description}") from e

    def _replace(self, description: str, updated: TowerItem) -> TowerItem:
        """Apply an updated item locally and confirm it with repository.update."""
        def confirm():
            saved = self.repository.update(updated)
            self.snapshot.put(saved)

        self._run(description, lambda: self.snapshot.put(updated), confirm)
        return self.snapshot.get(updated.id)

    def add(
        self,
        text: str,
        status: Optional[TowerStatus] = None,
        is_event: Optional[bool] = None,
        expects_by: Optional[date] = None,
        waiting_on: Optional[str] = None,
        effort: Optional[TowerEffort] = None,
    ) -> TowerItem:
        """Create an item locally and persist it."""
        item = create_item_base(
            user_id=self.user_id,
            text=text,
            status=status,
            is_event=is_event,
            expects_by=expects_by,
            waiting_on=waiting_on,
            effort=effort,
            now=self.clock(),
        )

        def confirm():
            saved = self.repository.create(item)
            self.snapshot.put(saved)

        self._run(f"create item {item.id}", lambda: self.snapshot.put(item), confirm)
        return self.snapshot.get(item.id)

    def capture(self, text: str, client=SHARED_CLIENT) -> List[TowerItem]:
        """Parse free text into items and add each one (client=None skips parsing)."""
        created = []
        for parsed in parse_tower_input(text, self.clock(), client=client):
            created.append(self.add(**to_item_fields(parsed)))
        return created

    def complete(self, item_id: str) -> TowerItem:
        item = self.snapshot.get(item_id)
        return self._replace(f"complete item {item_id}", transitions.mark_done(item, self.clock()))

    def hold(self, item_id: str, waiting_on: Optional[str] = None) -> TowerItem:
        item = self.snapshot.get(item_id)
        return self._replace(f"hold item {item_id}", transitions.hold(item, self.clock(), waiting_on))

    def defer(self, item_id: str) -> TowerItem:
        item = self.snapshot.get(item_id)
        return self._replace(f"defer item {item_id}", transitions.defer(item, self.clock()))

    def reactivate(self, item_id: str) -> TowerItem:
        item = self.snapshot.get(item_id)
        return self._replace(f"reactivate item {item_id}", transitions.reactivate(item, self.clock()))

    def edit_text(self, item_id: str, text: str) -> TowerItem:
        item = self.snapshot.get(item_id)
        return self._replace(f"edit item {item_id}", transitions.edit_text(item, self.clock(), text))

    def edit_schedule(self, item_id: str, **changes) -> TowerItem:
        """Change is_event and/or expects_by (see transitions.edit_schedule)."""
        item = self.snapshot.get(item_id)
        return self._replace(f"reschedule item {item_id}", transitions.edit_schedule(item, self.clock(), **changes))

    def delete(self, item_id: str) -> None:
        self.snapshot.get(item_id)

        def confirm():
            if not self.repository.delete(self.user_id, item_id):
                raise UnknownItem(item_id)

        self._run(f"delete item {item_id}", lambda: self.snapshot.remove(item_id), confirm)
