"""Repository layer for tower item database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session

from attentiontower.models.tower_item import TowerItem, TowerStatus
from attentiontower.database.models import TowerItemDB, enum_to_value

logger = logging.getLogger(__name__)


class TowerItemRepository:
    """Repository for TowerItem database operations.

    Every query is scoped to the owning user. The repository trusts the item
    it is given; it does not re-validate state transitions.
    """

    def __init__(self, db: Session):
        self.db = db

    def _query_for_user(self, user_id: str):
        return self.db.query(TowerItemDB).filter(TowerItemDB.user_id == user_id)

    def _surfacing_order(self, query):
        # expects_by ascending (nulls last), then least recently touched first
        return query.order_by(
            TowerItemDB.expects_by.is_(None),
            TowerItemDB.expects_by.asc(),
            TowerItemDB.last_touched.asc(),
        )

    def create(self, item: TowerItem) -> TowerItem:
        """Create a new tower item."""
        try:
            item_db = TowerItemDB.from_pydantic(item)
            self.db.add(item_db)
            self.db.commit()
            self.db.refresh(item_db)
            logger.debug(f"Created tower item {item.id}: {item.text[:50]}")
            return item_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create tower item {item.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, item_id: str) -> Optional[TowerItem]:
        """Get tower item by ID for a specific user."""
        item_db = self._query_for_user(user_id).filter(TowerItemDB.id == item_id).first()
        return item_db.to_pydantic() if item_db else None

    def get_all(self, user_id: str, include_done: bool = False) -> List[TowerItem]:
        """Get all tower items for a user in surfacing order (excludes done by default)."""
        query = self._query_for_user(user_id)
        if not include_done:
            query = query.filter(TowerItemDB.status != TowerStatus.DONE.value)
        return [item_db.to_pydantic() for item_db in self._surfacing_order(query).all()]

    def get_by_status(self, user_id: str, status: TowerStatus) -> List[TowerItem]:
        """Get tower items with a given status for a user in surfacing order."""
        query = self._query_for_user(user_id).filter(TowerItemDB.status == enum_to_value(status))
        return [item_db.to_pydantic() for item_db in self._surfacing_order(query).all()]

    def update(self, item: TowerItem) -> TowerItem:
        """Update an existing tower item (user_id must match item.user_id)."""
        item_db = self._query_for_user(item.user_id).filter(TowerItemDB.id == item.id).first()
        if not item_db:
            raise ValueError(f"Tower item {item.id} not found")

        item_db.text = item.text
        item_db.status = enum_to_value(item.status)
        item_db.is_event = item.is_event
        item_db.expects_by = item.expects_by
        item_db.waiting_on = item.waiting_on
        item_db.effort = enum_to_value(item.effort)
        item_db.last_touched = item.last_touched
        item_db.done_at = item.done_at

        try:
            self.db.commit()
            self.db.refresh(item_db)
            logger.debug(f"Updated tower item {item.id}: {item.text[:50]}")
            return item_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update tower item {item.id}: {type(e).__name__}: {str(e)}")
            raise

    def mark_done(self, user_id: str, item_id: str, now: Optional[datetime] = None) -> Optional[TowerItem]:
        """Mark a tower item done. Returns None if the item does not exist."""
        item_db = self._query_for_user(user_id).filter(TowerItemDB.id == item_id).first()
        if not item_db:
            return None

        now = now or datetime.utcnow()
        try:
            item_db.status = TowerStatus.DONE.value
            item_db.done_at = now
            item_db.last_touched = now
            self.db.commit()
            self.db.refresh(item_db)
            logger.debug(f"Completed tower item {item_id}")
            return item_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to complete tower item {item_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: str, item_id: str) -> bool:
        """Permanently delete a tower item by ID for a specific user."""
        item_db = self._query_for_user(user_id).filter(TowerItemDB.id == item_id).first()
        if not item_db:
            return False

        try:
            self.db.delete(item_db)
            self.db.commit()
            logger.debug(f"Deleted tower item {item_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete tower item {item_id}: {type(e).__name__}: {str(e)}")
            raise
