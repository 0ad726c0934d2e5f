"""SQLAlchemy database models for attentiontower."""

from datetime import datetime
from typing import Union, TypeVar, Type
import uuid
from sqlalchemy import Column, String, Boolean, Date, DateTime, ForeignKey, Index

from attentiontower.database.database import Base
from attentiontower.models.tower_item import TowerStatus, TowerEffort

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T, None]):
    """Convert enum to string value (handles enum, string and None).

    Args:
        enum_obj: Enum instance, string value, or None

    Returns:
        String value of the enum, the string itself, or None
    """
    if enum_obj is None:
        return None
    if hasattr(enum_obj, 'value'):
        return enum_obj.value
    return str(enum_obj)


def value_to_enum(value: str, enum_class: Type[T], default: T) -> T:
    """Convert string to enum with fallback to default.

    Args:
        value: String value to convert
        enum_class: Enum class to convert to
        default: Default enum value if conversion fails

    Returns:
        Enum instance, or default if conversion fails
    """
    if not value:
        return default
    try:
        return enum_class(value.lower())
    except (ValueError, AttributeError):
        return default


class TowerItemDB(Base):
    """Database model for TowerItem."""

    __tablename__ = "tower_items"
    __table_args__ = (
        # Fast queries by owner and status
        Index("ix_tower_items_user_status", "user_id", "status"),
        # Surfacing order (expects_by, then last_touched)
        Index("ix_tower_items_surfacing", "user_id", "expects_by", "last_touched"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User association
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Core content
    text = Column(String, nullable=False)
    status = Column(String, nullable=False, default=TowerStatus.ACTIVE.value)

    # false = action (DO it, deadline), true = event (SHOW UP, reminder)
    is_event = Column(Boolean, nullable=False, default=False)

    # Expectation: when to resurface/check (date-only)
    expects_by = Column(Date, nullable=True)

    # Waiting context (only relevant when status = 'waiting')
    waiting_on = Column(String, nullable=True)

    effort = Column(String, nullable=True)

    # Timestamps
    last_touched = Column(DateTime, nullable=False, default=datetime.utcnow)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    done_at = Column(DateTime, nullable=True)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from attentiontower.models.tower_item import TowerItem

        effort = value_to_enum(self.effort, TowerEffort, None) if self.effort else None

        return TowerItem(
            id=self.id,
            user_id=self.user_id,
            text=self.text,
            status=value_to_enum(self.status, TowerStatus, TowerStatus.ACTIVE),
            is_event=bool(self.is_event),
            expects_by=self.expects_by,
            waiting_on=self.waiting_on,
            effort=effort,
            last_touched=self.last_touched,
            created_at=self.created_at,
            done_at=self.done_at,
        )

    @classmethod
    def from_pydantic(cls, item):
        """Create database model from Pydantic model."""
        return cls(
            id=item.id,
            user_id=item.user_id,
            text=item.text,
            status=enum_to_value(item.status),
            is_event=item.is_event,
            expects_by=item.expects_by,
            waiting_on=item.waiting_on,
            effort=enum_to_value(item.effort),
            last_touched=item.last_touched,
            created_at=item.created_at,
            done_at=item.done_at,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key
    id = Column(String, primary_key=True)

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from attentiontower.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
