"""Data models for attentiontower."""

from attentiontower.models.tower_item import TowerItem, TowerStatus, TowerEffort
from attentiontower.models.user import User

__all__ = [
    "TowerItem",
    "TowerStatus",
    "TowerEffort",
    "User",
]
