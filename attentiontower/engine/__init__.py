"""Urgency engine for attentiontower."""

from attentiontower.engine.ai_exclusion import is_ai_excluded
from attentiontower.engine.classifier import assign_bucket, get_bucket_name
from attentiontower.engine.ranking import stack_rank, rank_with_buckets
from attentiontower.engine.partition import build_tower_view, TowerPartition
from attentiontower.engine.explain import explain_why_this, explain_with_fallback
from attentiontower.engine.transitions import (
    InvalidTransition,
    mark_done,
    hold,
    defer,
    reactivate,
    edit_text,
    edit_schedule,
)

__all__ = [
    "is_ai_excluded",
    "assign_bucket",
    "get_bucket_name",
    "stack_rank",
    "rank_with_buckets",
    "build_tower_view",
    "TowerPartition",
    "explain_why_this",
    "explain_with_fallback",
    "InvalidTransition",
    "mark_done",
    "hold",
    "defer",
    "reactivate",
    "edit_text",
    "edit_schedule",
]
