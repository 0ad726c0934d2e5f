"""FastAPI web application for attentiontower."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from attentiontower.models.tower_item import TowerItem, TowerStatus, TowerEffort
from attentiontower.models.user import User
from attentiontower.models.item_factory import create_item_base
from attentiontower.database.database import get_db, init_db
from attentiontower.database.repository import TowerItemRepository
from attentiontower.auth.dependencies import get_current_user
from attentiontower.integrations.openai_client import OpenAIClient
from attentiontower.capture.parser import parse_tower_input, to_item_fields
from attentiontower.engine import transitions
from attentiontower.engine.classifier import get_bucket_name
from attentiontower.engine.partition import build_tower_view
from attentiontower.engine.explain import explain_with_fallback, format_age, format_expects_by

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="attentiontower API",
    description="Surfaces the one thing that needs attention now, and hides the rest accountably",
    version="0.1.0",
    lifespan=lifespan,
)

_openai_client: Optional[OpenAIClient] = None


def get_ai_client() -> Optional[OpenAIClient]:
    """Shared text-generation client, or None when it is not configured."""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient()
    return _openai_client if _openai_client.available else None


# Request / response models
class ItemCreateRequest(BaseModel):
    """Request body for creating an item directly (no parsing)."""
    text: str = Field(..., min_length=1)
    status: Optional[TowerStatus] = None
    is_event: Optional[bool] = None
    expects_by: Optional[Any] = Field(None, description="YYYY-MM-DD; malformed values are ignored")
    waiting_on: Optional[str] = None
    effort: Optional[TowerEffort] = None


class ItemUpdateRequest(BaseModel):
    """Partial edit. Send `expects_by: null` to clear the date."""
    text: Optional[str] = None
    is_event: Optional[bool] = None
    expects_by: Optional[Any] = None
    effort: Optional[TowerEffort] = None


class CaptureRequest(BaseModel):
    text: str


class HoldRequest(BaseModel):
    waiting_on: Optional[str] = None


class ItemResponse(BaseModel):
    item: TowerItem


class CaptureResponse(BaseModel):
    created_count: int
    items: List[TowerItem]
    fallback: bool = Field(False, description="True when the text was saved as-is")


class RankedEntry(BaseModel):
    """A ranked active item with its derived display fields."""
    item: TowerItem
    bucket: int
    bucket_name: str
    expects_by_label: str = ""
    age_label: str = ""


class TowerViewResponse(BaseModel):
    hero: Optional[RankedEntry] = None
    why_this: Optional[str] = None
    queue: List[RankedEntry] = Field(default_factory=list)
    overflow: List[RankedEntry] = Field(default_factory=list)
    overflow_count: int = 0
    follow_up: List[TowerItem] = Field(default_factory=list)
    someday: List[TowerItem] = Field(default_factory=list)


def _ranked_entry(item: TowerItem, bucket: int, now: datetime) -> RankedEntry:
    return RankedEntry(
        item=item,
        bucket=bucket,
        bucket_name=get_bucket_name(bucket),
        expects_by_label=format_expects_by(item.expects_by, now, item.is_event),
        age_label=format_age(item.created_at, now),
    )


def _get_item_or_404(repo: TowerItemRepository, user: User, item_id: str) -> TowerItem:
    item = repo.get(user.id, item_id)
    if not item:
        raise HTTPException(status_code=404, detail=f"Tower item {item_id} not found")
    return item


def _save(repo: TowerItemRepository, item: TowerItem) -> ItemResponse:
    try:
        return ItemResponse(item=repo.update(item))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update tower item: {str(e)}")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/tower", response_model=TowerViewResponse)
def view_tower(
    now: Optional[datetime] = Query(None, description="Freeze 'now' (ISO datetime); defaults to current UTC time"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_client: Optional[OpenAIClient] = Depends(get_ai_client),
):
    """Build the tower view: hero, queue, overflow, follow-up and someday."""
    now = now or datetime.utcnow()
    items = TowerItemRepository(db).get_all(user.id)
    view = build_tower_view(items, now)

    def entry(item: TowerItem) -> RankedEntry:
        return _ranked_entry(item, view.buckets[item.id], now)

    response = TowerViewResponse(
        queue=[entry(item) for item in view.queue],
        overflow=[entry(item) for item in view.overflow],
        overflow_count=view.overflow_count,
        follow_up=view.follow_up,
        someday=view.someday,
    )
    if view.hero is not None:
        response.hero = entry(view.hero)
        response.why_this = explain_with_fallback(view.hero, 0, now, client=ai_client)
    return response


@app.post("/tower/capture", response_model=CaptureResponse, status_code=status.HTTP_201_CREATED)
def capture(
    request: CaptureRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    ai_client: Optional[OpenAIClient] = Depends(get_ai_client),
):
    """Parse free text into one or more items and save them."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Capture text must not be blank")

    now = datetime.utcnow()
    parsed_items = parse_tower_input(request.text, now, client=ai_client)
    repo = TowerItemRepository(db)

    created = []
    try:
        for parsed in parsed_items:
            item = create_item_base(user_id=user.id, now=now, **to_item_fields(parsed))
            created.append(repo.create(item))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to save captured items: {str(e)}")

    logger.debug(f"Captured {len(created)} item(s) for user {user.id}")
    return CaptureResponse(
        created_count=len(created),
        items=created,
        fallback=any(parsed.fallback for parsed in parsed_items),
    )


@app.post("/tower/items", response_model=ItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    request: ItemCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create an item from structured fields."""
    try:
        item = create_item_base(
            user_id=user.id,
            text=request.text,
            status=request.status,
            is_event=request.is_event,
            waiting_on=request.waiting_on,
            effort=request.effort,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    # Malformed dates go through TowerItem's expects_by validator
    item = TowerItem(**{**item.model_dump(), "expects_by": request.expects_by})

    try:
        return ItemResponse(item=TowerItemRepository(db).create(item))
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create tower item: {str(e)}")


@app.get("/tower/items/{item_id}", response_model=ItemResponse)
def get_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return ItemResponse(item=_get_item_or_404(TowerItemRepository(db), user, item_id))


@app.patch("/tower/items/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: str,
    request: ItemUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Edit text, action/event flag, expects_by or effort."""
    repo = TowerItemRepository(db)
    item = _get_item_or_404(repo, user, item_id)
    now = datetime.utcnow()
    fields = request.model_fields_set

    try:
        if "text" in fields and request.text is not None:
            item = transitions.edit_text(item, now, request.text)
        schedule_changes = {}
        if "is_event" in fields and request.is_event is not None:
            schedule_changes["is_event"] = request.is_event
        if "expects_by" in fields:
            schedule_changes["expects_by"] = request.expects_by
        if schedule_changes:
            item = transitions.edit_schedule(item, now, **schedule_changes)
        if "effort" in fields:
            item = item.model_copy(update={"effort": request.effort, "last_touched": now})
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return _save(repo, item)


def _transition(item_id: str, user: User, db: Session, apply) -> ItemResponse:
    repo = TowerItemRepository(db)
    item = _get_item_or_404(repo, user, item_id)
    try:
        updated = apply(item, datetime.utcnow())
    except transitions.InvalidTransition as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _save(repo, updated)


@app.post("/tower/items/{item_id}/done", response_model=ItemResponse)
def complete_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _transition(item_id, user, db, transitions.mark_done)


@app.post("/tower/items/{item_id}/hold", response_model=ItemResponse)
def hold_item(
    item_id: str,
    request: Optional[HoldRequest] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    waiting_on = request.waiting_on if request else None
    return _transition(item_id, user, db, lambda item, now: transitions.hold(item, now, waiting_on))


@app.post("/tower/items/{item_id}/someday", response_model=ItemResponse)
def defer_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _transition(item_id, user, db, transitions.defer)


@app.post("/tower/items/{item_id}/reactivate", response_model=ItemResponse)
def reactivate_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _transition(item_id, user, db, transitions.reactivate)


@app.delete("/tower/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(item_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        deleted = TowerItemRepository(db).delete(user.id, item_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete tower item: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Tower item {item_id} not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
