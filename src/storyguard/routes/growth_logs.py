import uuid
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from storyguard.db import get_db
from storyguard.deps import require_api_key
from storyguard.models import GrowthLog, Script, utcnow
from storyguard.services.growth import engagement_stats

router = APIRouter(prefix="/v1", tags=["growth"], dependencies=[Depends(require_api_key)])


class Modification(BaseModel):
    slide_id: int
    original_text: str = ""
    modified_text: str = ""
    changes: list[str] = Field(default_factory=list)


class EngagementMetrics(BaseModel):
    impressions: int | None = None
    reactions: int | None = None
    dm_count: int | None = None


class GrowthLogCreate(BaseModel):
    script_id: uuid.UUID
    user_modifications: list[Modification] = Field(min_length=1)
    engagement_metrics: EngagementMetrics | None = None


class GrowthLogMetricsUpdate(BaseModel):
    engagement_metrics: EngagementMetrics | None = None


def growth_log_out(g: GrowthLog) -> dict:
    return {
        "id": str(g.id),
        "script_id": str(g.script_id),
        "user_modifications": g.user_modifications,
        "engagement_metrics": g.engagement_metrics,
        "created_at": g.created_at.isoformat(),
    }


@router.get("/growth-logs")
def list_growth_logs(script_id: uuid.UUID | None = None, db: Session = Depends(get_db)):
    q = select(GrowthLog).order_by(GrowthLog.created_at.desc())
    if script_id:
        q = q.where(GrowthLog.script_id == script_id)
    return {"growth_logs": [growth_log_out(g) for g in db.scalars(q).all()]}


@router.post("/growth-logs", status_code=201)
def create_growth_log(body: GrowthLogCreate, db: Session = Depends(get_db)):
    if not db.get(Script, body.script_id):
        raise HTTPException(404, "script_not_found")

    log = GrowthLog(
        script_id=body.script_id,
        user_modifications=[m.model_dump() for m in body.user_modifications],
        engagement_metrics=(
            body.engagement_metrics.model_dump(exclude_none=True) if body.engagement_metrics else None
        ),
    )
    db.add(log)
    db.commit()
    db.refresh(log)
    return growth_log_out(log)


@router.patch("/growth-logs/{log_id}")
def update_growth_log_metrics(
    log_id: uuid.UUID, body: GrowthLogMetricsUpdate, db: Session = Depends(get_db)
):
    # 反応数は投稿後に遅れて入ってくる
    if body.engagement_metrics is None:
        raise HTTPException(400, "engagement_metrics_required")

    log = db.get(GrowthLog, log_id)
    if not log:
        raise HTTPException(404, "growth_log_not_found")

    log.engagement_metrics = body.engagement_metrics.model_dump(exclude_none=True)
    db.commit()
    db.refresh(log)
    return growth_log_out(log)


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)):
    now = utcnow()
    one_week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)

    recent = db.scalars(
        select(GrowthLog.engagement_metrics).where(GrowthLog.created_at >= one_week_ago)
    ).all()
    previous = db.scalars(
        select(GrowthLog.engagement_metrics).where(
            GrowthLog.created_at >= two_weeks_ago, GrowthLog.created_at < one_week_ago
        )
    ).all()
    script_count = db.scalar(select(func.count()).select_from(Script)) or 0

    return engagement_stats(recent, previous, script_count)
