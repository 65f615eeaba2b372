import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from storyguard.db import get_db
from storyguard.deps import get_writer, require_api_key
from storyguard.models import Pattern, utcnow
from storyguard.services.llm import LLMError, ScriptWriter
from storyguard.services.prompts import render_analysis_prompt, render_skeleton_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["patterns"], dependencies=[Depends(require_api_key)])

MIN_ANALYSIS_IMAGES = 5


class PatternIn(BaseModel):
    name: str = Field(min_length=1)
    description: str = ""
    account_name: str = Field(min_length=1)
    category: str | None = None
    skeleton: dict


class PatternAnalyzeReq(BaseModel):
    account_name: str = Field(min_length=1)
    category: str | None = None
    focus_point: str | None = None
    # base64（data URL 可）
    images: list[str] = Field(default_factory=list)


class PatternFavoriteReq(BaseModel):
    is_favorite: bool


def pattern_out(p: Pattern) -> dict:
    return {
        "id": str(p.id),
        "name": p.name,
        "description": p.description,
        "account_name": p.account_name,
        "category": p.category,
        "skeleton": p.skeleton,
        "is_favorite": bool(p.is_favorite),
        "created_at": p.created_at.isoformat(),
        "updated_at": p.updated_at.isoformat(),
    }


def _get_pattern(db: Session, pattern_id: uuid.UUID) -> Pattern:
    pattern = db.get(Pattern, pattern_id)
    if not pattern:
        raise HTTPException(404, "pattern_not_found")
    return pattern


@router.get("/patterns")
def list_patterns(db: Session = Depends(get_db)):
    rows = db.scalars(select(Pattern).order_by(Pattern.created_at.desc())).all()
    return {"patterns": [pattern_out(p) for p in rows]}


@router.post("/patterns", status_code=201)
def create_pattern(body: PatternIn, db: Session = Depends(get_db)):
    pattern = Pattern(**body.model_dump())
    db.add(pattern)
    db.commit()
    db.refresh(pattern)
    return pattern_out(pattern)


@router.post("/patterns/analyze", status_code=201)
async def analyze_pattern(
    body: PatternAnalyzeReq,
    db: Session = Depends(get_db),
    writer: ScriptWriter = Depends(get_writer),
):
    if len(body.images) < MIN_ANALYSIS_IMAGES:
        raise HTTPException(400, f"images_required: at least {MIN_ANALYSIS_IMAGES}")

    try:
        analysis = await writer.analyze_images(
            body.images, render_analysis_prompt(body.account_name, body.category, body.focus_point)
        )
        skeleton = await writer.extract_skeleton(render_skeleton_prompt(body.account_name, analysis))
    except LLMError as e:
        logger.exception("pattern analysis failed account=%s", body.account_name)
        raise HTTPException(500, detail=f"pattern_analysis_failed: {e}")

    summary = skeleton.get("summary") or {}
    pattern = Pattern(
        name=str(skeleton.get("template_name") or f"{body.account_name}さん風テンプレート"),
        description=str(summary.get("best_for") or ""),
        account_name=body.account_name,
        category=body.category or skeleton.get("category"),
        skeleton=skeleton,
    )
    db.add(pattern)
    db.commit()
    db.refresh(pattern)
    logger.info("pattern analyzed id=%s slides=%s", pattern.id, skeleton.get("total_slides"))
    return pattern_out(pattern)


@router.get("/patterns/{pattern_id}")
def get_pattern(pattern_id: uuid.UUID, db: Session = Depends(get_db)):
    return pattern_out(_get_pattern(db, pattern_id))


@router.patch("/patterns/{pattern_id}")
def update_pattern_favorite(
    pattern_id: uuid.UUID, body: PatternFavoriteReq, db: Session = Depends(get_db)
):
    pattern = _get_pattern(db, pattern_id)
    pattern.is_favorite = body.is_favorite
    pattern.updated_at = utcnow()
    db.commit()
    db.refresh(pattern)
    return pattern_out(pattern)


@router.delete("/patterns/{pattern_id}")
def delete_pattern(pattern_id: uuid.UUID, db: Session = Depends(get_db)):
    pattern = _get_pattern(db, pattern_id)
    db.delete(pattern)
    db.commit()
    return {"ok": True}
