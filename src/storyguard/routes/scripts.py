import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storyguard.compliance import scan
from storyguard.config import Settings
from storyguard.db import get_db
from storyguard.deps import get_settings, get_writer, require_api_key
from storyguard.models import Brand, GrowthLog, Pattern, Script, ScriptRewrite
from storyguard.services.growth import summarize_preferences
from storyguard.services.llm import LLMError, ScriptWriter
from storyguard.services.prompts import render_generate_prompt, render_rewrite_prompt

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["scripts"], dependencies=[Depends(require_api_key)])


class ScriptGenerateReq(BaseModel):
    brand_id: uuid.UUID
    # DB のパターン UUID、または組み込みテンプレートの任意ID（pattern_data 必須）
    pattern_id: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    vibe: str = Field(min_length=1)
    pattern_data: dict | None = None


class ScriptRewriteReq(BaseModel):
    slide_id: int
    instruction: str = Field(min_length=1)


def script_out(s: Script) -> dict:
    return {
        "id": str(s.id),
        "brand_id": str(s.brand_id),
        "pattern_id": str(s.pattern_id) if s.pattern_id else None,
        "topic": s.topic,
        "vibe": s.vibe,
        "slides": s.slides,
        "created_at": s.created_at.isoformat(),
    }


def _parse_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(value)
    except ValueError:
        return None


def _get_script(db: Session, script_id: uuid.UUID) -> Script:
    script = db.get(Script, script_id)
    if not script:
        raise HTTPException(404, "script_not_found")
    return script


def _resolve_pattern(db: Session, body: ScriptGenerateReq) -> tuple[uuid.UUID | None, str, dict]:
    pattern_uuid = _parse_uuid(body.pattern_id)
    if pattern_uuid:
        pattern = db.get(Pattern, pattern_uuid)
        if pattern:
            return pattern.id, pattern.name, pattern.skeleton or {}

    data = body.pattern_data or {}
    if data.get("skeleton"):
        return None, str(data.get("name") or body.pattern_id), data["skeleton"]

    raise HTTPException(404, "pattern_not_found")


def _load_preferences(db: Session, limit: int) -> str | None:
    try:
        rows = db.scalars(
            select(GrowthLog.user_modifications).order_by(GrowthLog.created_at.desc()).limit(limit)
        ).all()
    except SQLAlchemyError as e:
        # 好みの学習は無くても生成できる
        logger.warning("growth log lookup failed, skipping preferences: %s", e)
        return None
    return summarize_preferences(rows)


@router.post("/scripts/generate", status_code=201)
async def generate_script(
    body: ScriptGenerateReq,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    writer: ScriptWriter = Depends(get_writer),
):
    brand = db.get(Brand, body.brand_id)
    if not brand:
        raise HTTPException(404, "brand_not_found")

    pattern_id, pattern_name, skeleton = _resolve_pattern(db, body)
    preferences = _load_preferences(db, settings.preference_log_limit)

    prompt = render_generate_prompt(
        {
            "name": brand.name,
            "product_description": brand.product_description,
            "target_audience": brand.target_audience,
            "brand_tone": brand.brand_tone,
        },
        pattern_name,
        skeleton,
        body.topic,
        body.vibe,
        preferences,
    )

    try:
        slides = await writer.generate_slides(prompt)
    except LLMError as e:
        logger.exception("script generation failed brand=%s pattern=%s", brand.id, body.pattern_id)
        raise HTTPException(500, detail=f"script_gen_failed: {e}")

    legal_warnings = scan(slides)

    script = Script(
        brand_id=brand.id,
        pattern_id=pattern_id,
        topic=body.topic,
        vibe=body.vibe,
        slides=slides,
    )
    db.add(script)
    db.commit()
    db.refresh(script)

    logger.info(
        "script generated id=%s slides=%s warnings=%s", script.id, len(slides), len(legal_warnings)
    )
    out = script_out(script)
    out["legal_warnings"] = [w.to_dict() for w in legal_warnings]
    return out


@router.get("/scripts")
def list_scripts(brand_id: uuid.UUID | None = None, db: Session = Depends(get_db)):
    q = select(Script).order_by(Script.created_at.desc())
    if brand_id:
        q = q.where(Script.brand_id == brand_id)
    return {"scripts": [script_out(s) for s in db.scalars(q).all()]}


@router.get("/scripts/{script_id}")
def get_script(script_id: uuid.UUID, db: Session = Depends(get_db)):
    script = _get_script(db, script_id)
    out = script_out(script)
    out["legal_warnings"] = [w.to_dict() for w in scan(script.slides or [])]
    return out


@router.post("/scripts/{script_id}/rewrite")
async def rewrite_slide(
    script_id: uuid.UUID,
    body: ScriptRewriteReq,
    db: Session = Depends(get_db),
    writer: ScriptWriter = Depends(get_writer),
):
    script = _get_script(db, script_id)

    slides = [dict(s) for s in (script.slides or [])]
    slide = next((s for s in slides if s.get("id") == body.slide_id), None)
    if slide is None:
        raise HTTPException(404, "slide_not_found")

    original_text = str(slide.get("script") or "")
    try:
        rewritten = await writer.rewrite(render_rewrite_prompt(original_text, body.instruction))
    except LLMError as e:
        logger.exception("rewrite failed script=%s slide=%s", script_id, body.slide_id)
        raise HTTPException(500, detail=f"rewrite_failed: {e}")

    slide["script"] = rewritten
    # JSON 列は再代入しないと変更検知されない
    script.slides = slides
    db.add(
        ScriptRewrite(
            script_id=script.id,
            slide_id=body.slide_id,
            original_text=original_text,
            rewritten_text=rewritten,
            instruction=body.instruction,
        )
    )
    db.commit()
    db.refresh(script)

    legal_warnings = scan([slide])
    return {
        "slide": slide,
        "script": script_out(script),
        "legal_warnings": [w.to_dict() for w in legal_warnings],
    }
