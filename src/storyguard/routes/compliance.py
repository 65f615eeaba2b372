from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from storyguard.compliance import Slide, scan
from storyguard.config import Settings
from storyguard.deps import get_settings, require_api_key

router = APIRouter(prefix="/v1", tags=["compliance"], dependencies=[Depends(require_api_key)])


class SlideIn(BaseModel):
    id: int | str
    text: str


class ComplianceCheckReq(BaseModel):
    slides: list[SlideIn] = Field(default_factory=list)


class ComplianceCheckResp(BaseModel):
    warnings: list[dict]


@router.post("/compliance/check", response_model=ComplianceCheckResp)
def check_compliance(body: ComplianceCheckReq, settings: Settings = Depends(get_settings)):
    # 長文の上限はエンジンではなく入口で切る
    for s in body.slides:
        if len(s.text) > settings.max_slide_chars:
            raise HTTPException(
                400, detail=f"slide_too_long: id={s.id} {len(s.text)} > {settings.max_slide_chars}"
            )

    warnings = scan([Slide(s.id, s.text) for s in body.slides])
    return ComplianceCheckResp(warnings=[w.to_dict() for w in warnings])
