import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy import select
from sqlalchemy.orm import Session

from storyguard.db import get_db
from storyguard.deps import require_api_key
from storyguard.models import Brand, utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["brands"], dependencies=[Depends(require_api_key)])


class BrandIn(BaseModel):
    name: str = Field(min_length=1)
    product_description: str = Field(min_length=1)
    target_audience: str = Field(min_length=1)
    brand_tone: str = Field(min_length=1)


def brand_out(b: Brand) -> dict:
    return {
        "id": str(b.id),
        "name": b.name,
        "product_description": b.product_description,
        "target_audience": b.target_audience,
        "brand_tone": b.brand_tone,
        "created_at": b.created_at.isoformat(),
        "updated_at": b.updated_at.isoformat(),
    }


def _get_brand(db: Session, brand_id: uuid.UUID) -> Brand:
    brand = db.get(Brand, brand_id)
    if not brand:
        raise HTTPException(404, "brand_not_found")
    return brand


@router.get("/brands")
def list_brands(db: Session = Depends(get_db)):
    rows = db.scalars(select(Brand).order_by(Brand.created_at.desc())).all()
    return {"brands": [brand_out(b) for b in rows]}


@router.post("/brands", status_code=201)
def create_brand(body: BrandIn, db: Session = Depends(get_db)):
    brand = Brand(**body.model_dump())
    db.add(brand)
    db.commit()
    db.refresh(brand)
    logger.info("brand created id=%s", brand.id)
    return brand_out(brand)


@router.get("/brands/{brand_id}")
def get_brand(brand_id: uuid.UUID, db: Session = Depends(get_db)):
    return brand_out(_get_brand(db, brand_id))


@router.put("/brands/{brand_id}")
def update_brand(brand_id: uuid.UUID, body: BrandIn, db: Session = Depends(get_db)):
    brand = _get_brand(db, brand_id)
    for k, v in body.model_dump().items():
        setattr(brand, k, v)
    brand.updated_at = utcnow()
    db.commit()
    db.refresh(brand)
    return brand_out(brand)
