import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from storyguard.db import Base


def utcnow() -> datetime:
    # naive UTC で統一（SQLite は tz を保持しない）
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Brand(Base):
    __tablename__ = "brands"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))
    product_description: Mapped[str] = mapped_column(Text)
    target_audience: Mapped[str] = mapped_column(Text)
    brand_tone: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)


class Pattern(Base):
    __tablename__ = "competitor_patterns"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(200))
    description: Mapped[str] = mapped_column(Text, default="")
    account_name: Mapped[str] = mapped_column(String(200))
    category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    # {template_name, category, total_slides, skeleton: [...], summary: {...}}
    skeleton: Mapped[dict] = mapped_column(JSON, default=dict)
    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # 削除時は紐づく台本の pattern_id を NULL にする（台本は残す）
    scripts: Mapped[list["Script"]] = relationship("Script", back_populates="pattern")


class Script(Base):
    __tablename__ = "generated_scripts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    brand_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("brands.id"), index=True)
    # 組み込みパターン使用時は None
    pattern_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("competitor_patterns.id", ondelete="SET NULL"), nullable=True
    )
    topic: Mapped[str] = mapped_column(Text)
    vibe: Mapped[str] = mapped_column(Text)
    # [{id, role, visualGuidance, script, tips}]
    slides: Mapped[list] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    pattern: Mapped[Optional["Pattern"]] = relationship("Pattern", back_populates="scripts")
    rewrites: Mapped[list["ScriptRewrite"]] = relationship(
        "ScriptRewrite", back_populates="script", cascade="all, delete-orphan"
    )
    growth_logs: Mapped[list["GrowthLog"]] = relationship(
        "GrowthLog", back_populates="script", cascade="all, delete-orphan"
    )


class ScriptRewrite(Base):
    __tablename__ = "script_rewrites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    script_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("generated_scripts.id"), index=True)
    slide_id: Mapped[int] = mapped_column(Integer)
    original_text: Mapped[str] = mapped_column(Text)
    rewritten_text: Mapped[str] = mapped_column(Text)
    instruction: Mapped[str] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    script: Mapped["Script"] = relationship("Script", back_populates="rewrites")


class GrowthLog(Base):
    __tablename__ = "growth_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    script_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("generated_scripts.id"), index=True)
    # [{slide_id, original_text, modified_text, changes: [...]}]
    user_modifications: Mapped[list] = mapped_column(JSON, default=list)
    # {impressions?, reactions?, dm_count?}
    engagement_metrics: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    script: Mapped["Script"] = relationship("Script", back_populates="growth_logs")
