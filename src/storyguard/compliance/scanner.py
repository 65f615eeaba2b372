from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, NamedTuple, Union

from storyguard.compliance.matcher import find_matches
from storyguard.compliance.rules import RULES, Category, Rule, Severity

logger = logging.getLogger(__name__)

SlideId = Union[int, str]

_MISSING = object()


class Slide(NamedTuple):
    id: SlideId
    text: str


@dataclass(frozen=True)
class LegalWarning:
    slide_id: SlideId
    source_text: str
    matched_span: str
    category: Category
    severity: Severity
    suggestion: str

    def to_dict(self) -> dict[str, Any]:
        # UI 側はこのキー名で参照している
        return {
            "slideId": self.slide_id,
            "sourceText": self.source_text,
            "matchedSpan": self.matched_span,
            "category": self.category.value,
            "severity": self.severity.value,
            "suggestion": self.suggestion,
        }


def _unpack(slide: Any) -> tuple[Any, Any]:
    if isinstance(slide, Mapping):
        text = slide.get("text", _MISSING)
        if text is _MISSING:
            text = slide.get("script")
        return slide.get("id"), text
    if isinstance(slide, tuple) and len(slide) == 2:
        return slide[0], slide[1]
    text = getattr(slide, "text", _MISSING)
    if text is _MISSING:
        text = getattr(slide, "script", None)
    return getattr(slide, "id", None), text


def scan_slide(slide_id: SlideId, text: str, rules: Iterable[Rule] = RULES) -> list[LegalWarning]:
    warnings: list[LegalWarning] = []
    for rule in rules:
        for m in find_matches(rule.pattern, text):
            warnings.append(
                LegalWarning(
                    slide_id=slide_id,
                    source_text=text,
                    matched_span=m.text,
                    category=rule.category,
                    severity=rule.severity,
                    suggestion=rule.suggestion,
                )
            )
    return warnings


def scan(slides: Iterable[Any], rules: Iterable[Rule] = RULES) -> list[LegalWarning]:
    """
    スライド群をルールテーブル全件で走査し、警告をスライド順 → ルール順で返す。

    slides の各要素は Slide / (id, text) タプル / {"id", "text"} マッピングのいずれか。
    保存済みスライド形式（{"id", "script"}）もそのまま渡せる。
    id が無い、または text が文字列でないスライドは警告0件として読み飛ばす。
    """
    rules = tuple(rules)
    warnings: list[LegalWarning] = []
    for index, slide in enumerate(slides or ()):
        slide_id, text = _unpack(slide)
        if slide_id is None or not isinstance(text, str):
            logger.warning(
                "compliance scan skipped malformed slide index=%s id=%r text_type=%s",
                index,
                slide_id,
                type(text).__name__,
            )
            continue
        warnings.extend(scan_slide(slide_id, text, rules))
    return warnings
