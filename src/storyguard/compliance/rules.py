"""
薬機法・景表法ルールテーブル

rules.yaml を起動時に1回だけ読み込み、JSON Schema で検証してから正規表現を
コンパイルする。壊れたルールは黙ってスキップせず RuleTableError で起動を止める。
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator

BASE_DIR = Path(__file__).resolve().parent
RULES_PATH = BASE_DIR / "rules.yaml"
SCHEMA_PATH = BASE_DIR / "rules.schema.json"


class RuleTableError(RuntimeError):
    pass


class Category(str, Enum):
    REGULATED_EFFICACY = "REGULATED_EFFICACY"
    MISLEADING_CLAIM = "MISLEADING_CLAIM"

    @property
    def statute(self) -> str:
        """UI 表示用の法令名。"""
        return _STATUTES[self]


_STATUTES = {
    Category.REGULATED_EFFICACY: "薬機法",
    Category.MISLEADING_CLAIM: "景表法",
}


class Severity(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"


@dataclass(frozen=True)
class Rule:
    category: Category
    pattern: re.Pattern
    severity: Severity
    suggestion: str


def _compile(raw: str, where: str) -> re.Pattern:
    try:
        pattern = re.compile(raw)
    except re.error as e:
        raise RuleTableError(f"invalid pattern at {where}: {raw!r}: {e}") from e
    # 空文字にマッチするルールは全スライドに警告を出してしまう
    if pattern.fullmatch(""):
        raise RuleTableError(f"pattern matches empty text at {where}: {raw!r}")
    return pattern


def build_rules(doc: dict[str, Any], schema: dict[str, Any] | None = None) -> tuple[Rule, ...]:
    """Validate a parsed rule document and compile it into an ordered rule tuple."""
    if schema is None:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))

    errors = sorted(Draft202012Validator(schema).iter_errors(doc), key=lambda e: e.json_path)
    if errors:
        detail = "; ".join(
            f"{'.'.join(str(x) for x in e.path) or '<root>'}: {e.message}" for e in errors
        )
        raise RuleTableError(f"rule table failed schema validation: {detail}")

    rules: list[Rule] = []
    for ci, group in enumerate(doc["categories"]):
        category = Category(group["category"])
        for ri, item in enumerate(group["rules"]):
            rules.append(
                Rule(
                    category=category,
                    pattern=_compile(item["pattern"], f"categories.{ci}.rules.{ri}"),
                    severity=Severity(item["severity"]),
                    suggestion=item["suggestion"],
                )
            )
    return tuple(rules)


def load_rules(path: Path = RULES_PATH) -> tuple[Rule, ...]:
    try:
        doc = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise RuleTableError(f"cannot read rule table {path}: {e}") from e
    if not isinstance(doc, dict):
        raise RuleTableError(f"rule table {path} is not a mapping")
    return build_rules(doc)


RULES: tuple[Rule, ...] = load_rules()
