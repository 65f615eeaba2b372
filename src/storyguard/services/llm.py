from __future__ import annotations

import json
import logging
from typing import Any, Protocol

import httpx

from storyguard.config import Settings

logger = logging.getLogger(__name__)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"


class LLMError(RuntimeError):
    pass


class ScriptWriter(Protocol):
    async def generate_slides(self, prompt: str) -> list[dict]: ...

    async def rewrite(self, prompt: str) -> str: ...

    async def analyze_images(self, images: list[str], prompt: str) -> str: ...

    async def extract_skeleton(self, prompt: str) -> dict: ...


def _extract_json_object(text: str) -> str:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end <= start:
        raise ValueError("no_json_object_found")
    return text[start : end + 1]


def _parse_json_object(text: str) -> dict:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = json.loads(_extract_json_object(text))
        except ValueError as e2:
            raise LLMError(f"LLM returned invalid JSON: {e2}; head={text[:300]}") from e2
    if not isinstance(data, dict):
        raise LLMError(f"LLM returned non-object JSON: head={text[:300]}")
    return data


def coerce_slides(raw: Any) -> list[dict]:
    """Normalise model output into [{id, role, visualGuidance, script, tips}]."""
    if isinstance(raw, dict):
        raw = raw.get("slides")
    if not isinstance(raw, list) or not raw:
        raise LLMError("slides missing")

    slides = []
    for i, s in enumerate(raw):
        if not isinstance(s, dict):
            raise LLMError(f"slide {i} is not an object")
        try:
            sid = int(s.get("id") or (i + 1))
        except (TypeError, ValueError):
            sid = i + 1
        slides.append(
            {
                "id": sid,
                "role": str(s.get("role") or ""),
                "visualGuidance": str(s.get("visualGuidance") or s.get("visual_guidance") or ""),
                "script": str(s.get("script") or ""),
                "tips": str(s.get("tips") or ""),
            }
        )
    return slides


def _image_part(img: str) -> dict:
    data = img.split(",", 1)[1] if "," in img else img
    return {"type": "image_url", "image_url": {"url": f"data:image/jpeg;base64,{data}"}}


class OpenAIScriptWriter:
    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None):
        self.settings = settings
        self._client = client

    async def _chat(
        self,
        messages: list[dict],
        *,
        temperature: float,
        json_mode: bool = False,
        model: str | None = None,
    ) -> str:
        if not self.settings.openai_api_key:
            raise LLMError("OPENAI_API_KEY is missing")

        headers = {"Authorization": f"Bearer {self.settings.openai_api_key}"}
        payload: dict[str, Any] = {
            "model": model or self.settings.llm_model,
            "messages": messages,
            "temperature": temperature,
        }
        if json_mode:
            payload["response_format"] = {"type": "json_object"}

        try:
            if self._client is not None:
                r = await self._client.post(OPENAI_CHAT_URL, headers=headers, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self.settings.llm_timeout_sec) as client:
                    r = await client.post(OPENAI_CHAT_URL, headers=headers, json=payload)
        except httpx.HTTPError as e:
            raise LLMError(f"OpenAI request failed: {e}") from e

        if r.status_code >= 400:
            logger.warning("openai chat failed status=%s model=%s", r.status_code, payload["model"])
            raise LLMError(f"OpenAI error: {r.status_code} {r.text[:500]}")
        data = r.json()
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise LLMError(f"OpenAI response missing content: {e}") from e

    async def generate_slides(self, prompt: str) -> list[dict]:
        text = await self._chat(
            [
                {"role": "system", "content": "Return ONLY a valid JSON object. No prose, no markdown."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.8,
            json_mode=True,
        )
        return coerce_slides(_parse_json_object(text))

    async def rewrite(self, prompt: str) -> str:
        text = await self._chat([{"role": "user", "content": prompt}], temperature=0.7)
        out = text.strip()
        if not out:
            raise LLMError("empty rewrite")
        return out

    async def analyze_images(self, images: list[str], prompt: str) -> str:
        content = [_image_part(img) for img in images]
        content.append({"type": "text", "text": prompt})
        return await self._chat(
            [{"role": "user", "content": content}],
            temperature=0.3,
            model=self.settings.llm_vision_model,
        )

    async def extract_skeleton(self, prompt: str) -> dict:
        text = await self._chat(
            [
                {"role": "system", "content": "Return ONLY a valid JSON object. No prose, no markdown."},
                {"role": "user", "content": prompt},
            ],
            temperature=0.2,
            json_mode=True,
        )
        return _parse_json_object(text)


class DummyScriptWriter:
    """ローカル確認用。外部APIを叩かずに固定の台本を返す。"""

    async def generate_slides(self, prompt: str) -> list[dict]:
        return [
            {
                "id": 1,
                "role": "フック",
                "visualGuidance": "手元アップ、自然光",
                "script": "朝の5分、どう使ってる？",
                "tips": "疑問文で指を止める",
            },
            {
                "id": 2,
                "role": "共感",
                "visualGuidance": "散らかったデスクを俯瞰で",
                "script": "気づけば時間だけ過ぎてる…",
                "tips": "あるあるで共感を作る",
            },
            {
                "id": 3,
                "role": "CTA",
                "visualGuidance": "商品を正面に置く",
                "script": "詳しくはプロフのリンクから",
                "tips": "行動をひとつに絞る",
            },
        ]

    async def rewrite(self, prompt: str) -> str:
        return "毎日のリラックスタイムにどうぞ"

    async def analyze_images(self, images: list[str], prompt: str) -> str:
        return f"{len(images)}枚のストーリーズ: フック → 共感 → 解決 → CTA"

    async def extract_skeleton(self, prompt: str) -> dict:
        roles = ["フック", "共感", "解決", "証拠", "CTA"]
        return {
            "template_name": "共感→解決テンプレート",
            "category": "general",
            "total_slides": len(roles),
            "skeleton": [
                {
                    "slide_number": i,
                    "role": role,
                    "recommended_elements": [],
                    "copy_pattern": "",
                    "visual_instruction": "",
                }
                for i, role in enumerate(roles, start=1)
            ],
            "summary": {"best_for": "商品紹介", "key_success_factors": []},
        }


def build_script_writer(settings: Settings) -> ScriptWriter:
    if settings.llm_provider == "dummy":
        return DummyScriptWriter()
    if settings.llm_provider != "openai":
        raise LLMError(f"unsupported_llm_provider: {settings.llm_provider}")
    return OpenAIScriptWriter(settings)
