import pytest
from fastapi.testclient import TestClient

from storyguard.config import Settings
from storyguard.main import create_app
from storyguard.services.llm import DummyScriptWriter, LLMError

API_KEY = "test-key"


class FakeWriter(DummyScriptWriter):
    """プロンプトを記録し、決め打ちの台本を返す。"""

    def __init__(self):
        self.prompts: list[str] = []
        self.fail = False
        self.slides = [
            {"id": 1, "role": "フック", "visualGuidance": "", "script": "絶対に痩せる！", "tips": ""},
            {"id": 2, "role": "CTA", "visualGuidance": "", "script": "毎日のリラックスタイムにどうぞ", "tips": ""},
        ]
        self.rewritten = "今だけ半額！"

    async def generate_slides(self, prompt: str) -> list[dict]:
        self.prompts.append(prompt)
        if self.fail:
            raise LLMError("provider down")
        return [dict(s) for s in self.slides]

    async def rewrite(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.fail:
            raise LLMError("provider down")
        return self.rewritten


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        database_url="sqlite://",
        api_key=API_KEY,
        llm_provider="dummy",
        max_slide_chars=100,
    )


@pytest.fixture
def writer():
    return FakeWriter()


@pytest.fixture
def client(settings, writer):
    app = create_app(settings, writer)
    return TestClient(app)


@pytest.fixture
def headers():
    return {"x-api-key": API_KEY}


@pytest.fixture
def brand(client, headers):
    r = client.post(
        "/v1/brands",
        json={
            "name": "朝ハーブ",
            "product_description": "ノンカフェインのハーブティー",
            "target_audience": "30代の働く女性",
            "brand_tone": "やさしく親しみやすい",
        },
        headers=headers,
    )
    assert r.status_code == 201
    return r.json()


@pytest.fixture
def pattern_data():
    return {
        "name": "共感→解決",
        "skeleton": {
            "template_name": "共感→解決",
            "category": "食品",
            "total_slides": 2,
            "skeleton": [
                {
                    "slide_number": 1,
                    "role": "フック",
                    "recommended_elements": ["数字"],
                    "copy_pattern": "〇〇な人いる？",
                    "visual_instruction": "手元アップ",
                },
                {
                    "slide_number": 2,
                    "role": "CTA",
                    "recommended_elements": ["リンク"],
                    "copy_pattern": "詳しくは〇〇",
                    "visual_instruction": "商品正面",
                },
            ],
            "summary": {"best_for": "商品紹介", "key_success_factors": []},
        },
    }
