import logging

from fastapi import FastAPI

from storyguard.config import Settings
from storyguard.db import Base, make_engine, make_session_factory
from storyguard.routes.brands import router as brands_router
from storyguard.routes.compliance import router as compliance_router
from storyguard.routes.growth_logs import router as growth_router
from storyguard.routes.patterns import router as patterns_router
from storyguard.routes.scripts import router as scripts_router
from storyguard.services.llm import ScriptWriter, build_script_writer


def create_app(settings: Settings | None = None, writer: ScriptWriter | None = None) -> FastAPI:
    """
    アプリ生成。設定と台本ライター（外部LLM）は外から渡す。
    uvicorn からは `uvicorn --factory storyguard.main:create_app`。
    """
    settings = settings or Settings()

    logging.basicConfig(level=settings.log_level)
    # HTTPクライアントの生ログ（URL/ヘッダ）は抑制
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    app = FastAPI(title="storyguard API", version="0.1.0")

    engine = make_engine(settings.database_url)
    # v0: 起動時にテーブル作成（本番はalembic）
    Base.metadata.create_all(bind=engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)
    app.state.writer = writer or build_script_writer(settings)

    app.include_router(compliance_router)
    app.include_router(brands_router)
    app.include_router(patterns_router)
    app.include_router(scripts_router)
    app.include_router(growth_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app
