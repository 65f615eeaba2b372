from fastapi import HTTPException, Request

from storyguard.config import Settings
from storyguard.services.llm import ScriptWriter


def get_settings(req: Request) -> Settings:
    return req.app.state.settings


def get_writer(req: Request) -> ScriptWriter:
    return req.app.state.writer


def require_api_key(req: Request):
    key = req.headers.get("x-api-key")
    if key != req.app.state.settings.api_key:
        raise HTTPException(status_code=401, detail="unauthorized")
