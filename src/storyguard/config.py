from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    database_url: str = "sqlite:///./storyguard.db"
    log_level: str = "INFO"

    api_key: str = "dev_api_key_change_me"

    llm_provider: str = "openai"
    openai_api_key: str | None = None
    llm_model: str = "gpt-4o-mini"
    llm_vision_model: str = "gpt-4o"
    llm_timeout_sec: int = 60

    # 1枚あたりの上限（プラットフォーム慣習は40〜60文字、余裕を持たせる）
    max_slide_chars: int = 1000
    preference_log_limit: int = 10
