from functools import lru_cache
from typing import Literal, Optional
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

EnvName = Literal["development", "production"]
StorageBackend = Literal["memory", "redis"]
ProviderName = Literal["stub", "openai"]
ClassifierName = Literal["keyword", "llm"]

def _env_file_for(app_env: EnvName) -> str:
    return ".env.development" if app_env == "development" else ".env.production"

class Settings(BaseSettings):

    # Core
    APP_ENV: EnvName = "development"
    APP_NAME: str = "ShopMuse"
    DEBUG: bool = False
    GIT_SHA: str = "unknown"
    ALLOWED_ORIGINS: str = ""                  # CSV list for CORS

    # Storage (key-value repository behind profile, interactions, budgets...)
    STORAGE_BACKEND: StorageBackend = "memory"
    REDIS_URL: str = ""
    storage_prefix: str = "shopmuse"           # redis key namespace

    # Catalog
    CATALOG_PATH: str = ""                     # empty = packaged products.json

    # AI provider
    AI_PROVIDER: ProviderName = "stub"
    INTENT_CLASSIFIER: ClassifierName = "keyword"
    AI_STUB_DELAY_S: float = 0.8               # emulated model latency
    OPENAI_API_KEY: str = ""
    OPENAI_CHAT_MODEL: str = "gpt-4o-mini"
    openai_timeout_s: int = 30                 # seconds

    # Heuristics
    default_avg_price: float = 15000.0         # when the session has no views yet
    recommendation_limit: int = 3
    price_history_days: int = 30
    COMPARISON_PRICE_SCALE: Optional[float] = None  # None = derive from compared products

    # API
    api_prefix: str = "/api"

    # pydantic-settings config will be set dynamically in the factory below
    model_config = SettingsConfigDict(env_file=None, case_sensitive=True)

@lru_cache
def get_settings() -> Settings:
    """
    Factory that chooses the right .env file based on APP_ENV.
    Cache makes it cheap to inject via FastAPI dependencies.
    """
    app_env: EnvName = os.getenv("APP_ENV", "development")  # earliest switch
    env_file = _env_file_for(app_env)
    return Settings(
                _env_file=env_file,  # load .env.development or .env.production
                _env_file_encoding="utf-8"
    )
