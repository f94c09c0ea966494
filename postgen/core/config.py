from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Optional

class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    database_ssl: bool = Field(default=False, alias="DATABASE_SSL")
    db_auto_create: bool = Field(default=False, alias="DB_AUTO_CREATE")

    gemini_api_key: Optional[str] = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field(default="gemini-2.5-flash", alias="GEMINI_MODEL")
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        alias="GEMINI_BASE_URL",
    )

    auth_jwt_secret: Optional[str] = Field(default=None, alias="AUTH_JWT_SECRET")
    auth_jwt_alg: str = Field(default="HS256", alias="AUTH_JWT_ALG")
    auth_jwt_audience: Optional[str] = Field(default="authenticated", alias="AUTH_JWT_AUDIENCE")

    max_free_generations: int = Field(default=3, alias="MAX_FREE_GENERATIONS")
    refund_on_upstream_failure: bool = Field(default=True, alias="REFUND_ON_UPSTREAM_FAILURE")

    allowed_origins: str = Field(default="*", alias="ALLOWED_ORIGINS")

    http_timeout: float = Field(default=30.0, alias="HTTP_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

settings = Settings()
