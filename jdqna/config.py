# jdqna/config.py

from dotenv import load_dotenv
from pathlib import Path
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # .env 먼저 읽기

BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    # 환경 구분
    app_env: str = "local"
    log_level: str = "INFO"

    # DB 필수 설정
    database_url: str                        # DATABASE_URL

    # API 인증 (공유 Bearer 토큰)
    auth_token: str | None = None            # AUTH_TOKEN
    public_api_paths: List[str] = ["/api/public"]

    # OpenAI
    openai_api_key: str | None = None
    openai_model: str = "gpt-4.1"
    openai_extraction_model: str = "gpt-4o-mini"
    openai_timeout: float = 1200.0

    # Supabase Storage (업로드)
    supabase_url: str | None = None
    supabase_service_role_key: str | None = None
    supabase_upload_bucket: str = "uploads"
    upload_folder: str = "misc"

    # FloCareer
    flocareer_base_url: str = "https://sandbox.flocareer.com/dynamic/corporate"
    flocareer_timeout: float = 30.0

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
