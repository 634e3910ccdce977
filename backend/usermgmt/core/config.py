# backend/usermgmt/core/config.py

from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_env: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./usermgmt.db"

    # single-user/local mode: no session required, first user stands in
    auth_disabled: bool = False

    jwt_secret_key: str = "dev-secret-change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 10080

    # comma-separated allowlist, falls back to FRONTEND_URL/local
    cors_origins: str = ""
    frontend_url: str = "http://localhost:3000"

    # "s3" | "local"
    storage_backend: str = "s3"
    s3_bucket: str = ""
    s3_region: str = "us-east-1"
    s3_endpoint_url: Optional[str] = None
    s3_public_base_url: str = ""
    uploads_dir: str = "./uploads"
    uploads_base_url: str = "/uploads"

    avatar_max_bytes: int = 2 * 1024 * 1024

    seed_admin_email: str = "admin@example.com"
    seed_admin_password: str = "admin123"

    class Config:
        env_file = ".env"
        extra = "ignore"

    def allowed_origins(self) -> List[str]:
        if self.cors_origins.strip():
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return list({self.frontend_url.strip(), "http://localhost:3000"})


@lru_cache
def get_settings() -> Settings:
    return Settings()
