# app/config.py
from pydantic_settings import BaseSettings
from pydantic import field_validator

class Settings(BaseSettings):
    """환경변수 설정"""

    # API 기본 설정
    app_name: str = "DiaryHub API"
    debug: bool = True

    # Database
    database_url: str

    # JWT
    secret_key: str
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # 첨부 이미지 저장소
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_images_per_diary: int = 10

    # 로그
    log_dir: str = "logs"

    # CORS
    cors_origins: list[str] = [
        "http://127.0.0.1:5500",
        "http://localhost:3000",
    ]

    # 비공개 일기 단건 조회를 작성자에게만 허용할지 여부 (기본: 기존 동작 유지)
    private_diary_owner_only: bool = False

    @field_validator('secret_key')
    def validate_secret_key(cls, v):
        if len(v) < 32:
            raise ValueError('SECRET_KEY는 최소 32자 이상이어야 합니다')
        return v

    class Config:
        env_file = ".env"
        case_sensitive = False

# 싱글톤 인스턴스
settings = Settings()
