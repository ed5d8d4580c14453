from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "SmartScan"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # OCR
    TESSERACT_CMD: str = "/usr/local/bin/tesseract"  # macOS default
    OCR_LANGUAGE: str = "eng"

    # Uploads
    MAX_UPLOAD_MB: int = 10

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
