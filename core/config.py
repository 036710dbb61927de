from typing import Optional

from pydantic.v1 import BaseSettings


class Settings(BaseSettings):

    DATABASE_URL: str

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440

    # Microsoft identity platform (OAuth 2.0 + PKCE)
    AZURE_CLIENT_ID: str = ""
    AZURE_CLIENT_SECRET: str = ""
    AZURE_TENANT_ID: str = "common"
    REDIRECT_URL: str = "http://localhost:8000/auth/callback"
    FRONTEND_URL: str = "http://localhost:8080"

    # S3-совместимое хранилище картинок (MinIO)
    AWS_ACCESS_KEY_ID: str = ""
    AWS_SECRET_ACCESS_KEY: str = ""
    AWS_S3_BUCKET_NAME: str = "campusmatch"
    AWS_S3_ENDPOINT_URL: str = "http://localhost:9000"
    AWS_S3_REGION: Optional[str] = None
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024

    DEBUG: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @property
    def authority_url(self) -> str:
        return f"https://login.microsoftonline.com/{self.AZURE_TENANT_ID}/oauth2/v2.0"


# Создаём глобальный объект, который будем импортировать везде
settings = Settings()
