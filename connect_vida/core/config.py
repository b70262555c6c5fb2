"""
Connect Vida - Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv

# Carrega .env com override para sobrescrever variáveis do sistema
env_file = Path(__file__).parent.parent.parent / ".env"
if env_file.exists():
    load_dotenv(env_file, override=True)


class Settings(BaseSettings):
    # App
    APP_NAME: str = "Connect Vida"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # Database (accepts DATABASE_URL or CONNECT_VIDA_DATABASE_URL)
    DATABASE_URL: Optional[str] = None
    CONNECT_VIDA_DATABASE_URL: str = "sqlite+aiosqlite:///./connect_vida.db"

    @property
    def db_url(self) -> str:
        """Returns DATABASE_URL if set, otherwise CONNECT_VIDA_DATABASE_URL"""
        return self.DATABASE_URL or self.CONNECT_VIDA_DATABASE_URL

    # Identidade: tokens emitidos pelo provedor de autenticação (BaaS)
    AUTH_JWT_SECRET: str = "change-me-in-production"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: Optional[str] = None

    # Gateway de pagamento Asaas (PIX)
    ASAAS_API_TOKEN: Optional[str] = None
    ASAAS_API_URL: str = "https://api.asaas.com/v3"
    ASAAS_WEBHOOK_TOKEN: Optional[str] = None
    ASAAS_TIMEOUT_SECONDS: float = 15.0

    # Jornada de crescimento
    QUIZ_MAX_ATTEMPTS: int = 3
    QUIZ_DEFAULT_PASSING_SCORE: float = 70.0

    # Rate limit dos endpoints públicos
    PUBLIC_RATE_LIMIT: str = "10/minute"

    # CORS
    CORS_ORIGINS: list = ["*"]

    # Email Settings (SMTP)
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USER: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: str = "noreply@connectvida.com.br"
    SMTP_FROM_NAME: str = "Connect Vida"
    SMTP_TLS: bool = True

    # Notificação de erros críticos
    ERROR_NOTIFICATION_ENABLED: bool = False
    ERROR_NOTIFICATION_EMAIL: str = "suporte@connectvida.com.br"

    class Config:
        extra = "ignore"
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
