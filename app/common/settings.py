# common/settings.py
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parent.parent.parent  # raiz do projeto (onde fica o .env)


class Settings(BaseSettings):
    SHOP_URL: str = ""  # ex.: minha-loja.myshopify.com
    SHOPIFY_TOKEN: str = ""  # token Admin API (sessão já autenticada)
    SHOPIFY_API_VERSION: str = ""  # vazio = versão trimestral corrente
    APP_ENV: str = "dev"

    # prazo de cada chamada remota: (conexão, leitura) em segundos
    HTTP_CONNECT_TIMEOUT: float = 5.0
    HTTP_READ_TIMEOUT: float = 30.0

    TRACKING_MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024  # 50 MiB
    TRACKING_MAX_ERROS: int = 50  # mensagens de erro devolvidas por lote

    model_config = SettingsConfigDict(
        env_file=str(BASE_DIR / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Em runtime, pydantic-settings vai sobrescrever com valores do .env/ambiente
settings: Settings = Settings()
