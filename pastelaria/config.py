from decimal import Decimal
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./pastelaria.db"

    # JWT
    secret_key: str = "pastelaria_secret_key_change_me_in_prod"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12  # 12 horas

    # Fuso usado para o "dia" do turno (baseline das maquininhas e relatórios)
    timezone: str = "America/Sao_Paulo"

    # Divergências acima deste valor geram alerta para o admin
    large_divergence_alert: Decimal = Decimal("50.00")

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PASTELARIA_", case_sensitive=False)


@lru_cache
def get_settings() -> Settings:
    return Settings()
