# =============================================================================
# GIGA WMS v1.0 - CONFIGURAZIONE
# =============================================================================
# Impostazioni lette da variabili ambiente (e da .env se presente)
# =============================================================================

import os
from urllib.parse import quote_plus

from dotenv import load_dotenv

# Carica variabili ambiente da .env se presente
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    """Legge un flag booleano (1/true/yes/on)."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# =============================================================================
# CONFIGURAZIONE PRINCIPALE
# =============================================================================

class Settings:
    """Configurazione globale dell'applicazione."""

    # Database PostgreSQL
    PG_HOST: str = os.getenv("PG_HOST", "localhost")
    PG_PORT: int = int(os.getenv("PG_PORT", "5432"))
    PG_DATABASE: str = os.getenv("PG_DATABASE", "giga_wms")
    PG_USER: str = os.getenv("PG_USER", "giga_wms_user")
    PG_PASSWORD: str = os.getenv("PG_PASSWORD", "")
    PG_POOL_MIN: int = int(os.getenv("PG_POOL_MIN", "1"))
    PG_POOL_MAX: int = int(os.getenv("PG_POOL_MAX", "10"))

    # Log su file
    LOG_PATH: str = os.getenv("LOG_PATH", "logs")
    ENABLE_DEBUG_LOG: bool = _env_bool("ENABLE_DEBUG_LOG", False)
    ENABLE_ERROR_LOG: bool = _env_bool("ENABLE_ERROR_LOG", True)
    ENABLE_OPERATION_LOG: bool = _env_bool("ENABLE_OPERATION_LOG", True)

    # Informazioni applicazione
    SYSTEM_NAME: str = os.getenv("SYSTEM_NAME", "GIGA WMS")
    SYSTEM_VERSION: str = os.getenv("SYSTEM_VERSION", "1.0.0")
    COMPANY_NAME: str = os.getenv("COMPANY_NAME", "")

    # Sessioni
    SESSION_COOKIE: str = "WMS_SESSION"
    SESSION_TIMEOUT_MINUTES: int = int(os.getenv("SESSION_TIMEOUT_MINUTES", "20"))

    # JWT (emissione token esterna, qui solo verifica)
    JWT_SECRET_KEY: str = os.getenv("JWT_SECRET_KEY", "GIGA_WMS_SECRET_KEY_CHANGE_IN_PRODUCTION")
    JWT_ALGORITHM: str = "HS256"

    # Pagina errore per client browser
    ERROR_PAGE: str = "/error"

    # Paginazione
    DEFAULT_PAGE_SIZE: int = 10

    @property
    def database_url(self) -> str:
        """URL SQLAlchemy usato da Alembic."""
        return (
            f"postgresql+psycopg2://{self.PG_USER}:{quote_plus(self.PG_PASSWORD)}"
            f"@{self.PG_HOST}:{self.PG_PORT}/{self.PG_DATABASE}"
        )


# Istanza singleton
config = Settings()


# =============================================================================
# STATI ORDINI USCITA
# =============================================================================

OUTBOUND_STATUS_APPROVED = 2
