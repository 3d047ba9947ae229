import logging
import os
from typing import FrozenSet, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

logger = logging.getLogger(__name__)

REQUIRED_ENV = {
    "mongo_uri": "MONGO_URI",
    "mongo_dbname": "MONGO_DBNAME",
    "token_secret": "TOKEN_SECRET",
}

DEFAULT_PROTECTED_ROUTES = "list_sales"


class ConfigurationError(RuntimeError):
    pass


class Settings(BaseModel):
    mongo_uri: str
    mongo_dbname: str
    token_secret: str
    token_algorithm: str = "HS256"
    token_expire_minutes: int = 60
    protected_routes: FrozenSet[str] = frozenset({DEFAULT_PROTECTED_ROUTES})
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"


def _split(value: str) -> List[str]:
    return [part.strip() for part in value.split(",") if part.strip()]


def load_settings(env: Optional[dict] = None) -> Settings:
    """Read settings from the environment (and a .env file, if present).

    Missing required variables are collected and reported together.
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    missing = [name for name in REQUIRED_ENV.values() if not env.get(name)]
    if missing:
        raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")

    return Settings(
        mongo_uri=env["MONGO_URI"],
        mongo_dbname=env["MONGO_DBNAME"],
        token_secret=env["TOKEN_SECRET"],
        token_expire_minutes=int(env.get("TOKEN_EXPIRE_MINUTES", 60)),
        protected_routes=frozenset(_split(env.get("PROTECTED_ROUTES", DEFAULT_PROTECTED_ROUTES))),
        cors_origins=_split(env.get("CORS_ORIGINS", "*")) or ["*"],
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
