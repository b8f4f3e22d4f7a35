import sys

from pydantic_settings import BaseSettings

_ENV_FILE = None if "pytest" in sys.modules else ".env"


class Settings(BaseSettings):
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: list[str] = ["http://localhost:3000"]

    COSMOS_DB_ENDPOINT: str = ""
    COSMOS_DB_KEY: str = ""
    COSMOS_DB_DATABASE: str = "peoplehub"
    COSMOS_DB_COMPANIES_CONTAINER: str = "companies"
    COSMOS_DB_ORGANIZATION_CONTAINER: str = "organization"
    COSMOS_DB_IDENTITY_CONTAINER: str = "identity-keys"
    COSMOS_DB_SURVEY_TEMPLATES_CONTAINER: str = "survey-templates"

    PASSWORD_HASH_ROUNDS: int = 10
    IMPORT_MAX_FILE_SIZE: int = 10 * 1024 * 1024

    AUTH_ISSUER: str = ""
    AUTH_AUDIENCE: str = ""
    AUTH_JWKS_URL: str = ""

    model_config = {
        "env_file": _ENV_FILE,
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }


settings = Settings()
