import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file)
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./test.db")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Credential signing; previous secrets keep verifying during key rotation
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_PREVIOUS_SECRETS = data.get("JWT_PREVIOUS_SECRETS", [])
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    ACCESS_TOKEN_MINUTES = int(data.get("ACCESS_TOKEN_MINUTES", 30))
    REFRESH_TOKEN_DAYS = int(data.get("REFRESH_TOKEN_DAYS", 7))
    TOKEN_HASH_SECRET = data.get("TOKEN_HASH_SECRET", "dev-hash-key-change-in-production")

    STORE_TIMEOUT_SECONDS = float(data.get("STORE_TIMEOUT_SECONDS", 5))
    SESSION_JANITOR_ENABLED = bool(data.get("SESSION_JANITOR_ENABLED", True))
    SESSION_JANITOR_INTERVAL_MINUTES = int(data.get("SESSION_JANITOR_INTERVAL_MINUTES", 60))
