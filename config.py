import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


def _get(key, default=None):
    # Environment variables override env.yaml
    return os.environ.get(key, data.get(key, default))


def _get_bool(key, default=False) -> bool:
    value = _get(key, default)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _get_list(key, default=None) -> list:
    value = _get(key, default or [])
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return list(value)


class ApplicationConfig:
    APP_NAME = _get("APP_NAME", "Password Reset Service")
    DB_URI = _get("DB_URI", "sqlite+aiosqlite:///./app.db")
    API_PORT = int(_get("API_PORT", 8000))
    API_HOST = _get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = _get_list("CORS_ORIGINS")
    CORS_ALLOW_CREDENTIALS = _get_bool("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = _get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = _get_bool("ENABLE_LOGGING_MIDDLEWARE", True)
    AUTO_CREATE_TABLES = _get_bool("AUTO_CREATE_TABLES", True)

    # The OTP window length doubles as the code's expiry
    OTP_DIGITS = int(_get("OTP_DIGITS", 6))
    OTP_EXPIRY_MINUTES = int(_get("OTP_EXPIRY_MINUTES", 10))
    OTP_STEP_SECONDS = OTP_EXPIRY_MINUTES * 60
    OTP_WINDOW = int(_get("OTP_WINDOW", 0))
    EXTERNAL_CALL_TIMEOUT_SECONDS = float(_get("EXTERNAL_CALL_TIMEOUT_SECONDS", 10))

    SMTP_HOST = _get("SMTP_HOST", "")
    SMTP_PORT = int(_get("SMTP_PORT", 587))
    SMTP_USER = _get("SMTP_USER", "")
    SMTP_PASSWORD = _get("SMTP_PASSWORD", "")
    SMTP_FROM_EMAIL = _get("SMTP_FROM_EMAIL", "")
