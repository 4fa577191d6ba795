import os


def get_settings_module() -> str:
    # Environment comes from APP_ENV, defaulting to 'development'
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "config.production"

    if env in {"test", "testing"}:
        return "config.testing"

    return "config.development"


def csv_set(value: str) -> frozenset[str]:
    return frozenset(part.strip().lower().lstrip(".") for part in value.split(",") if part.strip())
