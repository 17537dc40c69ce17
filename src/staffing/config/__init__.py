import os


def get_settings_module() -> str:
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "staffing.config.production"

    if env in {"test", "testing"}:
        return "staffing.config.testing"

    return "staffing.config.development"
