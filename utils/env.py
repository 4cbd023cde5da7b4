import os


def is_production() -> bool:
    return os.getenv("APP_ENV", "development").lower() == "production"
