import os
from pathlib import Path

from dotenv import load_dotenv

env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)


class Settings:
    @staticmethod
    def _get_int(name: str, default: int) -> int:
        return int(os.getenv(name, str(default)))

    @staticmethod
    def _get_float(name: str, default: float) -> float:
        return float(os.getenv(name, str(default)))

    @property
    def DATABASE_URL(self) -> str:
        database_url = os.getenv("DATABASE_URL", "").strip()
        if not database_url:
            raise ValueError("DATABASE_URL is required")
        return database_url

    @property
    def DB_CONNECT_RETRIES(self) -> int:
        return self._get_int("DB_CONNECT_RETRIES", 10)

    @property
    def DB_CONNECT_RETRY_DELAY_SECONDS(self) -> int:
        return self._get_int("DB_CONNECT_RETRY_DELAY_SECONDS", 2)

    @property
    def DB_POOL_TIMEOUT_SECONDS(self) -> int:
        return self._get_int("DB_POOL_TIMEOUT_SECONDS", 10)

    @property
    def JWT_SECRET(self) -> str:
        return os.getenv("JWT_SECRET", "change-me-in-production")

    @property
    def JWT_ALGORITHM(self) -> str:
        return os.getenv("JWT_ALGORITHM", "HS256")

    @property
    def STRIPE_SECRET_KEY(self) -> str:
        return os.getenv("STRIPE_SECRET_KEY", "")

    @property
    def STRIPE_WEBHOOK_SECRET(self) -> str:
        return os.getenv("STRIPE_WEBHOOK_SECRET", "")

    @property
    def STRIPE_SUCCESS_URL(self) -> str:
        return os.getenv("STRIPE_SUCCESS_URL", "http://localhost:5173/payment-success")

    @property
    def STRIPE_CANCEL_URL(self) -> str:
        return os.getenv("STRIPE_CANCEL_URL", "http://localhost:5173/payment-failure")

    @property
    def STRIPE_TIMEOUT_SECONDS(self) -> int:
        return self._get_int("STRIPE_TIMEOUT_SECONDS", 20)

    @property
    def STRIPE_MAX_ATTEMPTS(self) -> int:
        return self._get_int("STRIPE_MAX_ATTEMPTS", 3)

    @property
    def STRIPE_RETRY_DELAY_SECONDS(self) -> float:
        return self._get_float("STRIPE_RETRY_DELAY_SECONDS", 0.5)

    @property
    def DEFAULT_CURRENCY(self) -> str:
        return os.getenv("DEFAULT_CURRENCY", "usd").strip().lower()

    @property
    def RECONCILE_ORDER_WRITE_ATTEMPTS(self) -> int:
        return self._get_int("RECONCILE_ORDER_WRITE_ATTEMPTS", 3)

    @property
    def RECONCILE_RETRY_DELAY_SECONDS(self) -> float:
        return self._get_float("RECONCILE_RETRY_DELAY_SECONDS", 0.2)

    @property
    def CORS_ORIGINS(self) -> str:
        return os.getenv("CORS_ORIGINS", "http://localhost:5173")


settings = Settings()

# Validate critical settings
if settings.JWT_SECRET == "change-me-in-production":
    import warnings
    warnings.warn("JWT_SECRET is using default value. Change it in production!", UserWarning)
