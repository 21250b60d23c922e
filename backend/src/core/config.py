from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # Database
    db_name: str = "taskactivity"
    db_user: str = "taskactivity"
    db_password: str = "CHANGE_ME"
    db_host: str = "db"
    db_port: int = 5432
    db_ssl: bool = False

    # App
    debug: bool = False

    # Receipt uploads
    max_receipt_size_bytes: int = Field(default=5 * 1024 * 1024, gt=0)

    # Password history
    password_history_enabled: bool = True
    password_history_size: int = Field(default=5, ge=1)

    @property
    def database_url(self) -> str:
        base = (
            f"postgresql+asyncpg://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )
        return f"{base}?ssl=require" if self.db_ssl else base

    model_config = {"env_file": ".env", "extra": "ignore"}

    def validate_secrets(self) -> None:
        """Raise if production-critical secrets are still defaults."""
        if self.debug:
            return
        if self.db_password == "CHANGE_ME":
            raise ValueError("db_password must be changed from default")


settings = Settings()
