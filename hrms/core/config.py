from dataclasses import dataclass
from pathlib import Path
import os


@dataclass(frozen=True)
class Settings:
    app_name: str = "HRMS Access Control & Leave Service"
    api_version: str = "v1"
    secret_key: str = os.getenv("HRMS_SECRET_KEY", "change-me-for-production")
    algorithm: str = os.getenv("HRMS_JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    data_dir: Path = Path(os.getenv("HRMS_DATA_DIR", str(Path(__file__).resolve().parents[2] / "data")))
    database_url: str = os.getenv(
        "HRMS_DATABASE_URL",
        f"sqlite:///{Path(__file__).resolve().parents[2] / 'data' / 'hrms.db'}",
    )
    database_echo: bool = os.getenv("HRMS_DATABASE_ECHO", "false").lower() == "true"
    log_level: str = os.getenv("HRMS_LOG_LEVEL", "INFO").upper()
    super_admin_role_id: int = int(os.getenv("HRMS_SUPER_ADMIN_ROLE_ID", "1"))
    hr_role_id: int = int(os.getenv("HRMS_HR_ROLE_ID", "2"))
    rate_limit_window_seconds: int = int(os.getenv("HRMS_RATE_LIMIT_WINDOW_SECONDS", "60"))
    rate_limit_write: int = int(os.getenv("HRMS_RATE_LIMIT_WRITE", "30"))
    rate_limit_read: int = int(os.getenv("HRMS_RATE_LIMIT_READ", "100"))

    @property
    def log_path(self) -> Path:
        return self.data_dir / "hrms.log"

    @property
    def audit_log_path(self) -> Path:
        return self.data_dir / "audit.jsonl"

    @property
    def admin_role_ids(self) -> frozenset[int]:
        return frozenset({self.super_admin_role_id, self.hr_role_id})


settings = Settings()
settings.data_dir.mkdir(parents=True, exist_ok=True)
