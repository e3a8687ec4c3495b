from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def parse_grade_cutoffs(raw: str) -> list[tuple[str, int]]:
    """
    "A+:90,A:80,B+:70" -> [("A+", 90), ("A", 80), ("B+", 70)]

    Sorted by threshold descending so the first match wins.
    """
    out: list[tuple[str, int]] = []
    for chunk in (raw or "").split(","):
        chunk = chunk.strip()
        if not chunk:
            continue
        if ":" not in chunk:
            raise ValueError(f"grade cutoff '{chunk}' must look like GRADE:MIN")
        grade, _, threshold = chunk.partition(":")
        grade = grade.strip()
        if not grade:
            raise ValueError(f"grade cutoff '{chunk}' is missing a grade")
        try:
            value = int(threshold.strip())
        except ValueError:
            raise ValueError(f"grade cutoff '{chunk}' has a non-integer threshold")
        if value < 0 or value > 100:
            raise ValueError(f"grade cutoff '{chunk}' must be within 0..100")
        out.append((grade, value))
    if not out:
        raise ValueError("grade_cutoffs is empty")
    return sorted(out, key=lambda x: x[1], reverse=True)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # ---- App ----
    app_env: str = "local"  # local|dev|prod
    app_version: str = "2026-10-19.v1"
    database_url: str = "sqlite:///./ownitright.db"

    # ---- CORS (used by main.py) ----
    cors_allow_origins: list[str] | str = ["*"]

    # ---- Admin auth ----
    auth_mode: str = "dev"  # dev|jwt
    dev_auto_provision: bool = True
    dev_header_admin_email: str = "X-Admin-Email"
    dev_header_admin_role: str = "X-Admin-Role"

    jwt_secret: str = "dev-change-me"
    jwt_exp_minutes: int = 60 * 12
    jwt_cookie_name: str = "ownitright_admin_jwt"

    # ---- Property scoring ----
    # Grading policy is owned by the advisory team, not derived from code.
    grade_cutoffs: str = "A+:90,A:80,B+:70,B:60,C+:50,C:40"
    grade_floor: str = "D"

    # ---- RERA registry ----
    rera_api_key: str | None = Field(default=None, validation_alias=AliasChoices("rera_api_key", "surepass_api_key"))
    rera_base_url: str = "https://api.surepass.io/rera-verification"
    rera_state_path: str = "karnataka"
    rera_default_state: str = "Karnataka"
    rera_request_timeout_seconds: float = 20.0
    rera_bulk_delay_seconds: float = 1.0
    rera_stale_after_days: int = 30
    rera_bulk_dedupe: bool = True
    rera_auto_sync_mode: str = "inline"  # inline|celery

    # ---- Celery ----
    celery_broker_url: str | None = None
    celery_result_backend: str | None = None

    def grade_table(self) -> list[tuple[str, int]]:
        return parse_grade_cutoffs(self.grade_cutoffs)

    def model_post_init(self, __context) -> None:
        # fail at startup, not on the first scored property
        parse_grade_cutoffs(self.grade_cutoffs)

        mode = (self.rera_auto_sync_mode or "").strip().lower()
        if mode not in ("inline", "celery"):
            raise ValueError(f"rera_auto_sync_mode must be inline|celery, got {self.rera_auto_sync_mode!r}")

        env = (self.app_env or "local").strip().lower()
        if env in ("prod", "production"):
            if (self.auth_mode or "").strip().lower() == "dev":
                raise ValueError("SECURITY: auth_mode=dev is not allowed in prod")

            origins = self.cors_allow_origins
            if origins == "*" or origins == ["*"] or (isinstance(origins, str) and "*" in origins):
                raise ValueError("SECURITY: cors_allow_origins wildcard is not allowed in prod")


settings = Settings()
