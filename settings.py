# ============================
# お問い合わせフォーム 設定
# ============================
from dataclasses import dataclass
from functools import lru_cache
from dotenv import load_dotenv
import os

load_dotenv()

# ------------------------------------------------------------
# 🔹 既定値: 保存先パス
# ------------------------------------------------------------
DEFAULT_LOG_PATH = "/var/www/html/form-submissions.log"
DEFAULT_LOCK_TIMEOUT = 10.0


def _as_bool(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    """環境変数（.env）から読み込むアプリ設定"""
    log_path: str
    lock_timeout: float
    form_heading: str
    allowed_origins: list[str]
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False


def load_settings() -> Settings:
    origins = os.getenv("ALLOWED_ORIGINS", "*")
    return Settings(
        log_path=os.getenv("CONTACT_LOG_PATH", DEFAULT_LOG_PATH),
        lock_timeout=float(os.getenv("CONTACT_LOG_LOCK_TIMEOUT", DEFAULT_LOCK_TIMEOUT)),
        form_heading=os.getenv("CONTACT_FORM_HEADING", "Contact Us"),
        allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=_as_bool(os.getenv("RELOAD")),
    )


@lru_cache
def get_settings() -> Settings:
    """プロセス全体で共有する設定（初回のみ読み込み）"""
    return load_settings()
