# ============================
# お問い合わせ送信の検証と記録
# ============================
from collections.abc import Mapping
from datetime import datetime
from enum import Enum
from urllib.parse import urlencode
from email_validator import validate_email, EmailNotValidError
from markupsafe import escape
from pydantic import BaseModel
import re

from submission_log import SubmissionLog

FIELDS = ("name", "email", "message")
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# ------------------------------------------------------------
# 🔹 処理結果（リダイレクト先のクエリと表示メッセージ）
# ------------------------------------------------------------
class SubmitOutcome(Enum):
    """
    送信処理の結果。値は (クエリ名, コード)。
    success と error は別パラメータなので success=1 と error=1 は衝突しない。
    """
    SUCCESS = ("success", "1")
    MISSING_FIELD = ("error", "1")
    INVALID_EMAIL = ("error", "2")
    STORAGE_ERROR = ("error", "3")

    @property
    def param(self) -> str:
        return self.value[0]

    @property
    def code(self) -> str:
        return self.value[1]

    @property
    def query(self) -> str:
        return urlencode({self.param: self.code})

    @property
    def is_error(self) -> bool:
        return self.param == "error"

    @property
    def message(self) -> str:
        return OUTCOME_MESSAGES[self]


OUTCOME_MESSAGES = {
    SubmitOutcome.SUCCESS: "Thank you! Your message has been received.",
    SubmitOutcome.MISSING_FIELD: "Please fill in all required fields.",
    SubmitOutcome.INVALID_EMAIL: "Please enter a valid email address.",
    SubmitOutcome.STORAGE_ERROR: "Sorry, your message could not be saved. Please try again.",
}


def outcome_from_query(success: str | None, error: str | None) -> SubmitOutcome | None:
    """
    クエリから表示すべき結果を決める。
    認識できる値のときだけ返す（未指定・未知の値は None）。エラーを優先。
    """
    for outcome in SubmitOutcome:
        if outcome.is_error and error == outcome.code:
            return outcome
    if success == SubmitOutcome.SUCCESS.code:
        return SubmitOutcome.SUCCESS
    return None


# ------------------------------------------------------------
# 🔹 送信記録
# ------------------------------------------------------------
class ContactSubmission(BaseModel):
    name: str
    email: str
    message: str
    timestamp: datetime

    def to_log_line(self) -> str:
        """[YYYY-MM-DD HH:MM:SS] Name: ..., Email: ..., Message: ... の 1行"""
        ts = self.timestamp.strftime(TIMESTAMP_FORMAT)
        return (
            f"[{ts}] Name: {_one_line(self.name)}, "
            f"Email: {_one_line(self.email)}, "
            f"Message: {_one_line(self.message)}"
        )


def _one_line(value: str) -> str:
    # 本文中の改行は空白にして 1記録=1行を保つ
    return re.sub(r"\r\n|\r|\n", " ", value)


def sanitize(value) -> str:
    """前後の空白を除去し、HTMLとして解釈される文字をエスケープ（未指定・非文字列は空文字）"""
    if not isinstance(value, str):
        return ""
    return str(escape(value.strip()))


def is_valid_email(email: str) -> bool:
    """
    local@domain 形式か（構文のみ。DNS確認・配送可否の判定はしない）
    - ローカル部は ASCII のみ
    - .test / .local などの特殊用途ドメインも構文上は許可
    - ドメインにドットが必要（a@b は不可）
    """
    try:
        result = validate_email(
            email,
            check_deliverability=False,
            globally_deliverable=False,
            allow_smtputf8=False,
        )
    except EmailNotValidError:
        return False
    # globally_deliverable=False ではドット必須の判定が外れるため自前で確認
    return "." in result.ascii_domain


# ------------------------------------------------------------
# 🔹 検証 → 記録
# ------------------------------------------------------------
def process_submission(form: Mapping, log: SubmissionLog, now: datetime | None = None) -> SubmitOutcome:
    """
    フォーム値を検証し、問題なければログに 1行追記する。
    - 必須項目が空: MISSING_FIELD
    - メール形式が不正: INVALID_EMAIL
    - 追記失敗: LogWriteError を送出（呼び出し側で STORAGE_ERROR に変換）
    """
    values = {field: sanitize(form.get(field)) for field in FIELDS}

    if not all(values.values()):
        return SubmitOutcome.MISSING_FIELD

    if not is_valid_email(values["email"]):
        return SubmitOutcome.INVALID_EMAIL

    record = ContactSubmission(timestamp=now or datetime.now(), **values)
    log.append(record.to_log_line())
    return SubmitOutcome.SUCCESS
