# ============================
# お問い合わせフォーム用 FastAPI
# ============================
from fastapi import FastAPI, Request, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool
from functools import lru_cache
import logging
import os

from settings import get_settings
from submission import SubmitOutcome, outcome_from_query, process_submission
from submission_log import LogWriteError, SubmissionLog

logger = logging.getLogger("uvicorn.error")

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
templates = Jinja2Templates(directory=os.path.join(BASE_DIR, "templates"))

app = FastAPI(title="Contact Form")

# 🔹 スタイルシートの静的配信（/static/*）
app.mount("/static", StaticFiles(directory=os.path.join(BASE_DIR, "static")), name="static")

# 🔹 CORS設定
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().allowed_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# 🔹 ログストア（プロセスで 1つ）
# ------------------------------------------------------------
@lru_cache
def get_submission_log() -> SubmissionLog:
    settings = get_settings()
    return SubmissionLog(settings.log_path, timeout=settings.lock_timeout)


# ------------------------------------------------------------
# 🔹 フォーム表示
# ------------------------------------------------------------
@app.get("/", response_class=HTMLResponse, name="index")
async def index(request: Request, success: str | None = None, error: str | None = None):
    """フォームを表示。success / error が既知の値ならメッセージも表示"""
    outcome = outcome_from_query(success, error)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "heading": get_settings().form_heading,
            "outcome": outcome,
        },
    )


# ------------------------------------------------------------
# 🔹 フォーム送信（検証 → ログ追記 → リダイレクト）
# ------------------------------------------------------------
def _redirect_to_form(request: Request, outcome: SubmitOutcome | None = None) -> RedirectResponse:
    """フォーム表示ルートへ 303 で戻す（root_path 配下でも url_for で解決）"""
    url = request.url_for("index")
    if outcome is not None:
        url = url.replace(query=outcome.query)
    return RedirectResponse(url=str(url), status_code=303)


@app.api_route(
    "/process-form",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE", "CONNECT"],
    name="process_form",
)
async def process_form(request: Request, log: SubmissionLog = Depends(get_submission_log)):
    """
    POST 以外はフォームへ戻すだけ。
    POST は検証し、結果を success / error クエリに載せてフォームへリダイレクト。
    """
    if request.method != "POST":
        return _redirect_to_form(request)

    form = await request.form()
    try:
        outcome = await run_in_threadpool(process_submission, form, log)
    except LogWriteError:
        logger.exception("⚠ contact submission could not be logged: %s", log.path)
        outcome = SubmitOutcome.STORAGE_ERROR

    if outcome is SubmitOutcome.SUCCESS:
        logger.info("✅ contact submission logged to %s", log.path)
    return _redirect_to_form(request, outcome)


if __name__ == "__main__":
    import uvicorn
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
