import pytest
from fastapi.testclient import TestClient

from main import app, get_submission_log
from submission_log import SubmissionLog


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / "form-submissions.log"


@pytest.fixture
def submission_log(log_path):
    return SubmissionLog(str(log_path), timeout=1)


@pytest.fixture
def client(submission_log):
    app.dependency_overrides[get_submission_log] = lambda: submission_log
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
