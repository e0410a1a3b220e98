import os
import re
from concurrent.futures import ThreadPoolExecutor
from multiprocessing import get_context

import pytest
from filelock import FileLock

from submission import SubmitOutcome, process_submission
from submission_log import LogWriteError, SubmissionLog

from log_helpers import read_log_lines

LINE_RE = re.compile(
    r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\] Name: user-(\d+), Email: user\1@example\.com, Message: (x+)$"
)


def _submit(log, i):
    form = {"name": f"user-{i}", "email": f"user{i}@example.com", "message": "x" * 2000}
    return process_submission(form, log)


def _submit_from_process(path, start, count):
    log = SubmissionLog(path, timeout=30)
    for i in range(start, start + count):
        _submit(log, i)


def test_append_creates_file_and_parent_dirs(tmp_path):
    path = tmp_path / "logs" / "nested" / "form-submissions.log"
    log = SubmissionLog(str(path))

    log.append("first")
    log.append("second")

    assert read_log_lines(log.path) == ["first", "second"]
    with open(path, "rb") as f:
        assert f.read() == ("first" + os.linesep + "second" + os.linesep).encode()


def test_append_never_rewrites_existing_lines(tmp_path):
    path = tmp_path / "form-submissions.log"
    path.write_text("old line" + os.linesep, encoding="utf-8")

    SubmissionLog(str(path)).append("new line")

    assert read_log_lines(path) == ["old line", "new line"]


def test_lock_timeout_raises(tmp_path):
    path = str(tmp_path / "form-submissions.log")
    log = SubmissionLog(path, timeout=0.1)

    with FileLock(path + ".lock"):
        with pytest.raises(LogWriteError):
            log.append("blocked")

    assert read_log_lines(log.path) == []


def test_io_error_raises(tmp_path):
    log = SubmissionLog(str(tmp_path))
    with pytest.raises(LogWriteError):
        log.append("line")


def test_concurrent_threads_write_complete_lines(tmp_path):
    log = SubmissionLog(str(tmp_path / "form-submissions.log"), timeout=30)
    n = 200

    with ThreadPoolExecutor(max_workers=16) as pool:
        outcomes = list(pool.map(lambda i: _submit(log, i), range(n)))

    assert outcomes == [SubmitOutcome.SUCCESS] * n
    lines = read_log_lines(log.path)
    assert len(lines) == n
    matches = [LINE_RE.match(line) for line in lines]
    assert all(matches)
    assert sorted(int(m.group(1)) for m in matches) == list(range(n))
    assert all(len(m.group(2)) == 2000 for m in matches)


def test_concurrent_processes_write_complete_lines(tmp_path):
    path = str(tmp_path / "form-submissions.log")
    workers, per_worker = 4, 25

    ctx = get_context("spawn")
    procs = [
        ctx.Process(target=_submit_from_process, args=(path, w * per_worker, per_worker))
        for w in range(workers)
    ]
    for p in procs:
        p.start()
    for p in procs:
        p.join(timeout=60)
        assert p.exitcode == 0

    lines = read_log_lines(path)
    assert len(lines) == workers * per_worker
    assert all(LINE_RE.match(line) for line in lines)
