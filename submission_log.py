# ============================
# 送信ログ（追記専用テキストファイル）
# ============================
from filelock import FileLock, Timeout
import os


class LogWriteError(Exception):
    """ログファイルへの追記に失敗した（ロック待ちタイムアウト / I/Oエラー）"""


class SubmissionLog:
    """
    送信記録を 1行ずつ追記するログストア。
    - 追記のたびにサイドカーの *.lock* で排他ロックを取得し、書き込み+flush 後に解放
    - ロック待ちは timeout 秒まで（超えたら LogWriteError）
    - 既存行の更新・削除は行わない
    - 読み出し口は持たない（追記専用）
    """

    def __init__(self, path: str, timeout: float = 10.0):
        self.path = str(path)
        self.lock = FileLock(self.path + ".lock", timeout=timeout, thread_local=True)

    def append(self, line: str) -> None:
        """1行を追記する（改行は os.linesep を付与）"""
        try:
            directory = os.path.dirname(self.path)
            if directory:
                os.makedirs(directory, exist_ok=True)
            with self.lock, open(self.path, "a", newline="", encoding="utf-8") as f:
                f.write(line + os.linesep)
                f.flush()
        except Timeout as e:
            raise LogWriteError(f"lock timeout: {self.path}") from e
        except OSError as e:
            raise LogWriteError(f"write failed: {self.path}: {e}") from e
