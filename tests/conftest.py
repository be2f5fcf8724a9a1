import io
import sys
import threading
from pathlib import Path

import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make the package importable when the project is not installed.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from imagelink.errors import InvalidResponseError  # noqa: E402


def make_image_bytes(size=(64, 48), color=(200, 30, 30), fmt="PNG", mode="RGB") -> bytes:
    img = Image.new(mode, size, color)
    buf = io.BytesIO()
    img.save(buf, format=fmt)
    return buf.getvalue()


class StubFetcher:
    """Serves canned responses and counts network calls per URL."""

    def __init__(self, responses=None, text=None, delay: threading.Event | None = None):
        self.responses: dict[str, bytes | Exception] = dict(responses or {})
        self.text = text
        self.calls: list[str] = []
        self.text_calls: list[str] = []
        self._delay = delay
        self._lock = threading.Lock()

    def fetch_bytes(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        if self._delay is not None:
            self._delay.wait(timeout=5)
        result = self.responses.get(url)
        if result is None:
            raise InvalidResponseError(f"HTTP 404 for {url}", status_code=404)
        if isinstance(result, Exception):
            raise result
        return result

    def fetch_text(self, url: str) -> str:
        with self._lock:
            self.text_calls.append(url)
        if isinstance(self.text, Exception):
            raise self.text
        if self.text is None:
            raise InvalidResponseError(f"HTTP 404 for {url}", status_code=404)
        return self.text

    def close(self) -> None:
        pass


class ImmediateExecutor:
    """Executor stand-in that runs submitted callables inline."""

    def __init__(self):
        self.submitted = 0

    def submit(self, fn, *args, **kwargs):
        from concurrent.futures import Future

        self.submitted += 1
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True, cancel_futures=False):
        pass


@pytest.fixture()
def image_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture()
def stub_fetcher() -> StubFetcher:
    return StubFetcher()
