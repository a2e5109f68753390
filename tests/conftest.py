"""Test configuration and fixtures."""

import os
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from code_fix_engine.core.notifier import RecordingNotifier

FIVE_LINE_FILE = "line 1\nline 2\nline 3\nline 4\nline 5"

SAMPLE_SOURCE = (
    "import os\n"
    "\n"
    "def load(path):\n"
    "    with open(path) as f:\n"
    "        return f.read()\n"
    "\n"
    "def save(path, data):\n"
    "    with open(path, 'w') as f:\n"
    "        f.write(data)\n"
)

SAMPLE_RESPONSE = (
    "### SUGGESTIONS\n"
    "- Consider using pathlib for file handling.\n"
    "\n"
    "### ERRORS\n"
    "1. The file content is returned with a trailing newline, which is a bug for callers.\n"
    "\n"
    "```python\n"
    "def load(path):\n"
    "    with open(path) as f:\n"
    "        return f.read().strip()\n"
    "```\n"
)


@pytest.fixture
def five_line_file() -> str:
    """Provide the five-line file used by the line replacement scenarios."""
    return FIVE_LINE_FILE


@pytest.fixture
def sample_source() -> str:
    """Provide a small Python module as reviewed file content."""
    return SAMPLE_SOURCE


@pytest.fixture
def sample_response() -> str:
    """
    Provide an AI review response for lines 3-5 of ``sample_source``.

    Returns:
        str: A response with a suggestions section listed before an errors section,
            the errors section carrying one fenced Python code block.
    """
    return SAMPLE_RESPONSE


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Remove every CFE_ variable so configuration starts from files and defaults."""
    for key in [k for k in os.environ if k.startswith("CFE_")]:
        monkeypatch.delenv(key)
    yield


@pytest.fixture
def recording_notifier() -> RecordingNotifier:
    """Provide a notifier that keeps every notification for assertions."""
    return RecordingNotifier()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """
    Provide a helper that writes a text file inside the test's temporary directory.

    Returns:
        Callable[[str, str], Path]: Function taking a file name and content and
            returning the path of the created file.
    """

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write
