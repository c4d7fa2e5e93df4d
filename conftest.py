import os
from unittest import mock

import pytest

ENV_VARS = ("LINECALC_PROMPT", "LINECALC_HISTORY_FILE", "LINECALC_LOG_LEVEL")


class ScriptedLineSource:
    """Line source that replays a fixed script. Exception instances in the script are raised."""

    def __init__(self, lines):
        self.lines = list(lines)
        self.prompts = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        if not self.lines:
            raise EOFError()
        line = self.lines.pop(0)
        if isinstance(line, BaseException):
            raise line
        return line


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # load_dotenv writes to os.environ; patch.dict drops whatever it added.
    with mock.patch.dict(os.environ):
        for name in ENV_VARS:
            monkeypatch.delenv(name, raising=False)
        monkeypatch.chdir(tmp_path)
        yield


@pytest.fixture
def scripted_source():
    return ScriptedLineSource


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call":
        print(f"TEST: {item.name} - {'PASSED' if report.passed else 'FAILED'}")
