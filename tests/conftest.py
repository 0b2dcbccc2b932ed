import io
import os
from typing import Any

import pytest

from lox.lox_session import LoxSession

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


class Run:
    """Result of running a program in a fresh session."""

    def __init__(self, source: str) -> None:
        self.out = io.StringIO()
        self.err = io.StringIO()
        self.session = LoxSession(out=self.out, err=self.err)
        self.ok = self.session.run(source)

    @property
    def lines(self) -> list[str]:
        return self.out.getvalue().splitlines()

    @property
    def errors(self) -> list[str]:
        return self.session.reporter.messages()


@pytest.fixture
def run_lox() -> Any:
    return Run
