from __future__ import annotations

import os

import pytest

from promisemitter.toolkit.tracing import TraceController


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch):
    for key in list(os.environ):
        if key.startswith("PROMISEMITTER_"):
            monkeypatch.delenv(key)
    TraceController.reset_instance()
    yield
    TraceController.reset_instance()
