from typing import Any

import pytest

from orchestrator.model_pool import ModelPool
from tests.fakes import FakeCompletionClient


@pytest.fixture
def make_pool():
    def _make(*candidates: str, **routing_defaults) -> ModelPool:
        return ModelPool.from_candidates(candidates, routing_defaults=routing_defaults)

    return _make


@pytest.fixture
def fake_client_factory():
    def _make(script: dict[str, Any], delay_s: float = 0.0) -> FakeCompletionClient:
        return FakeCompletionClient(script, delay_s=delay_s)

    return _make
