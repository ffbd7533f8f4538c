"""Shared pytest fixtures: a scripted upstream and a TestClient wired to it."""

from typing import Iterable, List

import pytest
from fastapi.testclient import TestClient

from fortec_gateway.app import app, get_auth_service, get_pipeline, get_rate_limiter
from fortec_gateway.auth import AuthService, DemoIdentityStore
from fortec_gateway.generate import AttemptPlanner, FallbackPolicy, GenerationPipeline
from fortec_gateway.ratelimit import TieredRateLimiter


class ScriptedUpstream:
    """Replays canned replies (or raises canned errors) in call order."""

    def __init__(self, replies: Iterable = (), probe_result: bool = True):
        self.replies = list(replies)
        self.attempts: List = []
        self.probes: List = []
        self.probe_result = probe_result

    def fetch(self, attempt):
        self.attempts.append(attempt)
        if not self.replies:
            raise AssertionError(f"unexpected upstream call: {attempt.url}")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    def probe(self, url, timeout):
        self.probes.append((url, timeout))
        return self.probe_result

    def close(self):
        pass


def make_pipeline(upstream, **kwargs) -> GenerationPipeline:
    planner = AttemptPlanner(seed_source=lambda: 42)
    return GenerationPipeline(client=upstream, planner=planner, policy=kwargs.pop("policy", FallbackPolicy()), **kwargs)


@pytest.fixture
def upstream() -> ScriptedUpstream:
    return ScriptedUpstream()


@pytest.fixture
def pipeline(upstream) -> GenerationPipeline:
    return make_pipeline(upstream)


@pytest.fixture
def limiter() -> TieredRateLimiter:
    return TieredRateLimiter(default_max=100, tier_limits={"free": 50, "standard": 200, "pro": 500, "premium": 1000}, window_seconds=900)


@pytest.fixture
def test_client(pipeline, limiter):
    """TestClient with a scripted upstream, fresh identity store and limiter."""
    auth = AuthService(DemoIdentityStore())
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_auth_service] = lambda: auth
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def pipeline_factory():
    """Build a pipeline around any upstream, e.g. with a custom FallbackPolicy."""
    return make_pipeline


@pytest.fixture
def upstream_factory():
    return ScriptedUpstream
