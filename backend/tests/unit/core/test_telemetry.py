"""Unit tests for the tracing helpers."""

import pytest

from common.core.otel_axiom_exporter import _span_attributes, trace_span


class Owner:
    def __init__(self, actor_id=None, plan_id=None):
        self.actor_id = actor_id
        self.plan_id = plan_id

    @trace_span
    def compute(self, value):
        return value * 2

    @trace_span
    async def fetch(self, value):
        return value + 1


class TestSpanAttributes:
    def test_reads_ids_from_instance(self):
        attributes = _span_attributes((Owner("actor-1", "plan-a"),), {})

        assert attributes == {"actor.id": "actor-1", "billing.plan_id": "plan-a"}

    def test_keyword_argument_wins(self):
        attributes = _span_attributes((Owner("actor-1"),), {"actor_id": "actor-2"})

        assert attributes == {"actor.id": "actor-2"}

    def test_ignores_missing_and_non_string_values(self):
        assert _span_attributes((), {}) == {}
        assert _span_attributes((Owner(actor_id=42),), {}) == {}


class TestTraceSpan:
    def test_sync_method_returns_result(self):
        assert Owner("actor-1").compute(21) == 42

    @pytest.mark.asyncio
    async def test_async_method_returns_result(self):
        assert await Owner("actor-1").fetch(41) == 42

    def test_preserves_function_name(self):
        assert Owner.compute.__name__ == "compute"
