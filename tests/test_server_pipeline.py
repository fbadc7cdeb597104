import pytest

from carryall.protocol.envelope import ResponseEnvelope
from carryall.server.pipeline import run_stage_pipeline


@pytest.mark.asyncio
async def test_run_stage_pipeline_returns_first_envelope():
    calls = []

    async def _s1():
        calls.append("s1")
        return None

    def _s2():
        calls.append("s2")
        return ResponseEnvelope.for_result(1)

    async def _s3():
        calls.append("s3")
        return ResponseEnvelope.for_result(2)

    result = await run_stage_pipeline((_s1, _s2, _s3))
    assert result == ResponseEnvelope.for_result(1)
    assert calls == ["s1", "s2"]


@pytest.mark.asyncio
async def test_run_stage_pipeline_returns_none_when_no_stage_answers():
    async def _none1():
        return None

    def _none2():
        return None

    assert await run_stage_pipeline((_none1, _none2)) is None
