import pytest

from postgen.services.errors import InvalidInput, MalformedGenerationResponse, QuotaExceeded, RateLimited
from postgen.services.generation_service import GenerationService
from postgen.services.quota_service import QuotaEnforcer


@pytest.mark.asyncio
async def test_end_to_end_humorous(session, session_id, gemini_client, fake_gemini):
    svc = GenerationService(session, gemini_client, max_free=3)

    result = await svc.generate(topic="AI in education", tone="humorous", session_id=session_id)

    assert result.content == "Hello #AI"
    assert result.image_prompt == "a city skyline"
    assert result.usage.snapshot() == {
        "generation_count": 1,
        "remaining": 2,
        "is_authenticated": False,
    }
    assert len(fake_gemini.requests) == 1


@pytest.mark.asyncio
async def test_invalid_topic_never_reaches_quota(session, session_id, gemini_client, fake_gemini):
    svc = GenerationService(session, gemini_client, max_free=3)

    with pytest.raises(InvalidInput):
        await svc.generate(topic="ab", session_id=session_id)

    usage = await QuotaEnforcer(session).get_usage(session_id, None, 3)
    assert usage.generation_count == 0
    assert fake_gemini.requests == []


@pytest.mark.asyncio
async def test_quota_exceeded_skips_upstream(session, session_id, gemini_client, fake_gemini):
    svc = GenerationService(session, gemini_client, max_free=1)
    await svc.generate(topic="First post", session_id=session_id)

    with pytest.raises(QuotaExceeded) as exc:
        await svc.generate(topic="Second post", session_id=session_id)

    assert exc.value.generation_count == 1
    assert exc.value.status_code == 403
    assert len(fake_gemini.requests) == 1


@pytest.mark.asyncio
async def test_rate_limited_refunds_slot(session, session_id, gemini_client, fake_gemini):
    fake_gemini.status_code = 429
    svc = GenerationService(session, gemini_client, max_free=3, refund_on_failure=True)

    with pytest.raises(RateLimited):
        await svc.generate(topic="AI in education", session_id=session_id)

    usage = await QuotaEnforcer(session).get_usage(session_id, None, 3)
    assert usage.generation_count == 0


@pytest.mark.asyncio
async def test_rate_limited_without_refund_consumes_slot(session, session_id, gemini_client, fake_gemini):
    fake_gemini.status_code = 429
    svc = GenerationService(session, gemini_client, max_free=3, refund_on_failure=False)

    with pytest.raises(RateLimited):
        await svc.generate(topic="AI in education", session_id=session_id)

    usage = await QuotaEnforcer(session).get_usage(session_id, None, 3)
    assert usage.generation_count == 1


@pytest.mark.asyncio
async def test_malformed_reply_refunds_slot(session, session_id, gemini_client, fake_gemini):
    fake_gemini.text = "I would rather not."
    svc = GenerationService(session, gemini_client, max_free=3)

    with pytest.raises(MalformedGenerationResponse):
        await svc.generate(topic="AI in education", session_id=session_id)

    usage = await QuotaEnforcer(session).get_usage(session_id, None, 3)
    assert usage.generation_count == 0


@pytest.mark.asyncio
async def test_authenticated_generation(session, session_id, gemini_client):
    svc = GenerationService(session, gemini_client, max_free=0)

    result = await svc.generate(topic="Leadership", session_id=session_id, user_id="user-123")

    assert result.usage.is_authenticated is True
    assert result.usage.remaining is None


@pytest.mark.asyncio
async def test_failed_release_keeps_upstream_error(session, session_id, gemini_client, fake_gemini):
    fake_gemini.status_code = 429
    svc = GenerationService(session, gemini_client, max_free=3)

    async def broken_release(*args, **kwargs):
        raise RuntimeError("database went away")

    svc.quota.release = broken_release

    with pytest.raises(RateLimited):
        await svc.generate(topic="AI in education", session_id=session_id)
