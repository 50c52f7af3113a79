"""Unit tests for HerokuClient.

Tests the Platform API add-on client with a mocked httpx transport.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from addon_provisioner.providers.heroku_client import (
    HerokuAPIError,
    HerokuClient,
    HerokuTimeoutError,
    is_not_found_error,
)

ADDON_PAYLOAD = {
    "id": "01234567-89ab-cdef-0123-456789abcdef",
    "name": "cache1",
    "state": "provisioning",
    "plan": {"name": "heroku-redis:mini"},
    "app": {"name": "myapp"},
    "provider_id": "resource123@heroku.com",
    "config_vars": ["REDIS_URL"],
}


def _make_client(**kwargs) -> HerokuClient:
    return HerokuClient(
        api_key="test-api-key",
        base_url="https://api.heroku.com",
        **kwargs,
    )


def _mock_http(*responses: httpx.Response) -> AsyncMock:
    mock_http = AsyncMock()
    if len(responses) == 1:
        mock_http.request = AsyncMock(return_value=responses[0])
    else:
        mock_http.request = AsyncMock(side_effect=list(responses))
    return mock_http


# ── Test: create_addon sends correct HTTP request ────────────────


@pytest.mark.asyncio
async def test_create_addon_sends_correct_http_request():
    mock_http = _mock_http(httpx.Response(201, json=ADDON_PAYLOAD))

    client = _make_client(http_client=mock_http, headers={"X-Trace": "abc"})
    result = await client.create_addon(
        "myapp",
        "heroku-redis",
        name="cache1",
        config={"maxmemory_policy": "noeviction"},
        confirm="myapp",
    )

    assert result["id"] == ADDON_PAYLOAD["id"]

    call = mock_http.request.call_args
    assert call.args[0] == "POST"
    assert call.args[1] == "https://api.heroku.com/apps/myapp/addons"
    headers = call.kwargs["headers"]
    assert headers["Authorization"] == "Bearer test-api-key"
    assert headers["Accept"] == "application/vnd.heroku+json; version=3"
    assert headers["X-Trace"] == "abc"
    assert call.kwargs["json"] == {
        "plan": "heroku-redis",
        "name": "cache1",
        "config": {"maxmemory_policy": "noeviction"},
        "confirm": "myapp",
    }


@pytest.mark.asyncio
async def test_create_addon_omits_unset_optionals():
    mock_http = _mock_http(httpx.Response(201, json=ADDON_PAYLOAD))

    client = _make_client(http_client=mock_http)
    await client.create_addon("myapp", "heroku-redis")

    assert mock_http.request.call_args.kwargs["json"] == {"plan": "heroku-redis"}


# ── Test: lookup, update, delete paths ───────────────────────────


@pytest.mark.asyncio
async def test_get_addon_and_get_addon_by_app_paths():
    mock_http = _mock_http(
        httpx.Response(200, json=ADDON_PAYLOAD),
        httpx.Response(200, json=ADDON_PAYLOAD),
    )
    client = _make_client(http_client=mock_http)

    await client.get_addon("abc")
    await client.get_addon_by_app("myapp", "abc")

    first, second = mock_http.request.call_args_list
    assert first.args == ("GET", "https://api.heroku.com/addons/abc")
    assert second.args == ("GET", "https://api.heroku.com/apps/myapp/addons/abc")


@pytest.mark.asyncio
async def test_update_addon_sends_only_plan():
    mock_http = _mock_http(httpx.Response(200, json={**ADDON_PAYLOAD, "id": "new-id"}))
    client = _make_client(http_client=mock_http)

    result = await client.update_addon("myapp", "abc", plan="heroku-redis:premium-0")

    assert result["id"] == "new-id"
    call = mock_http.request.call_args
    assert call.args == ("PATCH", "https://api.heroku.com/apps/myapp/addons/abc")
    assert call.kwargs["json"] == {"plan": "heroku-redis:premium-0"}


@pytest.mark.asyncio
async def test_delete_addon_sends_delete_request():
    mock_http = _mock_http(httpx.Response(200, json={**ADDON_PAYLOAD, "state": "deprovisioned"}))
    client = _make_client(http_client=mock_http)

    await client.delete_addon("myapp", "abc")

    call = mock_http.request.call_args
    assert call.args == ("DELETE", "https://api.heroku.com/apps/myapp/addons/abc")
    assert call.kwargs["json"] is None


@pytest.mark.asyncio
async def test_empty_body_returns_empty_dict():
    client = _make_client(http_client=_mock_http(httpx.Response(204)))
    assert await client.delete_addon("myapp", "abc") == {}


# ── Test: structured errors ──────────────────────────────────────


@pytest.mark.asyncio
async def test_not_found_payload_sets_error_id():
    mock_http = _mock_http(
        httpx.Response(
            404,
            json={"id": "not_found", "message": "Couldn't find that add-on."},
        )
    )
    client = _make_client(http_client=mock_http)

    with pytest.raises(HerokuAPIError) as exc_info:
        await client.get_addon("missing")

    err = exc_info.value
    assert err.status_code == 404
    assert err.error_id == "not_found"
    assert err.message == "Couldn't find that add-on."
    assert err.url == "https://api.heroku.com/addons/missing"
    assert is_not_found_error(err)


@pytest.mark.asyncio
async def test_plain_text_error_has_no_error_id():
    client = _make_client(
        http_client=_mock_http(httpx.Response(404, text="gone")),
    )

    with pytest.raises(HerokuAPIError) as exc_info:
        await client.get_addon("missing")

    assert exc_info.value.error_id is None
    assert not is_not_found_error(exc_info.value)


@pytest.mark.asyncio
async def test_non_retryable_status_not_retried():
    mock_http = _mock_http(
        httpx.Response(422, json={"id": "invalid_params", "message": "Plan is invalid"})
    )
    client = _make_client(http_client=mock_http, max_retries=3)

    with pytest.raises(HerokuAPIError) as exc_info:
        await client.create_addon("myapp", "nope")

    assert exc_info.value.error_id == "invalid_params"
    assert mock_http.request.call_count == 1


# ── Test: retries ────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_retry_on_429_respects_retry_after():
    mock_http = _mock_http(
        httpx.Response(429, text="Too Many Requests", headers={"Retry-After": "0.5"}),
        httpx.Response(200, json=ADDON_PAYLOAD),
    )

    with patch("addon_provisioner.providers.heroku_client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        client = _make_client(http_client=mock_http, max_retries=2)
        result = await client.get_addon("abc")

    assert result["name"] == "cache1"
    assert mock_http.request.call_count == 2
    mock_sleep.assert_called_once_with(0.5)


@pytest.mark.asyncio
async def test_retries_exhausted_returns_last_error():
    mock_http = _mock_http(httpx.Response(503, text="Service Unavailable"))

    with patch("addon_provisioner.providers.heroku_client.asyncio.sleep", new_callable=AsyncMock):
        client = _make_client(http_client=mock_http, max_retries=2)

        with pytest.raises(HerokuAPIError) as exc_info:
            await client.get_addon("abc")

    assert exc_info.value.status_code == 503
    assert mock_http.request.call_count == 3


@pytest.mark.asyncio
async def test_timeout_raises_heroku_timeout_error():
    mock_http = AsyncMock()
    mock_http.request = AsyncMock(side_effect=httpx.TimeoutException("read timeout"))

    with patch("addon_provisioner.providers.heroku_client.asyncio.sleep", new_callable=AsyncMock):
        client = _make_client(http_client=mock_http, max_retries=1)

        with pytest.raises(HerokuTimeoutError):
            await client.get_addon("slow")

    assert mock_http.request.call_count == 2


# ── Test: writes are sent once ───────────────────────────────


@pytest.mark.asyncio
async def test_create_timeout_is_not_resent():
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if len(methods) == 1:
            raise httpx.ReadTimeout("read timeout", request=request)
        return httpx.Response(201, json=ADDON_PAYLOAD)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
        client = _make_client(http_client=http, max_retries=3, base_delay=0)

        with pytest.raises(HerokuTimeoutError):
            await client.create_addon("myapp", "heroku-redis", confirm="myapp")

    assert methods == ["POST"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "call",
    [
        lambda c: c.create_addon("myapp", "heroku-redis"),
        lambda c: c.update_addon("myapp", "abc", plan="heroku-redis:premium-0"),
        lambda c: c.delete_addon("myapp", "abc"),
    ],
    ids=["create", "update", "delete"],
)
async def test_write_requests_not_retried_on_server_error(call):
    mock_http = _mock_http(
        httpx.Response(503, text="Service Unavailable"),
        httpx.Response(200, json=ADDON_PAYLOAD),
    )

    with patch("addon_provisioner.providers.heroku_client.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        client = _make_client(http_client=mock_http, max_retries=3)

        with pytest.raises(HerokuAPIError) as exc_info:
            await call(client)

    assert exc_info.value.status_code == 503
    assert mock_http.request.call_count == 1
    mock_sleep.assert_not_called()


# ── Test: not-found predicate ────────────────────────────────────


def test_not_found_predicate_walks_cause_chain():
    inner = HerokuAPIError(404, "gone", error_id="not_found")
    try:
        try:
            raise inner
        except HerokuAPIError as exc:
            raise RuntimeError("wrapped") from exc
    except RuntimeError as outer:
        assert is_not_found_error(outer)


def test_not_found_predicate_ignores_status_code():
    assert not is_not_found_error(HerokuAPIError(404, "gone"))
    assert not is_not_found_error(HerokuAPIError(403, "forbidden", error_id="forbidden"))
    assert not is_not_found_error(ValueError("not_found"))
    assert not is_not_found_error(None)


def test_api_key_required():
    with pytest.raises(ValueError, match="api_key"):
        HerokuClient(api_key="")
