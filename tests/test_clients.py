from __future__ import annotations

import asyncio

import httpx
import pytest

from tezos_previews.core.results import ErrorKind
from tezos_previews.services.external_apis.base import RATE_LIMITED_MESSAGE
from tezos_previews.services.external_apis.objkt import ObjktClient
from tezos_previews.services.external_apis.rate_limit import RateLimiter
from tezos_previews.services.external_apis.schemas import ObjktFa, ObjktGallery
from tezos_previews.services.external_apis.tzkt import TzktClient

from conftest import graphql_query

FXHASH = "KT1KEa8z6vWXDJrVqtMrAeDVzsvxat3kHaCE"
HEN = "KT1RJ6PbjHpwc3M5rw5s2Nbmefwbuwbdxton"


def make_tzkt(settings, handler, limiter=None) -> TzktClient:
    return TzktClient(
        rate_limiter=limiter or RateLimiter(settings.api_rate_limit),
        config=settings,
        transport=httpx.MockTransport(handler),
    )


def make_objkt(settings, handler, limiter=None) -> ObjktClient:
    return ObjktClient(
        rate_limiter=limiter or RateLimiter(settings.api_rate_limit),
        config=settings,
        transport=httpx.MockTransport(handler),
    )


def test_tzkt_token_lookup(test_settings, tzkt_token_payload):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=tzkt_token_payload)

    client = make_tzkt(test_settings, handler)
    result = asyncio.run(client.get_token_info(FXHASH, "12345"))

    assert result.ok
    assert result.data.token.tokenId == "12345"
    assert result.data.token.contract.address == FXHASH

    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/v1/tokens"
    assert request.url.params["contract"] == FXHASH
    assert request.url.params["tokenId"] == "12345"
    assert request.headers["user-agent"] == test_settings.user_agent


def test_tzkt_empty_list_is_not_found(test_settings):
    client = make_tzkt(test_settings, lambda request: httpx.Response(200, json=[]))

    result = asyncio.run(client.get_token_info(FXHASH, "1"))

    assert not result.ok
    assert result.error_kind == ErrorKind.NOT_FOUND
    assert result.error == "Token not found"


def test_tzkt_http_error(test_settings):
    client = make_tzkt(test_settings, lambda request: httpx.Response(500))

    result = asyncio.run(client.get_token_info(FXHASH, "1"))

    assert result.error_kind == ErrorKind.HTTP_ERROR
    assert "HTTP 500" in result.error
    assert result.error.startswith("TZKT API error")


def test_tzkt_timeout_is_transport_error(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client = make_tzkt(test_settings, handler)
    result = asyncio.run(client.get_token_info(FXHASH, "1"))

    assert result.error_kind == ErrorKind.TRANSPORT_ERROR
    assert "timed out" in result.error


def test_tzkt_invalid_json_is_transport_error(test_settings):
    client = make_tzkt(test_settings, lambda request: httpx.Response(200, content=b"<html>"))

    result = asyncio.run(client.get_token_info(FXHASH, "1"))

    assert result.error_kind == ErrorKind.TRANSPORT_ERROR


def test_repeat_call_inside_window_is_rate_limited(test_settings, tzkt_token_payload):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json=tzkt_token_payload)

    client = make_tzkt(test_settings, handler)

    async def twice():
        first = await client.get_token_info(FXHASH, "12345")
        second = await client.get_token_info(FXHASH, "12345")
        other = await client.get_token_info(FXHASH, "1")
        return first, second, other

    first, second, other = asyncio.run(twice())

    assert first.ok
    assert not second.ok
    assert second.error_kind == ErrorKind.RATE_LIMITED
    assert second.error == RATE_LIMITED_MESSAGE
    assert other.ok
    assert len(calls) == 2


def test_tzkt_contract_info(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == f"/v1/contracts/{FXHASH}"
        return httpx.Response(200, json={"address": FXHASH, "alias": "FXHASH GENTK v2", "kind": "asset"})

    result = asyncio.run(make_tzkt(test_settings, handler).get_contract_info(FXHASH))

    assert result.ok
    assert result.data.alias == "FXHASH GENTK v2"


def test_objkt_token_query(test_settings, objkt_token_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.method == "POST"
        assert request.url.path == "/v3/graphql"
        query, variables = graphql_query(request)
        assert "GetToken" in query
        assert variables == {"fa_contract": HEN, "token_id": "42"}
        return httpx.Response(200, json=objkt_token_payload)

    result = asyncio.run(make_objkt(test_settings, handler).get_token_metadata(HEN, "42"))

    assert result.ok
    assert result.data.name == "Sunset Study"
    assert result.data.listings_active[0].price == 5000000
    assert result.data.offers_active == []


def test_objkt_token_not_found(test_settings):
    client = make_objkt(test_settings, lambda request: httpx.Response(200, json={"data": {"token": []}}))

    result = asyncio.run(client.get_token_metadata(HEN, "42"))

    assert result.error_kind == ErrorKind.NOT_FOUND


def test_objkt_graphql_errors_are_transport_errors(test_settings):
    body = {"errors": [{"message": "field 'tokenz' not found"}]}
    client = make_objkt(test_settings, lambda request: httpx.Response(200, json=body))

    result = asyncio.run(client.get_token_metadata(HEN, "42"))

    assert result.error_kind == ErrorKind.TRANSPORT_ERROR
    assert "tokenz" in result.error


def test_resolve_contract_from_path(test_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        query, variables = graphql_query(request)
        assert "GetContractByPath" in query
        assert variables == {"path": "bootloader"}
        return httpx.Response(200, json={"data": {"fa": [{"contract": "KT1VEXkw6rw6pJDP9APGsMneFafArijmM96j", "name": "Bootloader"}]}})

    result = asyncio.run(make_objkt(test_settings, handler).resolve_contract_from_path("bootloader"))

    assert result.ok
    assert result.data == "KT1VEXkw6rw6pJDP9APGsMneFafArijmM96j"


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={"data": {"fa": []}}),
        httpx.Response(503),
    ],
)
def test_unresolved_path_is_not_found(test_settings, response):
    client = make_objkt(test_settings, lambda request: response)

    result = asyncio.run(client.resolve_contract_from_path("nowhere"))

    assert not result.ok
    assert result.error_kind == ErrorKind.NOT_FOUND


def test_collection_info(test_settings, objkt_collection_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        query, variables = graphql_query(request)
        assert "GetCollection(" in query
        assert variables == {"contract": "KT1LjmAdYQCLBjwv4S2oFkEzyHVkomAf5MrW"}
        return httpx.Response(200, json=objkt_collection_payload)

    result = asyncio.run(
        make_objkt(test_settings, handler).get_collection_info("KT1LjmAdYQCLBjwv4S2oFkEzyHVkomAf5MrW")
    )

    assert isinstance(result.data, ObjktFa)
    assert result.data.name == "Versum Items"


def test_gallery_project_lookup(test_settings, objkt_gallery_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        query, variables = graphql_query(request)
        assert "GetProjectByIdOrSlug" in query
        assert variables == {"projectId": "12345"}
        return httpx.Response(200, json=objkt_gallery_payload)

    result = asyncio.run(make_objkt(test_settings, handler).get_collection_by_project("fxhash", "12345"))

    assert isinstance(result.data, ObjktGallery)
    assert len(result.data.sample_tokens) == 1


def test_gallery_without_tokens_is_not_found(test_settings, objkt_gallery_payload):
    objkt_gallery_payload["data"]["gallery"][0]["tokens"] = []
    client = make_objkt(test_settings, lambda request: httpx.Response(200, json=objkt_gallery_payload))

    result = asyncio.run(client.get_collection_by_project("bootloader", "17"))

    assert result.error_kind == ErrorKind.NOT_FOUND
    assert result.error == "No tokens found in gallery"


def test_non_gallery_project_searches_fa_records(test_settings, objkt_collection_payload):
    def handler(request: httpx.Request) -> httpx.Response:
        query, variables = graphql_query(request)
        assert "GetCollectionByProject" in query
        assert variables == {"platform": "versum", "projectId": "3"}
        return httpx.Response(200, json=objkt_collection_payload)

    result = asyncio.run(make_objkt(test_settings, handler).get_collection_by_project("versum", "3"))

    assert isinstance(result.data, ObjktFa)
