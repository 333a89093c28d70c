from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from tezos_previews.core.config import Settings

DATA_DIR = Path(__file__).parent / "data"


def load_payload(name: str) -> Any:
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


def graphql_query(request: httpx.Request) -> tuple[str, dict]:
    body = json.loads(request.content)
    return body["query"], body.get("variables") or {}


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        telegram_api_id=12345,
        telegram_api_hash="hash",
        telegram_bot_token="123:token",
        api_rate_limit=60,
        referral_address="",
    )


@pytest.fixture
def objkt_token_payload() -> dict:
    return load_payload("objkt_token.json")


@pytest.fixture
def objkt_token_row(objkt_token_payload) -> dict:
    return copy.deepcopy(objkt_token_payload["data"]["token"][0])


@pytest.fixture
def tzkt_token_payload() -> list:
    return load_payload("tzkt_token.json")


@pytest.fixture
def objkt_gallery_payload() -> dict:
    return load_payload("objkt_gallery.json")


@pytest.fixture
def objkt_collection_payload() -> dict:
    return load_payload("objkt_collection.json")

