from __future__ import annotations

import pytest

from tezos_previews.services.extraction.patterns import (
    CollectionMatch,
    Marketplace,
    detect_collection_links,
    detect_nft_links,
    extract_urls,
    has_nft_links,
    is_contract_address,
)

HEN = "KT1RJ6PbjHpwc3M5rw5s2Nbmefwbuwbdxton"
VERSUM = "KT1LjmAdYQCLBjwv4S2oFkEzyHVkomAf5MrW"
EDITART = "KT1D7Ufx21sz9yDyP4Rs1WBCur9XhaZ9JwNE"


@pytest.mark.parametrize(
    "url, marketplace, contract, token_id",
    [
        ("https://objkt.com/asset/hicetnunc/42", Marketplace.OBJKT, "hicetnunc", "42"),
        (f"https://objkt.com/tokens/{HEN}/7", Marketplace.OBJKT, HEN, "7"),
        ("https://objkt.com/objkt/123", Marketplace.OBJKT, None, "123"),
        ("https://www.fxhash.xyz/gentk/12345", Marketplace.FXHASH, None, "12345"),
        ("https://teia.art/objkt/800", Marketplace.TEIA, None, "800"),
        (f"https://versum.xyz/token/{VERSUM}/3", Marketplace.VERSUM, VERSUM, "3"),
        ("https://bootloader.art/token/99", Marketplace.BOOTLOADER, None, "99"),
        (f"https://www.editart.xyz/token-detail/{EDITART}/5", Marketplace.EDITART, EDITART, "5"),
    ],
)
def test_detects_each_token_url_shape(url, marketplace, contract, token_id):
    matches = detect_nft_links(f"look at this {url} !")

    assert len(matches) == 1
    match = matches[0]
    assert match.marketplace == marketplace
    assert match.contract_address == contract
    assert match.token_id == token_id
    assert match.url == url


def test_match_url_is_exact_substring_including_query():
    text = "gm https://objkt.com/asset/hicetnunc/42?ref=tz1abc and bye"

    [match] = detect_nft_links(text)

    assert match.url == "https://objkt.com/asset/hicetnunc/42?ref=tz1abc"
    assert match.url in text


def test_scheme_and_host_are_case_insensitive():
    [match] = detect_nft_links("OBJKT.COM/asset/hicetnunc/42")

    assert match.marketplace == Marketplace.OBJKT
    assert match.token_id == "42"


def test_empty_and_plain_text_have_no_matches():
    assert detect_nft_links("") == []
    assert detect_nft_links("no links here, just vibes") == []
    assert detect_collection_links("") == []


def test_each_pattern_contributes_only_its_first_occurrence():
    text = "https://objkt.com/asset/hicetnunc/1 https://objkt.com/asset/hicetnunc/2"

    matches = detect_nft_links(text)

    assert [m.token_id for m in matches] == ["1"]


def test_links_from_several_marketplaces_are_all_found():
    text = "https://objkt.com/asset/hicetnunc/1 and https://www.fxhash.xyz/gentk/2"

    matches = detect_nft_links(text)

    assert [(m.marketplace, m.token_id) for m in matches] == [
        (Marketplace.OBJKT, "1"),
        (Marketplace.FXHASH, "2"),
    ]


def test_editart_rejects_non_base58_contract():
    bad_contract = "KT1" + "l" * 33

    assert detect_nft_links(f"https://editart.xyz/token-detail/{bad_contract}/1") == []


@pytest.mark.parametrize(
    "url, marketplace, contract, project_id",
    [
        ("https://objkt.com/collections/fxhash/projects/123", Marketplace.OBJKT, "fxhash", "123"),
        ("https://objkt.com/collections/hicetnunc", Marketplace.OBJKT, "hicetnunc", None),
        (f"https://objkt.com/collections/{VERSUM}", Marketplace.OBJKT, VERSUM, None),
        ("https://www.fxhash.xyz/generative/12345", Marketplace.FXHASH, None, "12345"),
        ("https://www.fxhash.xyz/project/generative-dreams", Marketplace.FXHASH, None, "generative-dreams"),
        ("https://bootloader.art/generator/17", Marketplace.BOOTLOADER, None, "17"),
        (f"https://www.editart.xyz/series/{EDITART}", Marketplace.EDITART, EDITART, None),
    ],
)
def test_detects_each_collection_url_shape(url, marketplace, contract, project_id):
    matches = detect_collection_links(f"{url} is great")

    assert len(matches) == 1
    match = matches[0]
    assert match.marketplace == marketplace
    assert match.contract_address == contract
    assert match.project_id == project_id
    assert match.url == url


def test_project_link_is_not_also_reported_as_plain_collection():
    matches = detect_collection_links("https://objkt.com/collections/fxhash/projects/123")

    assert len(matches) == 1
    assert matches[0].project_id == "123"


def test_collection_path_followed_by_subpage_keeps_whole_segment():
    [match] = detect_collection_links(f"https://objkt.com/collections/{VERSUM}/tokens")

    assert match.contract_address == VERSUM
    assert match.url == f"https://objkt.com/collections/{VERSUM}"


def test_collection_identifier_and_platform():
    objkt_project = CollectionMatch(Marketplace.OBJKT, url="u", contract_address="fxhash", project_id="1")
    fxhash_project = CollectionMatch(Marketplace.FXHASH, url="u", project_id="1")
    contract_only = CollectionMatch(Marketplace.EDITART, url="u", contract_address=EDITART)

    assert objkt_project.identifier == "fxhash"
    assert objkt_project.platform == "fxhash"
    assert fxhash_project.identifier == "1"
    assert fxhash_project.platform == "fxhash"
    assert contract_only.identifier == EDITART
    assert CollectionMatch(Marketplace.BOOTLOADER, url="u").identifier == "unknown"


def test_contract_project_path_keeps_its_case():
    [match] = detect_collection_links(f"https://objkt.com/collections/{HEN}/projects/5")

    assert match.project_id == "5"
    assert match.platform == HEN


def test_is_contract_address():
    assert is_contract_address(HEN)
    assert not is_contract_address("hicetnunc")
    assert not is_contract_address("")
    assert not is_contract_address(None)
    assert not is_contract_address(HEN + "x")
    assert not is_contract_address("KT1" + "0" * 33)
    assert not is_contract_address("kt1" + HEN[3:])
    assert not is_contract_address(HEN + "\n")


def test_has_nft_links_and_extract_urls():
    text = "see https://teia.art/objkt/1 and http://example.com/page"

    assert has_nft_links(text)
    assert not has_nft_links("https://example.com")
    assert extract_urls(text) == ["https://teia.art/objkt/1", "http://example.com/page"]
