from __future__ import annotations

from pathlib import Path

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from territory_rules.common.constants import FALLBACK_AREAS
from territory_rules.common.errors import SourceError
from territory_rules.common.http import HttpClient, HttpRequestError, RetryConfig
from territory_rules.pipeline.compiler import load_rule_set
from territory_rules.pipeline.sources import is_url, load_area_manifest, read_territory_text


class FakeHttpClient:
    def __init__(self, text: str = "", payload=None, error: HttpRequestError | None = None):
        self.text = text
        self.payload = payload
        self.error = error
        self.calls: list[str] = []

    def get_text(self, url: str, **_kwargs) -> str:
        self.calls.append(url)
        return self.text

    def get_json(self, url: str, **_kwargs):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.payload

    def close(self):
        return None


def test_is_url():
    assert is_url("https://example.com/territories.csv")
    assert not is_url("data/territories.csv")


def test_read_territory_text_from_file_and_url():
    assert read_territory_text(Path("tests/fixtures/scenario.csv")).startswith("territory_id,")
    client = FakeHttpClient(text="id,postcodes\n")
    assert read_territory_text("https://example.com/territories.csv", client) == "id,postcodes\n"
    assert client.calls == ["https://example.com/territories.csv"]


def test_read_territory_text_missing_file_raises(tmp_path: Path):
    with pytest.raises(SourceError):
        read_territory_text(tmp_path / "missing.csv")


def test_load_area_manifest_from_file():
    assert load_area_manifest(Path("tests/fixtures/areas_index.json")) == ["EC", "W", "N"]


def test_load_area_manifest_falls_back_when_missing_or_empty(tmp_path: Path):
    assert load_area_manifest(tmp_path / "_index.json") == list(FALLBACK_AREAS)
    empty = tmp_path / "empty.json"
    empty.write_text("[]", encoding="utf-8")
    assert load_area_manifest(empty, fallback=["W"]) == ["W"]


def test_load_area_manifest_treats_404_as_missing():
    client = FakeHttpClient(error=HttpRequestError("HTTP status: 404", status_code=404))
    assert load_area_manifest("https://example.com/postcodes/_index.json", client) == list(FALLBACK_AREAS)


def test_load_area_manifest_propagates_other_http_errors():
    client = FakeHttpClient(error=HttpRequestError("HTTP status: 403", status_code=403))
    with pytest.raises(HttpRequestError):
        load_area_manifest("https://example.com/postcodes/_index.json", client)


def test_read_territory_text_over_http_loads_bom_table_without_charset(monkeypatch):
    response = requests.Response()
    response.status_code = 200
    response.headers = CaseInsensitiveDict({"Content-Type": "text/csv"})
    response.encoding = "ISO-8859-1"
    response._content = "\ufeffterritory_id,postcode_prefixes,income\nT1,W1+,£45000\n".encode("utf-8")

    client = HttpClient(retry=RetryConfig(max_attempts=1))
    monkeypatch.setattr(client.session, "request", lambda **_kwargs: response)

    rule_set = load_rule_set(read_territory_text("https://example.com/territories.csv", client))

    assert rule_set.territory("T1").income == "£45000"
    assert rule_set.letter_rules[0].prefix == "W1"
