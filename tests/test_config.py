import pytest

from arc_agents import config


@pytest.mark.parametrize(
    "scheme,host,port,expected",
    [
        ("https", "three.arcprize.org", "443", "https://three.arcprize.org"),
        ("http", "localhost", "80", "http://localhost"),
        ("http", "localhost", "8001", "http://localhost:8001"),
    ],
)
def test_root_url(monkeypatch, scheme, host, port, expected):
    monkeypatch.setenv("SCHEME", scheme)
    monkeypatch.setenv("HOST", host)
    monkeypatch.setenv("PORT", port)
    assert config.root_url() == expected


def test_keys_are_stripped_of_quotes(monkeypatch):
    monkeypatch.setenv("ARC_API_KEY", " 'abc' ")
    assert config.arc_api_key() == "abc"


def test_timeout_falls_back_on_garbage(monkeypatch):
    monkeypatch.setenv("ARC_REQUEST_TIMEOUT", "soon")
    assert config.request_timeout() == config.DEFAULT_TIMEOUT
    monkeypatch.setenv("ARC_REQUEST_TIMEOUT", "30")
    assert config.request_timeout() == 30.0


def test_extra_tags(monkeypatch):
    monkeypatch.setenv("TAGS", "nightly, ,gpt5")
    assert config.extra_tags() == ["nightly", "gpt5"]
