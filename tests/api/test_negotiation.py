"""Tests for Accept header negotiation."""

import pytest

from panache_it.api.negotiation import NotAcceptableError, matches, negotiate, parse_accept
from panache_it.config import Environment, JsonProvider, Settings
from panache_it.serialization import JsonBindingSerializer, JsonSerializer, XmlSerializer


@pytest.fixture
def binding_settings() -> Settings:
    return Settings(environment=Environment.TEST, json_provider=JsonProvider.BINDING)


@pytest.fixture
def default_settings() -> Settings:
    return Settings(environment=Environment.TEST, json_provider=JsonProvider.DEFAULT)


class TestParseAccept:
    def test_missing_header_accepts_anything(self):
        assert parse_accept(None) == ["*/*"]
        assert parse_accept("   ") == ["*/*"]

    def test_orders_by_weight_then_position(self):
        header = "text/xml;q=0.5, application/json, application/xml;q=0.9"
        assert parse_accept(header) == ["application/json", "application/xml", "text/xml"]

    def test_equal_weights_keep_header_order(self):
        assert parse_accept("application/xml, application/json") == [
            "application/xml",
            "application/json",
        ]

    def test_zero_weight_and_malformed_weight_are_dropped(self):
        assert parse_accept("application/xml;q=0, application/json;q=abc, text/json") == [
            "text/json"
        ]

    def test_media_types_are_lowercased(self):
        assert parse_accept("Application/JSON") == ["application/json"]


class TestNegotiate:
    @pytest.mark.parametrize("accept", ["application/json", "text/json", "*/*", "application/*", None])
    def test_json_media_types(self, accept, binding_settings: Settings):
        assert isinstance(negotiate(accept, binding_settings), JsonBindingSerializer)

    @pytest.mark.parametrize("accept", ["application/xml", "text/xml"])
    def test_xml_media_types(self, accept, binding_settings: Settings):
        assert isinstance(negotiate(accept, binding_settings), XmlSerializer)

    def test_default_json_provider(self, default_settings: Settings):
        assert isinstance(negotiate("application/json", default_settings), JsonSerializer)

    def test_preferred_type_wins(self, binding_settings: Settings):
        serializer = negotiate("application/json;q=0.1, application/xml", binding_settings)
        assert isinstance(serializer, XmlSerializer)

    def test_text_wildcard_picks_xml(self, binding_settings: Settings):
        assert isinstance(negotiate("text/*", binding_settings), XmlSerializer)

    def test_wildcard_with_lower_weight_than_exact_type(self, binding_settings: Settings):
        serializer = negotiate("text/*;q=0.2, application/json", binding_settings)
        assert isinstance(serializer, JsonBindingSerializer)

    def test_unsupported_wildcard(self, binding_settings: Settings):
        with pytest.raises(NotAcceptableError):
            negotiate("image/*", binding_settings)

    def test_unsupported_type(self, binding_settings: Settings):
        with pytest.raises(NotAcceptableError) as exc_info:
            negotiate("image/png", binding_settings)
        assert exc_info.value.accept == "image/png"


@pytest.mark.parametrize(
    ("media_range", "media_type", "expected"),
    [
        ("*/*", "text/xml", True),
        ("text/*", "text/xml", True),
        ("text/*", "application/xml", False),
        ("application/xml", "application/xml", True),
        ("application/xml", "application/json", False),
    ],
)
def test_matches(media_range: str, media_type: str, expected: bool):
    assert matches(media_range, media_type) is expected
