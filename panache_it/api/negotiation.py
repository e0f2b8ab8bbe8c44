"""Pick a serializer from the request's Accept header."""

from __future__ import annotations

from panache_it.config import JsonProvider, Settings
from panache_it.serialization import (
    JsonBindingSerializer,
    JsonSerializer,
    Serializer,
    XmlSerializer,
)

XML_MEDIA_TYPES = ("application/xml", "text/xml")

# Preference order when a media range matches several served types
SERVED_MEDIA_TYPES = ("application/json", "application/xml", "text/xml", "text/json")


class NotAcceptableError(Exception):
    """Raised when no serializer produces a media type the client accepts."""

    def __init__(self, accept: str | None) -> None:
        super().__init__(f"No serializer for Accept: {accept!r}")
        self.accept = accept


def parse_accept(header: str | None) -> list[str]:
    """Media ranges ordered by q weight, then by position in the header.

    Ranges with q=0 are dropped; an absent or blank header accepts anything.
    """
    if not header or not header.strip():
        return ["*/*"]
    ranked: list[tuple[float, int, str]] = []
    for position, part in enumerate(header.split(",")):
        media, *params = [token.strip() for token in part.split(";")]
        if not media:
            continue
        weight = 1.0
        for param in params:
            key, _, value = param.partition("=")
            if key.strip().lower() == "q":
                try:
                    weight = float(value)
                except ValueError:
                    weight = 0.0
        if weight > 0:
            ranked.append((-weight, position, media.lower()))
    return [media for _, _, media in sorted(ranked)]


def json_serializer_for(settings: Settings) -> Serializer:
    if settings.json_provider == JsonProvider.DEFAULT:
        return JsonSerializer()
    return JsonBindingSerializer()


def matches(media_range: str, media_type: str) -> bool:
    """True when ``media_type`` falls within ``media_range`` (``*/*``, ``text/*``, exact)."""
    if media_range in ("*/*", "*"):
        return True
    range_type, _, range_subtype = media_range.partition("/")
    served_type, _, served_subtype = media_type.partition("/")
    return range_type == served_type and range_subtype in ("*", served_subtype)


def negotiate(accept: str | None, settings: Settings) -> Serializer:
    for media_range in parse_accept(accept):
        for media_type in SERVED_MEDIA_TYPES:
            if not matches(media_range, media_type):
                continue
            if media_type in XML_MEDIA_TYPES:
                return XmlSerializer()
            return json_serializer_for(settings)
    raise NotAcceptableError(accept)
