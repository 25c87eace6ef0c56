from __future__ import annotations

import pytest

from stream_resolver import EndpointOutOfRangeError, EndpointRegistry, ServiceClass

PIPED = ["https://piped-a.example", "https://piped-b.example/"]
INVIDIOUS = ["https://inv-a.example"]


def _registry(hls: str | None = "https://hls.example") -> EndpointRegistry:
    return EndpointRegistry(
        {ServiceClass.STREAM_PROXY: PIPED, ServiceClass.PLAYLIST_PROXY: INVIDIOUS},
        hls_mirror=hls,
    )


def test_current_starts_at_most_preferred() -> None:
    registry = _registry()
    assert registry.current(ServiceClass.STREAM_PROXY).url == "https://piped-a.example"
    assert registry.cursor(ServiceClass.STREAM_PROXY) == 0


def test_stream_proxy_list_ends_with_hls_mirror() -> None:
    registry = _registry()
    urls = [e.url for e in registry.endpoints(ServiceClass.STREAM_PROXY)]
    assert urls == ["https://piped-a.example", "https://piped-b.example", "https://hls.example"]
    assert [e.url for e in registry.endpoints(ServiceClass.PLAYLIST_PROXY)] == INVIDIOUS


def test_advance_stops_at_end_of_list() -> None:
    registry = _registry()
    assert registry.advance(ServiceClass.STREAM_PROXY) is True
    assert registry.advance(ServiceClass.STREAM_PROXY) is True
    assert registry.current(ServiceClass.STREAM_PROXY).url == "https://hls.example"
    assert registry.advance(ServiceClass.STREAM_PROXY) is False
    assert registry.cursor(ServiceClass.STREAM_PROXY) == 2


def test_cursors_are_independent_per_class() -> None:
    registry = _registry()
    registry.advance(ServiceClass.STREAM_PROXY)
    assert registry.cursor(ServiceClass.PLAYLIST_PROXY) == 0
    assert registry.advance(ServiceClass.PLAYLIST_PROXY) is False


def test_reset_returns_to_first_mirror() -> None:
    registry = _registry()
    registry.advance(ServiceClass.STREAM_PROXY)
    registry.reset(ServiceClass.STREAM_PROXY)
    assert registry.current(ServiceClass.STREAM_PROXY).url == "https://piped-a.example"


def test_current_on_empty_list_raises() -> None:
    registry = EndpointRegistry()
    with pytest.raises(EndpointOutOfRangeError):
        registry.current(ServiceClass.PLAYLIST_PROXY)
    assert registry.advance(ServiceClass.PLAYLIST_PROXY) is False


def test_endpoint_at_explicit_index() -> None:
    registry = _registry()
    assert registry.endpoint_at(ServiceClass.STREAM_PROXY, 1).url == "https://piped-b.example"
    with pytest.raises(EndpointOutOfRangeError):
        registry.endpoint_at(ServiceClass.STREAM_PROXY, 3)


def test_load_file_appends_mirrors(tmp_path) -> None:
    mirror_file = tmp_path / "mirrors.txt"
    mirror_file.write_text(
        "# comment\n"
        "\n"
        "stream_proxy https://piped-c.example\n"
        "playlist_proxy https://inv-b.example\n"
        "bogus_class https://nope.example\n"
        "not a valid line\n",
        encoding="utf-8",
    )
    registry = _registry(hls=None)

    assert registry.load_file(str(mirror_file)) == 2
    assert [e.url for e in registry.endpoints(ServiceClass.STREAM_PROXY)][-1] == "https://piped-c.example"
    assert [e.url for e in registry.endpoints(ServiceClass.PLAYLIST_PROXY)] == [
        "https://inv-a.example",
        "https://inv-b.example",
    ]


def test_load_missing_file_loads_nothing(tmp_path) -> None:
    registry = EndpointRegistry()
    assert registry.load_file(str(tmp_path / "missing.txt")) == 0


def test_initialize_returns_singleton() -> None:
    first = EndpointRegistry.initialize({ServiceClass.STREAM_PROXY: PIPED})
    second = EndpointRegistry.initialize({ServiceClass.STREAM_PROXY: ["https://other.example"]})
    assert first is second
    assert EndpointRegistry.get_instance() is first
