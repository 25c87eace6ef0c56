from __future__ import annotations

from stream_resolver import EndpointRegistry, ServiceClass, URLRewriter

STREAM = "https://proxy.example/videoplayback?itag=251&id=abc"
HOSTED = STREAM + "&host=rr3---sn.googlevideo.com"


def _rewriter(**kwargs) -> URLRewriter:
    registry = EndpointRegistry(
        {ServiceClass.STREAM_PROXY: ["https://a.example", "https://b.example"]}
    )
    return URLRewriter(registry, **kwargs)


def test_unchanged_without_host_parameter() -> None:
    rewriter = _rewriter()
    assert rewriter.proxy(STREAM) == STREAM
    assert rewriter.proxy(rewriter.proxy(STREAM)) == STREAM


def test_enforced_proxy_appends_origin_as_host() -> None:
    rewriter = _rewriter(enforce_proxy=True)
    assert rewriter.proxy(STREAM) == STREAM + "&host=proxy.example"


def test_enforced_proxy_keeps_existing_host() -> None:
    rewriter = _rewriter(enforce_proxy=True)
    assert rewriter.proxy(HOSTED) == HOSTED


def test_enforced_proxy_without_query_starts_one() -> None:
    rewriter = _rewriter(enforce_proxy=True)
    assert rewriter.proxy("https://proxy.example/stream") == (
        "https://proxy.example/stream?host=proxy.example"
    )


def test_host_parameter_bypasses_proxy() -> None:
    rewriter = _rewriter()
    assert rewriter.proxy(HOSTED) == (
        "https://rr3---sn.googlevideo.com/videoplayback?itag=251&id=abc"
        "&host=rr3---sn.googlevideo.com"
    )


def test_custom_instance_is_never_bypassed() -> None:
    rewriter = _rewriter(custom_instance=True)
    assert rewriter.proxy(HOSTED) == HOSTED


def test_proxy_resets_stream_cursor() -> None:
    rewriter = _rewriter()
    rewriter.registry.advance(ServiceClass.STREAM_PROXY)
    rewriter.proxy(STREAM)
    assert rewriter.registry.cursor(ServiceClass.STREAM_PROXY) == 0


def test_listing_links_on_own_origin_use_app_routes() -> None:
    rewriter = _rewriter(link_host="https://ytify.example", page_origin="https://ytify.example")
    assert rewriter.listing_link("/watch?v=dQw4w9WgXcQ") == "https://ytify.example?s=dQw4w9WgXcQ"
    assert rewriter.listing_link("/playlist?list=PLxyz") == "https://ytify.example/list?playlists=PLxyz"
    assert rewriter.listing_link("/playlist/PLxyz") == "https://ytify.example/list?playlists=PLxyz"
    assert rewriter.listing_link("/channel/UC123") == "https://ytify.example/list?channel=UC123"


def test_listing_links_on_foreign_host_are_raw() -> None:
    rewriter = _rewriter(link_host="https://youtube.com", page_origin="https://ytify.example")
    assert rewriter.listing_link("/watch?v=dQw4w9WgXcQ") == "https://youtube.com/watch?v=dQw4w9WgXcQ"
    assert rewriter.listing_link("/playlist?list=PLxyz") == "https://youtube.com/playlist?list=PLxyz"


def test_list_fetch_path() -> None:
    assert URLRewriter.list_fetch_path("/playlist?list=PLxyz") == "/playlists/PLxyz"
    assert URLRewriter.list_fetch_path("/channel/UC123") == "/channel/UC123"
