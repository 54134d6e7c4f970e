from core.normalizer import NormalizedResult, normalize


def test_normalize_uses_link_field() -> None:
    result = normalize({"title": "A", "link": "http://iptv.example/a"})

    assert result == NormalizedResult(title="A", link="http://iptv.example/a")


def test_normalize_falls_back_to_url_field() -> None:
    result = normalize({"title": "B", "url": "http://m3u.example/b"})

    assert result.link == "http://m3u.example/b"


def test_normalize_prefers_link_over_url() -> None:
    result = normalize({"title": "C", "link": "http://a.example", "url": "http://b.example"})

    assert result.link == "http://a.example"


def test_normalize_title_falls_back_to_link() -> None:
    result = normalize({"url": "http://m3u.example/list"})

    assert result.title == "http://m3u.example/list"


def test_normalize_missing_link_yields_empty_string() -> None:
    result = normalize({"title": "sin link"})

    assert result == NormalizedResult(title="sin link", link="")


def test_normalize_ignores_non_string_values() -> None:
    result = normalize({"title": None, "link": 42, "url": "http://iptv.example"})

    assert result.link == "http://iptv.example"
    assert result.title == "http://iptv.example"


def test_normalize_non_mapping_never_fails() -> None:
    assert normalize(None) == NormalizedResult(title="", link="")
    assert normalize(["not", "a", "dict"]) == NormalizedResult(title="", link="")
