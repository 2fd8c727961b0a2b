"""
Tests for URL and parameter helpers.
"""

from anistream.utils.helpers import default_if_empty, extract_slug, format_url


def test_default_if_empty():
    assert default_if_empty(None) == 1
    assert default_if_empty("") == 1
    assert default_if_empty("4") == "4"
    assert default_if_empty("abc") == "abc"


def test_format_url_and_slug():
    assert format_url("/category/naruto", "https://anitaku.to") == "https://anitaku.to/category/naruto"
    assert format_url("//embed.test/v/1", "https://anitaku.to") == "https://embed.test/v/1"
    assert extract_slug("/category/naruto") == "naruto"
    assert extract_slug("https://anitaku.to/naruto-episode-1/") == "naruto-episode-1"
