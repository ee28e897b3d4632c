"""
Log payload helper tests.
"""

from pmcopilot.platform.observability.request_logging import sha256_text, summarize_for_log, text_digest


def test_text_digest():
    """Digest carries length and hash, preview only on request"""
    assert text_digest("abc") == {"chars": 3, "sha256": sha256_text("abc")}
    assert text_digest("abcdef", preview_chars=2)["preview"] == "ab"


def test_long_strings_are_digested():
    """Strings over the limit are replaced by a digest"""
    out = summarize_for_log({"problem": "x" * 1000, "title": "short"}, max_str=100)
    assert out["title"] == "short"
    assert out["problem"]["chars"] == 1000
    assert out["problem"]["preview"] == "x" * 25


def test_long_lists_are_truncated():
    """Lists keep their head and count what was dropped"""
    out = summarize_for_log(list(range(10)), max_items=3)
    assert out == [0, 1, 2, {"dropped": 7}]


def test_scalars_pass_through():
    """Numbers, booleans and None are kept"""
    assert summarize_for_log({"a": 1, "b": True, "c": None}) == {"a": 1, "b": True, "c": None}
