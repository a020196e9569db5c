"""
Unit tests for the flat key codec.
"""

from service_oauth.app.storage.keys import SEPARATOR, encode_key, join_key, split_key


class TestKeyCodec:
    """Test cases for join/split/encode."""

    def test_join_uses_unit_separator(self):
        assert SEPARATOR == "\x1f"
        assert join_key(["oauth:code", "abc"]) == "oauth:code\x1fabc"

    def test_split_inverts_join(self):
        segments = ["oauth:refresh", "user:alice", "tok-123"]
        assert split_key(join_key(segments)) == segments

    def test_encode_strips_separator(self):
        assert encode_key(["oauth:code", f"ab{SEPARATOR}c"]) == ["oauth:code", "abc"]

    def test_encode_leaves_clean_segments_untouched(self):
        segments = ["oauth:refresh", "alice", "token"]
        assert encode_key(segments) == segments

    def test_encode_then_join_round_trips_after_sanitizing(self):
        encoded = encode_key(["oauth:code", f"x{SEPARATOR}y"])
        assert split_key(join_key(encoded)) == ["oauth:code", "xy"]

    def test_parent_key_sorts_before_children(self):
        parent = join_key(["oauth:refresh", "alice"])
        child = join_key(["oauth:refresh", "alice", "token"])
        sibling = join_key(["oauth:refresh", "alice-2"])

        assert sorted([sibling, child, parent]) == [parent, child, sibling]
