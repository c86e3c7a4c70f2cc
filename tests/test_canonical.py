"""Unit tests for canonical JSON and hashing."""

from tracegate.utils.canonical import canonical_json, is_strong_hash, sha256_digest


def test_canonical_json_sorts_keys():
    """Canonical JSON sorts keys."""
    obj = {"b": 1, "a": 2}
    assert canonical_json(obj) == '{"a":2,"b":1}'


def test_canonical_json_sorts_nested_keys_but_not_lists():
    obj = {"z": [{"y": 1, "x": 2}, 3], "a": None}
    assert canonical_json(obj) == '{"a":null,"z":[{"x":2,"y":1},3]}'


def test_canonical_json_escapes_non_ascii():
    assert canonical_json({"t": "é"}) == '{"t":"\\u00e9"}'


def test_sha256_digest_deterministic():
    """Digest is deterministic and independent of key order."""
    h1 = sha256_digest({"nodes": [], "version": "1.0.0"})
    h2 = sha256_digest({"version": "1.0.0", "nodes": []})
    assert h1 == h2
    assert h1.startswith("sha256:")
    assert len(h1) == len("sha256:") + 64  # SHA256 hex


def test_is_strong_hash():
    assert is_strong_hash(sha256_digest({"a": 1}))
    # Short checksum form produced by the old rolling hash
    assert not is_strong_hash("sha256:00000000a1b2c3d4")
    assert not is_strong_hash("md5:" + "0" * 64)
    assert not is_strong_hash("sha256:" + "A" * 64)
    assert not is_strong_hash("")
