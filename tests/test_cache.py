from typing import List

import pytest

from barcode_qr.cache import RenderCache
from barcode_qr.options import OutputFormat, RenderOptions
from barcode_qr.render import Artifact


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> RenderCache:
    return RenderCache(ttl=60, clock=clock)


def _artifact(data: bytes = b"<svg/>") -> Artifact:
    return Artifact(OutputFormat.SVG, data)


class TestFingerprint:
    def test_prefix_and_stability(self, cache: RenderCache) -> None:
        options = RenderOptions()
        key = cache.fingerprint("barcode", "C128", "ABC", "SVG", options)
        assert key.startswith("barcode_qrcode_")
        assert key == cache.fingerprint("barcode", "C128", "ABC", OutputFormat.SVG, RenderOptions())

    @pytest.mark.parametrize(
        "changes",
        [
            {"kind": "qrcode"},
            {"target": "C39"},
            {"payload": "ABD"},
            {"fmt": "PNG"},
            {"options": RenderOptions(height=31)},
        ],
    )
    def test_any_input_changes_the_key(self, cache: RenderCache, changes) -> None:
        arguments = {"kind": "barcode", "target": "C128", "payload": "ABC", "fmt": "SVG", "options": RenderOptions()}
        base = cache.fingerprint(**arguments)
        arguments.update(changes)
        assert cache.fingerprint(**arguments) != base

    def test_logo_content_is_part_of_the_key(self, cache: RenderCache) -> None:
        a = cache.fingerprint("qrcode", "medium", "x", "PNG", RenderOptions(logo_data=b"one"))
        b = cache.fingerprint("qrcode", "medium", "x", "PNG", RenderOptions(logo_data=b"two"))
        assert a != b

    def test_bytes_and_text_payloads(self, cache: RenderCache) -> None:
        assert cache.fingerprint("qrcode", "low", b"abc", "SVG", RenderOptions()) == cache.fingerprint(
            "qrcode", "low", "abc", "SVG", RenderOptions()
        )


class TestExpiry:
    def test_hit_within_ttl(self, cache: RenderCache, clock: FakeClock) -> None:
        calls: List[int] = []

        def factory() -> Artifact:
            calls.append(1)
            return _artifact()

        first = cache.get_or_create("k", factory)
        clock.now += 59
        second = cache.get_or_create("k", factory)
        assert first is second
        assert len(calls) == 1
        assert len(cache) == 1

    def test_miss_after_ttl(self, cache: RenderCache, clock: FakeClock) -> None:
        cache.get_or_create("k", lambda: _artifact(b"old"))
        clock.now += 60
        assert cache.get("k") is None
        assert cache.get_or_create("k", lambda: _artifact(b"new")).data == b"new"

    def test_len_ignores_expired_entries(self, cache: RenderCache, clock: FakeClock) -> None:
        cache.get_or_create("a", _artifact)
        clock.now += 30
        cache.get_or_create("b", _artifact)
        clock.now += 31
        assert len(cache) == 1

    def test_clear(self, cache: RenderCache) -> None:
        cache.get_or_create("a", _artifact)
        cache.clear()
        assert len(cache) == 0
        assert cache.get("a") is None

    def test_factory_errors_are_not_cached(self, cache: RenderCache) -> None:
        def broken() -> Artifact:
            raise ValueError("bad payload")

        with pytest.raises(ValueError):
            cache.get_or_create("k", broken)
        assert cache.get("k") is None

    def test_expired_entries_and_key_locks_are_released(self, clock: FakeClock) -> None:
        cache = RenderCache(ttl=1, clock=clock)
        for index in range(100):
            cache.get_or_create(f"key-{index}", _artifact)
            clock.now += 10
        assert len(cache._entries) == 1
        assert cache._key_locks == {}
        assert len(cache) == 0

    def test_key_lock_is_released_when_factory_fails(self, cache: RenderCache) -> None:
        def broken() -> Artifact:
            raise ValueError("bad payload")

        with pytest.raises(ValueError):
            cache.get_or_create("k", broken)
        assert cache._key_locks == {}

    @pytest.mark.parametrize("ttl", [0, -5])
    def test_ttl_must_be_positive(self, ttl: int) -> None:
        with pytest.raises(ValueError):
            RenderCache(ttl=ttl)
