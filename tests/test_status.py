import threading

import pytest

from apiconv.core.codes import (
    DEFAULT_STATUS_OVERRIDES,
    FORBIDDEN,
    INVALID_PARAMS,
    NOT_FOUND,
    SERVER_ERROR,
    SUCCESS,
    TOO_MANY_REQUESTS,
    UNAUTHORIZED,
)
from apiconv.core.status import StatusRegistry, status_from_code_range


@pytest.mark.parametrize("code", [2_000_000, 2_001_001, 2_999_999, 10_000_000, 99_999_999])
def test_business_band_resolves_to_200(code):
    assert StatusRegistry().resolve(code) == 200


@pytest.mark.parametrize("code", [1_000_000, 1_001_001, 1_999_999])
def test_system_band_resolves_to_500(code):
    assert StatusRegistry().resolve(code) == 500


@pytest.mark.parametrize("code", [-2_000_000, -1, 1, 999, 999_999])
def test_unknown_codes_fail_safe_to_500(code):
    assert StatusRegistry().resolve(code) == 500


def test_band_boundaries_are_inclusive():
    assert status_from_code_range(1_999_999) == 500
    assert status_from_code_range(2_000_000) == 200
    assert status_from_code_range(999_999) == 500
    assert status_from_code_range(1_000_000) == 500


def test_success_code_is_not_overridable():
    registry = StatusRegistry()
    registry.register(0, 418)

    assert registry.resolve(0) == 200
    assert registry.snapshot()[0] == 418


def test_override_beats_business_band():
    registry = StatusRegistry()
    registry.register(2_001_004, 401)

    assert registry.resolve(2_001_004) == 401
    assert registry.resolve(2_001_005) == 200


def test_override_beats_system_band():
    registry = StatusRegistry()
    registry.register(1_001_001, 409)

    assert registry.resolve(1_001_001) == 409


def test_last_registration_wins():
    registry = StatusRegistry()
    registry.register(2_001_004, 401)
    registry.register(2_001_004, 403)

    assert registry.resolve(2_001_004) == 403


def test_update_merges_over_existing_overrides():
    registry = StatusRegistry({2_001_001: 404})
    registry.update({2_001_002: 409, 2_001_001: 410})

    assert registry.resolve(2_001_001) == 410
    assert registry.resolve(2_001_002) == 409


def test_snapshot_is_read_only():
    registry = StatusRegistry({2_001_001: 404})
    snapshot = registry.snapshot()

    with pytest.raises(TypeError):
        snapshot[2_001_001] = 500  # type: ignore[index]

    # Earlier snapshots are not affected by later writes.
    registry.register(2_001_002, 409)
    assert 2_001_002 not in snapshot


def test_default_overrides():
    registry = StatusRegistry(DEFAULT_STATUS_OVERRIDES)

    assert registry.resolve(SUCCESS.code) == 200
    assert registry.resolve(SERVER_ERROR.code) == 500
    assert registry.resolve(INVALID_PARAMS.code) == 400
    assert registry.resolve(NOT_FOUND.code) == 404
    assert registry.resolve(UNAUTHORIZED.code) == 401
    assert registry.resolve(FORBIDDEN.code) == 403
    assert registry.resolve(TOO_MANY_REQUESTS.code) == 429


def test_concurrent_registration_keeps_every_entry():
    registry = StatusRegistry()
    start = threading.Barrier(8)

    def register_block(offset: int) -> None:
        start.wait()
        for i in range(50):
            registry.register(3_000_000 + offset * 100 + i, 400 + offset)

    threads = [threading.Thread(target=register_block, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(registry.snapshot()) == 8 * 50
    assert registry.resolve(3_000_000 + 7 * 100 + 49) == 407
