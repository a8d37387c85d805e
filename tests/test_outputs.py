"""Tests for the output routing state cache."""

import pytest

from pylwrp.outputs import OutputStateCache
from pylwrp.responses import DestinationResponse


@pytest.fixture
def cache() -> OutputStateCache:
    return OutputStateCache()


def destination(num: int, **attributes) -> DestinationResponse:
    return DestinationResponse(num=num, attributes=attributes)


def test_unknown_output(cache):
    assert cache.lookup(1) is None
    assert len(cache) == 0


def test_latest_update_replaces_whole_entry(cache):
    cache.apply([destination(1, address="239.192.0.1", name="Studio A")])
    cache.apply([destination(1, address="239.192.0.2")])

    assert cache.lookup(1) == "239.192.0.2"
    assert cache.get(1).attributes == {"address": "239.192.0.2"}


def test_outputs_missing_from_batch_keep_state(cache):
    cache.apply([destination(1, address="239.192.0.1"), destination(2, address="239.192.0.2")])
    assert cache.apply([destination(2, address="239.192.0.9")]) == [2]

    assert cache.lookup(1) == "239.192.0.1"
    assert cache.lookup(2) == "239.192.0.9"
    assert sorted(cache.outputs) == [1, 2]


def test_sip_address(cache):
    cache.apply([destination(3, address="sip:studio@10.0.0.5")])
    assert cache.lookup(3) == "sip:studio@10.0.0.5"


def test_bare_stream_number_becomes_address(cache):
    cache.apply([destination(4, address="1007")])
    assert cache.lookup(4) == "239.192.3.239"


def test_invalid_stream_number_is_returned_verbatim(cache):
    cache.apply([destination(4, address="99999")])
    assert cache.lookup(4) == "99999"


@pytest.mark.parametrize("attributes", [{}, {"address": ""}, {"name": "Out 5"}])
def test_output_without_source(cache, attributes):
    cache.apply([destination(5, **attributes)])
    assert 5 in cache
    assert cache.lookup(5) is None


def test_clear(cache):
    cache.apply([destination(1, address="239.192.0.1")])
    cache.clear()
    assert cache.lookup(1) is None
    assert len(cache) == 0
