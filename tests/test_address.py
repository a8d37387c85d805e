"""Tests for Livewire stream number / multicast address conversion."""

import pytest

from pylwrp.address import (
    StreamFormat,
    StreamNumberRangeError,
    UnknownStreamFormatError,
    address_to_stream_num,
    int_to_ip,
    ip_to_int,
    source_to_address,
    stream_format_base_ip,
    stream_format_from_address,
    stream_num_to_address,
)


def test_stream_num_range_ends_standard():
    assert stream_num_to_address(0) == "239.192.0.0"
    assert stream_num_to_address(65535, StreamFormat.STANDARD) == "239.192.255.255"


def test_stream_num_carries_into_third_octet():
    assert stream_num_to_address(256) == "239.192.1.0"
    assert stream_num_to_address(1007) == "239.192.3.239"


@pytest.mark.parametrize("stream_num", [-1, 65536, 100000])
def test_stream_num_out_of_range(stream_num):
    with pytest.raises(StreamNumberRangeError):
        stream_num_to_address(stream_num)


def test_range_error_is_value_error():
    with pytest.raises(ValueError):
        stream_num_to_address(-5)


@pytest.mark.parametrize(
    "stream_format, base",
    [
        (StreamFormat.STANDARD, "239.192.0.0"),
        (StreamFormat.LIVESTREAM, "239.192.0.0"),
        (StreamFormat.BACKFEED_STANDARD, "239.193.0.0"),
        (StreamFormat.BACKFEED_LIVESTREAM, "239.195.0.0"),
        (StreamFormat.SURROUND, "239.196.0.0"),
    ],
)
def test_base_ip_table(stream_format, base):
    assert stream_format_base_ip(stream_format) == base


@pytest.mark.parametrize(
    "stream_format",
    [
        StreamFormat.STANDARD,
        StreamFormat.BACKFEED_STANDARD,
        StreamFormat.BACKFEED_LIVESTREAM,
        StreamFormat.SURROUND,
    ],
)
@pytest.mark.parametrize("stream_num", [0, 1, 4321, 65535])
def test_address_decodes_back_to_stream_num(stream_format, stream_num):
    address = stream_num_to_address(stream_num, stream_format)
    assert stream_format_from_address(address) == stream_format
    assert address_to_stream_num(address) == stream_num


def test_surround_decodes_within_its_range():
    address = stream_num_to_address(20, StreamFormat.SURROUND)
    assert address == "239.196.0.20"
    assert stream_format_from_address(address) == StreamFormat.SURROUND
    assert address_to_stream_num(address) == 20


def test_livestream_decodes_as_standard():
    address = stream_num_to_address(42, StreamFormat.LIVESTREAM)
    assert stream_format_from_address(address) == StreamFormat.STANDARD
    assert address_to_stream_num(address) == 42


@pytest.mark.parametrize("address", ["239.194.0.1", "10.0.0.1", "not-an-address"])
def test_unknown_format(address):
    with pytest.raises(UnknownStreamFormatError):
        address_to_stream_num(address)


def test_ip_int_conversion():
    assert ip_to_int("239.192.0.0") == 0xEFC00000
    assert int_to_ip(0xEFC00001) == "239.192.0.1"
    assert int_to_ip(0xFFFFFFFF) == "255.255.255.255"


class TestSourceToAddress:

    def test_stream_number(self):
        assert source_to_address("7") == "239.192.0.7"

    def test_stream_number_with_whitespace(self):
        assert source_to_address(" 7 ") == "239.192.0.7"

    def test_dotted_address_passes_through(self):
        assert source_to_address("239.192.0.7") == "239.192.0.7"

    def test_sip_passes_through(self):
        assert source_to_address("sip:studio@10.0.0.5") == "sip:studio@10.0.0.5"

    @pytest.mark.parametrize("source", ["", "   ", "abc", "70000", "239.192.0"])
    def test_invalid(self, source):
        with pytest.raises(ValueError):
            source_to_address(source)
