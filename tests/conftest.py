"""Shared test fixtures for the pylwrp test suite."""

from unittest.mock import MagicMock

import pytest

from pylwrp.config import LwrpConfig
from pylwrp.listener import LwrpListener
from pylwrp.protocol import LwrpProtocol


@pytest.fixture
def config() -> LwrpConfig:
    return LwrpConfig(host="192.168.2.10", port=93, password="secret")


@pytest.fixture
def listener() -> MagicMock:
    """Create a mock listener recording every event."""
    return MagicMock(spec=LwrpListener)


@pytest.fixture
def transport() -> MagicMock:
    """Create a mock transport that stays open until closed."""
    transport = MagicMock()
    transport.is_closing.return_value = False
    transport.get_extra_info.return_value = ("192.168.2.10", 93)

    def close():
        transport.is_closing.return_value = True

    transport.close.side_effect = close
    return transport


@pytest.fixture
def protocol(config: LwrpConfig, listener: MagicMock) -> LwrpProtocol:
    return LwrpProtocol(config, listener)


def fake_create_connection(transport):
    """Replacement for loop.create_connection that connects to ``transport``."""

    async def create_connection(protocol_factory, host=None, port=None):
        protocol = protocol_factory()
        protocol.connection_made(transport)
        return transport, protocol

    return create_connection
