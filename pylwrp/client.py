"""LWRP client - the surface a host application drives.

This module contains the high-level client with:
- Connection setup and wholesale replacement on reconfiguration
- Actions: send a raw command, route an output to a source
- Feedback: is an output currently routed to a given source
- Listener registration for status, routing and response events

Input from the host application is validated here, so invalid requests are
logged and never reach the device."""

import logging
from typing import Any, Optional

from pylwrp.address import source_to_address
from pylwrp.config import LwrpConfig
from pylwrp.listener import LwrpListener, MultiplexingListener
from pylwrp.outputs import OutputStateCache
from pylwrp.protocol import ConnectionState, LwrpProtocol

MIN_OUTPUT_NUM = 1
MAX_OUTPUT_NUM = 32767


class LwrpClient:
    """High-level control of one LWRP device.

    Usage::

        client = LwrpClient(LwrpConfig("192.168.2.10", 93, "secret"))
        await client.async_connect()
        client.set_output(7, "1007")
        client.output_is_source(7, "1007")
        client.destroy()
    """

    def __init__(self, config: Optional[LwrpConfig] = None, strict_parsing: bool = False):
        """Initialize client.

        Args:
            config: Device host, port and password
            strict_parsing: Drop the connection on malformed device lines
                instead of skipping them
        """
        self._logger = logging.getLogger(__name__)
        self._config = config if config is not None else LwrpConfig()
        self._strict_parsing = strict_parsing

        # Create multiplexing listener for external listeners
        self._multiplex_callback = MultiplexingListener()

        self._protocol: Optional[LwrpProtocol] = None

    # ========== Connection lifecycle ==========

    @property
    def config(self) -> LwrpConfig:
        return self._config

    @property
    def protocol(self) -> Optional[LwrpProtocol]:
        return self._protocol

    @property
    def state(self) -> ConnectionState:
        if self._protocol is None:
            return ConnectionState.DISCONNECTED
        return self._protocol.state

    @property
    def outputs(self) -> Optional[OutputStateCache]:
        """Output routing state of the current connection."""
        return self._protocol.outputs if self._protocol else None

    def register_listener(self, listener: LwrpListener):
        """Register external listener for client events."""
        self._multiplex_callback.register_listener(listener)

    def unregister_listener(self, listener: LwrpListener):
        """Unregister external listener."""
        self._multiplex_callback.unregister_listener(listener)

    async def async_connect(self) -> bool:
        """Connect with the current configuration."""
        if self._protocol is None:
            self._protocol = LwrpProtocol(self._config, self._multiplex_callback, self._strict_parsing)
        return await self._protocol.async_connect()

    async def async_configure(self, config: LwrpConfig) -> bool:
        """Apply new settings: drop the current connection and start a new one."""
        self.destroy()
        self._config = config
        return await self.async_connect()

    def destroy(self):
        """Close the connection, the client can connect again afterwards."""
        self._logger.info("Destroying connection...")
        if self._protocol is not None:
            self._protocol.destroy()
            self._protocol = None
        self._logger.info("Destroyed connection...")

    # ========== Actions ==========

    def send_command(self, command: Any) -> bool:
        """Send a raw command line."""
        self._logger.info("Action: SendCommand")
        if command is None or str(command).strip() == "":
            self._logger.error("Invalid params: empty command")
            return False
        if self._protocol is None:
            self._logger.error("Not connected")
            return False
        return self._protocol.send_command(str(command))

    def set_output(self, output_num: Any, source: Any) -> bool:
        """Route an output to a source.

        Args:
            output_num: Device output number (1-32767)
            source: Stream number, multicast address or ``sip:`` descriptor
        """
        self._logger.info("Action: SetOutput")
        output = self._validate_output_num(output_num)
        address = self._resolve_source(source)
        if output is None or address is None:
            return False

        if self._protocol is None:
            self._logger.error("Not connected")
            return False

        self._logger.info(f"Action: SetOutput > {address}")
        return self._protocol.set_output(output, address)

    async def async_wait_sent(self):
        """Wait until queued commands have been written to the device."""
        if self._protocol is not None:
            await self._protocol.async_wait_sent()

    # ========== Feedbacks ==========

    def get_output_source(self, output_num: int) -> Optional[str]:
        """Source address the output is carrying, None if unknown."""
        if self._protocol is None:
            return None
        return self._protocol.outputs.lookup(output_num)

    def output_is_source(self, output_num: Any, source: Any) -> bool:
        """Whether an output is currently routed to a source."""
        if self._protocol is None:
            self._logger.error("Not connected")
            return False

        if len(self._protocol.outputs) == 0:
            self._logger.warning("No output data")
            return False

        output = self._validate_output_num(output_num)
        address = self._resolve_source(source)
        if output is None or address is None:
            return False

        return self._protocol.outputs.lookup(output) == address

    # ========== Helpers ==========

    def _validate_output_num(self, output_num: Any) -> Optional[int]:
        """Validate output_num and return it as int."""
        try:
            output = int(str(output_num).strip())
        except (TypeError, ValueError):
            self._logger.error(f"Invalid params: output number {output_num!r}")
            return None
        if not (MIN_OUTPUT_NUM <= output <= MAX_OUTPUT_NUM):
            self._logger.error(
                f"Invalid params: output number {output}, must be {MIN_OUTPUT_NUM}-{MAX_OUTPUT_NUM}"
            )
            return None
        return output

    def _resolve_source(self, source: Any) -> Optional[str]:
        """Validate source and return the address to route."""
        if source is None:
            self._logger.error("Invalid params: missing source")
            return None
        try:
            return source_to_address(str(source))
        except ValueError as e:
            self._logger.error(f"Invalid params: {e}")
            return None
