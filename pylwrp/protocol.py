import asyncio
import logging
from asyncio import Queue, Task
from enum import Enum
from typing import Any, Optional

from pylwrp.config import LwrpConfig
from pylwrp.framer import BlockFramer
from pylwrp.listener import InstanceStatus, LwrpListener
from pylwrp.outputs import OutputStateCache
from pylwrp.parser import process_response
from pylwrp.responses import DestinationResponse, ErrorResponse

# Commands are single lines terminated with \n, one byte per character
COMMAND_TERMINATOR = "\n"
COMMAND_ENCODING = "latin-1"

# Lists every output and subscribes the connection to later changes
COMMAND_LIST_OUTPUTS = "DST"


class ConnectionState(Enum):
    DISCONNECTED = "disconnected"
    BAD_CONFIG = "bad_config"
    CONNECTING = "connecting"
    AUTHENTICATING = "authenticating"
    READY = "ready"
    ERROR = "error"


class LwrpProtocol(asyncio.Protocol):
    """One connection to an LWRP device.

    Owns the socket, the received line buffer and the output state cache.
    On connect it logs in and lists the outputs, after which the device
    pushes every routing change. There is no reconnect here: after an error
    the owner calls ``async_connect()`` again or builds a new instance.
    """

    _transport: Optional[asyncio.Transport]
    _command_worker_task: Optional[Task[Any]]

    def __init__(self, config: LwrpConfig, callback: LwrpListener, strict_parsing: bool = False):
        self._logger = logging.getLogger(__name__)
        self._config = config
        self._callback = callback
        # Raise on malformed lines instead of skipping them, for development
        self._strict_parsing = strict_parsing

        self._state = ConnectionState.DISCONNECTED
        self._destroyed = False
        self._transport = None
        self.peer_name = None
        self._framer = BlockFramer()
        self._outputs = OutputStateCache()

        # Single writer on the transport, keeps commands in call order
        self._command_queue: Queue = Queue()
        self._command_worker_task = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def outputs(self) -> OutputStateCache:
        return self._outputs

    @property
    def connected(self) -> bool:
        return (
            not self._destroyed
            and self._transport is not None
            and not self._transport.is_closing()
        )

    def _set_state(self, state: ConnectionState):
        if state != self._state:
            self._logger.debug(f"State {self._state.value} -> {state.value}")
            self._state = state

    def _set_status(self, status: InstanceStatus, message: Optional[str] = None):
        self._callback.status_changed(status, message)

    async def async_connect(self) -> bool:
        """Open the connection. Failures are reported, not raised."""
        if self._destroyed:
            self._logger.error("Connection was destroyed, create a new one")
            return False
        if self.connected:
            self._logger.warning("Already connected")
            return True
        if self._state in (ConnectionState.CONNECTING, ConnectionState.AUTHENTICATING):
            # One socket per instance, a second create_connection would orphan the first
            self._logger.warning("Connect already in progress")
            return False

        problems = self._config.validate()
        if problems:
            for problem in problems:
                self._logger.error(problem)
            self._set_state(ConnectionState.BAD_CONFIG)
            self._set_status(InstanceStatus.BAD_CONFIG, "; ".join(problems))
            return False

        self._logger.info(f"Connecting to {self._config.host}:{self._config.port}")
        self._set_state(ConnectionState.CONNECTING)
        self._set_status(InstanceStatus.CONNECTING)
        self._framer.reset()
        self._outputs.clear()

        loop = asyncio.get_running_loop()
        try:
            await loop.create_connection(
                lambda: self, host=self._config.host, port=self._config.port
            )
        except OSError as e:
            if self._destroyed:
                return False
            self._logger.error(f"[TCP] Connection failed: {e}")
            self._set_state(ConnectionState.ERROR)
            self._set_status(InstanceStatus.CONNECTION_FAILURE, str(e))
            return False
        except asyncio.CancelledError:
            if self._state == ConnectionState.CONNECTING:
                self._set_state(ConnectionState.DISCONNECTED)
            raise
        return not self._destroyed

    def connection_made(self, transport):
        """Method from asyncio.Protocol"""
        if self._destroyed:
            transport.close()
            return
        self._transport = transport
        self.peer_name = transport.get_extra_info("peername")
        self._logger.info(f"Connection Made: {self.peer_name}")
        self._set_state(ConnectionState.AUTHENTICATING)

        self._stop_command_worker()
        self._command_queue = Queue()
        self._command_worker_task = asyncio.get_running_loop().create_task(self._command_worker())

        # The device does not acknowledge the login, carry straight on
        self.login(self._config.password)
        self.send_command(COMMAND_LIST_OUTPUTS)

        self._set_state(ConnectionState.READY)
        self._set_status(InstanceStatus.OK)
        self._callback.connected()

    def connection_lost(self, exc):
        """Method from asyncio.Protocol"""
        if self._destroyed:
            return
        self._transport = None
        self._stop_command_worker()
        self._framer.reset()
        had_outputs = len(self._outputs) > 0
        self._outputs.clear()

        if exc is not None:
            self._logger.error(f"[TCP] Connection to {self._config.host} lost: {exc}")
            self._set_state(ConnectionState.ERROR)
            self._set_status(InstanceStatus.CONNECTION_FAILURE, str(exc))
        else:
            self._logger.info(f"[TCP] Connection to {self._config.host} closed")
            self._set_state(ConnectionState.DISCONNECTED)
            self._set_status(InstanceStatus.DISCONNECTED)

        self._callback.disconnected()
        if had_outputs:
            self._callback.outputs_changed()

    def data_received(self, data):
        """Method from asyncio.Protocol"""
        if self._destroyed:
            return
        self._logger.debug(f"data_received client: {data}")

        responses = []
        for unit in self._framer.feed(data):
            responses.extend(process_response(unit, strict=self._strict_parsing))

        for response in responses:
            if isinstance(response, ErrorResponse):
                self._logger.warning(f"Device error: {response.message}")
                self._callback.error(response.message)
            self._callback.response_received(response)

        destinations = [response for response in responses if isinstance(response, DestinationResponse)]
        if destinations:
            updated = self._outputs.apply(destinations)
            self._logger.debug(f"Updated outputs: {updated}")
            self._callback.outputs_changed()

    def destroy(self):
        """Close the connection. Safe to call more than once."""
        if self._destroyed:
            self._logger.info("Connection already destroyed")
            return
        self._destroyed = True
        self._stop_command_worker()
        if self._transport is not None:
            self._transport.close()
            self._transport = None
            self._logger.info("Connection destroyed")
        else:
            self._logger.info("Connection already closed")
        self._framer.reset()
        self._outputs.clear()
        self._set_state(ConnectionState.DISCONNECTED)
        self._set_status(InstanceStatus.DISCONNECTED)

    def _stop_command_worker(self):
        if self._command_worker_task is not None and not self._command_worker_task.done():
            self._command_worker_task.cancel()
        self._command_worker_task = None

        # Release async_wait_sent() waiters, these commands will never be written
        while True:
            try:
                payload = self._command_queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            self._logger.warning(f"Dropping unsent command: {payload!r}")
            self._command_queue.task_done()

    async def _command_worker(self):
        """Worker task that writes queued commands to the transport in order."""
        while True:
            try:
                payload = await self._command_queue.get()
                try:
                    if self.connected:
                        self._transport.write(payload)
                        self._logger.info(f"Sent cmd: {payload!r}")
                    else:
                        self._logger.error(f"SEND FAILED: {payload!r} - not connected")
                finally:
                    self._command_queue.task_done()
            except asyncio.CancelledError:
                self._logger.debug("Command worker cancelled")
                break

    async def async_wait_sent(self):
        """Wait until every queued command has been written."""
        await self._command_queue.join()

    def send_command(self, command: str) -> bool:
        """Queue one command line. Nothing is sent when not connected."""
        if not self.connected:
            self._logger.error(f"Not connected, dropping command: {command!r}")
            return False
        try:
            payload = f"{command}{COMMAND_TERMINATOR}".encode(COMMAND_ENCODING)
        except UnicodeEncodeError as e:
            self._logger.error(f"Command {command!r} cannot be encoded: {e}")
            return False

        if self._command_worker_task is None or self._command_worker_task.done():
            self._logger.warning("Command worker was not running; restarting it")
            self._command_worker_task = asyncio.get_running_loop().create_task(self._command_worker())
        self._logger.info(f"Sending: '{command}'")
        self._command_queue.put_nowait(payload)
        return True

    def login(self, password: Optional[str]) -> bool:
        """Log in, required before the device accepts changes."""
        self._logger.info("Doing login")
        if password:
            return self.send_command(f"LOGIN {password}")
        return self.send_command("LOGIN")

    def set_output(self, output_num: int, address: str) -> bool:
        """Route an output to a multicast address or ``sip:`` descriptor."""
        return self.send_command(f"DST {output_num} ADDR:{address}")

    def query_outputs(self) -> bool:
        return self.send_command(COMMAND_LIST_OUTPUTS)
