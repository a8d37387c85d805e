from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional
import logging

from pylwrp.responses import LwrpResponse


class InstanceStatus(Enum):
    """Coarse connection status reported to the host application."""
    CONNECTING = "connecting"
    OK = "ok"
    BAD_CONFIG = "bad_config"
    CONNECTION_FAILURE = "connection_failure"
    DISCONNECTED = "disconnected"


class LwrpListener(ABC):

    @abstractmethod
    def connected(self):
        pass

    @abstractmethod
    def disconnected(self):
        pass

    @abstractmethod
    def outputs_changed(self):
        """Called after output routing state was updated.

        Anything showing output state should re-read it from the client.
        """
        pass

    def status_changed(self, status: InstanceStatus, message: Optional[str] = None):
        # By default, do nothing but can be overwritten to be notified of these messages.
        pass

    def response_received(self, response: LwrpResponse):
        """Called for every parsed response, in wire order."""
        pass

    def error(self, error_message: str):
        # By default, do nothing but can be overwritten to be notified of these messages.
        pass


class MultiplexingListener(LwrpListener):
    """Fan events out to registered listeners.

    A listener raising an exception is logged and skipped, the others still
    get the event.
    """

    _listeners: List[LwrpListener]

    def __init__(self):
        self._listeners = []
        self._logger = logging.getLogger(__name__)

    def _notify(self, method: str, *args):
        for listener in list(self._listeners):
            try:
                getattr(listener, method)(*args)
            except Exception as e:
                self._logger.error(f"Exception in {method}() callback of {listener!r}: {e}", exc_info=True)

    def connected(self):
        self._notify("connected")

    def disconnected(self):
        self._notify("disconnected")

    def outputs_changed(self):
        self._notify("outputs_changed")

    def status_changed(self, status: InstanceStatus, message: Optional[str] = None):
        self._notify("status_changed", status, message)

    def response_received(self, response: LwrpResponse):
        self._notify("response_received", response)

    def error(self, error_message: str):
        self._notify("error", error_message)

    def register_listener(self, listener: LwrpListener):
        self._listeners.append(listener)

    def unregister_listener(self, listener: LwrpListener):
        if listener in self._listeners:
            self._listeners.remove(listener)
        else:
            self._logger.info("Listener isn't registered")


class LoggingListener(LwrpListener):

    def __init__(self, logger=logging):
        self.logger = logger

    def connected(self):
        self.logger.info("Connected")

    def disconnected(self):
        self.logger.info("Disconnected")

    def outputs_changed(self):
        self.logger.info("Output state changed")

    def status_changed(self, status: InstanceStatus, message: Optional[str] = None):
        if message:
            self.logger.info(f"Status: {status.value} - {message}")
        else:
            self.logger.info(f"Status: {status.value}")

    def response_received(self, response: LwrpResponse):
        self.logger.debug(f"Response: {response}")

    def error(self, error_message: str):
        self.logger.error(f"Device error: {error_message}")
