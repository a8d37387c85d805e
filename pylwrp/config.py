from dataclasses import dataclass
from typing import Any, Mapping

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 93

MIN_PORT = 1
MAX_PORT = 65535


@dataclass
class LwrpConfig:
    """Connection settings for one LWRP device.

    An empty password logs in without one.
    """
    host: str = DEFAULT_HOST
    port: Any = DEFAULT_PORT
    password: str = ""

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "LwrpConfig":
        """Build from host plugin settings (``host``, ``port``, ``password``).

        Values are not checked here, use ``validate()``.
        """
        port = values.get("port", DEFAULT_PORT)
        if isinstance(port, str) and port.strip().isdigit():
            port = int(port)
        return cls(
            host=(values.get("host") or "").strip(),
            port=port,
            password=values.get("password") or "",
        )

    def validate(self) -> list[str]:
        """Return a list of problems, empty when the settings are usable."""
        problems = []
        if not self.host:
            problems.append("Missing host")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            problems.append(f"Missing port (got {self.port!r})")
        elif not (MIN_PORT <= self.port <= MAX_PORT):
            problems.append(f"Invalid port {self.port}, must be {MIN_PORT}-{MAX_PORT}")
        return problems
