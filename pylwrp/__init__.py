"""pylwrp Python Package

Python library for controlling Livewire audio devices over LWRP.
"""

from pylwrp.client import LwrpClient
from pylwrp.config import LwrpConfig

__all__ = ["LwrpClient", "LwrpConfig"]
