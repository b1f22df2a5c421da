from .base import HostPlatform
from .file import FileHost
from .memory import AUTOLOAD_SIZE_LIMIT, InMemoryHost

__all__ = ["HostPlatform", "InMemoryHost", "FileHost", "AUTOLOAD_SIZE_LIMIT"]
