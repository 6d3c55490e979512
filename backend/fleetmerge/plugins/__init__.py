from .api import Processor
from .registry import PROCESSORS, register_processor, get_applicable_processors, bootstrap_discovery

__all__ = ["Processor", "PROCESSORS", "register_processor", "get_applicable_processors", "bootstrap_discovery"]
