"""
Facet Shared Module
====================

Configuration, logging, and console utilities used by the Facet engine
and command-line front end.
"""

from shared.config import ConfigError, CoreConfig
from shared.console import CoreConsole
from shared.logger import CoreLogger

__all__ = ["ConfigError", "CoreConfig", "CoreConsole", "CoreLogger"]
