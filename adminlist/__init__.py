"""
__init__

List-view engine for admin dashboards backed by a REST API.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from .api.app import ApplicationFactory, create_app
from .client.http import BackendClient
from .conf import ListViewSettings, configure, current_settings
from .core.controller import ListViewController
from .resources.builtin import default_registry
from .resources.registry import ResourceRegistry

__version__ = "0.1.0"

__all__ = [
    "ApplicationFactory",
    "BackendClient",
    "ListViewController",
    "ListViewSettings",
    "ResourceRegistry",
    "__version__",
    "configure",
    "create_app",
    "current_settings",
    "default_registry",
]

# The End
