# -*- coding: utf-8 -*-
"""api

List-view HTTP API exports.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from .app import ApplicationFactory, create_app
from .views import ListViewAPIConfiguration, ListViewAPIViewSet

__all__ = [
    "ApplicationFactory",
    "ListViewAPIConfiguration",
    "ListViewAPIViewSet",
    "create_app",
]

# The End
