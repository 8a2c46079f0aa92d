# -*- coding: utf-8 -*-
"""client

Backend API client exports.

Version:0.1.0
Author: Timur Kady
Email: timurkady@yandex.com
"""

from .envelope import Envelope
from .http import BackendClient

__all__ = ["BackendClient", "Envelope"]

# The End
