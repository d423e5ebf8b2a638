"""
Adapters package for the proxy.

Contains HTTP client wrappers for external dependencies (the Clash of
Clans API and public IP-echo services). These adapters encapsulate:

- Base URLs, headers and timeouts
- Error handling that maps to shared errors

Keep adapters thin and side-effect free outside of explicit calls.
"""

from .coc_client import CocApiClient
from .ip_probe import IPProbe

__all__ = ["CocApiClient", "IPProbe"]
