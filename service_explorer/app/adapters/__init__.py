"""
Adapters package for the Explorer Service.

Contains HTTP client wrappers for the explorer gateway, one per protocol
generation. These adapters encapsulate:

- Base URL and request shapes
- Retry policy for transport failures
- Error handling that maps to shared errors

They never cache; the tangle cache services sit in front of them.
"""

from .api_client import ApiClient
from .chrysalis_api_client import ChrysalisApiClient
from .stardust_api_client import StardustApiClient

__all__ = [
    "ApiClient",
    "ChrysalisApiClient",
    "StardustApiClient",
]
