"""Service layer package.

Exports high-level services consumed by host applications.
"""

from .journey_service import JourneyService, JourneyServiceConfig, JourneySnapshot
from .poller import RefreshPoller

__all__ = ["JourneyService", "JourneyServiceConfig", "JourneySnapshot", "RefreshPoller"]
