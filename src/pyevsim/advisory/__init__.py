"""Client and scheduler for the external advisory service."""

from pyevsim.advisory._transport import AdvisoryTransport, HttpAdvisoryTransport
from pyevsim.advisory.client import AdvisoryClient
from pyevsim.advisory.tasks import AdvisoryScheduler

__all__ = [
    "AdvisoryClient",
    "AdvisoryScheduler",
    "AdvisoryTransport",
    "HttpAdvisoryTransport",
]
