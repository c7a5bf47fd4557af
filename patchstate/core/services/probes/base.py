"""
Probe strategy base — one way of finding out what is installed.

Subclasses implement ``_probe``.  ``probe`` is the strategy boundary:
any exception escaping ``_probe`` is logged and turned into a
``failed`` result, so one broken strategy can never abort the whole
resolution.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from patchstate.core.models.probe import ProbeResult

logger = logging.getLogger(__name__)


class ProbeStrategy(ABC):
    """Abstract base class for all probes."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Probe identifier (e.g. 'native', 'shell', 'filesystem')."""

    @abstractmethod
    def _probe(self) -> ProbeResult:
        """Run the probe. May raise; ``probe`` converts exceptions."""

    def probe(self) -> ProbeResult:
        """Run the probe and return its result. Never raises."""
        try:
            return self._probe()
        except Exception as e:
            logger.warning("Probe %s raised: %s", self.name, e, exc_info=True)
            return ProbeResult.failed(f"{type(e).__name__}: {e}", probe=self.name)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
