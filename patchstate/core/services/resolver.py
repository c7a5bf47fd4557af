"""
Version resolver — run a layer's probes in fallback order.

Flow:
    native → shell → filesystem   (probes not configured are skipped)

The first ``resolved`` / ``not_installed`` result wins.  ``failed`` and
``inconclusive`` fall through.  If every probe falls through, the layer
is ``unknown`` — never ``not_installed``.

The winning payload is converted into the layer's version domain:

    packed   PackedVersion as-is, "x.y.z" parsed, bare digits as a raw int
    integer  bare digits as IntegerVersion; anything else is rejected

A payload that does not convert is recorded as a failed attempt and
resolution continues with the next probe.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import Literal

from patchstate.adapters.base import KernelInterface, PrivilegedExecutor
from patchstate.adapters.shell.filesystem import LocalFilesystem, PrivilegedFilesystem
from patchstate.core.errors import ParseError, VersionError
from patchstate.core.models.config import LayerConfig
from patchstate.core.models.probe import ProbeOutcome, ProbeResult
from patchstate.core.models.state import Layer, LayerResolution
from patchstate.core.models.version import IntegerVersion, PackedVersion, Version
from patchstate.core.services.probes import (
    FilesystemFallbackProbe,
    NativeBindingProbe,
    ProbeStrategy,
    ShellProbe,
)
from patchstate.core.services.version_codec import from_raw, parse

logger = logging.getLogger(__name__)

VersionDomain = Literal["packed", "integer"]


def to_version(payload: PackedVersion | str, domain: VersionDomain) -> Version:
    """Convert a resolved probe payload into the layer's version domain.

    Raises:
        ParseError / RangeError: payload does not fit the domain.
    """
    if domain == "packed":
        if isinstance(payload, PackedVersion):
            return payload
        text = payload.strip()
        if text.isascii() and text.isdigit():
            return from_raw(int(text))
        return parse(text)

    if isinstance(payload, PackedVersion):
        raise TypeError("packed version reported for an integer-versioned layer")
    text = payload.strip()
    if not (text.isascii() and text.isdigit()):
        raise ParseError(f"Expected an integer version, got {payload!r}")
    return IntegerVersion(int(text))


class VersionResolver:
    """Resolve one layer through an ordered list of probes.

    Args:
        layer: Which layer this resolver answers for.
        strategies: Probes in fallback order.
        domain: Version domain of the layer ("packed" or "integer").
    """

    def __init__(
        self,
        layer: Layer,
        strategies: Sequence[ProbeStrategy],
        domain: VersionDomain = "integer",
    ):
        self.layer = layer
        self.strategies = list(strategies)
        self.domain = domain

    def resolve(self, cancel: threading.Event | None = None) -> LayerResolution:
        """Run the probes and return the layer's resolution.

        ``cancel`` is checked before and after each probe; once set,
        the result is ``unknown`` regardless of what the probes found.
        """
        attempts: list[ProbeResult] = []
        if not self.strategies:
            logger.warning("%s: no probes configured, state unknown", self.layer)

        for strategy in self.strategies:
            if cancel is not None and cancel.is_set():
                return self._cancelled(attempts)

            result = strategy.probe()
            attempts.append(result)
            logger.debug("%s/%s -> %s", self.layer, strategy.name, result.outcome)

            if cancel is not None and cancel.is_set():
                return self._cancelled(attempts)

            if result.outcome == ProbeOutcome.NOT_INSTALLED:
                return LayerResolution.not_installed(
                    self.layer, source=strategy.name, attempts=tuple(attempts)
                )

            if result.outcome == ProbeOutcome.RESOLVED:
                try:
                    version = to_version(result.payload, self.domain)
                except (VersionError, TypeError) as e:
                    logger.warning(
                        "%s/%s payload %r rejected: %s",
                        self.layer, strategy.name, result.payload, e,
                    )
                    attempts[-1] = ProbeResult.failed(
                        f"unusable version {result.payload!r}: {e}",
                        probe=strategy.name,
                    )
                    continue
                logger.info(
                    "%s resolved to %s via %s%s",
                    self.layer, version, strategy.name,
                    " (low confidence)" if result.low_confidence else "",
                )
                return LayerResolution.installed(
                    self.layer,
                    version,
                    source=strategy.name,
                    low_confidence=result.low_confidence,
                    attempts=tuple(attempts),
                )

            # INCONCLUSIVE / FAILED: fall through to the next probe

        logger.info("%s: all probes exhausted, state unknown", self.layer)
        return LayerResolution.unknown(self.layer, attempts=tuple(attempts))

    def _cancelled(self, attempts: list[ProbeResult]) -> LayerResolution:
        logger.info("%s: resolution cancelled", self.layer)
        return LayerResolution.unknown(self.layer, attempts=tuple(attempts), cancelled=True)


def build_strategies(
    config: LayerConfig,
    executor: PrivilegedExecutor,
    kernel: KernelInterface | None = None,
) -> list[ProbeStrategy]:
    """Instantiate the probes a layer's configuration enables, in order."""
    strategies: list[ProbeStrategy] = []

    if config.native and kernel is not None:
        strategies.append(NativeBindingProbe(kernel))

    if config.helper_binary:
        strategies.append(ShellProbe(executor, config.helper_binary, config.version_flag))

    if config.helper_binary or config.install_dir:
        filesystem = (
            PrivilegedFilesystem(executor)
            if config.filesystem == "privileged"
            else LocalFilesystem()
        )
        strategies.append(
            FilesystemFallbackProbe(
                filesystem,
                binary=config.helper_binary,
                version_file=config.version_file,
                install_dir=config.install_dir,
            )
        )

    return strategies


def build_resolver(
    layer: Layer,
    config: LayerConfig,
    executor: PrivilegedExecutor,
    kernel: KernelInterface | None = None,
) -> VersionResolver:
    """Wire a resolver for ``layer`` from its configuration."""
    return VersionResolver(
        layer,
        build_strategies(config, executor, kernel),
        domain=config.domain,
    )
