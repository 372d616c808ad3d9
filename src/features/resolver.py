"""
Resolution of a target version configuration into a support table.

The resolver runs once per analysed file. It turns validated options plus a
default version (from the package manifest, or the hard-coded default) into
a `VersionConfig`, and then decides for every catalog feature whether the
whole target range supports it, in non-strict and in strict code. The
resulting `SupportInfo` is read-only and answers every later lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import AbstractSet, Mapping, Optional

from .catalog import CATALOG, FeatureDescriptor
from .options import FeatureOptions
from .semver import intersects_below, valid_range

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "6.0.0"


@dataclass(frozen=True)
class VersionConfig:
    """A resolved target: the version shown to users, its range and the ignore set."""

    version: str
    range: str
    ignores: AbstractSet[str] = frozenset()


@dataclass(frozen=True)
class FeatureSupport:
    name: str
    singular: bool
    supported: bool
    supported_in_strict: bool


@dataclass(frozen=True)
class SupportInfo:
    version: str
    features: Mapping[str, FeatureSupport]

    def __getitem__(self, key: str) -> FeatureSupport:
        return self.features[key]

    def __contains__(self, key: object) -> bool:
        return key in self.features


def resolve_version_config(
    options: Optional[FeatureOptions] = None,
    default_version: Optional[str] = None,
) -> VersionConfig:
    """
    Determine the effective target.

    An explicit version means "that version and anything above". Without
    one, `default_version` (typically the manifest's `engines.node` range)
    is used as the range itself, falling back to DEFAULT_VERSION.
    """
    options = options or FeatureOptions()
    ignores = frozenset(options.ignores)
    explicit = options.explicit_version
    if explicit is not None:
        config = VersionConfig(version=explicit, range=f">={explicit}", ignores=ignores)
    else:
        fallback = valid_range(default_version) if default_version else None
        if fallback is None:
            fallback = DEFAULT_VERSION
        config = VersionConfig(version=fallback, range=fallback, ignores=ignores)
    logger.debug("Target version %s (range %s)", config.version, config.range)
    return config


def _is_ignored(feature: FeatureDescriptor, ignores: AbstractSet[str]) -> bool:
    return not ignores.isdisjoint(feature.names)


def _supports(target_range: str, threshold: Optional[str]) -> bool:
    if threshold is None:
        return False
    return not intersects_below(target_range, threshold)


def build_support_table(
    config: VersionConfig,
    catalog: Mapping[str, FeatureDescriptor] = CATALOG,
) -> SupportInfo:
    """Decide support for every catalog entry under `config`."""
    features = {}
    for key, feature in catalog.items():
        if _is_ignored(feature, config.ignores):
            supported = supported_in_strict = True
        else:
            supported = _supports(config.range, feature.non_strict)
            supported_in_strict = _supports(config.range, feature.strict)
        features[key] = FeatureSupport(
            name=feature.name,
            singular=feature.singular,
            supported=supported,
            supported_in_strict=supported_in_strict,
        )
    return SupportInfo(version=config.version, features=MappingProxyType(features))


__all__ = [
    "DEFAULT_VERSION",
    "FeatureSupport",
    "SupportInfo",
    "VersionConfig",
    "build_support_table",
    "resolve_version_config",
]
