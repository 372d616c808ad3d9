"""Feature catalog and target-version support resolution."""

from .catalog import CATALOG, SUBCLASSING_TARGETS, FeatureDescriptor, ignore_keys
from .manifest import find_engines_range
from .options import (
    VERSION_MAP,
    ConfigurationError,
    DeprecatedApiOptions,
    FeatureOptions,
    parse_deprecated_api_options,
    parse_feature_options,
)
from .resolver import (
    DEFAULT_VERSION,
    FeatureSupport,
    SupportInfo,
    VersionConfig,
    build_support_table,
    resolve_version_config,
)

__all__ = [
    "CATALOG",
    "ConfigurationError",
    "DEFAULT_VERSION",
    "DeprecatedApiOptions",
    "FeatureDescriptor",
    "FeatureOptions",
    "FeatureSupport",
    "SUBCLASSING_TARGETS",
    "SupportInfo",
    "VERSION_MAP",
    "VersionConfig",
    "build_support_table",
    "find_engines_range",
    "ignore_keys",
    "parse_deprecated_api_options",
    "parse_feature_options",
    "resolve_version_config",
]
