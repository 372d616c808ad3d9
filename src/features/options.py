"""
Validation of user supplied rule options.

Raw options come from the command line or a JSON config file. They are
validated here, before any analysis runs; everything downstream consumes the
frozen models and can assume well-formed values.
"""

from __future__ import annotations

import re
from typing import Any, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .catalog import ignore_keys

VERSION_MAP = {
    0.10: "0.10.0",
    0.12: "0.12.0",
    4: "4.0.0",
    5: "5.0.0",
    6: "6.0.0",
    6.5: "6.5.0",
    7: "7.0.0",
    7.6: "7.6.0",
    8: "8.0.0",
    8.3: "8.3.0",
    9: "9.0.0",
    10: "10.0.0",
}

_SEMVER_PATTERN = re.compile(r"^(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)\.(?:0|[1-9]\d*)$")


class ConfigurationError(ValueError):
    """Raised when rule options fail validation."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


def _raise_from(rule: str, exc: ValidationError) -> ConfigurationError:
    details = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "options"
        details.append(f"{location}: {error.get('msg')}")
    return ConfigurationError(f"Invalid options for '{rule}': " + "; ".join(details), details)


class FeatureOptions(BaseModel):
    """Options of the unsupported-features rule."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    version: Optional[Union[float, str]] = Field(
        None, description="Numeric shorthand from VERSION_MAP or a literal 'x.y.z' version."
    )
    ignores: List[str] = Field(default_factory=list, description="Feature keys or aliases to skip.")

    @field_validator("version")
    @classmethod
    def validate_version(cls, v: Optional[Union[float, str]]) -> Optional[Union[float, str]]:
        if v is None:
            return v
        if isinstance(v, str):
            if not _SEMVER_PATTERN.match(v):
                raise ValueError(f"'{v}' is not a 'major.minor.patch' version")
            return v
        if v not in VERSION_MAP:
            allowed = ", ".join(str(key) for key in VERSION_MAP)
            raise ValueError(f"{v} is not a known version shorthand (expected one of {allowed})")
        return v

    @field_validator("ignores")
    @classmethod
    def validate_ignores(cls, v: List[str]) -> List[str]:
        known = ignore_keys()
        unknown = [key for key in v if key not in known]
        if unknown:
            raise ValueError(f"unknown feature keys: {', '.join(unknown)}")
        if len(set(v)) != len(v):
            raise ValueError("entries must be unique")
        return v

    @property
    def explicit_version(self) -> Optional[str]:
        """The literal version selected by the options, if any."""
        if self.version is None:
            return None
        if isinstance(self.version, str):
            return self.version
        return VERSION_MAP[self.version]


class DeprecatedApiOptions(BaseModel):
    """Options of the deprecated-API rule."""

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    ignore_module_items: List[str] = Field(default_factory=list, alias="ignoreModuleItems")
    ignore_global_items: List[str] = Field(default_factory=list, alias="ignoreGlobalItems")


def parse_feature_options(raw: Union[None, int, float, str, Mapping[str, Any]]) -> FeatureOptions:
    """
    Validate the options of the unsupported-features rule.

    Accepts a version token (numeric shorthand or literal version string), a
    mapping `{"version": ..., "ignores": [...]}`, or None.

    Raises:
        ConfigurationError: If the options are malformed.
    """
    if raw is None:
        payload: Mapping[str, Any] = {}
    elif isinstance(raw, (int, float, str)) and not isinstance(raw, bool):
        payload = {"version": raw}
    elif isinstance(raw, Mapping):
        payload = raw
    else:
        raise ConfigurationError(f"Invalid options for 'no-unsupported-features': {raw!r}")
    try:
        return FeatureOptions.model_validate(payload)
    except ValidationError as exc:
        raise _raise_from("no-unsupported-features", exc) from exc


def parse_deprecated_api_options(raw: Optional[Mapping[str, Any]]) -> DeprecatedApiOptions:
    """
    Validate the options of the deprecated-API rule.

    Raises:
        ConfigurationError: If the options are malformed.
    """
    try:
        return DeprecatedApiOptions.model_validate(raw or {})
    except ValidationError as exc:
        raise _raise_from("no-deprecated-api", exc) from exc


__all__ = [
    "ConfigurationError",
    "DeprecatedApiOptions",
    "FeatureOptions",
    "VERSION_MAP",
    "parse_deprecated_api_options",
    "parse_feature_options",
]
