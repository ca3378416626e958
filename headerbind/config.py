"""Per-symbol translation configuration.

The configuration is the sanctioned way to steer translation: skip
declarations a human has reviewed and found unsupported, mark methods
safe, or override derives. It is read-only once loaded.

Configuration files are TOML::

    [class.NSObject]
    skipped = true

    [class.NSString.methods.length]
    unsafe = false

    [enum.NSComparisonResult]
    use-value = true

Example
-------
::

    from headerbind.config import Config

    config = Config.load("translation-config.toml")
    config.class_data["NSObject"].skipped  # True
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from os import PathLike
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError, field_validator

from headerbind.errors import ConfigError

DEFAULT_DERIVES = "Debug, PartialEq, Eq, Hash"


@dataclass(frozen=True)
class Derives:
    """Derive list attached to generated classes.

    The value is carried through the pipeline verbatim and never
    interpreted.
    """

    value: str = DEFAULT_DERIVES

    def __str__(self) -> str:
        return f"#[derive({self.value})]"


# =============================================================================
# Per-symbol data
# =============================================================================


class _Section(BaseModel):
    # Keys in files are kebab-case; Python callers use the field names
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class MethodData(_Section):
    """Overrides for a single selector.

    :param unsafe: Whether the generated method is ``unsafe``.
    :param skipped: Omit the method entirely.
    """

    unsafe: StrictBool = True
    skipped: StrictBool = False


class ClassData(_Section):
    """Configuration for a class or protocol.

    :param skipped: Omit the class (and its categories) entirely.
    :param definition_skipped: Emit methods and protocol impls, but not
        the class declaration itself.
    :param methods: Per-selector overrides, keyed by method name.
    :param derives: Derive list for the class declaration.
    """

    skipped: StrictBool = False
    definition_skipped: StrictBool = Field(False, alias="definition-skipped")
    methods: dict[str, MethodData] = Field(default_factory=dict)
    derives: Derives = Field(default_factory=Derives)

    @field_validator("derives", mode="before")
    @classmethod
    def wrap_derives(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Derives(value)
        if not isinstance(value, Derives):
            raise ValueError("must be a string")
        return value

    def method_data(self, fn_name: str) -> MethodData:
        return self.methods.get(fn_name, MethodData())


class StructData(_Section):
    """Configuration for structs, typedefs, functions and statics."""

    skipped: StrictBool = False


class EnumConstantData(_Section):
    """Configuration for a single enum constant.

    :param use_value: Override the enum-level ``use_value`` flag for this
        constant. None defers to the enum.
    """

    skipped: StrictBool = False
    use_value: StrictBool | None = Field(None, alias="use-value")


class EnumData(_Section):
    """Configuration for an enum.

    :param use_value: Render the evaluated integer of every constant
        instead of its literal expression.
    :param constants: Per-constant overrides.
    """

    skipped: StrictBool = False
    use_value: StrictBool = Field(False, alias="use-value")
    constants: dict[str, EnumConstantData] = Field(default_factory=dict)

    def constant_data(self, name: str) -> EnumConstantData:
        return self.constants.get(name, EnumConstantData())

    def uses_value(self, name: str) -> bool:
        override = self.constant_data(name).use_value
        return self.use_value if override is None else override


# =============================================================================
# Store
# =============================================================================


class Config(_Section):
    """Read-only configuration store, keyed by symbol name.

    Each field maps one top-level TOML table (``[class]``, ``[fn]``, ...)
    to its per-symbol entries.
    """

    class_data: dict[str, ClassData] = Field(default_factory=dict, alias="class")
    protocol_data: dict[str, ClassData] = Field(default_factory=dict, alias="protocol")
    struct_data: dict[str, StructData] = Field(default_factory=dict, alias="struct")
    enum_data: dict[str, EnumData] = Field(default_factory=dict, alias="enum")
    fns: dict[str, StructData] = Field(default_factory=dict, alias="fn")
    statics: dict[str, StructData] = Field(default_factory=dict, alias="static")
    typedef_data: dict[str, StructData] = Field(default_factory=dict, alias="typedef")

    @classmethod
    def load(cls, path: str | PathLike[str]) -> Config:
        """Load configuration from a TOML file.

        :raises ConfigError: If the file is not valid TOML, or contains
            unknown keys or values of the wrong type.
        """
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(f"invalid TOML in {path}: {e}") from e
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Config:
        """Build configuration from a parsed TOML document."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(_describe(e)) from e

    def is_class_skipped(self, name: str) -> bool:
        data = self.class_data.get(name)
        return data is not None and data.skipped


def _describe(error: ValidationError) -> str:
    """Summarise validation errors, grouping unknown keys per table."""
    unknown: dict[str, list[str]] = {}
    invalid: list[str] = []
    for detail in error.errors():
        loc = [str(part) for part in detail["loc"]]
        if detail["type"] == "extra_forbidden":
            unknown.setdefault(".".join(loc[:-1]) or "configuration", []).append(loc[-1])
        else:
            invalid.append(f"{'.'.join(loc) or 'configuration'}: {detail['msg']}")
    messages = [f"unknown keys in {where}: {', '.join(sorted(keys))}" for where, keys in unknown.items()]
    return "; ".join(messages + invalid)
