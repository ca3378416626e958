"""Platform availability of declarations.

Frontends report one :class:`PlatformAvailability` record per platform
mentioned by ``API_AVAILABLE`` / ``API_DEPRECATED`` style attributes.
Records with platform ``"*"`` carry the unconditional
``deprecated`` / ``unavailable`` attributes.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from headerbind.errors import MissingMetadataError

# Platform names as spelled by clang, mapped to the names we use.
_PLATFORM_NAMES: dict[str, str] = {
    "macos": "macos",
    "macosx": "macos",
    "ios": "ios",
    "maccatalyst": "maccatalyst",
    "tvos": "tvos",
    "watchos": "watchos",
    "visionos": "visionos",
    "xros": "visionos",
}


@dataclass(frozen=True)
class PlatformAvailability:
    """Raw availability record for a single platform."""

    platform: str
    introduced: str | None = None
    deprecated: str | None = None
    obsoleted: str | None = None
    unavailable: bool = False
    message: str | None = None


@dataclass(frozen=True)
class Availability:
    """Normalised availability of a declaration.

    :param introduced: ``(platform, version)`` pairs, sorted by platform.
    :param deprecated: ``(platform, version)`` pairs, sorted by platform.
        The version is empty for unconditional deprecation.
    :param unavailable: Platforms the declaration is unavailable on.
    :param message: Deprecation message, if one was given.
    """

    introduced: tuple[tuple[str, str], ...] = ()
    deprecated: tuple[tuple[str, str], ...] = ()
    unavailable: tuple[str, ...] = ()
    message: str | None = None

    @classmethod
    def parse(
        cls,
        records: Sequence[PlatformAvailability] | None,
        entity: object = None,
    ) -> Availability:
        """Build an :class:`Availability` from frontend records.

        :param records: Records from ``Entity.get_platform_availability()``.
        :param entity: Entity the records belong to, for error messages.
        :raises MissingMetadataError: If the frontend had no availability
            information at all (``records`` is None).
        """
        if records is None:
            raise MissingMetadataError("availability", entity)

        introduced: dict[str, str] = {}
        deprecated: dict[str, str] = {}
        unavailable: set[str] = set()
        message: str | None = None

        for record in records:
            if record.platform == "*":
                platform = "*"
            else:
                name = _PLATFORM_NAMES.get(record.platform.lower())
                if name is None:
                    # "swift", "driverkit", ... are irrelevant for bindings
                    continue
                platform = name
            if record.introduced:
                introduced[platform] = record.introduced
            if record.deprecated is not None:
                deprecated[platform] = record.deprecated
            if record.unavailable:
                unavailable.add(platform)
            if record.message and message is None:
                message = record.message

        return cls(
            introduced=tuple(sorted(introduced.items())),
            deprecated=tuple(sorted(deprecated.items())),
            unavailable=tuple(sorted(unavailable)),
            message=message,
        )

    @property
    def is_deprecated(self) -> bool:
        return bool(self.deprecated)

    def __str__(self) -> str:
        if not self.deprecated:
            return ""
        if self.message:
            escaped = self.message.replace("\\", "\\\\").replace('"', '\\"')
            return f'#[deprecated = "{escaped}"]'
        return "#[deprecated]"
