"""Tests for availability parsing."""

import pytest

from headerbind.availability import Availability, PlatformAvailability
from headerbind.errors import MissingMetadataError


class TestParse:
    def test_no_records(self):
        availability = Availability.parse([])
        assert availability == Availability()
        assert not availability.is_deprecated
        assert str(availability) == ""

    def test_missing_records_are_fatal(self):
        with pytest.raises(MissingMetadataError, match="availability"):
            Availability.parse(None, "NSThing")

    def test_introduced_is_sorted_by_platform(self):
        availability = Availability.parse(
            [
                PlatformAvailability("macos", introduced="10.10"),
                PlatformAvailability("ios", introduced="8.0"),
            ]
        )
        assert availability.introduced == (("ios", "8.0"), ("macos", "10.10"))

    def test_platform_aliases(self):
        availability = Availability.parse([PlatformAvailability("macosx", introduced="10.5")])
        assert availability.introduced == (("macos", "10.5"),)

    def test_unknown_platforms_are_ignored(self):
        availability = Availability.parse([PlatformAvailability("swift", unavailable=True)])
        assert availability == Availability()

    def test_unconditional_deprecation(self):
        availability = Availability.parse([PlatformAvailability("*", deprecated="", message="Use -bar")])
        assert availability.is_deprecated
        assert availability.deprecated == (("*", ""),)
        assert str(availability) == '#[deprecated = "Use -bar"]'

    def test_deprecated_without_message(self):
        availability = Availability.parse([PlatformAvailability("ios", introduced="2.0", deprecated="9.0")])
        assert str(availability) == "#[deprecated]"

    def test_message_is_escaped(self):
        availability = Availability.parse([PlatformAvailability("macos", deprecated="10.0", message='Use "bar"')])
        assert str(availability) == '#[deprecated = "Use \\"bar\\""]'

    def test_unavailable(self):
        availability = Availability.parse(
            [PlatformAvailability("watchos", unavailable=True), PlatformAvailability("tvos", unavailable=True)]
        )
        assert availability.unavailable == ("tvos", "watchos")
        assert not availability.is_deprecated

    def test_first_message_wins(self):
        availability = Availability.parse(
            [
                PlatformAvailability("ios", deprecated="10.0", message="first"),
                PlatformAvailability("macos", deprecated="10.12", message="second"),
            ]
        )
        assert availability.message == "first"
