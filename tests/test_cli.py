"""Tests for the command-line interface."""

import json

import pytest

from headerbind import cli
from headerbind.entity import EntityKind, Node
from headerbind.typeexpr import CType

FOUNDATION = "/SDK/Frameworks/Foundation.framework/Headers"


def _alias(name: str, underlying: str, file: str) -> Node:
    return Node(EntityKind.TYPEDEF_DECL, name, underlying_type=CType(underlying), file=f"{FOUNDATION}/{file}")


class MockBackend:
    """Returns a fixed tree and records how it was called."""

    calls: list = []

    def __init__(self, entities):
        self.entities = entities

    @property
    def name(self) -> str:
        return "mock"

    def parse(self, path, args=None):
        MockBackend.calls.append((path, list(args or [])))
        return self.entities


@pytest.fixture()
def backend(monkeypatch):
    entities = [
        _alias("NSInteger", "long", "NSObjCRuntime.h"),
        _alias("NSUInteger", "unsigned long", "NSObjCRuntime.h"),
    ]
    MockBackend.calls = []
    requested = []

    def get_backend(name=None):
        requested.append(name)
        return MockBackend(entities)

    monkeypatch.setattr(cli, "get_backend", get_backend)
    monkeypatch.delenv(cli.CONFIG_ENV_VAR, raising=False)
    return entities, requested


class TestTranslate:
    def test_prints_rust(self, backend, capsys):
        assert cli.main(["translate", "Foundation.h"]) == 0
        out = capsys.readouterr().out
        assert "pub type NSInteger = c_long;" in out
        assert "pub type NSUInteger = c_ulong;" in out
        # Single header, no separator line
        assert "// Foundation/NSObjCRuntime" not in out

    def test_multiple_headers_are_labelled(self, backend, capsys):
        entities, _ = backend
        entities.append(_alias("NSStringEncoding", "unsigned long", "NSString.h"))
        assert cli.main(["translate", "Foundation.h"]) == 0
        out = capsys.readouterr().out
        assert "// Foundation/NSObjCRuntime\n" in out
        assert "// Foundation/NSString\n" in out

    def test_json_format(self, backend, capsys):
        assert cli.main(["translate", "Foundation.h", "--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [s["name"] for s in data["statements"]] == ["NSInteger", "NSUInteger"]

    def test_backend_arguments(self, backend):
        _, requested = backend
        argv = ["translate", "Foundation.h", "--backend", "mock", "--clang-arg", "-isysroot", "--clang-arg", "/SDK"]
        assert cli.main(argv) == 0
        assert requested == ["mock"]
        assert MockBackend.calls == [("Foundation.h", ["-isysroot", "/SDK"])]

    def test_library_filter(self, backend, capsys):
        assert cli.main(["translate", "Foundation.h", "--library", "AppKit"]) == 0
        assert capsys.readouterr().out == ""

    def test_output_directory(self, backend, tmp_path):
        out_dir = tmp_path / "generated"
        assert cli.main(["translate", "Foundation.h", "-o", str(out_dir)]) == 0
        written = out_dir / "Foundation" / "NSObjCRuntime.rs"
        assert written.exists()
        assert "pub type NSInteger = c_long;" in written.read_text(encoding="utf-8")

    def test_output_directory_json(self, backend, tmp_path):
        assert cli.main(["translate", "Foundation.h", "--format", "json", "-o", str(tmp_path)]) == 0
        assert (tmp_path / "Foundation" / "NSObjCRuntime.json").exists()

    def test_config_file(self, backend, tmp_path, capsys):
        config = tmp_path / "Foundation.toml"
        config.write_text("[typedef.NSUInteger]\nskipped = true\n", encoding="utf-8")
        assert cli.main(["translate", "Foundation.h", "--config", str(config)]) == 0
        out = capsys.readouterr().out
        assert "NSInteger" in out
        assert "NSUInteger" not in out

    def test_config_from_environment(self, backend, tmp_path, monkeypatch, capsys):
        config = tmp_path / "Foundation.toml"
        config.write_text("[typedef.NSInteger]\nskipped = true\n", encoding="utf-8")
        monkeypatch.setenv(cli.CONFIG_ENV_VAR, str(config))
        assert cli.main(["translate", "Foundation.h"]) == 0
        assert "pub type NSInteger" not in capsys.readouterr().out

    def test_invalid_config(self, backend, tmp_path, capsys):
        config = tmp_path / "Foundation.toml"
        config.write_text("[bogus]\n", encoding="utf-8")
        assert cli.main(["translate", "Foundation.h", "--config", str(config)]) == 2
        assert "error: unknown keys in configuration: bogus" in capsys.readouterr().err

    def test_translation_error(self, backend, capsys):
        entities, _ = backend
        entities.append(Node(EntityKind.UNKNOWN, "NSFoo", file=f"{FOUNDATION}/NSFoo.h"))
        assert cli.main(["translate", "Foundation.h"]) == 1
        assert "error: unknown declaration kind" in capsys.readouterr().err


class TestListWriters:
    def test_lists_builtin_writers(self, capsys):
        assert cli.main(["list-writers"]) == 0
        out = capsys.readouterr().out
        assert "rust (default): Rust binding declarations" in out
        assert "json: " in out


class TestArguments:
    def test_command_is_required(self):
        with pytest.raises(SystemExit):
            cli.main([])

    def test_verbose_flag(self, capsys):
        assert cli.main(["-vv", "list-writers"]) == 0
