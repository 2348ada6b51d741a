"""
Tests for handler entry file resolution.
"""

import os
from pathlib import Path

import pytest

from lambda_nodejs.lambda_utils.entry import (
    EntryNotFoundError,
    HandlerNotFoundError,
    ResolutionRequest,
    ResolvedEntry,
    UnsupportedExtensionError,
    find_defining_file,
    find_entry,
    resolve_entry,
)


class TestAutomaticDiscovery:
    """Test handler discovery next to the defining file."""

    @pytest.fixture
    def defining_file(self, tmp_path):
        """Create the file that defines the functions."""
        path = tmp_path / "function.test.ts"
        path.write_text("// stack definition")
        return path

    def _request(self, defining_file, construct_id="handler1"):
        return ResolutionRequest(construct_id=construct_id, defining_file=defining_file)

    def test_finds_ts_handler(self, defining_file) -> None:
        """Test that a .ts handler is found automatically."""
        handler = defining_file.parent / "function.test.handler1.ts"
        handler.write_text("export const handler = async () => {};")

        resolved = resolve_entry(self._request(defining_file))

        assert resolved.path == handler
        assert resolved.extension == ".ts"
        assert resolved.path.is_absolute()

    def test_finds_js_handler(self, defining_file) -> None:
        handler = defining_file.parent / "function.test.handler2.js"
        handler.write_text("exports.handler = async () => {};")

        resolved = resolve_entry(self._request(defining_file, "handler2"))

        assert resolved.path == handler
        assert resolved.extension == ".js"

    def test_finds_mjs_handler(self, defining_file) -> None:
        handler = defining_file.parent / "function.test.handler3.mjs"
        handler.write_text("export const handler = async () => {};")

        resolved = resolve_entry(self._request(defining_file, "handler3"))

        assert resolved.path == handler
        assert resolved.extension == ".mjs"

    def test_ts_wins_over_js(self, defining_file) -> None:
        """Test that .ts is preferred when .ts and .js siblings both exist."""
        for ext in (".ts", ".js"):
            (defining_file.parent / f"function.test.handler1{ext}").write_text("")

        resolved = resolve_entry(self._request(defining_file))

        assert resolved.path.name == "function.test.handler1.ts"

    def test_js_wins_over_mjs(self, defining_file) -> None:
        for ext in (".js", ".mjs"):
            (defining_file.parent / f"function.test.handler1{ext}").write_text("")

        resolved = resolve_entry(self._request(defining_file))

        assert resolved.path.name == "function.test.handler1.js"

    def test_directory_with_handler_name_is_skipped(self, defining_file) -> None:
        """Test that only regular files count as handlers."""
        (defining_file.parent / "function.test.handler1.ts").mkdir()
        handler = defining_file.parent / "function.test.handler1.js"
        handler.write_text("")

        resolved = resolve_entry(self._request(defining_file))

        assert resolved.path == handler

    def test_throws_when_handler_cannot_be_found(self, defining_file) -> None:
        """Test that the error lists all three attempted paths."""
        with pytest.raises(HandlerNotFoundError) as exc_info:
            resolve_entry(self._request(defining_file, "Fn"))

        base = defining_file.parent
        expected = [base / f"function.test.Fn{ext}" for ext in (".ts", ".js", ".mjs")]
        assert exc_info.value.candidates == expected

        message = str(exc_info.value)
        assert message.startswith("Cannot find handler file")
        assert (
            f"{expected[0]}, {expected[1]} or {expected[2]}" in message
        )

    def test_stem_drops_only_last_extension(self, tmp_path) -> None:
        defining_file = tmp_path / "stack.py"
        handler = tmp_path / "stack.api.js"
        handler.write_text("")

        resolved = resolve_entry(self._request(defining_file, "api"))

        assert resolved.path == handler

    def test_resolution_is_idempotent(self, defining_file) -> None:
        (defining_file.parent / "function.test.handler1.ts").write_text("")
        request = self._request(defining_file)

        assert resolve_entry(request) == resolve_entry(request)

    def test_rejects_empty_construct_id(self, defining_file) -> None:
        with pytest.raises(ValueError, match="non-empty"):
            resolve_entry(self._request(defining_file, ""))


class TestExplicitEntry:
    """Test explicitly configured entry files."""

    @pytest.fixture(autouse=True)
    def _defining_file(self, tmp_path):
        """Set up test fixtures."""
        self.base = tmp_path
        self.defining_file = tmp_path / "stack.py"
        (tmp_path / "function.test.handler1.ts").write_text(
            "export const handler = async () => {};"
        )

    def _resolve(self, entry):
        return resolve_entry(
            ResolutionRequest(
                construct_id="Fn",
                defining_file=self.defining_file,
                entry=entry,
            )
        )

    def test_throws_when_entry_is_not_js_or_ts(self) -> None:
        with pytest.raises(
            UnsupportedExtensionError,
            match="Only JavaScript or TypeScript entry files are supported",
        ):
            self._resolve("handler.py")

    def test_extension_checked_before_existence(self) -> None:
        """Test that a missing .py entry reports the extension, not the path."""
        assert not (self.base / "missing.py").exists()

        with pytest.raises(UnsupportedExtensionError):
            self._resolve("missing.py")

    def test_accepts_tsx_symlink(self) -> None:
        """Test that a .tsx symlink to a valid .ts file resolves."""
        entry = self.base / "handler.tsx"
        os.symlink(self.base / "function.test.handler1.ts", entry)

        resolved = self._resolve(str(entry))

        assert resolved.path == entry
        assert resolved.extension == ".tsx"

    def test_throws_when_entry_does_not_exist(self) -> None:
        with pytest.raises(EntryNotFoundError, match="Cannot find entry file at") as exc_info:
            self._resolve("notfound.ts")

        assert str(self.base / "notfound.ts") in str(exc_info.value)
        assert exc_info.value.path == self.base / "notfound.ts"

    def test_throws_for_dangling_symlink(self) -> None:
        entry = self.base / "dangling.ts"
        os.symlink(self.base / "gone.ts", entry)

        with pytest.raises(EntryNotFoundError):
            self._resolve(str(entry))

    def test_resolves_relative_entry_against_defining_directory(self) -> None:
        """Test that relative entries become absolute paths."""
        lib = self.base / "aws-lambda-nodejs" / "lib"
        lib.mkdir(parents=True)
        (lib / "index.ts").write_text("")

        resolved = self._resolve("aws-lambda-nodejs/lib/index.ts")

        assert resolved.path == lib / "index.ts"
        assert resolved.path.is_absolute()

    def test_normalizes_parent_references(self) -> None:
        nested = self.base / "infra"
        nested.mkdir()
        self.defining_file = nested / "stack.py"

        resolved = self._resolve("../function.test.handler1.ts")

        assert resolved.path == self.base / "function.test.handler1.ts"

    def test_keeps_absolute_entry(self) -> None:
        entry = self.base / "function.test.handler1.ts"

        resolved = self._resolve(str(entry))

        assert resolved == ResolvedEntry(path=entry, extension=".ts")
        assert str(resolved) == str(entry)


class TestFindEntry:
    """Test the convenience wrapper that defaults to the calling file."""

    def test_defining_file_is_the_caller(self) -> None:
        assert find_defining_file() == Path(os.path.abspath(__file__))

    def test_discovers_next_to_calling_file(self) -> None:
        """Test that discovery is relative to this test module by default."""
        with pytest.raises(HandlerNotFoundError) as exc_info:
            find_entry("Fn")

        names = [c.name for c in exc_info.value.candidates]
        assert names == [
            "test_lambda_utils_entry.Fn.ts",
            "test_lambda_utils_entry.Fn.js",
            "test_lambda_utils_entry.Fn.mjs",
        ]

    def test_explicit_defining_file(self, tmp_path) -> None:
        handler = tmp_path / "app.handler.ts"
        handler.write_text("")

        assert find_entry("handler", defining_file=tmp_path / "app.py") == handler
