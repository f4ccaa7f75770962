"""Tests for the write-once artifact store."""

from datetime import UTC, datetime

import pytest

from launchpad.diagnostics import ArtifactStore, DiagnosticArtifact, run_stamp, safe_label


@pytest.fixture
def store(tmp_path) -> ArtifactStore:
    return ArtifactStore(tmp_path / "artifacts", stamp="20261018T091500Z")


class TestNaming:
    def test_run_stamp(self):
        assert run_stamp(datetime(2026, 10, 18, 9, 15, 0, tzinfo=UTC)) == "20261018T091500Z"

    @pytest.mark.parametrize(
        "label, expected",
        [("Get printers", "Get-printers"), ("a/b\\c", "a-b-c"), ("  ", "run"), ("nightly_v1.2", "nightly_v1.2")],
    )
    def test_safe_label(self, label, expected):
        assert safe_label(label) == expected

    def test_paths_share_prefix(self, store, tmp_path):
        params = tmp_path / "get_printers.json"
        copy = store.parameter_copy_path("nightly", params)
        diag = store.diagnostic_path("nightly", params)
        assert copy.name == "20261018T091500Z_nightly_get_printers.json"
        assert diag.name == "20261018T091500Z_nightly_get_printers.diagnostic.json"

    def test_diagnostic_without_parameter_file(self, store):
        assert store.diagnostic_path("x", None).name == "20261018T091500Z_x_run.diagnostic.json"


class TestWrites:
    def test_copy_is_byte_identical(self, store, tmp_path):
        params = tmp_path / "params.json"
        params.write_bytes(b'\xef\xbb\xbf{ "ScriptName" : "x" }\r\n')
        dest = store.copy_parameter_file("x", params)
        assert dest.parent == store.root
        assert dest.read_bytes() == params.read_bytes()

    def test_copy_never_overwrites(self, store, tmp_path):
        params = tmp_path / "params.json"
        params.write_text("{}")
        store.copy_parameter_file("x", params)
        with pytest.raises(FileExistsError):
            store.copy_parameter_file("x", params)

    def test_write_diagnostic(self, store, tmp_path):
        artifact = DiagnosticArtifact(error_message="bad", script_identity="x")
        dest = store.write_diagnostic("x", artifact, tmp_path / "params.json")
        assert DiagnosticArtifact.model_validate_json(dest.read_text()) == artifact
        with pytest.raises(FileExistsError):
            store.write_diagnostic("x", artifact, tmp_path / "params.json")
