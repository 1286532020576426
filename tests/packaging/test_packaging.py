"""Packaging correctness verification for mutation-summary.

Tests validate that:
- The base install imports without optional tooling
- py.typed marker is present in the wheel
- Pytest plugin entry point is registered
- Package metadata is correct

These tests inspect the built wheel and current installation rather than
creating temporary virtualenvs (faster, more reliable in CI).
"""

from __future__ import annotations

import shutil
import subprocess
import sys
import zipfile
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestBaseInstall:
    """Verify the base install exposes the public API."""

    def test_import_mutation_summary(self):  # type: ignore[no-untyped-def]
        """Top-level import succeeds."""
        import mutation_summary

        assert hasattr(mutation_summary, "project")
        assert hasattr(mutation_summary, "summarize")
        assert hasattr(mutation_summary, "compile_patterns")
        assert hasattr(mutation_summary, "MutationSummary")

    @pytest.mark.parametrize(
        "module",
        [
            "mutation_summary",
            "mutation_summary.patterns",
            "mutation_summary.queries",
            "mutation_summary.matchability",
            "mutation_summary.tree",
            "mutation_summary.tree.recorder",
            "mutation_summary.integrations._pytest_plugin",
        ],
    )
    def test_import_in_fresh_interpreter(self, module: str):  # type: ignore[no-untyped-def]
        """Each module imports first in a new process without an import cycle."""
        result = subprocess.run(
            [sys.executable, "-c", f"import {module}"],
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
        )
        assert result.returncode == 0, result.stderr

    def test_project_basic(self):  # type: ignore[no-untyped-def]
        """project() and summarize() work on the bundled tree."""
        from mutation_summary import project, summarize
        from mutation_summary.tree import element

        summary = summarize(project(element("div"), []), {"all": True})
        assert summary.is_empty()


class TestWheelContents:
    """Verify the built wheel contains required files."""

    @pytest.fixture(scope="class")
    def wheel_path(self) -> Path:
        """Build a fresh wheel and return its path."""
        if shutil.which("poetry") is None:
            pytest.skip("poetry is not installed")
        dist_dir = PROJECT_ROOT / "dist"
        # Use poetry build since that's the project's build system
        result = subprocess.run(
            ["poetry", "build", "-f", "wheel"],
            cwd=str(PROJECT_ROOT),
            capture_output=True,
            text=True,
        )
        if result.returncode != 0:
            pytest.skip(f"poetry build failed: {result.stderr}")

        wheels = sorted(dist_dir.glob("*.whl"), key=lambda p: p.stat().st_mtime)
        if not wheels:
            pytest.skip("No wheel found in dist/")
        return wheels[-1]

    def test_py_typed_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """py.typed marker must be included in the wheel."""
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            py_typed_files = [n for n in names if n.endswith("py.typed")]
            assert py_typed_files, f"py.typed not found in wheel. Contents: {names}"

    def test_no_pycache_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """__pycache__ directories must not be in the wheel."""
        with zipfile.ZipFile(wheel_path) as zf:
            pycache_files = [n for n in zf.namelist() if "__pycache__" in n]
            assert not pycache_files, f"__pycache__ found in wheel: {pycache_files}"

    def test_all_source_modules_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """All source modules must be present in the wheel."""
        expected_modules = [
            "mutation_summary/__init__.py",
            "mutation_summary/api.py",
            "mutation_summary/classifier.py",
            "mutation_summary/config.py",
            "mutation_summary/errors.py",
            "mutation_summary/ledger.py",
            "mutation_summary/matchability.py",
            "mutation_summary/names.py",
            "mutation_summary/movement.py",
            "mutation_summary/node_map.py",
            "mutation_summary/observer.py",
            "mutation_summary/patterns.py",
            "mutation_summary/projection.py",
            "mutation_summary/protocols.py",
            "mutation_summary/queries.py",
            "mutation_summary/reachability.py",
            "mutation_summary/records.py",
            "mutation_summary/states.py",
            "mutation_summary/summarizer.py",
            "mutation_summary/summary.py",
            "mutation_summary/tree/__init__.py",
            "mutation_summary/tree/builder.py",
            "mutation_summary/tree/nodes.py",
            "mutation_summary/tree/recorder.py",
            "mutation_summary/integrations/__init__.py",
            "mutation_summary/integrations/_pytest_plugin.py",
        ]
        with zipfile.ZipFile(wheel_path) as zf:
            names = zf.namelist()
            for module in expected_modules:
                assert any(module in n for n in names), (
                    f"Module {module} not found in wheel"
                )

    def test_metadata_in_wheel(self, wheel_path: Path):  # type: ignore[no-untyped-def]
        """Wheel metadata must include correct package info."""
        with zipfile.ZipFile(wheel_path) as zf:
            metadata_files = [n for n in zf.namelist() if "METADATA" in n]
            assert metadata_files, "No METADATA found in wheel"
            metadata = zf.read(metadata_files[0]).decode()
            assert (
                "mutation-summary" in metadata.lower()
                or "mutation_summary" in metadata.lower()
            )
            assert "0.1.0" in metadata


class TestPytestPluginDiscovery:
    """Verify the pytest plugin is discoverable."""

    def test_entry_point_registered(self):  # type: ignore[no-untyped-def]
        """pytest11 entry point must be registered for mutation-summary."""
        from importlib.metadata import entry_points

        pytest11_eps = entry_points(group="pytest11")

        ms_eps = [ep for ep in pytest11_eps if "mutation_summary" in str(ep.value)]
        assert ms_eps, (
            f"No pytest11 entry point found for mutation-summary. "
            f"Available: {[ep.name for ep in pytest11_eps]}"
        )

    def test_fixtures_available(self):  # type: ignore[no-untyped-def]
        """Plugin module must define both fixtures."""
        import importlib

        mod = importlib.import_module("mutation_summary.integrations._pytest_plugin")
        assert callable(mod.assert_summary)
        assert callable(mod.mutation_recorder)

    def test_plugin_discovery_via_pytest(self):  # type: ignore[no-untyped-def]
        """pytest --fixtures should list assert_summary."""
        result = subprocess.run(
            [sys.executable, "-m", "pytest", "--fixtures", "-q"],
            capture_output=True,
            text=True,
            cwd=str(PROJECT_ROOT),
        )
        assert "assert_summary" in result.stdout, (
            f"Fixture not found in pytest fixtures list. stdout: {result.stdout[:500]}"
        )


class TestPackageMetadata:
    """Verify pyproject.toml metadata completeness."""

    def test_version(self):  # type: ignore[no-untyped-def]
        """Package version must be 0.1.0."""
        import mutation_summary

        assert mutation_summary.__version__ == "0.1.0"

    def test_all_exports_resolve(self):  # type: ignore[no-untyped-def]
        """Every name in __all__ must be importable from the package."""
        import mutation_summary

        missing = [n for n in mutation_summary.__all__ if not hasattr(mutation_summary, n)]
        assert not missing, f"Missing exports: {missing}"
        assert len(set(mutation_summary.__all__)) == len(mutation_summary.__all__)
