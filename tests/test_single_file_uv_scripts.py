# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0"]
# ///
"""Tests for the single_file_uv_scripts feature.

Validates that every Python file is a self-describing UV script and that the
package metadata agrees with it:
  1. Each .py file begins with a PEP 723 inline metadata block declaring
     requires-python and its dependencies
  2. Every third-party import is declared in the importing file's block
  3. pyproject.toml declares the same runtime dependencies and installs
     every top-level module
  4. driver.py is the entry point, runnable with 'uv run driver.py'
"""

import re
import sys
import tomllib
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

PEP723_OPEN = "# /// script"

# import name -> distribution name
THIRD_PARTY = {
    "playwright": "playwright",
    "pydantic": "pydantic",
    "pytest": "pytest",
}

IMPORT_RE = re.compile(r"^\s*(?:from|import)\s+([A-Za-z_]\w*)", re.MULTILINE)


def _all_py_files():
    """Return all .py files in the project tree."""
    files = []
    for f in sorted(PROJECT_ROOT.rglob("*.py")):
        rel = f.relative_to(PROJECT_ROOT)
        if any(part.startswith(".") or part == "__pycache__" for part in rel.parts):
            continue
        files.append(f)
    return files


def _parse_pep723_block(text: str) -> str | None:
    """Extract the PEP 723 metadata block content from a script, or None."""
    m = re.search(r"^# /// script\s*\n((?:#[^\n]*\n)*?)# ///", text, re.MULTILINE)
    return m.group(1) if m else None


def _extract_dependencies(block: str) -> list[str]:
    """Return dependency names (version specifiers stripped) from a block."""
    clean = "\n".join(re.sub(r"^#\s?", "", line) for line in block.split("\n"))
    metadata = tomllib.loads(clean)
    return [_dist_name(d) for d in metadata.get("dependencies", [])]


def _dist_name(requirement: str) -> str:
    return re.split(r"[<>=!~\[;\s]", requirement, maxsplit=1)[0].strip()


def _third_party_imports(text: str) -> set[str]:
    return {name for name in IMPORT_RE.findall(text) if name in THIRD_PARTY}


def _pyproject() -> dict:
    with open(PROJECT_ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)


ALL_PY_FILES = _all_py_files()
ALL_PY_FILE_IDS = [str(f.relative_to(PROJECT_ROOT)) for f in ALL_PY_FILES]
ROOT_MODULES = sorted(f.stem for f in PROJECT_ROOT.glob("*.py"))


# ---------------------------------------------------------------------------
# Step 1: Each .py file begins with a PEP 723 inline metadata block
# ---------------------------------------------------------------------------

class TestStep1PEP723MetadataBlocks:
    """Every .py file must begin with a PEP 723 inline metadata block."""

    @pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
    def test_pep723_block_is_at_start(self, py_file):
        first_line = py_file.read_text().split("\n")[0]
        assert first_line.strip() == PEP723_OPEN, (
            f"{py_file.relative_to(PROJECT_ROOT)}: PEP 723 block must be the "
            f"very first line, got: {first_line!r}"
        )

    @pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
    def test_declares_requires_python_and_dependencies(self, py_file):
        block = _parse_pep723_block(py_file.read_text())
        assert block is not None, (
            f"{py_file.relative_to(PROJECT_ROOT)} missing complete PEP 723 block"
        )
        assert "requires-python" in block
        assert "dependencies" in block


# ---------------------------------------------------------------------------
# Step 2: Third-party imports are declared inline
# ---------------------------------------------------------------------------

class TestStep2ImportsDeclared:
    @pytest.mark.parametrize("py_file", ALL_PY_FILES, ids=ALL_PY_FILE_IDS)
    def test_third_party_imports_declared(self, py_file):
        text = py_file.read_text()
        declared = set(_extract_dependencies(_parse_pep723_block(text)))
        for name in _third_party_imports(text):
            assert THIRD_PARTY[name] in declared, (
                f"{py_file.relative_to(PROJECT_ROOT)} imports {name!r} but does not "
                f"declare {THIRD_PARTY[name]!r}; found: {sorted(declared)}"
            )

    def test_declared_versions_have_minimums(self):
        block = _parse_pep723_block((PROJECT_ROOT / "driver.py").read_text())
        clean = "\n".join(re.sub(r"^#\s?", "", line) for line in block.split("\n"))
        for requirement in tomllib.loads(clean)["dependencies"]:
            assert ">=" in requirement, f"{requirement} should specify a minimum version"


# ---------------------------------------------------------------------------
# Step 3: pyproject.toml agrees with the scripts
# ---------------------------------------------------------------------------

class TestStep3Pyproject:
    def test_runtime_dependencies_declared(self):
        runtime = {_dist_name(d) for d in _pyproject()["project"]["dependencies"]}
        for py_file in (PROJECT_ROOT / name for name in
                        [f"{m}.py" for m in ROOT_MODULES]):
            for name in _third_party_imports(py_file.read_text()):
                assert THIRD_PARTY[name] in runtime, (
                    f"{py_file.name} imports {name!r}, missing from pyproject dependencies"
                )

    def test_pytest_is_a_test_extra(self):
        extras = _pyproject()["project"]["optional-dependencies"]["test"]
        assert "pytest" in {_dist_name(d) for d in extras}

    def test_every_root_module_is_installed(self):
        installed = set(_pyproject()["tool"]["setuptools"]["py-modules"])
        assert installed == set(ROOT_MODULES)


# ---------------------------------------------------------------------------
# Step 4: Entry point
# ---------------------------------------------------------------------------

class TestStep4EntryPoint:
    def test_driver_has_main_guard(self):
        text = (PROJECT_ROOT / "driver.py").read_text()
        assert 'if __name__ == "__main__":' in text
        assert "argparse" in text

    def test_console_script_points_at_driver(self):
        scripts = _pyproject()["project"]["scripts"]
        assert scripts["stringer-driver"] == "driver:main"
