"""
Import boundary enforcement.

fragment_kernel/** must NOT import fragment_ingestion or fragment_config.
fragment_config/** must NOT import fragment_ingestion.
Ingestion is a consumer of kernel and config; they must not depend on it.
"""

import ast
import glob
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def _python_files(package: str) -> list[str]:
    return sorted(glob.glob(f"{ROOT / package}/**/*.py", recursive=True))


def _extract_imports(filepath: str) -> list[tuple[int, str]]:
    try:
        source = Path(filepath).read_text()
        tree = ast.parse(source, filename=filepath)
    except (SyntaxError, UnicodeDecodeError):
        return []
    results: list[tuple[int, str]] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                results.append((node.lineno, alias.name))
        elif isinstance(node, ast.ImportFrom):
            if node.module:
                results.append((node.lineno, node.module))
    return results


def _violations(package: str, forbidden: tuple[str, ...]) -> list[str]:
    violations: list[str] = []
    for filepath in _python_files(package):
        for lineno, module in _extract_imports(filepath):
            if any(module == f or module.startswith(f"{f}.") for f in forbidden):
                violations.append(f"  {filepath}:{lineno} imports '{module}'")
    return violations


class TestKernelIsALeaf:
    """fragment_kernel/** must not import the ingestion or config layers."""

    def test_kernel_imports(self):
        assert _python_files("fragment_kernel")
        violations = _violations("fragment_kernel", ("fragment_ingestion", "fragment_config"))
        assert not violations, (
            "Kernel must not import ingestion or config. Violations:\n" + "\n".join(violations)
        )


class TestConfigDoesNotImportIngestion:
    """fragment_config/** is pure parsing; it must not import fragment_ingestion."""

    def test_config_imports(self):
        violations = _violations("fragment_config", ("fragment_ingestion",))
        assert not violations, (
            "Config must not import fragment_ingestion. Violations:\n" + "\n".join(violations)
        )
