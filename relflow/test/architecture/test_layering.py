"""Import-layer checks over the relflow source tree."""

from __future__ import annotations

import ast
from dataclasses import dataclass
from pathlib import Path

import pytest


@dataclass(frozen=True, slots=True)
class ImportRef:
    module: str
    line: int


def package_root() -> Path:
    return Path(__file__).resolve().parents[2]


def iter_source_files() -> list[Path]:
    root = package_root()
    files: list[Path] = []
    for path in sorted(root.rglob("*.py")):
        rel = path.relative_to(root)
        if rel.parts[0] == "test" or "__pycache__" in rel.parts:
            continue
        files.append(path)
    return files


def parse_imports(path: Path) -> list[ImportRef]:
    tree = ast.parse(path.read_text(encoding="utf-8"), filename=str(path))
    imports: list[ImportRef] = []
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            imports.extend(ImportRef(module=alias.name, line=node.lineno) for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and not node.level and node.module is not None:
            imports.append(ImportRef(module=node.module, line=node.lineno))
    return imports


def matches_prefix(module: str, prefix: str) -> bool:
    return module == prefix or module.startswith(prefix + ".")


def _offenders(prefix: str, allowed: set[str]) -> list[str]:
    root = package_root()
    offenders: list[str] = []
    for path in iter_source_files():
        rel = path.relative_to(root).as_posix()
        if rel in allowed or any(rel.startswith(a) for a in allowed if a.endswith("/")):
            continue
        for item in parse_imports(path):
            if matches_prefix(item.module, prefix):
                offenders.append(f"{rel}:{item.line}: imports '{item.module}'")
    return offenders


@pytest.mark.parametrize(
    ("library", "allowed"),
    [
        ("subprocess", {"platform/process.py"}),
        ("rich", {"output/console.py"}),
        ("typer", {"cli/", "prompt.py"}),
        ("urllib", {"issues/http.py"}),
    ],
)
def test_third_party_and_process_access_is_confined(library: str, allowed: set[str]) -> None:
    offenders = _offenders(library, allowed)
    assert not offenders, f"{library} used outside {sorted(allowed)}:\n" + "\n".join(offenders)


@pytest.mark.parametrize("layer", ["core", "platform"])
def test_base_layers_only_import_themselves(layer: str) -> None:
    root = package_root()
    offenders: list[str] = []
    for path in sorted((root / layer).rglob("*.py")):
        for item in parse_imports(path):
            if matches_prefix(item.module, "relflow") and not (
                matches_prefix(item.module, f"relflow.{layer}")
                or matches_prefix(item.module, "relflow.core")
            ):
                offenders.append(f"{path.relative_to(root)}:{item.line}: {item.module}")
    assert not offenders, "Layering violations:\n" + "\n".join(offenders)


def test_cli_is_not_imported_by_library_code() -> None:
    root = package_root()
    offenders = [
        f"{path.relative_to(root)}:{item.line}"
        for path in iter_source_files()
        if path.relative_to(root).parts[0] != "cli"
        for item in parse_imports(path)
        if matches_prefix(item.module, "relflow.cli")
    ]
    assert not offenders, "Library modules importing the CLI:\n" + "\n".join(offenders)
