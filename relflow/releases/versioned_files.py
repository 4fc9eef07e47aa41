"""Reading and writing the version in package metadata files.

Supported files:
- ``pyproject.toml``: ``[project] version``, else ``[tool.poetry] version``
- ``package.json``: top-level ``version``
- ``Cargo.toml``: ``[package] version``

TOML files are edited in place (only the version string changes) so comments
and formatting survive.
"""

from __future__ import annotations

import json
import re
import tomllib
from pathlib import Path

from relflow.core.config import PackageConfig
from relflow.core.result import Err, Ok, Result
from relflow.core.structured import as_str_dict, get_str, get_table
from relflow.platform.files import atomic_write_text
from relflow.releases.semver import Version, parse_version
from relflow.step_errors import (
    InvalidSemanticVersion,
    InvalidVersionedFile,
    IoError,
    NoMetadataFileFound,
    StepError,
)

SUPPORTED_FILES = ("pyproject.toml", "package.json", "Cargo.toml")

_VERSION_LINE_RE = re.compile(r'(?m)^(?P<lead>version\s*=\s*)"(?P<value>[^"]*)"')
_TABLE_HEADER_RE = re.compile(r"(?m)^\s*\[")


def _read_text(path: Path) -> Result[str, StepError]:
    try:
        return Ok(path.read_text(encoding="utf-8"))
    except OSError as e:
        return Err(IoError(path=path, message=str(e)))


def _write_text(path: Path, content: str) -> Result[None, StepError]:
    try:
        atomic_write_text(path, content)
    except OSError as e:
        return Err(IoError(path=path, message=str(e)))
    return Ok(None)


def _toml_table_for(path: Path, data: dict[str, object]) -> str | None:
    """Header of the table holding the version, or None if there is none."""
    if path.name == "Cargo.toml":
        package = get_table(data, "package")
        return "[package]" if package is not None and "version" in package else None
    project = get_table(data, "project")
    if project is not None and "version" in project:
        return "[project]"
    tool = get_table(data, "tool")
    poetry = get_table(tool, "poetry") if tool is not None else None
    if poetry is not None and "version" in poetry:
        return "[tool.poetry]"
    return None


def _toml_table_span(text: str, header: str) -> tuple[int, int] | None:
    """Character span of a table's body, from after its header to the next header."""
    m = re.search(rf"(?m)^\s*{re.escape(header)}\s*(#.*)?$", text)
    if m is None:
        return None
    start = m.end()
    following = _TABLE_HEADER_RE.search(text, start)
    end = following.start() if following is not None else len(text)
    return (start, end)


def _read_toml_version(path: Path, text: str) -> Result[str, StepError]:
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(InvalidVersionedFile(file_name=path.name, reason=f"invalid TOML: {e}"))
    header = _toml_table_for(path, data)
    if header is None:
        return Err(InvalidVersionedFile(file_name=path.name, reason="no version field found"))
    span = _toml_table_span(text, header)
    m = _VERSION_LINE_RE.search(text, *span) if span is not None else None
    if m is None:
        return Err(
            InvalidVersionedFile(
                file_name=path.name, reason=f"version in {header} must be a plain string"
            )
        )
    return Ok(m.group("value"))


def _read_json_version(path: Path, text: str) -> Result[str, StepError]:
    try:
        data = as_str_dict(json.loads(text))
    except json.JSONDecodeError as e:
        return Err(InvalidVersionedFile(file_name=path.name, reason=f"invalid JSON: {e}"))
    value = get_str(data, "version") if data is not None else None
    if value is None:
        return Err(
            InvalidVersionedFile(file_name=path.name, reason="expected a top-level version string")
        )
    return Ok(value)


def read_version(path: Path) -> Result[Version, StepError]:
    """Read and parse the version stored in a supported metadata file."""
    if path.name not in SUPPORTED_FILES:
        return Err(NoMetadataFileFound(file_name=path.name))
    text = _read_text(path)
    if isinstance(text, Err):
        return text

    raw = (
        _read_json_version(path, text.value)
        if path.name == "package.json"
        else _read_toml_version(path, text.value)
    )
    if isinstance(raw, Err):
        return raw
    version = parse_version(raw.value)
    if version is None:
        return Err(InvalidSemanticVersion(version=raw.value, file_name=path.name))
    return Ok(version)


def write_version(path: Path, version: Version) -> Result[None, StepError]:
    """Store ``version`` in a supported metadata file."""
    text = _read_text(path)
    if isinstance(text, Err):
        return text

    if path.name == "package.json":
        data = as_str_dict(json.loads(text.value))
        if data is None:
            return Err(InvalidVersionedFile(file_name=path.name, reason="expected an object"))
        data["version"] = str(version)
        return _write_text(path, json.dumps(data, indent=2) + "\n")

    data_toml = tomllib.loads(text.value)
    header = _toml_table_for(path, data_toml)
    span = _toml_table_span(text.value, header) if header is not None else None
    m = _VERSION_LINE_RE.search(text.value, *span) if span is not None else None
    if m is None:
        return Err(InvalidVersionedFile(file_name=path.name, reason="no version field found"))
    updated = text.value[: m.start()] + f'{m.group("lead")}"{version}"' + text.value[m.end() :]
    return _write_text(path, updated)


def versioned_paths(root: Path, package: PackageConfig | None) -> Result[list[Path], StepError]:
    if package is None or not package.versioned_files:
        return Err(NoMetadataFileFound())
    return Ok([root / name for name in package.versioned_files])


def current_package_version(
    root: Path, package: PackageConfig | None
) -> Result[Version, StepError]:
    """The package version; every versioned file must agree on it."""
    paths = versioned_paths(root, package)
    if isinstance(paths, Err):
        return paths

    found: Version | None = None
    for path in paths.value:
        version = read_version(path)
        if isinstance(version, Err):
            return version
        if found is None:
            found = version.value
        elif version.value != found:
            return Err(
                InvalidVersionedFile(
                    file_name=path.name,
                    reason=f"has version {version.value}, expected {found}",
                )
            )
    assert found is not None
    return Ok(found)
