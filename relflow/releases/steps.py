"""Release steps: BumpVersion, PrepareRelease and Release."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from pathlib import Path

import structlog

from relflow.core.config import PackageConfig
from relflow.core.result import Err, Ok, Result
from relflow.git.history import get_commit_messages_after_last_stable_version
from relflow.git.repository import Repository
from relflow.platform.files import atomic_write_text
from relflow.platform.process import run as run_process
from relflow.releases.changelog import (
    insert_section,
    release_notes,
    render_section,
    sections_from,
)
from relflow.releases.conventional import parse_commits, rule_for
from relflow.releases.semver import Rule, Version, bump
from relflow.releases.tags import get_current_versions_from_tag, tag_name
from relflow.releases.versioned_files import (
    current_package_version,
    versioned_paths,
    write_version,
)
from relflow.runtime import Runtime
from relflow.state import Apply, ExecutionContext, PreparedRelease, Simulate, with_state
from relflow.step_errors import (
    ApiRequestError,
    InvalidPreReleaseVersion,
    IoError,
    NoMetadataFileFound,
    NoRelevantChanges,
    ReleaseNotPrepared,
    StepError,
)

logger = structlog.get_logger()

GH_RELEASE_TIMEOUT_SECONDS = 120.0


def _bumped(current: Version, rule: Rule, label: str | None) -> Result[Version, StepError]:
    result = bump(current, rule, label)
    if isinstance(result, Err):
        return Err(InvalidPreReleaseVersion(version=result.error))
    return result


def _write_versions(
    root: Path, package: PackageConfig, version: Version
) -> Result[list[Path], StepError]:
    paths = versioned_paths(root, package)
    if isinstance(paths, Err):
        return paths
    for path in paths.value:
        written = write_version(path, version)
        if isinstance(written, Err):
            return written
    return paths


def bump_version(
    rule: Rule, label: str | None, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    """Bump the package version in every versioned file."""
    package = ctx.state.package
    current = current_package_version(runtime.cwd, package)
    if isinstance(current, Err):
        return current
    new = _bumped(current.value, rule, label)
    if isinstance(new, Err):
        return new

    match ctx:
        case Simulate(sink=sink):
            sink.print(f"Would bump version from {current.value} to {new.value}")
            return Ok(ctx)
        case Apply():
            pass

    assert package is not None
    written = _write_versions(runtime.cwd, package, new.value)
    if isinstance(written, Err):
        return written
    runtime.console.success(f"Bumped version from {current.value} to {new.value}")
    return Ok(ctx)


def _next_version(
    current: Version, rule: Rule, label: str | None, last_stable: Version | None
) -> Result[Version, StepError]:
    if label is None:
        return _bumped(current, rule, None)

    base = last_stable or current.stable
    target = _bumped(base, rule, None)
    if isinstance(target, Err):
        return target
    if current.is_prerelease and current.stable == target.value:
        return _bumped(current, "pre", label)
    return Ok(replace(target.value, pre=f"{label}.0"))


def _last_stable_version(root: Path, package_name: str | None) -> Version | None:
    discovered = Repository.discover(root)
    if isinstance(discovered, Err):
        return None
    versions = get_current_versions_from_tag(package_name, discovered.value)
    if isinstance(versions, Err) or versions.value is None:
        return None
    return versions.value.stable


def prepare_release(
    prerelease_label: str | None, ctx: ExecutionContext, runtime: Runtime
) -> Result[ExecutionContext, StepError]:
    """Derive the next version from conventional commits and record the release.

    The versioned files are bumped, the changelog (if configured) gains a new
    section, and the changed files are staged. The prepared release is kept in
    the workflow state for a later ``Release`` step.
    """
    package = ctx.state.package
    if package is None or not package.versioned_files:
        return Err(NoMetadataFileFound())

    messages = get_commit_messages_after_last_stable_version(package.name, runtime.cwd)
    if isinstance(messages, Err):
        return messages
    commits = parse_commits(messages.value)
    rule = rule_for(commits)
    if rule is None:
        return Err(NoRelevantChanges())

    current = current_package_version(runtime.cwd, package)
    if isinstance(current, Err):
        return current
    last_stable = _last_stable_version(runtime.cwd, package.name)
    new = _next_version(current.value, rule, prerelease_label, last_stable)
    if isinstance(new, Err):
        return new

    notes = release_notes(sections_from(commits))
    section = render_section(new.value, notes, date.today())
    logger.debug("release_prepared", version=str(new.value), rule=rule, commits=len(commits))
    prepared = with_state(
        ctx, replace(ctx.state, release=PreparedRelease(version=new.value, notes=notes))
    )

    match ctx:
        case Simulate(sink=sink):
            sink.print(f"Would bump version from {current.value} to {new.value}")
            if package.changelog:
                sink.print(f"Would add a {new.value} section to {package.changelog}")
            return Ok(prepared)
        case Apply():
            pass

    written = _write_versions(runtime.cwd, package, new.value)
    if isinstance(written, Err):
        return written
    changed = list(written.value)

    if package.changelog:
        changelog_path = runtime.cwd / package.changelog
        try:
            existing = changelog_path.read_text(encoding="utf-8") if changelog_path.exists() else ""
            atomic_write_text(changelog_path, insert_section(existing, section))
        except OSError as e:
            return Err(IoError(path=changelog_path, message=str(e)))
        changed.append(changelog_path)

    discovered = Repository.discover(runtime.cwd)
    if isinstance(discovered, Err):
        return discovered
    staged = discovered.value.add_paths(changed)
    if isinstance(staged, Err):
        return staged

    runtime.console.success(f"Prepared release {new.value}")
    return Ok(prepared)


def release(ctx: ExecutionContext, runtime: Runtime) -> Result[ExecutionContext, StepError]:
    """Publish the prepared release as a GitHub release, or else as a Git tag."""
    prepared = ctx.state.release
    if prepared is None:
        return Err(ReleaseNotPrepared())
    package_name = ctx.state.package.name if ctx.state.package is not None else None
    tag = tag_name(prepared.version, package_name)
    github = ctx.state.github

    match ctx:
        case Simulate(sink=sink):
            if github is not None:
                sink.print(f"Would create GitHub release {tag} on {github.slug}")
            else:
                sink.print(f"Would create Git tag {tag}")
            return Ok(ctx)
        case Apply():
            pass

    if github is not None:
        cmd = [
            "gh",
            "release",
            "create",
            tag,
            "--repo",
            github.slug,
            "--title",
            f"{prepared.version} ({date.today().isoformat()})",
            "--notes",
            prepared.notes,
        ]
        if prepared.version.is_prerelease:
            cmd.append("--prerelease")
        result = run_process(cmd, cwd=runtime.cwd, timeout=GH_RELEASE_TIMEOUT_SECONDS)
        if isinstance(result, Err):
            detail = result.error.stderr.strip() or str(result.error)
            return Err(ApiRequestError(url=f"https://github.com/{github.slug}", message=detail))
        runtime.console.success(f"Created GitHub release {tag}")
        return Ok(ctx)

    discovered = Repository.discover(runtime.cwd)
    if isinstance(discovered, Err):
        return discovered
    created = discovered.value.create_tag(tag, f"Release {prepared.version}")
    if isinstance(created, Err):
        return created
    runtime.console.success(f"Created tag {tag}, don't forget to push it!")
    return Ok(ctx)
