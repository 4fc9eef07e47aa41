"""Git repository adapter.

This is the only module that touches the on-disk repository. It drives the
``git`` executable and returns Result types for every operation that can
fail.

A ``Repository`` is a transient handle: callers discover it from the working
directory at the start of an operation and drop it at the end, so every step
sees the latest on-disk state.

Usage:
    match Repository.discover(Path.cwd()):
        case Err(NotAGitRepo()):
            print("not inside a repository")
        case Ok(repo):
            print(repo.head_branch())
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from relflow.core.result import Err, Ok, Result
from relflow.platform.process import ProcessError
from relflow.platform.process import run as run_process

_GIT_TIMEOUT_SECONDS = 60.0

__all__ = [
    "CommitRecord",
    "GitError",
    "NotAGitRepo",
    "Repository",
    "StatusEntry",
]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git subcommand that failed
        message: Error message (git's stderr when available)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1


@dataclass(frozen=True, slots=True)
class NotAGitRepo:
    """No repository contains the working directory."""

    path: Path


@dataclass(frozen=True, slots=True)
class StatusEntry:
    """A single entry of ``git status --porcelain``.

    Attributes:
        xy: Two-character status code (e.g., "M ", " M", "??", "!!")
        path: File path relative to the repository root
    """

    xy: str
    path: str

    @property
    def is_ignored(self) -> bool:
        """True if the path is covered by the repository's ignore rules."""
        return self.xy == "!!"

    @property
    def is_untracked(self) -> bool:
        return self.xy == "??"


@dataclass(frozen=True, slots=True)
class CommitRecord:
    """A commit id and its raw message."""

    id: str
    message: str


class Repository:
    """Git repository handle.

    Attributes:
        path: Path to the working tree root
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    @classmethod
    def discover(cls, cwd: Path) -> Result[Repository, NotAGitRepo]:
        """Find the repository containing ``cwd``."""
        result = run_process(
            ["git", "rev-parse", "--show-toplevel"], cwd=cwd, timeout=_GIT_TIMEOUT_SECONDS
        )
        match result:
            case Ok(stdout) if stdout.strip():
                return Ok(cls(Path(stdout.strip())))
            case _:
                return Err(NotAGitRepo(path=cwd))

    # -------------------------------------------------------------------------
    # Refs
    # -------------------------------------------------------------------------

    def local_branches(self) -> Result[list[str], GitError]:
        """Names of all local branches (remote-tracking branches excluded)."""
        result = self._git("for-each-ref", ["--format=%(refname)", "refs/heads"])
        if isinstance(result, Err):
            return result
        prefix = "refs/heads/"
        return Ok(
            [
                line[len(prefix) :]
                for line in result.value.splitlines()
                if line.startswith(prefix)
            ]
        )

    def branch_exists(self, name: str) -> bool:
        result = self._run(["show-ref", "--verify", "--quiet", f"refs/heads/{name}"])
        return isinstance(result, Ok)

    def create_branch(self, name: str, base: str) -> Result[str, GitError]:
        """Create local branch ``name`` at the tip commit of local branch ``base``.

        Returns:
            Ok(commit id the new branch points at)
        """
        tip = self.resolve_commit(f"refs/heads/{base}")
        if isinstance(tip, Err):
            return tip
        created = self._git("branch", ["--no-track", name, tip.value])
        if isinstance(created, Err):
            return created
        return Ok(tip.value)

    def resolve_commit(self, ref: str) -> Result[str, GitError]:
        """Resolve any ref (branch, tag, HEAD) to the commit id it points at."""
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if isinstance(result, Err):
            return Err(
                GitError(
                    command="rev-parse",
                    message=result.error.stderr.strip() or f"cannot resolve {ref} to a commit",
                    returncode=result.error.returncode,
                )
            )
        return Ok(result.value.strip())

    def peel_tag(self, tag_name: str) -> str | None:
        """Fully peel ``refs/tags/<tag_name>`` to a commit id.

        Annotated tags (including tags of tags) are followed to the commit.
        Returns None if the tag is missing or does not lead to a commit.
        """
        result = self.resolve_commit(f"refs/tags/{tag_name}")
        if isinstance(result, Err):
            return None
        return result.value

    def head_branch(self) -> str | None:
        """Short name of the branch HEAD points at.

        Returns None if HEAD is detached or does not resolve to a commit.
        """
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"])
        if isinstance(result, Err):
            return None
        if isinstance(self.resolve_commit("HEAD"), Err):
            return None
        return result.value.strip() or None

    def set_head(self, ref_name: str) -> Result[None, GitError]:
        """Point HEAD at ``ref_name`` without touching index or working tree."""
        result = self._git("symbolic-ref", ["HEAD", ref_name])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def checkout_head_force(self) -> Result[None, GitError]:
        """Make index and working tree match HEAD, overwriting local files."""
        # reset --hard is the CLI form of a forced checkout of the current HEAD
        result = self._git("reset", ["--hard", "--quiet", "HEAD"])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def rebase_onto(self, target: str) -> Result[None, GitError]:
        """Replay the commits of HEAD onto ``target``.

        Conflicts are not resolved here; they come back as a GitError and the
        rebase is left in progress for the user to finish or abort.
        """
        result = self._git("rebase", [target])
        if isinstance(result, Err):
            return result
        return Ok(None)

    # -------------------------------------------------------------------------
    # Working tree
    # -------------------------------------------------------------------------

    def status(self) -> Result[list[StatusEntry], GitError]:
        """Status entries, including ignored ones (flagged ``!!``)."""
        result = self._git(
            "status",
            ["--porcelain=v1", "-z", "--ignored=matching", "--untracked-files=all"],
        )
        if isinstance(result, Err):
            return result
        return Ok(self._parse_status(result.value))

    def add_paths(self, paths: list[Path]) -> Result[None, GitError]:
        """Stage files for a later commit."""
        if not paths:
            return Ok(None)
        result = self._git("add", ["--", *(str(p) for p in paths)])
        if isinstance(result, Err):
            return result
        return Ok(None)

    # -------------------------------------------------------------------------
    # History and tags
    # -------------------------------------------------------------------------

    def commit_log(
        self, start: str = "HEAD", exclude: str | None = None
    ) -> Result[list[CommitRecord], GitError]:
        """All ancestors of ``start`` with raw messages.

        Topological order: a commit never appears before any of its
        descendants. With ``exclude``, that commit and everything reachable
        from it are left out.
        """
        args = ["--topo-order", "--format=%H%x00%B%x1e", start]
        if exclude is not None:
            args.append(f"^{exclude}")
        result = self._git("log", args)
        if isinstance(result, Err):
            return result
        records: list[CommitRecord] = []
        for chunk in result.value.split("\x1e"):
            chunk = chunk.lstrip("\n")
            if not chunk:
                continue
            commit_id, sep, message = chunk.partition("\x00")
            if not sep:
                continue
            records.append(CommitRecord(id=commit_id.strip(), message=message))
        return Ok(records)

    def shallow_commits(self) -> set[str]:
        """Commits whose parents were cut off by a shallow clone."""
        result = self._run(["rev-parse", "--git-path", "shallow"])
        if isinstance(result, Err):
            return set()
        shallow_file = Path(result.value.strip())
        if not shallow_file.is_absolute():
            shallow_file = self.path / shallow_file
        try:
            text = shallow_file.read_text(encoding="utf-8")
        except OSError:
            return set()
        return {line.strip() for line in text.splitlines() if line.strip()}

    def tags(self) -> Result[list[str], GitError]:
        result = self._git("tag", ["--list"])
        if isinstance(result, Err):
            return result
        return Ok([line.strip() for line in result.value.splitlines() if line.strip()])

    def create_tag(self, name: str, message: str) -> Result[None, GitError]:
        """Create an annotated tag at HEAD."""
        result = self._git("tag", ["--annotate", name, "--message", message])
        if isinstance(result, Err):
            return result
        return Ok(None)

    def first_remote_url(self) -> str | None:
        """URL of the first configured remote, if any."""
        remotes = self._run(["remote"])
        if isinstance(remotes, Err):
            return None
        names = remotes.value.split()
        if not names:
            return None
        url = self._run(["remote", "get-url", names[0]])
        if isinstance(url, Err):
            return None
        return url.value.strip() or None

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        return run_process(
            ["git", "-C", str(self.path), *args], cwd=self.path, timeout=_GIT_TIMEOUT_SECONDS
        )

    def _git(self, command: str, args: list[str]) -> Result[str, GitError]:
        """Run ``git <command> <args>`` and convert failures to GitError."""
        result = self._run([command, *args])
        if isinstance(result, Err):
            e = result.error
            return Err(
                GitError(
                    command=command,
                    message=e.stderr.strip() or e.stdout.strip() or f"git {command} failed",
                    returncode=e.returncode,
                )
            )
        return result

    def _parse_status(self, output: str) -> list[StatusEntry]:
        """Parse ``git status --porcelain=v1 -z`` output.

        Renames and copies carry the original path as an extra NUL field.
        """
        fields = output.split("\0")
        entries: list[StatusEntry] = []
        i = 0
        while i < len(fields):
            item = fields[i]
            i += 1
            if len(item) < 4:
                continue
            xy = item[:2]
            entries.append(StatusEntry(xy=xy, path=item[3:]))
            if xy[0] in "RC":
                i += 1
        return entries
