from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from relflow.issues.http import HttpClient, RealHttpClient
from relflow.output.console import ConsoleProtocol, RichConsole
from relflow.prompt import Prompt, TerminalPrompt


def _environ() -> dict[str, str]:
    return dict(os.environ)


@dataclass(frozen=True, slots=True)
class Runtime:
    """Blocking collaborators available to every step.

    Attributes:
        console: Progress output for Apply mode (Simulate writes to its sink)
        prompt: Interactive choices and secrets
        http: Client for issue tracker APIs
        cwd: Directory the repository is discovered from
        env: Environment variables (tracker credentials)
    """

    console: ConsoleProtocol
    prompt: Prompt
    http: HttpClient
    cwd: Path
    env: Mapping[str, str] = field(default_factory=_environ)

    @classmethod
    def default(cls) -> Runtime:
        return cls(
            console=RichConsole(),
            prompt=TerminalPrompt(),
            http=RealHttpClient(),
            cwd=Path.cwd(),
        )
