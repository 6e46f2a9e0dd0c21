"""Terminal rendering and saving of artifacts."""

from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.text import Text

from kysy.core.errors import PersistenceError
from kysy.core.models import Artifact

OUTPUT_STEM = "output"
DEFAULT_EXTENSION = "txt"


def output_path(artifact: Artifact, directory: Path) -> Path:
    """Return ``directory/output.<ext>`` for the artifact's reported extension."""
    extension = artifact.extension.lstrip(".") or DEFAULT_EXTENSION
    return directory / f"{OUTPUT_STEM}.{extension}"


def save_artifact(artifact: Artifact, directory: Path) -> Path:
    """Write exactly the artifact's code to its output file."""
    path = output_path(artifact, directory)
    try:
        # newline="" keeps the code byte-for-byte on every platform
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(artifact.code)
    except OSError as e:
        raise PersistenceError(f"Unable to write {path}: {e}") from e
    return path


class ArtifactPresenter:
    """Formats an artifact for the terminal."""

    def __init__(self, output: TextIO | None = None, color: bool | None = None):
        """Initialize the presenter.

        Parameters
        ----------
        output
            File-like object to write to (default: stdout).
        color
            Force colors on or off; by default rich detects a terminal.
        """
        self.console = Console(
            file=output,
            force_terminal=color,
            no_color=color is False,
            highlight=False,
        )

    def render(self, question: str, artifact: Artifact) -> None:
        """Print the question, description and, when present, language and code."""
        self._print(Text("Question:"))
        self._print(Text(f"  {question}"))
        self._print(Text("Description:"))
        self._print(Text(f"  {artifact.description}", style="green"))
        if artifact.programming_language:
            self._print(
                Text.assemble("Language: ", (artifact.programming_language, "yellow"))
            )
        if artifact.code:
            self._print(Text("Code:"))
            self._print(Text(""))
            self._print(Text(artifact.code, style="black on white"))

    def saved(self, path: Path) -> None:
        self._print(Text(f"Output saved to {path}"))

    def _print(self, text: Text) -> None:
        self.console.print(text, soft_wrap=True)
