"""Single-shot ask command."""

import logging
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.text import Text

from kysy.configs.config import AppConfig
from kysy.core.client import InferenceClient
from kysy.core.context_store import ContextStore
from kysy.core.errors import InputFileError, KysyError, MalformedModelOutput
from kysy.core.session import Session

from .formatter import ArtifactPresenter, save_artifact

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def read_input_file(path: Path) -> str:
    """Read the file whose contents are appended to the prompt."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputFileError(f"Unable to read {path}: {e}") from e


class KysyCLI:
    """Runs one question through a session and presents the answer."""

    def __init__(
        self,
        session: Session,
        output_stream: TextIO | None = None,
        error_stream: TextIO | None = None,
        save_dir: Path | None = None,
        color: bool | None = None,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        session
            Session used to talk to the inference server.
        output_stream
            Stream for the rendered answer (default: stdout).
        error_stream
            Stream for diagnostics (default: stderr).
        save_dir
            Directory for ``--save`` output (default: working directory).
        color
            Force colors on or off; by default rich detects a terminal.
        """
        self.session = session
        self.presenter = ArtifactPresenter(output_stream, color=color)
        self.errors = Console(
            file=error_stream or sys.stderr,
            force_terminal=color,
            no_color=color is False,
            highlight=False,
        )
        self.save_dir = save_dir

    def run(
        self,
        question: str,
        file: Path | None = None,
        new_conversation: bool = False,
        save: bool = False,
    ) -> int:
        """Ask ``question`` and return the process exit status."""
        try:
            file_content = read_input_file(file) if file is not None else None
            artifact = self.session.ask(
                question,
                file_content=file_content,
                new_conversation=new_conversation,
            )
            self.presenter.render(question, artifact)
            if save:
                path = save_artifact(artifact, self.save_dir or Path.cwd())
                self.presenter.saved(path)
        except MalformedModelOutput as e:
            logger.debug("State: ArtifactParseFailed")
            self._report(e)
            self.errors.print(Text("Raw model output:"))
            self.errors.print(Text(e.raw_text), soft_wrap=True)
            return EXIT_FAILURE
        except KysyError as e:
            self._report(e)
            return EXIT_FAILURE
        return EXIT_OK

    def _report(self, error: KysyError) -> None:
        self.errors.print(
            Text.assemble(("Error", "bold red"), f" [{type(error).__name__}]: {error}"),
            soft_wrap=True,
        )


def main(
    question: str,
    file: Path | None = None,
    new_conversation: bool = False,
    save: bool = False,
    config: AppConfig | None = None,
) -> int:
    """Main entry point for the CLI.

    Parameters
    ----------
    question
        Question text, already joined from the command line.
    file
        Optional file whose contents are appended to the prompt.
    new_conversation
        Ignore the stored conversation context for this question.
    save
        Write the answer's code to ``output.<ext>``.
    config
        Application configuration (default: loaded from the environment).
    """
    if config is None:
        config = AppConfig()

    store = ContextStore(config.context_file)
    with InferenceClient(config.inference) as client:
        cli = KysyCLI(Session(config, store, client))
        return cli.run(
            question, file=file, new_conversation=new_conversation, save=save
        )
