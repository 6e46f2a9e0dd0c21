"""Persistence of the conversation context between invocations."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from kysy.infra.file_lock import FileLock

from .errors import CorruptState, PersistenceError
from .models import ConversationContext

logger = logging.getLogger(__name__)

LOCK_SUFFIX = ".lock"


class ContextStore:
    """Loads and saves the continuation token as a JSON array of integers.

    The store owns a single file whose path is handed in by the caller; it
    never resolves locations on its own.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def lock(self) -> FileLock:
        """Advisory lock to hold around a load → exchange → save cycle."""
        return FileLock(self.path.with_name(self.path.name + LOCK_SUFFIX))

    def provision(self) -> bool:
        """Create the config directory and an empty context file if absent.

        Returns True when the file had to be created. Idempotent.
        """
        if self.path.exists():
            return False
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.touch(exist_ok=True)
        except OSError as e:
            raise PersistenceError(
                f"Unable to create context file {self.path}: {e}"
            ) from e
        logger.info("Created empty context file %s", self.path)
        return True

    def load(self, reset_requested: bool = False) -> ConversationContext | None:
        """Return the stored context, or None for a fresh conversation.

        A missing file is provisioned empty. ``reset_requested`` skips the
        stored value without erasing it.
        """
        if self.provision():
            return None
        if reset_requested:
            logger.debug("Reset requested; ignoring stored context")
            return None

        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise PersistenceError(
                f"Unable to read context file {self.path}: {e}"
            ) from e

        if not raw.strip():
            return None

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptState(self.path, str(e)) from e

        # bool is an int subclass but never a valid token
        if not isinstance(data, list) or not all(
            isinstance(item, int) and not isinstance(item, bool) for item in data
        ):
            raise CorruptState(self.path, "expected a JSON array of integers")

        logger.debug("Loaded context with %d tokens", len(data))
        return data

    def save(self, context: ConversationContext) -> None:
        """Overwrite the file with ``context``."""
        payload = json.dumps(context, separators=(",", ":"))
        try:
            # "w" truncates before writing
            with open(self.path, "w", encoding="utf-8") as f:
                f.write(payload)
        except OSError as e:
            raise PersistenceError(
                f"Unable to write context file {self.path}: {e}"
            ) from e
        logger.debug("Saved context with %d tokens", len(context))
