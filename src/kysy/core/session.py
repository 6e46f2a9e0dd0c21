"""One question/answer turn against the inference server.

Each call to :meth:`Session.ask` is a single linear attempt::

    Idle -> ContextLoaded -> RequestSent -> EnvelopeReceived
         -> ContextPersisted -> ArtifactParsed | ArtifactParseFailed

The updated context is written back *before* the answer text is parsed,
so a malformed answer never breaks conversation continuity.
"""

from __future__ import annotations

import logging

from kysy.configs.config import AppConfig

from .artifact import parse_artifact
from .client import InferenceClient
from .context_store import ContextStore
from .errors import CorruptState
from .models import Artifact, ConversationContext, OutboundRequest
from .prompt import compose

logger = logging.getLogger(__name__)


class Session:
    """Wires the context store, prompt composer and inference client together."""

    def __init__(
        self,
        config: AppConfig,
        store: ContextStore,
        client: InferenceClient,
    ) -> None:
        self.config = config
        self.store = store
        self.client = client

    def ask(
        self,
        question: str,
        file_content: str | None = None,
        new_conversation: bool = False,
    ) -> Artifact:
        """Send ``question`` and return the parsed artifact.

        Raises
        ------
        KysyError
            Any failure of the turn; none are retried.
        """
        with self.store.lock():
            context = self._load_context(new_conversation)
            logger.debug("State: ContextLoaded")

            request = OutboundRequest(
                model=self.config.inference.model,
                prompt=compose(question, file_content, self.config.prompt.preamble),
                context=context,
            )
            logger.debug("State: RequestSent")
            envelope = self.client.exchange(request)
            logger.debug("State: EnvelopeReceived")

            self.store.save(envelope.context)
            logger.debug("State: ContextPersisted")

        artifact = parse_artifact(envelope.response)
        logger.debug("State: ArtifactParsed")
        return artifact

    def _load_context(self, new_conversation: bool) -> ConversationContext | None:
        try:
            return self.store.load(reset_requested=new_conversation)
        except CorruptState as e:
            if not self.config.context.discard_corrupt:
                raise
            logger.warning("%s; starting a new conversation", e)
            return None
