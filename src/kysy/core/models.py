"""Wire and domain models for the inference exchange."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

ConversationContext = list[int]


class OutboundRequest(BaseModel):
    """Body POSTed to the generate endpoint."""

    model_config = ConfigDict(frozen=True)

    model: str = Field(description="Model identifier served by the inference server")
    prompt: str = Field(description="Fully composed prompt text")
    stream: Literal[False] = Field(
        default=False,
        description="Always disabled; the client reads a single response body",
    )
    context: list[int] | None = Field(
        default=None,
        description="Continuation token from the previous exchange",
    )


class TransportEnvelope(BaseModel):
    """Response body returned by the generate endpoint.

    Only ``response`` and ``context`` are read; the server's timing and
    bookkeeping fields are ignored.
    """

    model_config = ConfigDict(extra="ignore")

    response: StrictStr = Field(description="Raw answer text authored by the model")
    context: list[StrictInt] = Field(description="Updated continuation token")


class Artifact(BaseModel):
    """Structured answer the model is instructed to produce."""

    code: StrictStr = Field(description="Source code, possibly empty")
    description: StrictStr = Field(description="Explanation of the answer")
    programming_language: StrictStr = Field(
        description="Language of ``code``, possibly empty"
    )
    extension: StrictStr = Field(
        description="File extension for ``code`` without the dot, possibly empty"
    )
