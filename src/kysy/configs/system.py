from typing import Literal

from pydantic import BaseModel, Field, field_validator

from kysy.core.prompt import DEFAULT_PREAMBLE


class InferenceConfig(BaseModel):
    """Inference server connection settings."""

    endpoint: str = Field(
        default="http://localhost:11434/api/generate",
        description="Generate endpoint of the local inference server",
    )
    model: str = Field(default="llama3", description="Model identifier to request")
    timeout_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Upper bound on a single request/response exchange",
    )


class ContextConfig(BaseModel):
    """Conversation context persistence settings."""

    filename: str = Field(
        default="context.json",
        description="Context file name inside the config directory",
    )
    discard_corrupt: bool = Field(
        default=True,
        description="Start a fresh conversation instead of failing on a corrupt file",
    )


class PromptConfig(BaseModel):
    """Prompt composition settings."""

    preamble: str = Field(
        default=DEFAULT_PREAMBLE,
        description="Instruction text placed before the user's question",
    )


class LoggingConfig(BaseModel):
    """Diagnostic logging settings (stderr)."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING", description="Root log level (case-insensitive)"
    )
    json_output: bool = Field(
        default=False, description="Emit JSON lines instead of plain text"
    )

    @field_validator("level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value
