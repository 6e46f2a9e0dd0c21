"""Parsing of the model-authored answer into an artifact."""

import json

from pydantic import ValidationError

from .errors import MalformedModelOutput
from .models import Artifact


def parse_artifact(answer_text: str) -> Artifact:
    """Parse ``answer_text`` as a strict JSON artifact.

    No fence stripping, trimming or coercion is attempted: anything other
    than a JSON object with the four string fields is rejected.
    """
    try:
        data = json.loads(answer_text)
    except json.JSONDecodeError as e:
        raise MalformedModelOutput(str(e), answer_text) from e

    if not isinstance(data, dict):
        raise MalformedModelOutput(
            f"expected a JSON object, got {type(data).__name__}", answer_text
        )

    try:
        return Artifact.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        raise MalformedModelOutput(problems, answer_text) from e
