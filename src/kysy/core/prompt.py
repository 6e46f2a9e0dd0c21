"""Prompt composition for the generate endpoint."""

DEFAULT_PREAMBLE = (
    "Only answer to me in JSON. The format you should respond to me in is as "
    'follows: {"code": string, "description": string, "programming_language": '
    'string, "extension": string}. You can use the description field to give me '
    "some information about a command. You will be answering programming "
    'questions. Use the programming_language field to respond to what language '
    'the "code" output is in. Use the "extension" field to output the file '
    "extension for the code without the dot. Remember to handle newlines "
    "correctly in the JSON and escape any characters you need to. You should "
    "always answer the description in the same language as the user is asking "
    "the question in. This is the user's question:"
)


def compose(
    question: str,
    file_content: str | None = None,
    preamble: str = DEFAULT_PREAMBLE,
) -> str:
    """Join the preamble, the question and optional file contents.

    Parts are separated by a single space. The file contents are included
    verbatim; nothing is validated, so an empty question is a legal prompt.
    """
    parts = [preamble, question]
    if file_content is not None:
        parts.append(file_content)
    return " ".join(parts)
