"""
Content bundle loader.

Reads the quiz/review JSON bundle from disk (or the copy shipped with the
package) and turns it into a validated, immutable QuizContent model.
"""

import logging
from importlib import resources
from pathlib import Path

from pydantic import ValidationError

from lit_quiz.models import QuizContent

logger = logging.getLogger(__name__)

DEFAULT_BUNDLE = "quiz.json"


class ContentError(Exception):
    """
    Raised when a content bundle cannot be read or parsed.

    Contains the path of the offending bundle and the underlying cause.
    """

    def __init__(self, message: str, source: str | Path, cause: Exception | None = None):
        self.source = str(source)
        self.cause = cause
        super().__init__(f"Failed to load content '{source}': {message}")


def load_content(path: Path | str | None = None) -> QuizContent:
    """
    Load a quiz content bundle.

    Args:
        path: Path to a JSON bundle. Uses the packaged bundle if None.

    Returns:
        The parsed QuizContent.

    Raises:
        ContentError: If the file is missing, unreadable, or doesn't match the schema.
    """
    if path is None:
        source = f"lit_quiz.content/{DEFAULT_BUNDLE}"
        text = resources.files("lit_quiz.content").joinpath(DEFAULT_BUNDLE).read_text(
            encoding="utf-8"
        )
    else:
        source_path = Path(path) if isinstance(path, str) else path
        source = str(source_path)
        if not source_path.exists():
            raise ContentError("File not found", source_path)
        if source_path.suffix.lower() != ".json":
            raise ContentError(
                f"Unsupported file format '{source_path.suffix}'. Expected .json", source_path
            )
        try:
            text = source_path.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise ContentError(f"Could not read file: {e}", source_path, cause=e) from e

    if not text.strip():
        raise ContentError("File is empty or contains only whitespace", source)

    try:
        content = QuizContent.model_validate_json(text)
    except ValidationError as e:
        raise ContentError(f"Invalid content bundle: {e}", source, cause=e) from e

    logger.debug(
        "content_loaded source=%s multiple_choice=%s short_answer=%s essays=%s",
        source,
        len(content.multiple_choice),
        len(content.short_answer),
        len(content.essays),
    )
    return content
