"""
Codex Loader - Reads codex documents from disk.

Loading is the caller's concern; the decision functions never touch the
filesystem. Decode failures raise CodexLoadError, schema problems are left
to the validator.
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from codex_runtime.config import settings
from codex_runtime.exceptions import CodexLoadError
from codex_runtime.logging import get_logger
from codex_runtime.schemas.codex import Codex

logger = get_logger(__name__)

BUNDLED_CODEX = "front_end_codex.v0.9.json"


def bundled_codex_path() -> Path:
    """Path of the reference codex shipped with the package."""
    return Path(__file__).parent / "data" / BUNDLED_CODEX


def _resolve_path(path: Optional[Union[str, Path]]) -> Path:
    if path is not None:
        return Path(path)
    if settings.codex_path:
        return Path(settings.codex_path)
    return bundled_codex_path()


def load_codex_document(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Read a raw codex document.

    Args:
        path: JSON file; settings.codex_path or the bundled codex when None

    Returns:
        The decoded JSON object

    Raises:
        CodexLoadError: If the file cannot be read or is not a JSON object
    """
    resolved = _resolve_path(path)
    try:
        document = json.loads(resolved.read_text(encoding="utf-8"))
    except OSError as exc:
        raise CodexLoadError(str(resolved), str(exc)) from exc
    except json.JSONDecodeError as exc:
        raise CodexLoadError(str(resolved), f"invalid JSON: {exc}") from exc

    if not isinstance(document, dict):
        raise CodexLoadError(str(resolved), "document must be a JSON object")
    return document


def load_codex(path: Optional[Union[str, Path]] = None) -> Codex:
    """
    Read and parse a codex document.

    Semantic invariants are not checked here; run validate_codex or open
    a CodexSession for that.

    Raises:
        CodexLoadError: If the file cannot be read or does not parse as a codex
    """
    resolved = _resolve_path(path)
    document = load_codex_document(resolved)
    try:
        codex = Codex.model_validate(document)
    except ValidationError as exc:
        raise CodexLoadError(str(resolved), f"{exc.error_count()} schema error(s)") from exc

    logger.codex_loaded(str(resolved), codex.codex_version)
    return codex
