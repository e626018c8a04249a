"""
Emission gate — existence check, then write.

An existing file is never replaced unless the GeneratedFile asks for it
(``overwrite``, set from ``--force``).  The check and the write are not
atomic with respect to other processes; this is an interactive tool.
"""

from __future__ import annotations

import logging
from pathlib import Path

from endpoint_forge.core.errors import EmissionError, FileConflictError
from endpoint_forge.core.models.template import GeneratedFile

logger = logging.getLogger(__name__)


def write_generated_file(project_root: Path, file: GeneratedFile) -> Path:
    """Write a GeneratedFile below *project_root*.

    Args:
        project_root: Project root directory.
        file: The file to write; ``file.overwrite`` allows replacing.

    Returns:
        Absolute path of the written file.

    Raises:
        FileConflictError: The target exists and overwrite is False.
            Nothing is written.
        EmissionError: Creating the directory or writing the file failed.
    """
    target = project_root / file.path

    if target.exists() and not file.overwrite:
        logger.info("Refusing to overwrite %s", target)
        raise FileConflictError(file.path)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(file.content, encoding="utf-8")
    except OSError as e:
        raise EmissionError(file.path, e.strerror or str(e)) from e

    logger.info("Wrote generated file: %s", target)
    return target
