"""Program source reading: a file path, or standard input when no path is given."""

from __future__ import annotations
import logging
import sys
from pathlib import Path
from typing import Optional

from .errors import SourceError

logger = logging.getLogger(__name__)


def read_source(path: Optional[str] = None) -> bytes:
    """Read a whole program. An empty or missing path reads stdin."""
    if not path:
        try:
            data = sys.stdin.buffer.read()
        except OSError as e:
            raise SourceError("", str(e)) from e
        logger.debug("read %d bytes from stdin", len(data))
        return data

    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        raise SourceError(path, "file not found") from None
    except OSError as e:
        raise SourceError(path, e.strerror or str(e)) from e
    logger.debug("read %d bytes from %s", len(data), path)
    return data
