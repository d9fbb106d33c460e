"""Filesystem sink for rendered pages.

Each page is stored as ``<slug>.html`` plus a ``<slug>.json`` metadata file.
Both are written to a temporary file first and moved into place, so a crash
never leaves a half-written page behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from landing_seo.publishing.slug import is_valid_slug

logger = logging.getLogger(__name__)


def _atomic_write(path: Path, text: str) -> None:
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class FileSystemSink:
    def __init__(self, output_dir: Union[str, Path]):
        self.output_dir = Path(output_dir)

    def _path(self, identifier: str, suffix: str) -> Path:
        if not is_valid_slug(identifier):
            raise ValueError(f"Not a valid page identifier: {identifier!r}")
        return self.output_dir / f"{identifier}{suffix}"

    def save(self, identifier: str, artifact: str, metadata: Optional[dict] = None) -> Path:
        """Store the rendered page; returns the HTML path."""
        html_path = self._path(identifier, ".html")
        self.output_dir.mkdir(parents=True, exist_ok=True)
        # Metadata first: an .html file on disk always has its .json beside it
        _atomic_write(
            self._path(identifier, ".json"),
            json.dumps(metadata or {}, indent=2, ensure_ascii=False, default=str),
        )
        _atomic_write(html_path, artifact)
        logger.debug("Saved %s", html_path)
        return html_path

    def load_metadata(self, identifier: str) -> dict:
        path = self._path(identifier, ".json")
        if not path.exists():
            return {}
        return json.loads(path.read_text(encoding="utf-8"))

    def list_artifacts(self) -> list[Path]:
        if not self.output_dir.exists():
            return []
        return sorted(self.output_dir.glob("*.html"))
