"""
sources/base.py — Abstract base class for all data source adapters.

Each concrete source must implement:
  extract()      — fetch raw data, return polars DataFrame(s)
  transform()    — clean/normalize raw data into the stage schema
  get_metadata() — return dict with source info for the run log

The run() method orchestrates extract → transform → return and handles
timing/logging automatically. Pipelines call run() rather than the
individual methods.

Locations may be local paths or http(s) URLs. There is no retry policy:
any fetch or parse failure is raised as RetrievalError and aborts the run.
"""

from __future__ import annotations

import io
import tempfile
import time
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx
import polars as pl
import structlog

from pitcount_shared.config import settings
from pitcount_pipeline.errors import RetrievalError

log = structlog.get_logger(__name__)


def is_remote(location: str | Path) -> bool:
    """True for http(s) URLs, False for filesystem paths."""
    return str(location).lower().startswith(("http://", "https://"))


class BaseSource(ABC):
    """Abstract base for all pitcount data source adapters."""

    # Override in subclass — used for logging
    name: str = "unknown"

    def __init__(self, timeout: float | None = None) -> None:
        self._timeout = timeout if timeout is not None else settings.http_timeout
        self._log = log.bind(source_name=self.name)

    # ------------------------------------------------------------------
    # Abstract interface — subclasses must implement all three
    # ------------------------------------------------------------------

    @abstractmethod
    def extract(self, **kwargs: Any) -> Any:
        """
        Fetch raw data from the external source.

        Implementations should:
        - Read local files or GET remote ones via fetch_bytes()/download_to_tempfile()
        - Return raw polars data with all original columns preserved
        - Raise RetrievalError when the resource is unreachable or unparseable

        Args:
            **kwargs: Source-specific parameters (location, sheets, ...)

        Returns:
            Raw polars DataFrame, or a mapping of them for multi-sheet sources.
        """
        ...

    @abstractmethod
    def transform(self, raw: Any) -> Any:
        """
        Clean and normalize raw data into the stage schema.

        Args:
            raw: Value returned by extract().

        Returns:
            Normalized polars data ready for the next stage.
        """
        ...

    @abstractmethod
    def get_metadata(self) -> dict[str, Any]:
        """
        Return source-level metadata for observability.

        Should include at minimum: source_name, description.
        """
        ...

    # ------------------------------------------------------------------
    # Orchestration — pipelines call this
    # ------------------------------------------------------------------

    def run(self, **kwargs: Any) -> Any:
        """
        Extract + transform in sequence with timing and structured logging.

        Args:
            **kwargs: Forwarded to extract().

        Returns:
            Transformed polars data.

        Raises:
            Any exception from extract() or transform() after logging it.
        """
        run_log = self._log.bind(**{k: str(v) for k, v in kwargs.items()})
        run_log.info("source_run_start")

        t0 = time.monotonic()
        try:
            raw = self.extract(**kwargs)
            run_log.info(
                "extract_complete",
                raw_rows=_row_count(raw),
                duration_ms=int((time.monotonic() - t0) * 1000),
            )

            t1 = time.monotonic()
            result = self.transform(raw)
            run_log.info(
                "transform_complete",
                result_rows=_row_count(result),
                duration_ms=int((time.monotonic() - t1) * 1000),
            )

            run_log.info(
                "source_run_complete",
                total_duration_ms=int((time.monotonic() - t0) * 1000),
            )
            return result

        except Exception as exc:
            run_log.error(
                "source_run_failed",
                error=str(exc),
                duration_ms=int((time.monotonic() - t0) * 1000),
                exc_info=True,
            )
            raise

    # ------------------------------------------------------------------
    # Shared helpers available to all subclasses
    # ------------------------------------------------------------------

    def fetch_bytes(self, location: str | Path) -> bytes:
        """Return the raw bytes of a local file or remote URL."""
        if not is_remote(location):
            path = Path(location)
            try:
                return path.read_bytes()
            except OSError as exc:
                raise RetrievalError(str(location), str(exc)) from exc

        self._log.info("downloading", url=str(location))
        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                response = client.get(str(location))
                response.raise_for_status()
                return response.content
        except httpx.HTTPError as exc:
            raise RetrievalError(str(location), str(exc)) from exc

    def fetch_csv(self, location: str | Path) -> pl.DataFrame:
        """Fetch a CSV and parse it with every column as String."""
        content = self.fetch_bytes(location)
        try:
            return pl.read_csv(
                io.BytesIO(content),
                infer_schema_length=0,
                truncate_ragged_lines=True,
            )
        except (pl.exceptions.PolarsError, UnicodeDecodeError) as exc:
            raise RetrievalError(str(location), f"unparseable CSV: {exc}") from exc

    def download_to_tempfile(self, url: str, suffix: str = "") -> Path:
        """Stream a remote file to a temp file and return its path.

        The caller owns the file and must unlink it.
        """
        self._log.info("downloading", url=url)
        tmp = tempfile.NamedTemporaryFile(suffix=suffix, delete=False)
        try:
            with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
                with client.stream("GET", url) as response:
                    response.raise_for_status()
                    for chunk in response.iter_bytes(chunk_size=256 * 1024):
                        tmp.write(chunk)
            tmp.close()
            return Path(tmp.name)
        except httpx.HTTPError as exc:
            tmp.close()
            Path(tmp.name).unlink(missing_ok=True)
            raise RetrievalError(url, str(exc)) from exc
        except Exception:
            tmp.close()
            Path(tmp.name).unlink(missing_ok=True)
            raise


def _row_count(data: Any) -> int:
    if isinstance(data, dict):
        return sum(len(v) for v in data.values())
    return len(data)
