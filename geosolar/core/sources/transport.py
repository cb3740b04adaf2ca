"""Retrieve remote text resources over HTTP(S), FTP or the local filesystem."""

from __future__ import annotations

import ftplib
import threading
from collections.abc import Callable
from pathlib import Path, PurePosixPath
from types import TracebackType
from typing import Any
from urllib.parse import unquote, urlsplit

import httpx

from geosolar.core.config.settings import SourceConfig
from geosolar.core.exceptions.base import SourceUnavailableError
from geosolar.core.logging import get_logger

logger = get_logger(__name__)

FtpFactory = Callable[..., ftplib.FTP]


class RemoteTextTransport:
    """Fetch text resources and list remote directories.

    One instance owns at most one ``httpx.Client``. FTP sessions are opened per
    call and closed before returning.
    """

    def __init__(
        self,
        config: SourceConfig | None = None,
        *,
        http_client: httpx.Client | None = None,
        ftp_factory: FtpFactory = ftplib.FTP,
    ):
        self.config = config or SourceConfig()
        self._ftp_factory = ftp_factory
        self._owns_client = http_client is None
        self._client = http_client
        self._client_lock = threading.Lock()

    def __enter__(self) -> RemoteTextTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    @property
    def client(self) -> httpx.Client:
        with self._client_lock:
            if self._client is None:
                self._client = httpx.Client(
                    timeout=httpx.Timeout(self.config.timeout),
                    follow_redirects=True,
                    headers={"User-Agent": self.config.user_agent},
                )
            return self._client

    def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        with self._client_lock:
            if self._client is not None and self._owns_client:
                self._client.close()
                self._client = None

    def fetch_text(self, url: str, *, source_name: str | None = None) -> str:
        """Return the full text behind ``url``.

        Raises:
            SourceUnavailableError: If the resource cannot be retrieved.
        """
        parts = urlsplit(url)
        name = source_name or parts.hostname or url
        logger.debug(f"Fetching {url}")
        if parts.scheme in ("http", "https"):
            return self._fetch_http(url, name)
        if parts.scheme == "ftp":
            return self._fetch_ftp(url, name)
        if parts.scheme in ("", "file"):
            return self._read_local(url, name)
        raise SourceUnavailableError(f"Unsupported URL scheme '{parts.scheme}'", name, url=url)

    def list_directory(self, url: str, *, source_name: str | None = None) -> frozenset[str]:
        """Return the bare file names found in the remote FTP directory ``url``."""
        parts = urlsplit(url)
        name = source_name or parts.hostname or url
        if parts.scheme != "ftp":
            raise SourceUnavailableError(f"Directory listing needs an ftp:// URL, got '{url}'", name, url=url)

        def _list(ftp: ftplib.FTP) -> list[str]:
            ftp.cwd(unquote(parts.path) or "/")
            return ftp.nlst()

        entries = self._with_ftp(url, name, _list)
        return frozenset(PurePosixPath(entry).name for entry in entries if entry not in (".", ".."))

    def _fetch_http(self, url: str, name: str) -> str:
        try:
            response = self.client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            raise SourceUnavailableError(
                f"{name} answered HTTP {status} for {url}", name, url=url, status_code=status
            ) from exc
        except httpx.HTTPError as exc:
            raise SourceUnavailableError(f"Could not reach {url}: {exc}", name, url=url) from exc
        return response.text

    def _fetch_ftp(self, url: str, name: str) -> str:
        path = unquote(urlsplit(url).path)

        def _retrieve(ftp: ftplib.FTP) -> list[str]:
            lines: list[str] = []
            ftp.retrlines(f"RETR {path}", lines.append)
            return lines

        lines = self._with_ftp(url, name, _retrieve)
        return "\n".join(lines) + ("\n" if lines else "")

    def _with_ftp(self, url: str, name: str, action: Callable[[ftplib.FTP], Any]) -> Any:
        parts = urlsplit(url)
        host = parts.hostname
        if not host:
            raise SourceUnavailableError(f"FTP URL without host: {url}", name, url=url)
        try:
            with self._ftp_factory(host, timeout=self.config.timeout) as ftp:
                ftp.login(parts.username or "anonymous", parts.password or "")
                return action(ftp)
        except ftplib.all_errors as exc:
            raise SourceUnavailableError(f"FTP request to {url} failed: {exc}", name, url=url) from exc

    def _read_local(self, url: str, name: str) -> str:
        parts = urlsplit(url)
        path = Path(unquote(parts.path)) if parts.scheme == "file" else Path(url)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SourceUnavailableError(f"Could not read {path}: {exc}", name, url=url) from exc


__all__ = ["FtpFactory", "RemoteTextTransport"]
