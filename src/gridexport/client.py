from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from urllib.parse import urlsplit

import requests
from pydantic import ValidationError

from .config import DEFAULT_SOURCE_URL
from .model import FlowRecord, parse_records

log = logging.getLogger(__name__)


class FeedError(RuntimeError):
    pass


@dataclass(frozen=True)
class FlowFeedClient:
    """Blocking client for the physical flow map feed.

    ``connect_timeout`` bounds connection setup and each wait on the socket.
    ``request_timeout`` is a deadline for the whole request, body included.
    """

    url: str = DEFAULT_SOURCE_URL
    connect_timeout: float = 15.0
    request_timeout: float = 30.0
    session: requests.Session | None = None

    def __post_init__(self) -> None:
        if self.connect_timeout >= self.request_timeout:
            raise ValueError("connect_timeout must be shorter than request_timeout.")
        if self.session is None:
            session = requests.Session()
            session.headers.update({"Accept": "application/json"})
            object.__setattr__(self, "session", session)

    @property
    def path(self) -> str:
        return urlsplit(self.url).path

    def fetch_records(self) -> list[FlowRecord]:
        deadline = time.monotonic() + self.request_timeout
        try:
            resp = self.session.get(
                self.url,
                stream=True,
                timeout=(self.connect_timeout, self.connect_timeout),
            )
        except requests.RequestException as exc:
            raise FeedError(f"GET {self.url} failed: {exc}") from exc

        try:
            if resp.status_code != 200:
                raise FeedError(f"status: {resp.status_code}, path: {self.path}")
            log.info("Status: OK, url: %s", self.path)
            body = self._read_body(resp, deadline)
        finally:
            resp.close()

        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise FeedError(f"Response from {self.path} is not valid JSON") from exc
        try:
            return parse_records(payload)
        except ValidationError as exc:
            raise FeedError(
                f"Unexpected payload from {self.path}: {exc.error_count()} invalid field(s)"
            ) from exc

    def _read_body(self, resp: requests.Response, deadline: float) -> bytes:
        # One byte per read so the deadline is checked between socket reads;
        # urllib3 blocks until a requested chunk is full.
        buf = bytearray()
        try:
            for chunk in resp.iter_content(chunk_size=1):
                buf += chunk
                if time.monotonic() > deadline:
                    raise FeedError(
                        f"GET {self.path} exceeded {self.request_timeout}s request timeout"
                    )
        except requests.RequestException as exc:
            raise FeedError(f"Reading {self.path} failed: {exc}") from exc
        return bytes(buf)

    def close(self) -> None:
        self.session.close()
