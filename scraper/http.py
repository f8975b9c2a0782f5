"""
scraper/http.py — pobieranie PDF i stron HTML z polityką grzecznościową.

Throttle wymusza stały odstęp przed każdym pobraniem (nie po nim), więc
pierwsze żądanie też czeka — tak jak w harmonogramie przyrostowym.
"""

from __future__ import annotations

import logging
import threading
import time

import requests
from bs4 import BeautifulSoup

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30


class Throttle:
    def __init__(self, interval_ms: int) -> None:
        self.interval = interval_ms / 1000.0
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            time.sleep(self.interval)


class Fetcher:
    """Sesja requests z nagłówkiem User-Agent i wspólnym Throttle."""

    def __init__(self, user_agent: str, throttle: Throttle, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.session = requests.Session()
        self.session.headers["User-Agent"] = user_agent
        self.throttle = throttle
        self.timeout = timeout

    def get(self, url: str) -> requests.Response:
        self.throttle.wait()
        log.debug("GET %s", url)
        resp = self.session.get(url, timeout=self.timeout)
        resp.raise_for_status()
        return resp

    def fetch_bytes(self, url: str) -> bytes:
        return self.get(url).content

    def fetch_html(self, url: str) -> BeautifulSoup:
        resp = self.get(url)
        resp.encoding = resp.apparent_encoding or "utf-8"
        return BeautifulSoup(resp.text, "html.parser")
