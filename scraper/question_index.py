"""
scraper/question_index.py — wyszukiwanie PDF zawiadomień o pytaniach.

Indeks → strony roczne (tekst linku zawiera 令/平 i 年) → linki *.pdf.
Nazwa sesji dla linku, w kolejności:
  1. z tekstu linku ("令和7年桐生市議会第4回定例会")
  2. z najbliższego poprzedzającego nagłówka h2/h3 (rok uzupełniany z h1)
  3. ze wzorca nazwy pliku [rh]<rok>t<numer>
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from urllib.parse import urljoin

from bs4 import Tag

from scraper.http import Fetcher

_FULL_SESSION_RE = re.compile(r"(?:令和|平成)(?:\d+|元)年(?:桐生市議会)?第\d+回(?:定例会|臨時会)")
_PARTIAL_SESSION_RE = re.compile(r"第(\d+)回(定例会|臨時会)")
_YEAR_RE = re.compile(r"((?:令和|平成)(?:\d+|元)年)")
_FILENAME_RE = re.compile(r"([rh])(\d+)t(\d+)", re.IGNORECASE)
_PARENT_DEPTH = 10


@dataclass(frozen=True, slots=True)
class YearPageLink:
    label: str
    url: str


@dataclass(frozen=True, slots=True)
class PdfEntry:
    session: str
    pdf_url: str
    page_url: str


def _clean_session(text: str) -> str:
    return re.sub(r"\s+", "", text.replace("桐生市議会", ""))


def get_year_page_links(fetcher: Fetcher, index_url: str) -> list[YearPageLink]:
    soup = fetcher.fetch_html(index_url)
    links: list[YearPageLink] = []
    for a in soup.find_all("a", href=True):
        text = a.get_text(strip=True)
        if re.search(r"[令平]", text) and "年" in text:
            links.append(YearPageLink(label=text, url=urljoin(index_url, a["href"])))
    return links


def _session_from_headings(link: Tag, year_prefix: str) -> str:
    node = link.parent
    for _ in range(_PARENT_DEPTH):
        if node is None or not isinstance(node, Tag):
            break
        heading = node.find_previous_sibling(["h2", "h3"])
        if heading is not None:
            text = heading.get_text(strip=True)
            if m := _FULL_SESSION_RE.search(text):
                return _clean_session(m.group())
            if (m := _PARTIAL_SESSION_RE.search(text)) and year_prefix:
                return f"{year_prefix}第{m.group(1)}回{m.group(2)}"
        node = node.parent
    return ""


def session_for_link(link: Tag, href: str, year_prefix: str) -> str:
    if m := _FULL_SESSION_RE.search(link.get_text(strip=True)):
        return _clean_session(m.group())
    if session := _session_from_headings(link, year_prefix):
        return session
    if m := _FILENAME_RE.search(href):
        era = "令和" if m.group(1).lower() == "r" else "平成"
        return f"{era}{m.group(2)}年第{m.group(3)}回定例会"
    return ""


def get_pdf_links(fetcher: Fetcher, year_url: str) -> list[PdfEntry]:
    soup = fetcher.fetch_html(year_url)
    h1 = soup.find("h1")
    year_match = _YEAR_RE.search(h1.get_text(strip=True)) if h1 else None
    year_prefix = year_match.group(1) if year_match else ""

    entries: list[PdfEntry] = []
    for a in soup.select("a[href$='.pdf']"):
        href = a["href"]
        session = session_for_link(a, href, year_prefix)
        if session:
            entries.append(PdfEntry(session=session, pdf_url=urljoin(year_url, href), page_url=year_url))
    return entries
