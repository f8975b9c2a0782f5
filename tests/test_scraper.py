import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from bs4 import BeautifulSoup

from scraper.http import Fetcher, Throttle
from scraper.question_index import get_pdf_links, get_year_page_links
from scraper.sessions import load_roster, load_voting_sources, session_to_slug

INDEX_URL = "https://www.city.kiryu.lg.jp/shigikai/honkaigi/shitsusmon/index.html"

INDEX_HTML = """
<html><body>
  <ul>
    <li><a href="r7/index.html">令和7年</a></li>
    <li><a href="r6/index.html">令和6年</a></li>
    <li><a href="/shigikai/index.html">市議会トップ</a></li>
  </ul>
</body></html>
"""

YEAR_HTML = """
<html><body>
  <h1>令和7年 一般質問通告一覧表</h1>
  <div>
    <p><a href="files/tsuukoku4.pdf">令和7年桐生市議会第4回定例会 一般質問通告一覧表 (PDF 120KB)</a></p>
  </div>
  <div><p><a href="files/r7t2.pdf">通告一覧表</a></p></div>
  <h2>第3回定例会</h2>
  <div><p><a href="files/tsuukoku3.pdf">一般質問通告一覧表 (PDF 98KB)</a></p></div>
  <p><a href="files/other.html">その他</a></p>
</body></html>
"""


class FakeFetcher:
    def __init__(self, pages):
        self.pages = pages
        self.requested = []

    def fetch_html(self, url):
        self.requested.append(url)
        return BeautifulSoup(self.pages[url], "html.parser")


class SessionSlugTests(unittest.TestCase):
    def test_regular_session(self):
        self.assertEqual(session_to_slug("令和7年第4回定例会"), "r7-4-teireikai")

    def test_first_year_of_era(self):
        self.assertEqual(session_to_slug("令和元年第2回定例会"), "r1-2-teireikai")

    def test_extraordinary_session(self):
        self.assertEqual(session_to_slug("平成30年第1回臨時会"), "h30-1-rinjikai")

    def test_fullwidth_digits(self):
        self.assertEqual(session_to_slug("令和６年第３回定例会"), "r6-3-teireikai")

    def test_unknown_format(self):
        self.assertEqual(session_to_slug("特別 委員会"), "特別-委員会")


class DataDirTests(unittest.TestCase):
    def test_voting_sources_only_with_pdf_url(self):
        with tempfile.TemporaryDirectory() as tmp:
            sessions = Path(tmp)
            (sessions / "r7-4-teireikai.json").write_text(json.dumps({
                "session": "令和7年第4回定例会",
                "votingRecordPdfUrl": "https://www.city.kiryu.lg.jp/r7-4.pdf",
            }), encoding="utf-8")
            (sessions / "r7-1-rinjikai.json").write_text(json.dumps({"session": "令和7年第1回臨時会"}), encoding="utf-8")
            sources = load_voting_sources(sessions)
        self.assertEqual([(s.slug, s.session) for s in sources], [("r7-4-teireikai", "令和7年第4回定例会")])
        self.assertEqual(sources[0].pdf_url, "https://www.city.kiryu.lg.jp/r7-4.pdf")

    def test_roster(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "council-members.json"
            path.write_text(json.dumps({
                "officers": [{"name": "近藤 洋子", "seatNumber": 10, "faction": "一心会"}],
                "members": [{"name": "飯島　英規", "seatNumber": 1}, {"name": "欠員"}],
            }, ensure_ascii=False), encoding="utf-8")
            roster = load_roster(path)
            missing = load_roster(Path(tmp) / "missing.json")
        self.assertEqual(roster, frozenset({"近藤　洋子", "飯島　英規"}))
        self.assertEqual(missing, frozenset())


class QuestionIndexTests(unittest.TestCase):
    def test_year_pages(self):
        fetcher = FakeFetcher({INDEX_URL: INDEX_HTML})
        links = get_year_page_links(fetcher, INDEX_URL)
        self.assertEqual([l.label for l in links], ["令和7年", "令和6年"])
        self.assertEqual(
            links[0].url, "https://www.city.kiryu.lg.jp/shigikai/honkaigi/shitsusmon/r7/index.html"
        )

    def test_pdf_links_and_session_names(self):
        year_url = "https://www.city.kiryu.lg.jp/shigikai/honkaigi/shitsusmon/r7/index.html"
        fetcher = FakeFetcher({year_url: YEAR_HTML})
        entries = get_pdf_links(fetcher, year_url)
        self.assertEqual(
            [e.session for e in entries],
            ["令和7年第4回定例会", "令和7年第2回定例会", "令和7年第3回定例会"],
        )
        self.assertEqual(
            entries[0].pdf_url,
            "https://www.city.kiryu.lg.jp/shigikai/honkaigi/shitsusmon/r7/files/tsuukoku4.pdf",
        )
        self.assertEqual(entries[0].page_url, year_url)


class FetcherTests(unittest.TestCase):
    def test_throttle_waits_before_each_request(self):
        response = MagicMock()
        response.content = b"%PDF-"
        fetcher = Fetcher("KiryuPublicLog/1.0 (+https://kiryu.co)", Throttle(1000))
        with patch("scraper.http.time.sleep") as sleep, \
                patch.object(fetcher.session, "get", return_value=response) as get:
            self.assertEqual(fetcher.fetch_bytes("https://example.org/a.pdf"), b"%PDF-")
            fetcher.fetch_bytes("https://example.org/b.pdf")
        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(1.0)
        get.assert_called_with("https://example.org/b.pdf", timeout=30)
        self.assertEqual(fetcher.session.headers["User-Agent"], "KiryuPublicLog/1.0 (+https://kiryu.co)")
        response.raise_for_status.assert_called()


if __name__ == "__main__":
    unittest.main()
