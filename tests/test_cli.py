import argparse
import io
import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

import psycopg2
import requests
from rich.console import Console

from data_model.errors import LayoutError
from data_model.layout import TextFragment
from data_model.records import (
    BillRecord,
    MemberQuestion,
    QuestionItem,
    QuestionsDocument,
    VoteEntry,
    VoteValue,
    VotingDocument,
)
from kpl._batch import BatchResult, run_batch
from kpl._settings import Settings
from kpl._sink import has_records, question_rows, save_results, upsert, voting_rows
from kpl.cli import build_parser
from kpl.commands import apply_schema as cmd_apply_schema
from kpl.commands import voting as cmd_voting
from scraper.sessions import VotingSource
from tests.test_assembler import document


def settings(root: Path) -> Settings:
    return Settings(
        data_dir=root,
        request_interval_ms=0,
        user_agent="test",
        workers=1,
        questions_index_url="https://example.org/index.html",
    )


class ParserTests(unittest.TestCase):
    def test_subcommands(self):
        parser = build_parser()
        args = parser.parse_args(["--data-dir", "tmp", "voting", "--session", "r7-4-teireikai", "--force"])
        self.assertEqual(args.command, "voting")
        self.assertEqual(args.session, ["r7-4-teireikai"])
        self.assertTrue(args.force)
        self.assertEqual(args.out, "json")
        args = parser.parse_args(["parse", "a.pdf", "--kind", "questions"])
        self.assertEqual((args.pdf_file, args.kind), ("a.pdf", "questions"))


class SinkTests(unittest.TestCase):
    def test_voting_rows(self):
        doc = VotingDocument(
            session="令和7年第4回定例会",
            session_slug="r7-4-teireikai",
            source_url="https://example.org/r7-4.pdf",
            scraped_at="2025-12-20T00:00:00.000Z",
            records=[BillRecord("議案第1号", "条例案", "原案可決", (
                VoteEntry("飯島　英規", VoteValue.YES),
                VoteEntry("近藤　洋子", VoteValue.PRESIDING),
            ))],
        )
        rows = voting_rows(doc)
        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[1][:5], ("r7-4-teireikai", "議案第1号", 1, "近藤　洋子", "議長"))

    def test_question_rows_number_items(self):
        doc = QuestionsDocument(
            session="令和7年第4回定例会",
            session_slug="r7-4-teireikai",
            source_url="https://example.org/",
            pdf_url="https://example.org/r7t4.pdf",
            scraped_at="2025-12-20T00:00:00.000Z",
            questions=[MemberQuestion("飯島英規", 1, [QuestionItem("市政", ["財政"]), QuestionItem("教育")])],
        )
        rows = question_rows(doc)
        self.assertEqual([r[2] for r in rows], [1, 2])
        self.assertEqual(rows[0][5], ["財政"])

    def test_repeated_bill_number_gets_next_vote_seq(self):
        doc = VotingDocument(
            session="令和7年第4回定例会",
            session_slug="r7-4-teireikai",
            source_url="https://example.org/r7-4.pdf",
            scraped_at="2025-12-20T00:00:00.000Z",
            records=[
                BillRecord("議案第1号", "条例案に対する修正案", "否決", (VoteEntry("飯島　英規", VoteValue.YES),)),
                BillRecord("議案第1号", "条例案", "原案可決", (VoteEntry("飯島　英規", VoteValue.NO),)),
            ],
        )
        rows = voting_rows(doc)
        keys = [r[:4] for r in rows]
        self.assertEqual(keys, [
            ("r7-4-teireikai", "議案第1号", 1, "飯島　英規"),
            ("r7-4-teireikai", "議案第1号", 2, "飯島　英規"),
        ])
        self.assertEqual([r[4] for r in rows], ["賛成", "反対"])

    def test_member_in_two_notices_keeps_numbering(self):
        doc = QuestionsDocument(
            session="令和7年第4回定例会",
            session_slug="r7-4-teireikai",
            source_url="https://example.org/",
            pdf_url="https://example.org/r7t4.pdf",
            scraped_at="2025-12-20T00:00:00.000Z",
            questions=[
                MemberQuestion("飯島英規", 1, [QuestionItem("市政")]),
                MemberQuestion("飯島英規", 3, [QuestionItem("教育"), QuestionItem("福祉")]),
            ],
        )
        rows = question_rows(doc)
        self.assertEqual([(r[1], r[2], r[4]) for r in rows], [
            ("飯島英規", 1, "市政"), ("飯島英規", 2, "教育"), ("飯島英規", 3, "福祉"),
        ])

    def test_upsert_sends_one_row_per_key(self):
        votes = (VoteEntry("飯島　英規", VoteValue.YES), VoteEntry("飯島　英規", VoteValue.NO))
        doc = VotingDocument(
            session="令和7年第4回定例会",
            session_slug="r7-4-teireikai",
            source_url="https://example.org/r7-4.pdf",
            scraped_at="2025-12-20T00:00:00.000Z",
            records=[BillRecord("議案第1号", "条例案", "原案可決", votes)],
        )
        conn = MagicMock()
        with patch("kpl._sink.psycopg2.extras.execute_values") as execute_values:
            count = upsert(conn, doc)
        self.assertEqual(count, 1)
        rows = execute_values.call_args.args[2]
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0][4], "反対")

    def test_upsert_empty_document(self):
        doc = VotingDocument(session="", session_slug="r7-4-teireikai", source_url="", scraped_at="")
        conn = MagicMock()
        self.assertEqual(upsert(conn, doc), 0)
        conn.cursor.assert_not_called()

    def test_save_failure_is_per_document(self):
        result = BatchResult(done=[("r7-3-teireikai", "doc-3"), ("r7-4-teireikai", "doc-4")])
        saved = []

        def save(slug, doc):
            if slug == "r7-3-teireikai":
                raise psycopg2.OperationalError("ON CONFLICT DO UPDATE command cannot affect row a second time")
            saved.append(doc)

        with self.assertLogs("kpl._sink", level="ERROR") as logs:
            save_results(result, save, label=lambda slug: slug)
        self.assertEqual(saved, ["doc-4"])
        self.assertEqual(result.done, [("r7-4-teireikai", "doc-4")])
        self.assertEqual([slug for slug, _ in result.failed], ["r7-3-teireikai"])
        self.assertIn("r7-3-teireikai", logs.output[0])

    def test_has_records(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "r7-4-teireikai.json"
            self.assertFalse(has_records(path))
            path.write_text(json.dumps({"records": []}), encoding="utf-8")
            self.assertFalse(has_records(path))
            path.write_text(json.dumps({"records": [{}]}), encoding="utf-8")
            self.assertTrue(has_records(path))


class BatchTests(unittest.TestCase):
    def test_every_worker_error_is_reported_with_document_id(self):
        def worker(slug):
            if slug == "doc-2":
                raise RuntimeError("code=4: cannot parse page tree")
            if slug == "doc-3":
                raise LayoutError("brak wierszy tekstu", doc_id=slug)
            return slug.upper()

        with self.assertLogs("kpl._batch", level="ERROR") as logs:
            result = run_batch(
                ["doc-1", "doc-2", "doc-3"],
                worker,
                label=lambda slug: slug,
                workers=2,
                console=Console(file=io.StringIO()),
            )
        self.assertEqual(result.done, [("doc-1", "DOC-1")])
        failed = dict(result.failed)
        self.assertEqual(sorted(failed), ["doc-2", "doc-3"])
        self.assertIn("RuntimeError", failed["doc-2"])
        self.assertTrue(any("doc-2" in line and "Traceback" in line for line in logs.output))

    def test_empty_batch(self):
        result = run_batch([], str, label=str, workers=1, console=Console(file=io.StringIO()))
        self.assertEqual((result.done, result.failed), ([], []))


class SchemaTests(unittest.TestCase):
    def test_schema_tables_and_keys(self):
        sql = cmd_apply_schema.SCHEMA_PATH.read_text(encoding="utf-8")
        self.assertEqual(cmd_apply_schema.schema_tables(sql), ["vote_entry", "question_item"])
        self.assertIn("PRIMARY KEY (session_slug, bill_number, vote_seq, member_name)", sql)

    def test_run_executes_schema_in_one_transaction(self):
        conn = MagicMock()
        with patch("kpl.commands.apply_schema.get_connection", return_value=conn):
            cmd_apply_schema.run(argparse.Namespace())
        cur = conn.cursor.return_value.__enter__.return_value
        cur.execute.assert_called_once_with(cmd_apply_schema.SCHEMA_PATH.read_text(encoding="utf-8"))
        conn.__exit__.assert_called_once()
        conn.close.assert_called_once()

    def test_connection_error_exits(self):
        with patch(
            "kpl.commands.apply_schema.get_connection",
            side_effect=psycopg2.OperationalError("connection refused"),
        ):
            with self.assertRaises(SystemExit):
                cmd_apply_schema.run(argparse.Namespace())


class VotingCommandTests(unittest.TestCase):
    def test_select_sources_skips_existing(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp)
            (out / "r7-3-teireikai.json").write_text(json.dumps({"records": [{}]}), encoding="utf-8")
            sources = [
                VotingSource("r7-3-teireikai", "令和7年第3回定例会", "https://example.org/3.pdf"),
                VotingSource("r7-4-teireikai", "令和7年第4回定例会", "https://example.org/4.pdf"),
            ]
            todo, skipped = cmd_voting.select_sources(sources, out)
            self.assertEqual([s.slug for s in todo], ["r7-4-teireikai"])
            self.assertEqual([s.slug for s in skipped], ["r7-3-teireikai"])
            todo, skipped = cmd_voting.select_sources(sources, out, force=True)
            self.assertEqual(len(todo), 2)
            todo, _ = cmd_voting.select_sources(sources, out, only=["r7-3-teireikai"], force=True)
            self.assertEqual([s.slug for s in todo], ["r7-3-teireikai"])

    def run_voting(self, root: Path, extract):
        sessions = root / "sessions"
        sessions.mkdir()
        for slug, session in (("r7-4-teireikai", "令和7年第4回定例会"), ("r7-3-teireikai", "令和7年第3回定例会")):
            (sessions / f"{slug}.json").write_text(json.dumps({
                "session": session,
                "votingRecordPdfUrl": f"https://example.org/{slug}.pdf",
            }), encoding="utf-8")
        args = argparse.Namespace(
            settings=settings(root), session=None, force=False, lexicon=None, workers=2, out="json",
        )
        with patch("kpl.commands.voting.Fetcher") as fetcher_cls, \
                patch("kpl.commands.voting.extract_pages", side_effect=extract):
            fetcher_cls.return_value = MagicMock()
            cmd_voting.run(args)

    def test_writes_documents_and_continues_after_failure(self):
        pages = [[TextFragment(line) for line in document().split("\n")]]

        def extract(data, mode, doc_id):
            if doc_id == "r7-3-teireikai":
                raise LayoutError("nie można otworzyć PDF", doc_id=doc_id)
            return pages

        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self.run_voting(root, extract)
            written = json.loads((root / "voting" / "r7-4-teireikai.json").read_text(encoding="utf-8"))
            self.assertFalse((root / "voting" / "r7-3-teireikai.json").exists())
        self.assertEqual(written["sessionSlug"], "r7-4-teireikai")
        self.assertEqual(len(written["records"]), 5)

    def test_unexpected_error_keeps_finished_documents(self):
        pages = [[TextFragment(line) for line in document().split("\n")]]

        def extract(data, mode, doc_id):
            if doc_id == "r7-3-teireikai":
                raise IndexError("list index out of range")
            return pages

        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            with self.assertLogs("kpl._batch", level="ERROR"):
                self.run_voting(root, extract)
            self.assertTrue((root / "voting" / "r7-4-teireikai.json").exists())
            self.assertFalse((root / "voting" / "r7-3-teireikai.json").exists())

    def test_network_errors_are_per_document(self):
        def extract(data, mode, doc_id):
            raise requests.ConnectionError("offline")

        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            self.run_voting(root, extract)
            self.assertFalse((root / "voting").exists())


if __name__ == "__main__":
    unittest.main()
