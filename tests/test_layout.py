import unittest

from data_model.layout import ColumnRole, Row, TextFragment
from pdf.columns import ColumnRange, ColumnRangeTable, classify_row, classify_rows
from pdf.families import (
    QUESTION_NOTICE,
    ROLLCALL_INLINE,
    ROLLCALL_LEGACY,
    ROLLCALL_LINES,
    fiscal_year,
    select_rollcall_family,
)
from pdf.layout import reconstruct_pages, reconstruct_rows
from pdf.text_cleaner import is_blank, remove_all_ws, to_half, vertical_char
from rollcall.lexicon import DEFAULT_LEXICON


def lines(*texts):
    return [Row(fragments=(TextFragment(t),)) for t in texts]


class TextCleanerTests(unittest.TestCase):
    def test_fullwidth_digits_become_ascii(self):
        self.assertEqual(to_half("議案第１２号"), "議案第12号")

    def test_ideographic_space_is_not_blank(self):
        self.assertFalse(is_blank("　"))
        self.assertTrue(is_blank(" \t"))

    def test_remove_all_ws_drops_ideographic_space(self):
        self.assertEqual(remove_all_ws("同　意 "), "同意")

    def test_vertical_char(self):
        self.assertEqual(vertical_char(" 飯 "), "飯")
        self.assertEqual(vertical_char("　"), "　")
        self.assertIsNone(vertical_char("飯島"))
        self.assertIsNone(vertical_char("○"))
        self.assertIsNone(vertical_char("の"))
        self.assertEqual(vertical_char("の", allow_hiragana=True), "の")


class ReconstructRowsTests(unittest.TestCase):
    def test_groups_by_y_within_tolerance_and_orders_by_x(self):
        frags = [
            TextFragment("b", x=200, y=700),
            TextFragment("a", x=80, y=702),
            TextFragment("c", x=80, y=650),
        ]
        rows = reconstruct_rows(frags)
        self.assertEqual([r.text for r in rows], ["ab", "c"])

    def test_rows_split_beyond_tolerance(self):
        frags = [TextFragment("a", x=10, y=700), TextFragment("b", x=20, y=694)]
        self.assertEqual(len(reconstruct_rows(frags, tolerance=5)), 2)
        self.assertEqual(len(reconstruct_rows(frags, tolerance=6)), 1)

    def test_line_stream_keeps_one_row_per_line(self):
        frags = [TextFragment("議案第1号"), TextFragment("  "), TextFragment("　"), TextFragment("○○")]
        rows = reconstruct_rows(frags)
        self.assertEqual([r.text for r in rows], ["議案第1号", "　", "○○"])

    def test_empty_input(self):
        self.assertEqual(reconstruct_rows([]), [])
        self.assertEqual(reconstruct_pages([[], []]), [])

    def test_pages_are_reconstructed_separately(self):
        page1 = [TextFragment("p1", x=10, y=100)]
        page2 = [TextFragment("p2", x=10, y=800)]
        self.assertEqual([r.text for r in reconstruct_pages([page1, page2])], ["p1", "p2"])


class ColumnClassifierTests(unittest.TestCase):
    def test_question_columns_by_x_boundaries(self):
        table = QUESTION_NOTICE.columns
        self.assertEqual(table.role_of(TextFragment("1", x=74, y=0)), ColumnRole.ORDER)
        self.assertEqual(table.role_of(TextFragment("t", x=75, y=0)), ColumnRole.ITEM_TITLE)
        self.assertEqual(table.role_of(TextFragment("d", x=190, y=0)), ColumnRole.DETAIL)
        self.assertEqual(table.role_of(TextFragment("r", x=480, y=0)), ColumnRole.RESPONDENT)
        self.assertEqual(table.role_of(TextFragment("?")), ColumnRole.UNCLASSIFIED)

    def test_unclassified_fragments_are_skipped(self):
        table = ColumnRangeTable(ranges=(ColumnRange(0, 100, ColumnRole.ITEM_TITLE),))
        row = Row(fragments=(TextFragment("in", x=10, y=0), TextFragment("out", x=150, y=0)))
        classified = classify_row(row, table)
        self.assertEqual(classified.text(ColumnRole.ITEM_TITLE), "in")
        self.assertEqual(classified.roles, {ColumnRole.ITEM_TITLE})

    def test_line_rules_mark_vertical_glyphs(self):
        classified = classify_rows(lines("飯", "議案第1号", "　"), ROLLCALL_LINES)
        self.assertEqual(
            [c.roles for c in classified],
            [{ColumnRole.MEMBER_NAME_BLOCK}, {ColumnRole.VOTE_AREA}, {ColumnRole.MEMBER_NAME_BLOCK}],
        )


class FamilySelectionTests(unittest.TestCase):
    def test_fiscal_year(self):
        self.assertEqual(fiscal_year("令和2年第1回定例会"), 2020)
        self.assertEqual(fiscal_year("令和元年第3回定例会"), 2019)
        self.assertEqual(fiscal_year("平成30年第4回定例会"), 2018)
        self.assertEqual(fiscal_year("令和７年第４回定例会"), 2025)
        self.assertIsNone(fiscal_year("定例会"))

    def test_family_from_session_year(self):
        pattern = DEFAULT_LEXICON.bill_pattern
        self.assertIs(select_rollcall_family("令和2年第1回定例会", [], pattern), ROLLCALL_INLINE)
        self.assertIs(select_rollcall_family("令和元年第4回定例会", [], pattern), ROLLCALL_LEGACY)
        self.assertIs(select_rollcall_family("平成28年第1回定例会", [], pattern), ROLLCALL_LEGACY)

    def test_family_from_first_bill_row(self):
        pattern = DEFAULT_LEXICON.bill_pattern
        inline = lines("表決結果", "議案第1号 桐生市税条例の一部を改正する条例案")
        legacy = lines("表決結果", "議案第1号", "○○○")
        self.assertIs(select_rollcall_family("", inline, pattern), ROLLCALL_INLINE)
        self.assertIs(select_rollcall_family(None, legacy, pattern), ROLLCALL_LEGACY)
        self.assertIs(select_rollcall_family("", lines("表決結果"), pattern), ROLLCALL_INLINE)


if __name__ == "__main__":
    unittest.main()
