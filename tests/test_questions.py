import unittest

from data_model.errors import LayoutError
from data_model.layout import TextFragment
from questions import parse_question_document


def frag(text, x, y):
    return TextFragment(text, x=x, y=y)


NOTICE = [
    frag("一般質問通告一覧表", 100, 800),
    frag("順", 30, 780), frag("件　名", 100, 780), frag("質問項目", 200, 780), frag("答弁を求める者", 500, 780),
    frag("1", 30, 760), frag("3番 飯島 英規", 100, 760),
    frag("1 市政について", 100, 740), frag("(1) 財政の見通しについて", 200, 740), frag("市長", 500, 740),
    frag("の基本的な考え方", 100, 725), frag("と今後の課題", 200, 725),
    frag("(2) 公共施設の再編", 200, 710),
    frag("２ 子育て支援", 100, 690), frag("１ 保育所の待機児童", 200, 690), frag("教育長", 500, 690),
    frag("２", 30, 660), frag("5番　歌代　昌一", 100, 660),
    frag("1 観光振興", 100, 640), frag("(1) 桐生八木節まつり", 200, 641),
]


def parse(pages, **kwargs):
    kwargs.setdefault("session", "令和7年第4回定例会")
    kwargs.setdefault("session_slug", "r7-4-teireikai")
    kwargs.setdefault("scraped_at", "2025-12-20T00:00:00.000Z")
    return parse_question_document(pages, **kwargs)


class QuestionNoticeTests(unittest.TestCase):
    def test_members_in_order(self):
        doc = parse([NOTICE])
        self.assertEqual([(q.member_name, q.order) for q in doc.questions], [("飯島英規", 1), ("歌代昌一", 2)])

    def test_wrapped_title_and_detail_continuation(self):
        first = parse([NOTICE]).questions[0]
        self.assertEqual([i.title for i in first.items], ["市政についての基本的な考え方", "子育て支援"])
        self.assertEqual(first.items[0].details, ["財政の見通しについてと今後の課題", "公共施設の再編"])
        self.assertEqual(first.items[1].details, ["保育所の待機児童"])

    def test_rows_with_small_y_drift(self):
        second = parse([NOTICE]).questions[1]
        self.assertEqual(second.items[0].title, "観光振興")
        self.assertEqual(second.items[0].details, ["桐生八木節まつり"])

    def test_detail_before_any_item(self):
        page = [frag("1", 30, 760), frag("3番 飯島英規", 100, 760), frag("(1) 防災計画", 200, 740)]
        member = parse([page]).questions[0]
        self.assertEqual(member.items[0].title, "(不明)")
        self.assertEqual(member.items[0].details, ["防災計画"])

    def test_order_falls_back_to_sequence(self):
        page = [frag("3番 飯島英規", 100, 760), frag("5番 歌代昌一", 100, 700)]
        self.assertEqual([q.order for q in parse([page]).questions], [1, 2])

    def test_members_across_pages(self):
        doc = parse([NOTICE[:12], NOTICE[12:]])
        self.assertEqual(len(doc.questions), 2)
        self.assertEqual(doc.questions[0].items[0].details[-1], "公共施設の再編")

    def test_json_shape(self):
        data = parse([NOTICE], pdf_url="https://example.org/r7t4.pdf").to_dict()
        self.assertEqual(data["pdfUrl"], "https://example.org/r7t4.pdf")
        self.assertEqual(data["questions"][1], {
            "memberName": "歌代昌一",
            "order": 2,
            "items": [{"title": "観光振興", "details": ["桐生八木節まつり"]}],
        })

    def test_empty_document(self):
        with self.assertRaises(LayoutError):
            parse([[]])


if __name__ == "__main__":
    unittest.main()
