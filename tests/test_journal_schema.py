import unittest

from learning.journal_schema import (
    JournalField,
    KIND_SCORE_GROUP,
    KIND_SLIDER,
    KIND_TEXT_LONG,
    KIND_TEXT_SHORT,
    any_text_answer,
    normalize_check_key,
    parse_journal_schema,
)


class JournalSchemaTests(unittest.TestCase):
    def test_parse_drops_unknown_kinds_and_maps_aliases(self):
        schema = parse_journal_schema(
            {
                "fields": [
                    {"id": "a", "type": "text"},
                    {"id": "b", "type": "group"},
                    {"id": "c", "type": "video"},
                    "garbage",
                    {"type": "checkbox", "label": "Done"},
                ]
            }
        )
        self.assertEqual([f.id for f in schema.fields], ["a", "b", "f4"])
        self.assertEqual(schema.fields[0].kind, KIND_TEXT_SHORT)
        self.assertEqual(schema.fields[1].kind, KIND_SCORE_GROUP)

    def test_parse_accepts_json_string_and_rejects_junk(self):
        schema = parse_journal_schema('{"fields": [{"id": "x", "type": "text_long", "required": true}]}')
        self.assertTrue(schema.fields[0].required)
        self.assertEqual(parse_journal_schema("not json").fields, ())
        self.assertEqual(parse_journal_schema(None).fields, ())
        self.assertFalse(parse_journal_schema([1, 2]).has_text_questions)

    def test_has_text_questions(self):
        self.assertFalse(parse_journal_schema({"fields": [{"id": "s", "type": "slider"}]}).has_text_questions)
        self.assertTrue(parse_journal_schema({"fields": [{"id": "t", "type": "text_long"}]}).has_text_questions)
        self.assertTrue(parse_journal_schema({"questions": ["Why?"]}).has_text_questions)

    def test_field_predicates(self):
        text = JournalField(id="t", kind="text_short", min_len=3)
        self.assertFalse(text.is_filled({"t": "ab "}))
        self.assertTrue(text.is_filled({"t": "abc"}))
        self.assertFalse(text.is_filled({}))

        slider = JournalField(id="s", kind="slider")
        self.assertTrue(slider.is_filled({"s": 0}))
        self.assertFalse(slider.is_filled({"s": True}))
        self.assertFalse(slider.is_filled({"s": "5"}))

        box = JournalField(id="c", kind="checkbox")
        self.assertTrue(box.is_filled({"c": True}))
        self.assertFalse(box.is_filled({"c": "true"}))

        chips = JournalField(id="k", kind="chips")
        self.assertTrue(chips.is_filled({"k": ["calm"]}))
        self.assertTrue(chips.is_filled({"k": "calm"}))
        self.assertFalse(chips.is_filled({"k": []}))

        group = JournalField(id="g", kind="score_group")
        self.assertTrue(group.is_filled({}))

    def test_missing_required_and_labels(self):
        schema = parse_journal_schema(
            {
                "fields": [
                    {"id": "why", "type": "text_long", "label": "Why today?", "required": True},
                    {"id": "opt", "type": "text_short"},
                ],
                "questions": ["Legacy prompt"],
            }
        )
        self.assertEqual([f.id for f in schema.missing_required({})], ["why"])
        self.assertEqual(schema.missing_required({"why": "because"}), [])
        self.assertEqual(schema.label_for("why"), "Why today?")
        self.assertEqual(schema.label_for("q0"), "Legacy prompt")
        self.assertEqual(schema.label_for("other"), "other")

    def test_any_text_answer(self):
        self.assertFalse(any_text_answer(None))
        self.assertFalse(any_text_answer({"a": " ", "b": 3}))
        self.assertTrue(any_text_answer({"a": " ", "b": "x"}))

    def test_keyed_questions_keep_key_label_and_placeholder(self):
        schema = parse_journal_schema(
            {
                "questions": [
                    {"key": "takeaways", "label": "Ce que je retiens", "placeholder": "3 points saillants"},
                    "Bare prompt",
                ]
            }
        )
        self.assertEqual([f.id for f in schema.text_fields()], ["takeaways", "q1"])
        self.assertEqual(schema.label_for("takeaways"), "Ce que je retiens")
        self.assertEqual(schema.field("takeaways").placeholder, "3 points saillants")
        self.assertEqual(schema.field("takeaways").kind, KIND_TEXT_LONG)
        self.assertEqual(schema.label_for("q1"), "Bare prompt")

    def test_sliders_and_checks_sections(self):
        schema = parse_journal_schema(
            {
                "sliders": [{"key": "focus", "label": "Clarté", "min": 1, "max": 5}, {"label": "no key"}],
                "checks": [{"key": "pratique", "label": "Pratique faite"}, {"key": "x", "label": "Mantra répété 3×"}],
            }
        )
        slider = schema.field("focus")
        self.assertEqual((slider.kind, slider.min, slider.max), (KIND_SLIDER, 1, 5))
        self.assertEqual([f.id for f in schema.check_fields()], ["practiced", "mantra3x"])
        self.assertEqual([f.id for f in schema.slider_fields()], ["focus"])
        self.assertFalse(schema.has_text_questions)

    def test_missing_sections_fall_back_to_defaults(self):
        schema = parse_journal_schema({"questions": ["Why?"]})
        self.assertEqual([f.id for f in schema.slider_fields()], ["energie", "focus", "paix"])
        self.assertEqual([f.id for f in schema.check_fields()], ["practiced", "mantra3x"])

        declared_empty = parse_journal_schema({"sliders": [], "checks": []})
        self.assertEqual(declared_empty.slider_fields(), [])
        self.assertEqual(declared_empty.check_fields(), [])

    def test_normalize_check_key(self):
        self.assertEqual(normalize_check_key("fait"), "practiced")
        self.assertEqual(normalize_check_key("", "Practice done"), "practiced")
        self.assertEqual(normalize_check_key("mantra_3x"), "mantra3x")
        self.assertEqual(normalize_check_key(" Gratitude "), "gratitude")


if __name__ == "__main__":
    unittest.main()
