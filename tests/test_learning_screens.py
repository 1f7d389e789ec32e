import unittest
from types import SimpleNamespace

from telegram.error import BadRequest

from learning import progression as pg
from learning.journal_schema import parse_journal_schema
from learning.learning_handlers import _error_text, day_text, edit_screen, outline_text
from ui import texts
from ui.keyboards import menus


def _outline(enrollment, n=3, done=()):
    units = [{"unit_index": i, "title": f"Day {i}", "mantra": ""} for i in range(1, n + 1)]
    states = [{"day": d, "completed": True} for d in done]
    return pg.compute_outline("p", enrollment, units, states)


class LearningScreensTests(unittest.TestCase):
    def test_outline_text(self):
        out = _outline({"status": "active", "current_day": 2, "intro_engaged": True}, done=(1,))
        text = outline_text(out, "Anna")
        self.assertIn("Anna", text)
        self.assertIn(texts.OUTLINE_DAY_OF.format(day=2, total=3), text)
        self.assertIn(texts.OUTLINE_PROGRESS.format(percent=33, done=1, total=3), text)

        empty = outline_text(_outline(None, n=0), "")
        self.assertIn(texts.OUTLINE_NO_UNITS, empty)

    def test_outline_keyboard_only_links_open_steps(self):
        out = _outline({"status": "active", "current_day": 2, "intro_engaged": True}, done=(1,))
        kb = menus.kb_outline("p", out)
        data = [row[0].callback_data for row in kb.inline_keyboard]
        self.assertEqual(
            data,
            ["learn:outline:p", "learn:day:p:1", "learn:day:p:2", "learn:outline:p", "learn:outline:p"],
        )
        self.assertTrue(kb.inline_keyboard[3][0].text.startswith(texts.STATE_ICONS["locked"]))

    def test_error_text_lists_missing_requirements(self):
        text = _error_text({"ok": False, "error": "INCOMPLETE_DAY", "requirements": {"practiced": False, "anyText": True}})
        self.assertIn(texts.INCOMPLETE_NOT_PRACTICED, text)
        self.assertNotIn(texts.INCOMPLETE_NO_TEXT, text)
        self.assertEqual(_error_text({"ok": False, "error": "WHATEVER"}), texts.ERRORS["SERVER_ERROR"])

    def test_day_text_and_keyboard(self):
        schema = parse_journal_schema(
            {"fields": [{"id": "why", "type": "text_long", "label": "Why?", "required": True}], "questions": ["Legacy"]}
        )
        view = {
            "day": 2,
            "unit": {"title": "Calm", "mantra": "Breathe"},
            "schema": schema,
            "state": {"data": {"q0": "old answer"}, "practiced": True},
            "missing": ["why"],
        }
        text = day_text(view)
        self.assertIn(texts.DAY_HEADER.format(dd="02", title="Calm"), text)
        self.assertIn("• Legacy: old answer", text)
        self.assertIn(texts.DAY_MISSING.format(labels="Why?"), text)
        self.assertNotIn(texts.DAY_COMPLETED, text)

        data = [row[0].callback_data for row in menus.kb_day("p", view).inline_keyboard]
        self.assertIn("learn:mantra:p:2", data)
        self.assertIn("learn:answer:p:2:0", data)
        self.assertIn("learn:answer:p:2:1", data)
        self.assertIn("learn:reopen:p:1", data)
        self.assertIn("learn:rate:p:2:s:energie", data)

    def test_keyed_questions_use_their_key_and_label(self):
        schema = parse_journal_schema({"questions": [{"key": "takeaways", "label": "Ce que je retiens", "placeholder": "3 points"}]})
        view = {"day": 1, "unit": {"title": "Calm"}, "schema": schema, "state": {"data": {"takeaways": "breathe"}}, "missing": []}

        self.assertIn("• Ce que je retiens: breathe", day_text(view))
        answer_rows = [row[0] for row in menus.kb_day("p", view).inline_keyboard if row[0].callback_data.startswith("learn:answer:")]
        self.assertEqual([b.callback_data for b in answer_rows], ["learn:answer:p:1:0"])
        self.assertEqual(answer_rows[0].text, texts.BTN_ANSWER.format(label="Ce que je retiens"))
        self.assertEqual(schema.text_fields()[0].id, "takeaways")

    def test_rating_rows_show_before_and_after_values(self):
        schema = parse_journal_schema({"sliders": [{"key": "paix", "label": "Paix"}, {"key": "mood", "label": "Mood"}]})
        view = {"day": 3, "unit": {}, "schema": schema, "state": {"sliders": {"paix": 4}}, "missing": []}

        rows = [row for row in menus.kb_day("p", view).inline_keyboard if row[0].callback_data.startswith("learn:rate:")]
        self.assertEqual(len(rows), 1)
        before, after = rows[0]
        self.assertEqual(before.callback_data, "learn:rate:p:3:s:paix")
        self.assertEqual(after.callback_data, "learn:rate:p:3:c:paix")
        self.assertEqual(before.text, texts.BTN_RATE_BEFORE.format(label="Paix", value=4))
        self.assertEqual(after.text, texts.BTN_RATE_AFTER.format(label="Paix", value="–"))

    def test_declared_checks_without_mantra_hide_the_mantra_button(self):
        schema = parse_journal_schema({"checks": [{"key": "pratique", "label": "Pratique faite"}]})
        view = {"day": 1, "unit": {}, "schema": schema, "state": {}, "missing": []}
        data = [row[0].callback_data for row in menus.kb_day("p", view).inline_keyboard]
        self.assertNotIn("learn:mantra:p:1", data)

    def test_rating_picker(self):
        kb = menus.kb_rating("p", 2, "c", "focus")
        values = [b.callback_data for row in kb.inline_keyboard[:2] for b in row]
        self.assertEqual(len(values), 11)
        self.assertEqual(values[0], "learn:rate_set:p:2:c:focus:0")
        self.assertEqual(values[-1], "learn:rate_set:p:2:c:focus:10")
        self.assertEqual(kb.inline_keyboard[2][0].callback_data, "learn:day:p:2")

    def test_continue_button_follows_next_step(self):
        self.assertEqual(menus.continue_data({"type": "none", "href": "/programs"}, "reset-7"), "learn:outline:reset-7")
        self.assertEqual(menus.continue_data({"type": "intro", "programSlug": "p"}, "reset-7"), "learn:intro:p")
        self.assertEqual(menus.continue_data({"type": "day", "programSlug": "p", "day": 4}, "reset-7"), "learn:day:p:4")
        self.assertEqual(menus.continue_data({"type": "summary", "programSlug": "p"}, "reset-7"), "learn:conclusion:p")
        self.assertEqual(menus.continue_data({"type": "day", "programSlug": "x" * 40, "day": 1}, "reset-7"), "learn:outline:reset-7")

        kb = menus.kb_start({"type": "day", "programSlug": "p", "day": 2}, "reset-7")
        self.assertEqual(kb.inline_keyboard[0][0].text, texts.BTN_CONTINUE)


class DummyQuery:
    def __init__(self, error=None):
        self.error = error
        self.edits = []
        self.from_user = SimpleNamespace(id=7)

    async def edit_message_text(self, text, reply_markup=None):
        if self.error:
            raise self.error
        self.edits.append(text)


class EditScreenTests(unittest.IsolatedAsyncioTestCase):
    async def test_edits_message(self):
        q = DummyQuery()
        await edit_screen(q, "hello")
        self.assertEqual(q.edits, ["hello"])

    async def test_unchanged_message_is_ignored(self):
        q = DummyQuery(BadRequest("Message is not modified: specified new message content is the same"))
        await edit_screen(q, "hello")

    async def test_other_bad_requests_propagate(self):
        q = DummyQuery(BadRequest("Button_data_invalid"))
        with self.assertRaises(BadRequest):
            await edit_screen(q, "hello")


if __name__ == "__main__":
    unittest.main()
