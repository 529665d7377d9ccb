import inspect
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

from notecomposer.config import settings
from notecomposer.main import (
    add_abbreviation,
    app,
    delete_abbreviation,
    edit_abbreviation,
    find_abbreviation,
    list_abbreviations,
)


class ApiTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self._patches = [
            patch.object(settings, "abbreviation_db_path", str(Path(self._tmp.name) / "abbrev.db")),
            patch.object(settings, "seed_abbreviations", True),
            patch.object(settings, "seed_problems", []),
        ]
        for p in self._patches:
            p.start()
        self.client = TestClient(app)
        self.client.__enter__()

    def tearDown(self) -> None:
        self.client.__exit__(None, None, None)
        for p in reversed(self._patches):
            p.stop()
        self._tmp.cleanup()

    def test_health(self) -> None:
        body = self.client.get("/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["abbreviations"], 2)

    def test_abbreviation_crud(self) -> None:
        resp = self.client.post("/abbreviations", json={"short": "dm", "full": "diabetes mellitus"})
        self.assertEqual(resp.status_code, 201)

        resp = self.client.post("/abbreviations", json={"short": "dm", "full": "again"})
        self.assertEqual(resp.status_code, 409)

        resp = self.client.post("/abbreviations", json={"short": "x", "full": ""})
        self.assertEqual(resp.status_code, 400)

        resp = self.client.put("/abbreviations/dm", json={"full": "type 2 diabetes"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.client.get("/abbreviations/dm").json()["entry"]["full"], "type 2 diabetes")

        shorts = [e["short"] for e in self.client.get("/abbreviations").json()]
        self.assertEqual(shorts, ["c", "dm", "to"])

        self.assertEqual(self.client.delete("/abbreviations/dm").status_code, 200)
        self.assertEqual(self.client.get("/abbreviations/dm").status_code, 404)
        self.assertEqual(self.client.put("/abbreviations/dm", json={"full": "x"}).status_code, 404)

    def test_abbreviation_endpoints_run_in_threadpool(self) -> None:
        for endpoint in (
            list_abbreviations,
            find_abbreviation,
            add_abbreviation,
            edit_abbreviation,
            delete_abbreviation,
        ):
            self.assertFalse(inspect.iscoroutinefunction(endpoint), endpoint.__name__)

    def test_templates(self) -> None:
        templates = self.client.get("/templates").json()
        self.assertEqual(len(templates), 12)
        self.assertEqual(self.client.get("/templates/HPI").json()["display_name"], "HPI")
        self.assertIsNone(self.client.get("/templates/HPI").json()["snippet_order"])
        vitals = self.client.get("/templates/SNIPPET_VITALS").json()
        self.assertTrue(vitals["quick_snippet"])
        self.assertEqual(vitals["snippet_order"], 0)
        self.assertEqual(self.client.get("/templates/unknown").status_code, 404)

    def test_format_endpoints(self) -> None:
        self.assertEqual(
            self.client.post("/format", json={"text": "* foo\n•bar\n--baz"}).json()["text"],
            "- foo\n- bar\n- baz",
        )
        self.assertEqual(
            self.client.post("/finalize", json={"text": "##Title\ntext"}).json()["text"],
            "## Title\ntext",
        )

    def test_websocket_editing_session(self) -> None:
        with self.client.websocket_connect("/ws") as ws:
            state = ws.receive_json()
            self.assertEqual(state["type"], "session_state")

            ws.send_json({"action": "edit", "section": "CC", "text": "Hx :to"})
            self.assertEqual(ws.receive_json()["data"]["text"], "CC> Hx :to")

            ws.send_json({"action": "space", "section": "CC", "caret": 6, "text_before_caret": "Hx :to"})
            expansion = ws.receive_json()
            self.assertEqual(expansion["type"], "expansion")
            self.assertEqual(expansion["data"]["text"], "Hx hypothyroidism ")
            self.assertEqual(ws.receive_json()["type"], "scratchpad")

            ws.send_json({"action": "bogus"})
            self.assertEqual(ws.receive_json()["type"], "error")

            ws.send_json({"action": "copy_all"})
            clipboard = ws.receive_json()
            self.assertEqual(clipboard["type"], "clipboard")
            self.assertEqual(clipboard["data"]["text"], "# CC\nHx hypothyroidism")


if __name__ == "__main__":
    unittest.main()
