import json
import tempfile
import unittest
from pathlib import Path

from docx_merger.main import main, run
from docx_merger.tests.fixtures import build_docx, heading, numbered


class CommandLineTest(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name)
        self.main_path = self.root / "main.docx"
        self.main_path.write_bytes(build_docx([heading("Main"), numbered("a")]))
        self.other_path = self.root / "other.docx"
        self.other_path.write_bytes(build_docx([numbered("b")]))

    def test_run_writes_merged_document(self) -> None:
        written = run([str(self.main_path), str(self.other_path)], self.root / "out", mode="simpleMerge")
        self.assertEqual([path.name for path in written], ["merged_simple.docx"])
        self.assertTrue(written[0].read_bytes().startswith(b"PK"))

    def test_main_with_debug_dump(self) -> None:
        out = self.root / "out"
        main([str(self.main_path), str(self.other_path), "--output", str(out), "--separator", "line", "--debug"])
        self.assertTrue((out / "merged_smart.docx").exists())
        dumped = json.loads((out / "debug" / "parsed_documents.json").read_text(encoding="utf-8"))
        self.assertEqual([doc["name"] for doc in dumped], ["main.docx", "other.docx"])

    def test_session_error_exits(self) -> None:
        with self.assertRaises(SystemExit):
            run([str(self.main_path)], self.root / "out")

    def test_missing_input(self) -> None:
        with self.assertRaises(FileNotFoundError):
            run([str(self.root / "absent.docx")], self.root / "out")


if __name__ == "__main__":  # pragma: no cover
    unittest.main()
