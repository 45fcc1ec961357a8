"""Command-line entry point for the document merger."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional, Sequence

from docx_merger.merge.settings import MergeMode, SeparatorStyle
from docx_merger.session.controller import IncomingFile, MergeSession
from docx_merger.utils.debug import DebugDumper
from docx_merger.utils.logger import get_logger

LOGGER = get_logger(__name__)


def load_files(paths: Sequence[str]) -> List[IncomingFile]:
    files = []
    for raw in paths:
        path = Path(raw).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Input file not found: {path}")
        files.append(IncomingFile(name=path.name, data=path.read_bytes()))
    return files


def run(
    paths: Sequence[str],
    output_dir: Path,
    mode: Optional[str] = None,
    separator: Optional[str] = None,
    debug: bool = False,
) -> List[Path]:
    """Merge ``paths`` (the first one is the style authority) and write the outputs."""
    session = MergeSession().add_documents(load_files(paths))
    for failure in session.file_errors:
        LOGGER.warning("Skipped %s: %s", failure.filename, failure.message)

    changes = {}
    if mode:
        changes["mode"] = MergeMode(mode)
    if separator:
        changes["separator_style"] = SeparatorStyle(separator)
    if changes:
        session = session.update_settings(**changes)

    output_dir.mkdir(parents=True, exist_ok=True)
    if debug:
        DebugDumper(output_dir / "debug").dump(session.documents)

    outcome = session.process()
    if outcome.session.error:
        raise SystemExit(outcome.session.error)

    written = []
    for output in outcome.outputs:
        target = output_dir / output.filename
        target.write_bytes(output.blob)
        LOGGER.info("Wrote %s", target)
        written.append(target)
    return written


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Merge documents under the styles of the first DOCX file")
    parser.add_argument("files", nargs="+", help="Main .docx file followed by the documents to merge")
    parser.add_argument("--mode", choices=[m.value for m in MergeMode], help="Merge policy")
    parser.add_argument("--output", default=".", help="Directory to write generated documents")
    parser.add_argument("--separator", choices=[s.value for s in SeparatorStyle], help="Separator between documents")
    parser.add_argument("--debug", action="store_true", help="Dump the parsed documents as JSON")

    args = parser.parse_args(argv)
    run(args.files, Path(args.output).resolve(), mode=args.mode, separator=args.separator, debug=args.debug)


if __name__ == "__main__":  # pragma: no cover
    main()
