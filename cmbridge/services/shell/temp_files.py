"""
Scoped temporary report files.

Some cm commands write their XML report to a file whose path is passed on
the command line. The file lives in a private temporary directory that is
removed on every exit path, whether parsing succeeded or not.
"""

from __future__ import annotations

import tempfile
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path


@contextmanager
def scoped_report_file(name: str = "report.xml") -> Iterator[Path]:
    """
    Yield a path for cm to write to, deleting it afterwards.

    The file itself is not created; cm creates it.

    Example:
        >>> with scoped_report_file() as xml_path:
        ...     runner.run("history", [f"--xml={xml_path}"])
        ...     revisions = parse_history_xml(xml_path)
    """
    with tempfile.TemporaryDirectory(prefix="cmbridge-") as tmp_dir:
        yield Path(tmp_dir) / name


@contextmanager
def scoped_text_file(content: str, name: str = "content.txt") -> Iterator[Path]:
    """
    Yield a UTF-8 file holding ``content``, deleting it afterwards.

    Used for names, descriptions and comments that cm reads from a file
    (``--namefile``, ``--descriptionfile``, ``-commentsfile``) so that
    multi-line text survives the command line.
    """
    with scoped_report_file(name) as path:
        path.write_text(content, encoding="utf-8")
        yield path
