"""
GDX fixture runner - compare transforms against expected output.

A fixture directory holds pairs of files sharing a case name::

    fixtures/
        single_tag.gdx     # input
        single_tag.gd      # expected output, compared byte for byte

A case that raises ``ParseError`` is recorded as failed together with the
error message and position; the run carries on with the next case.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from gdx.core.errors import ParseError
from gdx.core.parser import GdxParser, ParseContext

logger = logging.getLogger(__name__)

INPUT_SUFFIX = ".gdx"
EXPECTED_SUFFIX = ".gd"


@dataclass
class FixtureCase:
    """One input / expected-output pair."""

    name: str
    source: str
    expected: str
    path: Path | None = None


@dataclass
class FixtureResult:
    """Outcome of a single case."""

    name: str
    passed: bool
    output: str = ""
    error: str = ""
    line: int = 0
    column: int = 0


@dataclass
class FixtureReport:
    """Outcome of a whole run."""

    results: list[FixtureResult] = field(default_factory=list)
    elapsed: float = 0.0

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results if not r.passed)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        return self.failed == 0


def load_fixtures(directory: Path) -> list[FixtureCase]:
    """
    Load every ``<case>.gdx`` in ``directory`` that has a ``<case>.gd`` beside it.

    Inputs without an expected file are skipped with a warning.
    """
    cases: list[FixtureCase] = []
    for source_path in sorted(directory.glob(f"*{INPUT_SUFFIX}")):
        expected_path = source_path.with_suffix(EXPECTED_SUFFIX)
        if not expected_path.exists():
            logger.warning("No expected output for fixture %s", source_path.name)
            continue
        cases.append(
            FixtureCase(
                name=source_path.stem,
                source=source_path.read_text(encoding="utf-8"),
                expected=expected_path.read_text(encoding="utf-8"),
                path=source_path,
            )
        )
    return cases


def run_fixtures(
    cases: list[FixtureCase],
    parser: GdxParser | None = None,
    folder_path: str = "",
) -> FixtureReport:
    """Transform every case and compare with its expected output."""
    parser = parser or GdxParser()
    report = FixtureReport()
    start = time.perf_counter()

    for case in cases:
        context = ParseContext(
            file_path=case.path,
            file_base_name=case.name,
            folder_path=folder_path,
        )
        try:
            output = parser.parse(case.source, context)
        except ParseError as e:
            logger.debug("Fixture %s raised: %s", case.name, e.message)
            report.results.append(
                FixtureResult(
                    name=case.name,
                    passed=False,
                    error=e.message,
                    line=e.line,
                    column=e.column,
                )
            )
            continue

        passed = output == case.expected
        if not passed:
            logger.debug("Fixture %s output differs from expected", case.name)
        report.results.append(FixtureResult(name=case.name, passed=passed, output=output))

    report.elapsed = time.perf_counter() - start
    return report
