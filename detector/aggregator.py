# Finding aggregation: group per file, drop duplicates, resolve diff positions.

from __future__ import annotations

import logging
from typing import Iterable

from detector.diff import DiffPositionMapper
from detector.findings.models import FileFindings, FileReport, PositionedFinding

logger = logging.getLogger(__name__)


class FindingAggregator:
    """
    Turns raw per-file analyzer output into FileReports ready for posting.

    - files appear in the order they were first seen;
    - findings keep analyzer order, with repeated (line, message) pairs dropped,
      which happens when several analyzers report for the same file;
    - a finding whose line is not in the diff is dropped, or anchored at
      position 1 when fallback_anchor is set and the patch has any lines.
    """

    def __init__(self, fallback_anchor: bool = False) -> None:
        self.fallback_anchor = fallback_anchor

    def aggregate(self, file_findings: Iterable[FileFindings]) -> list[FileReport]:
        merged: dict[str, FileFindings] = {}
        for entry in file_findings:
            existing = merged.get(entry.path)
            if existing is None:
                merged[entry.path] = FileFindings(
                    path=entry.path, patch=entry.patch, findings=list(entry.findings)
                )
                continue
            if not existing.patch and entry.patch:
                existing.patch = entry.patch
            existing.findings.extend(entry.findings)

        return [self._report(entry) for entry in merged.values()]

    def _report(self, entry: FileFindings) -> FileReport:
        mapper = DiffPositionMapper(entry.patch, path=entry.path)
        fallback_position = mapper.first_position if self.fallback_anchor else None
        seen: set[tuple[int, str]] = set()
        positioned: list[PositionedFinding] = []
        dropped = 0

        for finding in entry.findings:
            key = (finding.line, finding.message)
            if key in seen:
                continue
            seen.add(key)

            position = mapper.position_for(finding.line)
            fallback = False
            if position is None:
                if fallback_position is None:
                    dropped += 1
                    logger.debug(
                        "Dropping %s finding at %s:%d: line not in diff",
                        finding.rule_id,
                        entry.path,
                        finding.line,
                    )
                    continue
                position, fallback = fallback_position, True

            positioned.append(
                PositionedFinding(
                    path=entry.path,
                    line=finding.line,
                    message=finding.message,
                    rule_id=finding.rule_id,
                    position=position,
                    fallback=fallback,
                )
            )

        if dropped:
            logger.info("%s: %d finding(s) outside the diff were dropped", entry.path, dropped)
        return FileReport(path=entry.path, findings=positioned, dropped=dropped)


def aggregate(file_findings: Iterable[FileFindings], fallback_anchor: bool = False) -> list[FileReport]:
    return FindingAggregator(fallback_anchor).aggregate(file_findings)
