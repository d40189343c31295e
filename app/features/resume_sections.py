from __future__ import annotations

import logging
import re

from app.normalize.utils import normalize_line
from app.schemas.ats import ParsedResumeSections, ResumeSection

logger = logging.getLogger(__name__)

_SECTION_PATTERNS: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("contact", re.compile(r"^(contact|personal|info|details|address|phone|email)$", re.IGNORECASE)),
    (
        "summary",
        re.compile(r"^(summary|objective|profile|about|overview|professional\s+summary)$", re.IGNORECASE),
    ),
    (
        "experience",
        re.compile(
            r"^(experience|work|employment|professional|career|history|work\s+experience|professional\s+experience)$",
            re.IGNORECASE,
        ),
    ),
    (
        "education",
        re.compile(r"^(education|academic|degree|university|college|school|qualifications)$", re.IGNORECASE),
    ),
    (
        "skills",
        re.compile(
            r"^(skills|technical|technologies|competencies|expertise|abilities|technical\s+skills)$",
            re.IGNORECASE,
        ),
    ),
    (
        "certifications",
        re.compile(
            r"^(certifications|certificates|licenses|credentials|professional\s+development)$",
            re.IGNORECASE,
        ),
    ),
)


def detect_section_header(line: str) -> str | None:
    """Return the canonical section a header line opens, or None."""
    candidate = normalize_line(line).rstrip(":").strip()
    if not candidate:
        return None
    for name, pattern in _SECTION_PATTERNS:
        if pattern.match(candidate):
            return name
    return None


def _build_section(lines: list[str], start: int, end: int, header_line: int) -> ResumeSection | None:
    if start > end:
        return None
    content = "\n".join(lines[start : end + 1]).strip()
    if not content:
        return None
    return ResumeSection(content=content, start_line=start, end_line=end, header_line=header_line)


def parse_resume_into_sections(text: str) -> ParsedResumeSections:
    lines = text.split("\n")
    sections = ParsedResumeSections()

    headers: list[tuple[int, str]] = []
    for index, line in enumerate(lines):
        name = detect_section_header(line)
        if name:
            headers.append((index, name))

    if not headers:
        if text.strip():
            sections.other.append(
                ResumeSection(content=text.strip(), start_line=0, end_line=max(0, len(lines) - 1), header_line=0)
            )
        return sections

    preamble = _build_section(lines, 0, headers[0][0] - 1, 0)
    if preamble is not None:
        sections.other.append(preamble)

    for position, (header_line, name) in enumerate(headers):
        end = headers[position + 1][0] - 1 if position + 1 < len(headers) else len(lines) - 1
        section = _build_section(lines, header_line + 1, end, header_line)
        if section is None:
            continue
        if getattr(sections, name) is None:
            setattr(sections, name, section)
        else:
            sections.other.append(section)

    logger.debug(
        "resume_sections_parsed sections=%s other=%s",
        ",".join(sections.detected_sections()),
        len(sections.other),
    )
    return sections
