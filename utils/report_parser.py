"""
Report parsing
---------------
Narrow, template-shaped pattern matching over the markdown reports returned by
the generation service. Not a markdown parser: if the service changes its
output format, extraction degrades to "no data".

  split_sections(report)        -> List[Section]
  extract_traffic_data(text)    -> Optional[List[TrafficRecord]]
  link_tool_mentions(text)      -> str
  prepare_for_display(text)     -> str
"""

import logging
import re
from typing import List, Optional
from urllib.parse import quote

from models.schemas import Section, TrafficRecord

logger = logging.getLogger(__name__)


# ─── Sections ────────────────────────────────────────────────────────────────

# A section starts at a line beginning with exactly two markers and whitespace.
_SECTION_BOUNDARY = re.compile(r"^(?=##[ \t])", re.MULTILINE)
_HEADING_MARKERS = re.compile(r"^[ \t]*#+[ \t]*", re.MULTILINE)


def split_sections(report: str, include_preamble: bool = False) -> List[Section]:
    """
    Split a report into its level-2 sections, in document order.

    Text before the first heading is dropped unless `include_preamble` is set,
    in which case it becomes a leading section of its own. Sections that are
    blank after trimming are filtered out.
    """
    if not report:
        return []

    chunks = _SECTION_BOUNDARY.split(report)
    preamble, bodies = chunks[0], chunks[1:]
    texts = ([preamble] if include_preamble else []) + bodies

    sections: List[Section] = []
    for text in texts:
        text = text.strip()
        if text:
            sections.append(Section(index=len(sections), text=text))
    return sections


def strip_heading_markers(text: str) -> str:
    return _HEADING_MARKERS.sub("", text)


def narration_text(section: Section, max_chars: int) -> str:
    """Speakable text for a section: no heading markers, bounded length."""
    text = strip_heading_markers(section.text).strip()
    return text[:max_chars]


# ─── Traffic table ───────────────────────────────────────────────────────────

# Header row (first two labels as the report template writes them),
# separator row, then one or more data rows. CRLF reports match too: a
# trailing \r stays inside the row and is trimmed with the cells.
_TRAFFIC_TABLE = re.compile(
    r"^[ \t]*\|[ \t]*Concorrente[ \t]*\|[ \t]*Busca Orgânica \(%\)[^\n]*\n"
    r"[ \t]*\|[ \t]*:?-[-:| \t]*\r?\n"
    r"((?:[ \t]*\|[^\n]*(?:\n|$))+)",
    re.MULTILINE,
)
_LEADING_NUMBER = re.compile(r"\s*[-+]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?")


def _split_row(row: str) -> List[str]:
    cells = [c.strip() for c in row.strip().split("|")]
    # Drop the empty cells produced by a leading / trailing delimiter
    if cells and cells[0] == "":
        cells = cells[1:]
    if cells and cells[-1] == "":
        cells = cells[:-1]
    return cells


def parse_number(cell: str) -> float:
    """Leading-number parse ("45%" -> 45.0); anything unparseable is 0.0."""
    match = _LEADING_NUMBER.match(cell or "")
    if not match:
        return 0.0
    try:
        return float(match.group())
    except ValueError:
        return 0.0


def extract_traffic_data(markdown: str) -> Optional[List[TrafficRecord]]:
    """
    Find the traffic-source comparison table and parse it into records.

    Returns None ("no data") when no table is found or no row survives.
    Safe to call repeatedly on growing prefixes of the same report.
    """
    if not markdown:
        return None

    match = _TRAFFIC_TABLE.search(markdown)
    if not match:
        return None

    records: List[TrafficRecord] = []
    for row in match.group(1).strip().split("\n"):
        cells = _split_row(row)
        if not cells or not cells[0]:
            continue
        values = [parse_number(c) for c in cells[1:6]]
        values += [0.0] * (5 - len(values))
        records.append(TrafficRecord(cells[0], *values))

    return records or None


# ─── Display ─────────────────────────────────────────────────────────────────

_SCREENSHOT_PLACEHOLDER = re.compile(r"\[SCREENSHOT_PLACEHOLDER_FOR_(.*?)\]")
_PLACEHOLDER_IMAGE_URL = (
    "https://placehold.co/800x450/21262d/8b949e/png?text=Placeholder+do+Site%0A{name}"
)


def strip_traffic_table(markdown: str) -> str:
    """Remove the traffic table itself; the chart renders that data instead."""
    return _TRAFFIC_TABLE.sub("", markdown)


def replace_screenshot_placeholders(markdown: str) -> str:
    def _image(match: "re.Match[str]") -> str:
        name = match.group(1).strip()
        url = _PLACEHOLDER_IMAGE_URL.format(name=quote(name))
        return f"\n![Placeholder para o website de {name}]({url})\n"

    return _SCREENSHOT_PLACEHOLDER.sub(_image, markdown)


# Analytics tools the report template cites as data sources.
TOOLS_INFO = {
    "SimilarWeb": (
        "Ferramenta de inteligência de mercado que fornece estimativas de tráfego e insights sobre websites.",
        "https://www.similarweb.com/",
    ),
    "Ahrefs": (
        "Conjunto de ferramentas de SEO para pesquisa de backlinks, análise de concorrentes e pesquisa de palavras-chave.",
        "https://ahrefs.com/",
    ),
    "SEMrush": (
        "Plataforma de SaaS para gerenciamento de visibilidade online e marketing de conteúdo.",
        "https://www.semrush.com/",
    ),
}
# Bare mentions only: not already link text, not part of a URL or longer word.
_TOOL_MENTION = re.compile(
    r"(?<![\[\w/.])(" + "|".join(map(re.escape, TOOLS_INFO)) + r")(?![\w\]])"
)


def link_tool_mentions(markdown: str) -> str:
    """
    Turn tool names in prose into links whose title shows a short description.
    Headings and table rows are left untouched.
    """
    def _link(match: "re.Match[str]") -> str:
        name = match.group(1)
        description, url = TOOLS_INFO[name]
        return f'[{name}]({url} "{description}")'

    lines = []
    for line in markdown.split("\n"):
        if line.lstrip().startswith(("#", "|")):
            lines.append(line)
        else:
            lines.append(_TOOL_MENTION.sub(_link, line))
    return "\n".join(lines)


def prepare_for_display(markdown: str, hide_traffic_table: bool = True) -> str:
    text = strip_traffic_table(markdown) if hide_traffic_table else markdown
    return link_tool_mentions(replace_screenshot_placeholders(text)).strip()
