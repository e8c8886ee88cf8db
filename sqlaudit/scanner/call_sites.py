"""Call-site scanner: DBI method calls found by text pattern over the raw file."""

from .literals import snippet
from .models import CallFinding
from .vocabulary import ScanVocabulary


def offset_to_line(content: str, pos: int) -> int:
    """1-based line of a character offset, counted from preceding newlines."""
    if pos is None or pos < 0:
        pos = 0
    return content.count("\n", 0, pos) + 1


def context_window(content: str, start: int, end: int, vocabulary: ScanVocabulary) -> str:
    """Normalized slice of content from radius chars before start to radius after end."""
    radius = vocabulary.context_radius
    lo = max(start - radius, 0)
    hi = min(end + radius, len(content))
    return snippet(content[lo:hi], vocabulary.snippet_max_chars)


def scan_call_sites(content: str, vocabulary: ScanVocabulary) -> list[CallFinding]:
    return [
        CallFinding(
            line=offset_to_line(content, match.start()),
            verb=match.group(1).lower(),
            context=context_window(content, match.start(), match.end(), vocabulary),
        )
        for match in vocabulary.call_re.finditer(content)
    ]
