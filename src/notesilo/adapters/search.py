from dataclasses import dataclass, field

from ..core.model import Note
from ..core.ports import Search
from ..core.store import NoteStore


@dataclass
class SearchMatch:
    note: Note
    spans: list[tuple[int, int]] = field(default_factory=list)  # offsets into content
    score: float = 0.0


def _find_all(haystack: str, needle: str) -> list[tuple[int, int]]:
    spans = []
    start = haystack.find(needle)
    while start != -1:
        spans.append((start, start + len(needle)))
        start = haystack.find(needle, start + len(needle))
    return spans


class SubstringSearch(Search):
    """Case-insensitive substring search over titles and content.

    Ranking: exact title, title prefix, title substring, then content-only
    hits; ties go to the most recently updated note.
    """

    def __init__(self, store: NoteStore):
        self.store = store

    def search(self, query: str) -> list[SearchMatch]:
        q = query.strip().lower()
        if not q:
            return []
        hits = []
        for note in self.store:
            title = note.title.lower()
            spans = _find_all(note.content.lower(), q)
            if title == q:
                score = 3.0
            elif title.startswith(q):
                score = 2.0
            elif q in title:
                score = 1.5
            elif spans:
                score = 1.0
            else:
                continue
            hits.append(SearchMatch(note=note, spans=spans, score=score))
        hits.sort(key=lambda m: (m.score, m.note.updated_at), reverse=True)
        return hits
