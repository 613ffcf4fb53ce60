"""Link span scanning and target rewriting for note markdown."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator
from urllib.parse import quote, unquote

from ..core.model import NOTE_SUFFIX

SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*:")

# encodeURI's reserved set, minus "#" and parentheses which would end the href
_URI_SAFE = ";,/?:@&=+$!~*'"


@dataclass(frozen=True)
class LinkSpan:
    """One link reference found in note text.

    ``target_start``/``target_end`` delimit the raw text naming the target;
    everything else in ``start``..``end`` (brackets, ``!``, alias, anchor,
    fragment, label) belongs to the link syntax and is never rewritten.
    """

    kind: str  # "wiki" | "embed" | "md"
    start: int
    end: int
    target: str
    target_start: int
    target_end: int
    md_suffix: bool = False
    dot_prefix: bool = False


def encode_uri(title: str) -> str:
    return quote(title, safe=_URI_SAFE)


def iter_link_spans(text: str) -> Iterator[LinkSpan]:
    """Yield link spans in document order, skipping fenced and inline code."""
    i = 0
    n = len(text)

    while i < n:
        # Fenced code block: opens only at the start of a line
        if i == 0 or text[i - 1] == "\n":
            fence = _fence_at(text, i)
            if fence:
                i = _skip_fence(text, i, fence)
                continue

        # Inline code: closed by a run of the same length, else plain text
        if text[i] == "`":
            run_end = _run_end(text, i)
            run = run_end - i
            close = _closing_run(text, run_end, run)
            i = run_end if close == -1 else close + run
            continue

        if text.startswith("[[", i) or text.startswith("![[", i):
            span = _wiki_span(text, i)
            if span is not None:
                yield span
                i = span.end
            else:
                i += 3 if text[i] == "!" else 2
            continue

        if text[i] == "[" and not (i > 0 and text[i - 1] == "!"):
            span = _md_span(text, i)
            if span is not None:
                if span.kind == "md":
                    yield span
                i = span.end
                continue

        i += 1


def _run_end(text: str, i: int) -> int:
    while i < len(text) and text[i] == "`":
        i += 1
    return i


def _line_end(text: str, i: int) -> int:
    end = text.find("\n", i)
    return len(text) if end == -1 else end


def _closing_run(text: str, start: int, run: int) -> int:
    """Start of the next backtick run of exactly ``run`` characters, or -1."""
    i = start
    while i < len(text):
        if text[i] != "`":
            i += 1
            continue
        end = _run_end(text, i)
        if end - i == run:
            return i
        i = end
    return -1


def _fence_at(text: str, line_start: int) -> int:
    """Backtick count of a fence opening this line, or 0."""
    j = line_start
    while j < len(text) and j - line_start < 3 and text[j] == " ":
        j += 1
    run = _run_end(text, j) - j
    if run < 3:
        return 0
    # A backtick after the fence means it is inline code, not a fence
    if "`" in text[j + run : _line_end(text, j)]:
        return 0
    return run


def _skip_fence(text: str, start: int, run: int) -> int:
    """End of the closing fence line; an unclosed fence runs to the end."""
    line = _line_end(text, start) + 1
    while line < len(text):
        end = _line_end(text, line)
        row = text[line:end]
        body = row.strip()
        indent = len(row) - len(row.lstrip(" "))
        if indent <= 3 and len(body) >= run and body == "`" * len(body):
            return end
        line = end + 1
    return len(text)


def _wiki_span(text: str, start: int) -> LinkSpan | None:
    embed = text[start] == "!"
    open_end = start + (3 if embed else 2)
    close = text.find("]]", open_end)
    if close == -1:
        return None
    inner = text[open_end:close]
    if "\n" in inner or "[[" in inner:
        return None

    # Target runs up to the first "#" (anchor) or "|" (alias)
    cut = len(inner)
    for sep in ("#", "|"):
        pos = inner.find(sep)
        if pos != -1:
            cut = min(cut, pos)
    raw = inner[:cut]
    stripped = raw.strip()
    if not stripped:
        return None
    lead = len(raw) - len(raw.lstrip())
    t_start = open_end + lead
    return LinkSpan(
        kind="embed" if embed else "wiki",
        start=start,
        end=close + 2,
        target=stripped,
        target_start=t_start,
        target_end=t_start + len(stripped),
    )


def _md_span(text: str, start: int) -> LinkSpan | None:
    """Inline ``[label](href)``. Returns a span of kind "skip" for external links."""
    label_end = text.find("]", start + 1)
    if label_end == -1 or "\n" in text[start:label_end]:
        return None
    if label_end + 1 >= len(text) or text[label_end + 1] != "(":
        return None
    href_start = label_end + 2
    href_end = text.find(")", href_start)
    if href_end == -1 or "\n" in text[href_start:href_end]:
        return None

    href = text[href_start:href_end]
    skip = LinkSpan("skip", start, href_end + 1, "", href_start, href_start)
    if not href.strip() or SCHEME_RE.match(href.strip()):
        return skip

    path = href.split("#", 1)[0]
    lead = len(path) - len(path.lstrip())
    path_start = href_start + lead
    path = path.strip()
    if not path:
        return skip

    decoded = unquote(path)
    dot_prefix = decoded.startswith("./")
    if dot_prefix:
        decoded = decoded[2:]
    md_suffix = decoded.endswith(NOTE_SUFFIX)
    if md_suffix:
        decoded = decoded[: -len(NOTE_SUFFIX)]
    if not decoded:
        return skip
    return LinkSpan(
        kind="md",
        start=start,
        end=href_end + 1,
        target=decoded,
        target_start=path_start,
        target_end=path_start + len(path),
        md_suffix=md_suffix,
        dot_prefix=dot_prefix,
    )


def link_targets(text: str) -> list[str]:
    """Titles referenced by link spans in ``text``, in order of appearance."""
    return [span.target for span in iter_link_spans(text)]


def rewrite_link_targets(text: str, old_title: str, new_title: str) -> tuple[str, int]:
    """Point every link span targeting ``old_title`` at ``new_title``.

    Returns the new text and the number of spans rewritten. Occurrences of the
    title outside link spans are left alone.
    """
    out: list[str] = []
    last = 0
    count = 0
    for span in iter_link_spans(text):
        if span.target != old_title:
            continue
        if span.kind == "md":
            replacement = encode_uri(new_title)
            if span.md_suffix:
                replacement += NOTE_SUFFIX
            if span.dot_prefix:
                replacement = "./" + replacement
        else:
            replacement = new_title
        out.append(text[last : span.target_start])
        out.append(replacement)
        last = span.target_end
        count += 1
    if not count:
        return text, 0
    out.append(text[last:])
    return "".join(out), count
