"""Markdown link handling for notesilo notes."""

from .links import LinkSpan, encode_uri, iter_link_spans, link_targets, rewrite_link_targets

__all__ = [
    "LinkSpan",
    "encode_uri",
    "iter_link_spans",
    "link_targets",
    "rewrite_link_targets",
]
