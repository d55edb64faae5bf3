"""
Deterministic plain-text article layout.

Downstream exporters parse the output by its section labels, so the labels and their
order are part of the public contract:

    Title / Excerpt / Introduction / Main Sections (Key Points, Details) / Conclusion / Sources
"""
from __future__ import annotations

import re
import textwrap
from dataclasses import dataclass
from typing import List, Optional, Sequence

# Latin terminators, Thai paiyannoi (U+0E2F) and maiyamok (U+0E46), ideographic full stop.
_SENTENCE_END_RE = re.compile(r"(?<=[.!?\u0E2F\u0E46\u3002])\s+")
_PARAGRAPH_RE = re.compile(r"\n\s*\n+")
_WS_RE = re.compile(r"\s+")

INTRO_SENTENCES = 3
SUMMARY_SENTENCES = 13
KEY_POINTS = 6
SENTENCES_PER_PARAGRAPH = 2
CONCLUSION_SENTENCES = 2
EXCERPT_MAX_CHARS = 220

NO_SOURCES = "No external sources provided."


@dataclass(frozen=True)
class ArticleSections:
    introduction: List[str]
    key_points: List[str]
    details: List[str]
    conclusion: List[str]
    summary: List[str]


@dataclass(frozen=True)
class ReformatResult:
    title: str
    excerpt: str
    content: str
    used_ai: bool = False


def _normalize_newlines(text: str) -> str:
    return (text or "").replace("\r\n", "\n").replace("\r", "\n").strip()


def split_sentences(text: str) -> List[str]:
    """Split on sentence punctuation and on blank lines; whitespace inside a sentence is collapsed."""
    out: List[str] = []
    for para in _PARAGRAPH_RE.split(_normalize_newlines(text)):
        para = _WS_RE.sub(" ", para).strip()
        if not para:
            continue
        out.extend(s.strip() for s in _SENTENCE_END_RE.split(para) if s.strip())
    return out


def first_sentences(text: str, n: int = 2) -> str:
    return " ".join(split_sentences(text)[:n])


def chunk_sentences(sentences: Sequence[str], per: int = SENTENCES_PER_PARAGRAPH) -> List[str]:
    per = max(1, per)
    return [" ".join(sentences[i:i + per]) for i in range(0, len(sentences), per)]


def to_paragraphs(text: str, *, chunk_chars: int = 140) -> str:
    """
    Reflow flat prose into two-sentence paragraphs.

    Prose with fewer than 3 sentences is wrapped at whitespace near ``chunk_chars``; words are
    never split, so unspaced (Thai) runs stay whole.
    """
    normalized = _WS_RE.sub(" ", text or "").strip()
    if not normalized:
        return ""
    sentences = [s for s in _SENTENCE_END_RE.split(normalized) if s]
    if len(sentences) < 3:
        sentences = textwrap.wrap(normalized, chunk_chars, break_long_words=False, break_on_hyphens=False)
    return "\n\n".join(chunk_sentences(sentences, 2))


def format_content_for_readability(text: str) -> str:
    normalized = _normalize_newlines(text)
    if not normalized:
        return ""
    # Respect existing paragraph breaks, otherwise build them.
    base = normalized if _PARAGRAPH_RE.search(normalized) else to_paragraphs(normalized)
    parts = [p.strip() for p in _PARAGRAPH_RE.split(base) if p.strip()]
    return "\n\n" + "\n\n\n".join(parts)


def excerpt_from(text: str, max_chars: int = EXCERPT_MAX_CHARS) -> str:
    """Leading slice of ``text`` that ends on a word boundary when the text has spaces."""
    flat = _WS_RE.sub(" ", text or "").strip()
    if len(flat) <= max_chars:
        return flat
    cut = flat[:max_chars]
    space = cut.rfind(" ")
    if space > max_chars // 2:
        cut = cut[:space]
    return cut.rstrip(" ,;:-")


def partition_sentences(sentences: Sequence[str]) -> ArticleSections:
    """
    Split sentences into intro / key points / details / conclusion without loss or duplication.

    The conclusion is carved from the tail (two sentences when at least three remain after the
    introduction, otherwise one). With nothing left after the intro, the conclusion repeats it.
    """
    sents = list(sentences)
    intro = sents[:INTRO_SENTENCES]
    rest = sents[INTRO_SENTENCES:]
    if len(rest) > CONCLUSION_SENTENCES:
        body, conclusion = rest[:-CONCLUSION_SENTENCES], rest[-CONCLUSION_SENTENCES:]
    elif rest:
        body, conclusion = rest[:-1], rest[-1:]
    else:
        body, conclusion = [], list(intro)
    return ArticleSections(
        introduction=intro,
        key_points=body[:KEY_POINTS],
        details=body[KEY_POINTS:],
        conclusion=conclusion,
        summary=sents[:SUMMARY_SENTENCES],
    )


def build_structured_article(
    title: str,
    excerpt: str,
    body: str,
    sources: Optional[Sequence[str]] = None,
) -> str:
    """Render the fixed-section plain-text document. Pure; never raises."""
    sections = partition_sentences(split_sentences(body))
    intro = " ".join(sections.introduction)

    lines: List[str] = []
    lines += ["Title", "", (title or "").strip(), ""]
    lines += ["Excerpt", "", (" ".join(sections.summary) or excerpt or "").strip(), ""]
    lines += ["Introduction", "", intro, ""]
    lines += ["Main Sections", ""]
    if sections.key_points:
        lines += ["Key Points", ""]
        lines += [f"- {k}" for k in sections.key_points]
        lines.append("")
    if sections.details:
        lines += ["Details", ""]
        for p in chunk_sentences(sections.details, SENTENCES_PER_PARAGRAPH):
            lines += [p, ""]
    lines += ["Conclusion", "", " ".join(sections.conclusion).strip(), ""]
    lines += ["Sources", ""]
    if sources:
        lines += [f"- {s}" for s in sources]
    else:
        lines.append(NO_SOURCES)
    return "\n".join(lines)


def basic_seo_reformat(title: Optional[str], excerpt: Optional[str], content: str) -> ReformatResult:
    """Heuristic Markdown layout used when no AI rewrite is available."""
    out_title = (title or first_sentences(content, 1))[:80]
    meta = _WS_RE.sub(" ", excerpt or content).strip()[:180]
    bullets = split_sentences(content)[:5]
    paras = [p.strip() for p in re.split(r"\n\n+|\n-\s*", (content or "").replace("\r", "")) if p.strip()]

    body = "\n".join(
        [f"# {out_title}", "", meta, "", "## ภาพรวม", first_sentences(content, 3), "", "## ประเด็นสำคัญ"]
        + [f"- {b}" for b in bullets]
        + ["", "## รายละเอียด"]
        + paras
        + ["", "## สรุป", first_sentences(content, 1)]
    )
    return ReformatResult(title=out_title, excerpt=meta, content=body, used_ai=False)
