from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional


class Category(str, Enum):
    HOT = "Hot"
    DRAMA = "Drama"
    BUSINESS = "Business"
    TECH = "Tech"
    ENTERTAINMENT = "Entertainment"
    LIFESTYLE = "Lifestyle"


class Region(str, Enum):
    TH = "th"
    INTL = "intl"


@dataclass(frozen=True)
class FeedSource:
    url: str
    name: str


@dataclass(frozen=True)
class RawItem:
    """One entry extracted from a feed. Not persisted."""
    title: str
    link: str
    published_at: datetime
    description: str = ""


@dataclass(frozen=True)
class Candidate:
    """A RawItem whose link parsed as an absolute URL."""
    title: str
    link: str
    published_at: datetime
    hostname: str
    description: str = ""


@dataclass(frozen=True)
class TranslationResult:
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    used_ai: bool = False


@dataclass(frozen=True)
class NormalizedArticle:
    """
    Stable public model representing one generated article.

    WARNING: Do not change fields lightly. ``to_dict`` is what downstream exporters read.
    """
    title: str
    slug: str
    excerpt: str
    category: str
    cover_query: str
    cover_url: str
    content: str
    sources: List[str] = field(default_factory=list)
    is_translated: bool = False
    cover_note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "Title": self.title,
            "Slug": self.slug,
            "Excerpt": self.excerpt,
            "Category": self.category,
            "Cover": self.cover_url,
            "Sources": list(self.sources),
            "Content": self.content,
            "isTranslated": self.is_translated,
        }
        if self.cover_note:
            out["coverNote"] = self.cover_note
        return out
