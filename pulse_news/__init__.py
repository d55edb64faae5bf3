"""
pulse_news

Turns RSS/Atom feeds into publish-ready, translated articles with a fixed section layout.

Core ideas:
- Input: a category, a region and how many articles to produce (3-10)
- Process: fetch feeds → tolerant parse → dedup → select (recent, max 2 per site)
  → fetch full text → translate (AI, then fallback translators) → structure → cover query
- Output: List[NormalizedArticle]

Example
-------
from pulse_news import NewsGenerator

generator = NewsGenerator()
articles = generator.generate("Tech", "intl", count=5)

for article in articles:
    print(article.slug, article.is_translated, article.title)
"""
from .config import Settings, configure_logging
from .core import NewsGenerator
from .exceptions import PulseNewsError
from .models import Category, NormalizedArticle, Region
from .parser import parse_feed
from .structurer import build_structured_article
from .text import slugify
from .translation import TranslationPipeline

__all__ = [
    "Category",
    "NewsGenerator",
    "NormalizedArticle",
    "PulseNewsError",
    "Region",
    "Settings",
    "TranslationPipeline",
    "build_structured_article",
    "configure_logging",
    "parse_feed",
    "slugify",
]
