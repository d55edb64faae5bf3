from __future__ import annotations

from typing import Dict, List, Mapping, Sequence, Union

from .models import Category, FeedSource, Region

FeedRegistry = Mapping[Region, Mapping[Category, Sequence[FeedSource]]]


def _feeds(*pairs: tuple) -> tuple:
    return tuple(FeedSource(url=u, name=n) for u, n in pairs)


RSS_SOURCES: Dict[Region, Dict[Category, tuple]] = {
    Region.TH: {
        Category.HOT: _feeds(
            ("https://www.matichon.co.th/feed", "Matichon"),
            ("https://www.thaipbs.or.th/rss/thaipbs-news.xml", "ThaiPBS"),
            ("https://www.thairath.co.th/rss/home", "Thairath"),
        ),
        Category.DRAMA: _feeds(
            ("https://www.sanook.com/entertain/rss/", "Sanook Entertainment"),
            ("https://workpointtoday.com/feed/", "WorkpointToday"),
            ("https://www.dailynews.co.th/rss/entertainment.xml", "Daily News Entertainment"),
        ),
        Category.BUSINESS: _feeds(
            ("https://www.prachachat.net/feed", "Prachachat"),
            ("https://www.bangkokpost.com/business/rss", "Bangkok Post Business"),
            ("https://www.thairath.co.th/rss/business", "Thairath Business"),
        ),
        Category.TECH: _feeds(
            ("https://www.blognone.com/rss", "Blognone"),
            ("https://www.thairath.co.th/rss/tech", "Thairath Tech"),
            ("https://techsauce.co/feed", "TechSauce"),
        ),
        Category.ENTERTAINMENT: _feeds(
            ("https://www.sanook.com/entertain/rss/", "Sanook Entertainment"),
            ("https://workpointtoday.com/feed/", "Workpoint Today"),
            ("https://www.thairath.co.th/rss/entertainment", "Thairath Entertainment"),
        ),
        Category.LIFESTYLE: _feeds(
            ("https://adaybulletin.com/feed", "a day BULLETIN"),
            ("https://thestandard.co/pop/feed/", "The Standard Pop"),
            ("https://www.thairath.co.th/rss/lifestyle", "Thairath Lifestyle"),
        ),
    },
    Region.INTL: {
        Category.HOT: _feeds(
            ("https://feeds.bbci.co.uk/news/world/rss.xml", "BBC World"),
            ("https://rss.nytimes.com/services/xml/rss/nyt/World.xml", "NY Times World"),
            ("https://www.aljazeera.com/xml/rss/all.xml", "Al Jazeera"),
        ),
        Category.DRAMA: _feeds(
            ("https://feeds.bbci.co.uk/news/entertainment_and_arts/rss.xml", "BBC Entertainment & Arts"),
            ("https://rss.nytimes.com/services/xml/rss/nyt/Arts.xml", "NY Times Arts"),
        ),
        Category.BUSINESS: _feeds(
            ("https://feeds.bbci.co.uk/news/business/rss.xml", "BBC Business"),
            ("https://rss.nytimes.com/services/xml/rss/nyt/Business.xml", "NY Times Business"),
            ("https://www.cnbc.com/id/100003114/device/rss/rss.html", "CNBC Top News"),
        ),
        Category.TECH: _feeds(
            ("https://techcrunch.com/feed/", "TechCrunch"),
            ("https://www.theverge.com/rss/index.xml", "The Verge"),
            ("https://feeds.arstechnica.com/arstechnica/index", "Ars Technica"),
        ),
        Category.ENTERTAINMENT: _feeds(
            ("https://variety.com/feed/", "Variety"),
            ("https://www.hollywoodreporter.com/feed/", "The Hollywood Reporter"),
            ("https://ew.com/feed/", "Entertainment Weekly"),
        ),
        Category.LIFESTYLE: _feeds(
            ("https://www.vogue.com/feed/rss", "Vogue"),
            ("https://www.gq.com/feed/rss", "GQ"),
            ("https://www.bonappetit.com/feed/rss", "Bon Appétit"),
        ),
    },
}


def feeds_for(
    region: Union[Region, str],
    category: Union[Category, str],
    registry: FeedRegistry = RSS_SOURCES,
) -> List[FeedSource]:
    """Return the configured feeds for a region/category pair, or [] when unknown."""
    try:
        r = Region(region)
        c = Category(category)
    except ValueError:
        return []
    return list(registry.get(r, {}).get(c, ()))
