"""Command-line runner: ``python -m pulse_news Tech intl --count 5``."""
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .config import Settings, configure_logging
from .core import NewsGenerator
from .models import Category, Region


def main(argv: Optional[List[str]] = None, *, generator: Optional[NewsGenerator] = None) -> int:
    parser = argparse.ArgumentParser(prog="pulse_news", description="Generate translated articles from RSS feeds.")
    parser.add_argument("category", choices=[c.value for c in Category])
    parser.add_argument("region", choices=[r.value for r in Region])
    parser.add_argument("--count", type=int, default=5)
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    generator = generator or NewsGenerator(settings)

    status, payload = generator.generate_response(args.category, args.region, args.count)
    json.dump(payload, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0 if status == 200 else 1


if __name__ == "__main__":
    sys.exit(main())
