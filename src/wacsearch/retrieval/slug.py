"""URL slugs for curated questions."""

import re
from collections.abc import Iterable

from .document import QAPair

MAX_SLUG_LENGTH = 50


def generate_slug(question: str) -> str:
    """Turn a question into a lowercase, hyphenated slug of at most 50 characters."""
    slug = question.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    return slug[:MAX_SLUG_LENGTH].rstrip("-")


def build_slug_map(qa_pairs: Iterable[QAPair]) -> dict[str, QAPair]:
    """Map slugs to Q&A pairs; on a collision the first pair wins."""
    slug_map: dict[str, QAPair] = {}
    for qa in qa_pairs:
        slug_map.setdefault(generate_slug(qa.question), qa)
    return slug_map
