"""Core quiz logic.

Modules:
- tag_canonicalizer: Raw tag -> canonical record key
- text_normalizer: Answer/reference normalization
- grader: Strict/loose answer grading
- categories: Category variant and field schemas
- record_merger: Table parsing and per-category record merge
- proficiency: Mastery tracking and its stores
- session: Quiz session controller
- reports: Proficiency overview and wrong-answer book
"""

from tagdrill.core.grader import is_correct
from tagdrill.core.tag_canonicalizer import canonicalize
from tagdrill.core.text_normalizer import normalize

__all__ = [
    "canonicalize",
    "is_correct",
    "normalize",
]
