"""Slug generation for post and newsletter URLs"""

import re


def slugify(title: str) -> str:
    """Lowercase title with each run of non-alphanumerics collapsed to one hyphen."""
    return re.sub(r'[^a-z0-9]+', '-', title.lower()).strip('-')
