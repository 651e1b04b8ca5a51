from __future__ import annotations

import hashlib
import re

_EMAIL_RE = re.compile(r"<([^>]+)>")


def extract_email(author: str) -> str:
    """Return the address from a git-style ``Name <email>`` author string."""
    match = _EMAIL_RE.search(author)
    return match.group(1) if match else author


def get_gravatar_url(author: str) -> str:
    email = extract_email(author).strip().lower()
    digest = hashlib.md5(email.encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}.jpg?d=identicon"
