import re

_NON_ALPHANUMERIC_RUN_RE = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """
    Derive the URL-safe slug for a startup or organization name.

    Lower-cases the name, collapses every run of characters outside ``[a-z0-9]``
    into a single hyphen and trims hyphens from both ends, so ``"Acme! Inc."``
    becomes ``"acme-inc"``. Names without any ASCII letter or digit yield ``""``.
    """
    return _NON_ALPHANUMERIC_RUN_RE.sub("-", name.lower()).strip("-")
