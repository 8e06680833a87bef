"""Deterministic bucket names for project data sources.

Names follow S3 rules: 3-63 characters of lowercase letters, digits and
hyphens, starting and ending with a letter or digit. Distinct data source
names always map to distinct buckets: when slugifying alters a name or the
result would exceed 63 characters, the tail becomes a hash of the raw name.
"""

import hashlib
import re
import unicodedata

from labelflow.infrastructure.exceptions import InvalidBucketNameError

MAX_BUCKET_NAME_LENGTH = 63
DIGEST_LENGTH = 8
_INVALID_CHARS_RE = re.compile(r"[^a-z0-9]+")


def _slugify(value: str) -> str:
    ascii_value = (
        unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    )
    return _INVALID_CHARS_RE.sub("-", ascii_value.lower()).strip("-")


def _digest(value: str) -> str:
    return hashlib.sha256(value.encode("utf-8")).hexdigest()[:DIGEST_LENGTH]


class BucketNamer:
    """Implements IBucketNamer: ``{prefix}-{project_id}-{slug(name)}``.

    Names that are already valid slugs and fit keep that exact form, e.g.
    ``labelflow-1-annotation``. Any other name becomes
    ``{prefix}-{project_id}-{slug prefix}-{sha256[:8] of the raw name}``.
    """

    def __init__(self, prefix: str = "labelflow") -> None:
        slug = _slugify(prefix)
        if not slug:
            raise ValueError("Bucket prefix must contain letters or digits")
        self.prefix = slug

    def __call__(self, project_id: int, data_source_name: str) -> str:
        """Return the bucket name for a project's data source.

        Raises:
            InvalidBucketNameError: If the name has no usable characters, the
                project id is negative, or the prefix leaves no room for a name.
        """
        raw = data_source_name or ""
        slug = _slugify(raw)
        if not slug or project_id < 0:
            raise InvalidBucketNameError(project_id, data_source_name)
        head = f"{self.prefix}-{project_id}-"
        name = f"{head}{slug}"
        if slug == raw and len(name) <= MAX_BUCKET_NAME_LENGTH:
            return name

        room = MAX_BUCKET_NAME_LENGTH - len(head) - DIGEST_LENGTH - 1
        if room < 0:
            raise InvalidBucketNameError(project_id, data_source_name)
        kept = slug[:room].rstrip("-")
        tail = f"{kept}-{_digest(raw)}" if kept else _digest(raw)
        return f"{head}{tail}"
