"""BucketNamer produces deterministic, S3-valid, collision-free bucket names."""

import re

import pytest

from labelflow.infrastructure.exceptions import InvalidBucketNameError
from labelflow.infrastructure.external.storage import BucketNamer

_S3_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]{1,61}[a-z0-9]$")


def test_slug_names_keep_the_plain_form() -> None:
    assert BucketNamer("labelflow")(1, "annotation") == "labelflow-1-annotation"
    assert BucketNamer("LabelFlow")(1, "review-eu") == "labelflow-1-review-eu"


def test_altered_names_get_a_stable_digest_suffix() -> None:
    namer = BucketNamer("LabelFlow")
    first = namer(42, "Review Queue (EU)")
    assert first == "labelflow-42-review-queue-eu-eb09512f"
    assert namer(42, "Review Queue (EU)") == first


def test_non_ascii_is_transliterated() -> None:
    assert BucketNamer()(3, "Révision") == "labelflow-3-revision-ecbeff2c"


@pytest.mark.parametrize(
    ("first", "second"),
    [
        ("Review", "review"),
        ("review queue", "review-queue"),
        ("review_queue", "review.queue"),
        ("annotation", "Annotation"),
    ],
)
def test_names_differing_in_case_or_punctuation_do_not_collide(
    first: str, second: str
) -> None:
    namer = BucketNamer()
    assert namer(1, first) != namer(1, second)


def test_long_names_sharing_a_prefix_do_not_collide() -> None:
    namer = BucketNamer("labelflow")
    annotation = namer(1, "x" * 60 + "-annotation")
    review = namer(1, "x" * 60 + "-review")

    assert annotation != review
    for name in (annotation, review):
        assert len(name) == 63
        assert _S3_NAME_RE.match(name)


def test_long_names_are_capped_at_63_chars() -> None:
    name = BucketNamer()(7, "x" * 200)
    assert len(name) <= 63
    assert _S3_NAME_RE.match(name)


@pytest.mark.parametrize(("project_id", "ds_name"), [(1, "!!!"), (1, ""), (-1, "ok")])
def test_unusable_inputs_are_rejected(project_id: int, ds_name: str) -> None:
    with pytest.raises(InvalidBucketNameError):
        BucketNamer()(project_id, ds_name)


def test_prefix_must_have_usable_characters() -> None:
    with pytest.raises(ValueError):
        BucketNamer("---")
