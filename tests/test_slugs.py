import pytest

from catalys.domain.slugs import slugify


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Acme! Inc.", "acme-inc"),
        ("  Hello   World  ", "hello-world"),
        ("Already-a-slug", "already-a-slug"),
        ("Rocket 42 -- Labs", "rocket-42-labs"),
        ("Café Crème", "caf-cr-me"),
        ("!!!", ""),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected
