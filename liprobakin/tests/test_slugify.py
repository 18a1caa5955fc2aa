"""
Tests for team slug generation.
"""
import pytest

from liprobakin.utils.slugify import slugify


@pytest.mark.parametrize(
    "name,expected",
    [
        ("AS Vita Club", "as-vita-club"),
        ("  Héritage de Kinshasa ", "heritage-de-kinshasa"),
        ("Mazembe N'Djili", "mazembe-ndjili"),
        ("New Generation (U-20)", "new-generation-u-20"),
        ("Dauphins__Noirs", "dauphins-noirs"),
        ("!!!", ""),
        ("", ""),
    ],
)
def test_slugify(name, expected):
    assert slugify(name) == expected
