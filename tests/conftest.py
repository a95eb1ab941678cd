import pytest

from cost_tree import new_composite, new_leaf


@pytest.fixture
def cake():
    """Cake with a nested batter step; every basic task costs 1."""
    batter = new_composite("batter")
    for name in ("dry", "liquids", "mix"):
        batter.add(new_leaf(name, 1))

    cake = new_composite("cake")
    cake.add(batter)
    for name in ("pan", "bake", "frost"):
        cake.add(new_leaf(name, 1))
    return cake


@pytest.fixture
def package():
    package = new_composite("package")
    package.add(new_leaf("box", 1))
    package.add(new_leaf("label", 1))
    return package
