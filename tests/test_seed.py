import yaml
import pytest
from scripts.seed_from_yaml import load_seed

SEED_YAML = """
employees:
  - Ali
  - Sara
categories:
  Formatting: [Typo, Spacing]
  Content:
    - Wrong figure
"""


@pytest.mark.asyncio
async def test_load_seed(tracker):
    created = await load_seed(tracker, yaml.safe_load(SEED_YAML))
    assert created == {"employees": 2, "categories": 2, "error_types": 3}

    types = {t.name: t.category_name for t in await tracker.list_error_types()}
    assert types == {"Typo": "Formatting", "Spacing": "Formatting", "Wrong figure": "Content"}


@pytest.mark.asyncio
async def test_load_seed_skips_existing(tracker):
    await tracker.add_employee("Ali")
    await load_seed(tracker, yaml.safe_load(SEED_YAML))
    created = await load_seed(tracker, yaml.safe_load(SEED_YAML))

    assert created == {"employees": 0, "categories": 0, "error_types": 0}
    assert sorted(e.name for e in await tracker.list_employees()) == ["Ali", "Sara"]


@pytest.mark.asyncio
async def test_load_empty_seed(tracker):
    assert await load_seed(tracker, None) == {"employees": 0, "categories": 0, "error_types": 0}
