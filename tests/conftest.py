import pytest

from ecs_check.world import World


@pytest.fixture
def world() -> World:
    return World()
