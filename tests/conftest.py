from __future__ import annotations

import pytest

from content import ContentStore, MonsterTemplate, StageRule
from dispatcher import PacketDispatcher
from state import GameState
from tests.helpers.fake_connection import FakeConnection


@pytest.fixture
def content() -> ContentStore:
    return ContentStore(
        monsters=[
            MonsterTemplate(id=1, base_hp=100, attack_power=10, gold=5, score=2, speed=1),
            MonsterTemplate(id=2, base_hp=150, attack_power=12, gold=8, score=3, speed=1),
        ],
        stage_rules=[
            StageRule(stage_id=101, monster_id=1),
            StageRule(stage_id=101, monster_id=2),
            # allowed on the stage but missing a template
            StageRule(stage_id=101, monster_id=9),
            StageRule(stage_id=102, monster_id=2),
        ],
    )


@pytest.fixture
def state() -> GameState:
    return GameState()


@pytest.fixture
def dispatcher(state: GameState, content: ContentStore) -> PacketDispatcher:
    return PacketDispatcher(state, content)


@pytest.fixture
def conn() -> FakeConnection:
    return FakeConnection()
