# state.py

from dataclasses import dataclass, field
from typing import List, Optional

from content import MonsterTemplate

INITIAL_STAGE_ID = 101


@dataclass
class Position:
    x: int
    y: int


@dataclass
class ActiveMonster:
    # template id, shared by every instance spawned from the same template
    id: int
    hp: int
    attack_power: int
    position: Position
    gold: int
    score: int
    speed: int

    @classmethod
    def from_template(cls, template: MonsterTemplate, x: int, y: int) -> 'ActiveMonster':
        return cls(
            id=template.id,
            hp=template.base_hp,
            attack_power=template.attack_power,
            position=Position(x, y),
            gold=template.gold,
            score=template.score,
            speed=template.speed,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'hp': self.hp,
            'attackPower': self.attack_power,
            'position': {'x': self.position.x, 'y': self.position.y},
            'gold': self.gold,
            'score': self.score,
            'speed': self.speed,
        }


@dataclass
class GameState:
    """
    In-memory state of one running game.
    gold and score only ever grow; monsters keep spawn order.
    """

    monsters: List[ActiveMonster] = field(default_factory=list)
    gold: int = 0
    score: int = 0
    current_stage_id: int = INITIAL_STAGE_ID
    timestamp: int = 0
    base_hp: int = 0
    monster_level: int = 0
    towers: list = field(default_factory=list)

    def add_monster(self, monster: ActiveMonster) -> None:
        self.monsters.append(monster)

    def find_monster_index(self, monster_id: int) -> Optional[int]:
        # first match wins when several instances share a template id
        for index, monster in enumerate(self.monsters):
            if monster.id == monster_id:
                return index
        return None

    def kill_monster(self, monster_id: int) -> Optional[ActiveMonster]:
        """
        Remove the first monster with this id and collect its rewards.
        Returns the removed monster, or None if no such monster is active.
        """
        index = self.find_monster_index(monster_id)
        if index is None:
            return None
        monster = self.monsters.pop(index)
        self.gold += monster.gold
        self.score += monster.score
        return monster

    def snapshot(self) -> dict:
        return {
            'userGold': self.gold,
            'baseHp': self.base_hp,
            'monsterLevel': self.monster_level,
            'score': self.score,
            'towers': list(self.towers),
            'monsters': [m.to_dict() for m in self.monsters],
        }
