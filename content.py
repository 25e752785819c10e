# content.py

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

ASSETS_DIR = Path(__file__).resolve().parent / 'assets'
MONSTER_FILE = 'monster.json'
STAGE_FILE = 'stage.json'


class ContentLoadError(Exception):
    """Raised when a content file is missing, unreadable or malformed."""


@dataclass(frozen=True)
class MonsterTemplate:
    id: int
    base_hp: int
    attack_power: int
    gold: int
    score: int
    speed: int


@dataclass(frozen=True)
class StageRule:
    stage_id: int
    monster_id: int


def load_records(path: Path) -> List[dict]:
    """Load the 'data' list of a content file and raise ContentLoadError on failure."""
    try:
        text = path.read_text(encoding='utf-8')
    except (OSError, UnicodeDecodeError) as exc:
        raise ContentLoadError(f"Unable to read content file: {path}") from exc
    try:
        raw = json.loads(text)
    except (json.JSONDecodeError, RecursionError) as exc:
        raise ContentLoadError(f"Invalid JSON in {path}: {exc}") from exc

    records = raw.get('data') if isinstance(raw, dict) else None
    if not isinstance(records, list):
        raise ContentLoadError(f"Expected a 'data' list in {path}")
    for record in records:
        if not isinstance(record, dict):
            raise ContentLoadError(f"Records in {path} must be objects")
    return records


def _require_int(record: dict, key: str, context: str) -> int:
    value = record.get(key)
    # bool is an int subclass, reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        raise ContentLoadError(f"{context} field '{key}' must be an integer")
    return value


def parse_monster(record: dict) -> MonsterTemplate:
    monster_id = _require_int(record, 'id', 'monster')
    context = f"monster {monster_id}"
    return MonsterTemplate(
        id=monster_id,
        base_hp=_require_int(record, 'hp', context),
        attack_power=_require_int(record, 'attackPower', context),
        gold=_require_int(record, 'gold', context),
        score=_require_int(record, 'score', context),
        speed=_require_int(record, 'speed', context),
    )


def parse_stage_rule(record: dict) -> StageRule:
    return StageRule(
        stage_id=_require_int(record, 'id', 'stage'),
        monster_id=_require_int(record, 'monster_id', 'stage'),
    )


class ContentStore:
    """
    Read-only monster templates and stage eligibility rules.
    A table that fails to load stays empty; lookups then simply miss.
    """

    def __init__(self, monsters: Optional[List[MonsterTemplate]] = None,
                 stage_rules: Optional[List[StageRule]] = None):
        # monster_id → template
        self._monsters: Dict[int, MonsterTemplate] = {}
        for template in monsters or []:
            if template.id in self._monsters:
                logging.warning(f"Duplicate monster template {template.id}, keeping the first one")
                continue
            self._monsters[template.id] = template
        # (stage_id, monster_id) pairs
        self._stage_rules: Set[Tuple[int, int]] = {
            (rule.stage_id, rule.monster_id) for rule in stage_rules or []
        }

    @classmethod
    def load(cls, assets_dir: Optional[Path] = None) -> 'ContentStore':
        base = Path(assets_dir) if assets_dir is not None else ASSETS_DIR
        monsters = cls._load_table(base / MONSTER_FILE, parse_monster)
        stage_rules = cls._load_table(base / STAGE_FILE, parse_stage_rule)
        store = cls(monsters, stage_rules)
        logging.info(
            f"Loaded {len(store._monsters)} monster template(s) and "
            f"{len(store._stage_rules)} stage rule(s) from {base}"
        )
        return store

    @staticmethod
    def _load_table(path: Path, parse) -> list:
        try:
            return [parse(record) for record in load_records(path)]
        except ContentLoadError as e:
            logging.warning(f"Failed to load {path}, continuing with an empty table: {e}")
            return []

    def find_monster_template(self, monster_id: int) -> Optional[MonsterTemplate]:
        return self._monsters.get(monster_id)

    def is_spawn_allowed(self, stage_id: int, monster_id: int) -> bool:
        return (stage_id, monster_id) in self._stage_rules
