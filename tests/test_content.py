from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from content import ContentLoadError, ContentStore, MonsterTemplate, load_records


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")


def _write_assets(base: Path) -> Path:
    _write_json(
        base / "monster.json",
        {"data": [{"id": 1, "hp": 100, "attackPower": 10, "gold": 5, "score": 2, "speed": 1}]},
    )
    _write_json(
        base / "stage.json",
        {"data": [{"id": 101, "monster_id": 1}, {"id": 102, "monster_id": 1}]},
    )
    return base


def test_load_builds_templates_and_rules(tmp_path: Path) -> None:
    store = ContentStore.load(_write_assets(tmp_path))

    assert store.find_monster_template(1) == MonsterTemplate(
        id=1, base_hp=100, attack_power=10, gold=5, score=2, speed=1
    )
    assert store.is_spawn_allowed(101, 1)
    assert store.is_spawn_allowed(102, 1)
    assert not store.is_spawn_allowed(103, 1)
    assert not store.is_spawn_allowed(101, 2)


def test_missing_file_degrades_to_empty_table(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write_json(tmp_path / "stage.json", {"data": [{"id": 101, "monster_id": 1}]})

    with caplog.at_level(logging.WARNING):
        store = ContentStore.load(tmp_path)

    assert store.find_monster_template(1) is None
    assert store.is_spawn_allowed(101, 1)
    assert "monster.json" in caplog.text


def test_invalid_json_degrades_to_empty_table(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    (tmp_path / "stage.json").write_text("{not json", encoding="utf-8")

    store = ContentStore.load(tmp_path)

    assert store.find_monster_template(1) is not None
    assert not store.is_spawn_allowed(101, 1)


def test_non_utf8_file_degrades_to_empty_table(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    _write_assets(tmp_path)
    (tmp_path / "monster.json").write_bytes(b'{"data": [\xff\xfe]}')

    with caplog.at_level(logging.WARNING):
        store = ContentStore.load(tmp_path)

    assert store.find_monster_template(1) is None
    assert store.is_spawn_allowed(101, 1)
    assert "monster.json" in caplog.text


def test_deeply_nested_json_degrades_to_empty_table(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    (tmp_path / "stage.json").write_text("[" * 200000 + "]" * 200000, encoding="utf-8")

    store = ContentStore.load(tmp_path)

    assert store.find_monster_template(1) is not None
    assert not store.is_spawn_allowed(101, 1)


def test_malformed_record_degrades_whole_table(tmp_path: Path) -> None:
    _write_assets(tmp_path)
    _write_json(tmp_path / "monster.json", {"data": [{"id": 1, "hp": "lots"}]})

    store = ContentStore.load(tmp_path)

    assert store.find_monster_template(1) is None


def test_load_records_requires_data_list(tmp_path: Path) -> None:
    path = tmp_path / "monster.json"
    _write_json(path, {"rows": []})
    with pytest.raises(ContentLoadError):
        load_records(path)


def test_duplicate_template_keeps_first() -> None:
    first = MonsterTemplate(id=1, base_hp=100, attack_power=10, gold=5, score=2, speed=1)
    second = MonsterTemplate(id=1, base_hp=1, attack_power=1, gold=1, score=1, speed=1)

    store = ContentStore(monsters=[first, second])

    assert store.find_monster_template(1) == first


def test_bundled_assets_allow_monster_one_on_first_stage() -> None:
    store = ContentStore.load()

    template = store.find_monster_template(1)
    assert template is not None
    assert template.base_hp == 100
    assert store.is_spawn_allowed(101, 1)
