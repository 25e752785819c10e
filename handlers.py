# handlers.py

import json
import logging
from typing import Callable, Dict

from content import ContentStore
from protocol import Protocol, ResponseCode, PacketType, Payload
from state import ActiveMonster, GameState

STAGE_MISMATCH = "current stage is not valid for this monster"
MONSTER_DATA_NOT_FOUND = "monster data not found"
MONSTER_NOT_FOUND = "monster not found"


class HandlerContext:
    def __init__(self, version: int, sequence: int, payload: Payload,
                 state: GameState, content: ContentStore):
        self.version = version
        self.sequence = sequence
        self.payload = payload
        self.state = state
        self.content = content

    def respond(self, code: int, body: bytes = b'') -> bytes:
        return Protocol.make_response(self.version, code, self.sequence, body)

    def respond_text(self, code: int, message: str) -> bytes:
        return self.respond(code, message.encode('utf-8'))

    def reject(self, message: str) -> bytes:
        logging.info(f"Request {self.sequence} rejected: {message}")
        return self.respond_text(ResponseCode.REJECTED, message)


def report_error(err: Exception, version: int, sequence: int = 0) -> bytes:
    """
    Log a fault and turn it into an ERROR response.
    Body is '<ExceptionName>: <message>' in UTF-8.
    """
    logging.error(f"Request {sequence} failed: {type(err).__name__}: {err}")
    body = f"{type(err).__name__}: {err}".encode('utf-8')
    return Protocol.make_response(version, ResponseCode.ERROR, sequence, body)


# map packet types to handler functions
HANDLERS: Dict[int, Callable[[HandlerContext], bytes]] = {}


def register(packet_type: PacketType):
    def decorator(fn):
        HANDLERS[packet_type] = fn
        return fn
    return decorator


@register(PacketType.SPAWN_MONSTER_REQUEST)
def handle_spawn_monster(ctx: HandlerContext) -> bytes:
    """
    Handle spawn requests (packet 700).
    The monster must be allowed on the current stage and have a template.
    Answers 2200 on success, 4200 on rejection.
    """
    monster_id, x, y = ctx.payload.monster_id, ctx.payload.x, ctx.payload.y

    if not ctx.content.is_spawn_allowed(ctx.state.current_stage_id, monster_id):
        return ctx.reject(STAGE_MISMATCH)

    template = ctx.content.find_monster_template(monster_id)
    if template is None:
        return ctx.reject(MONSTER_DATA_NOT_FOUND)

    monster = ActiveMonster.from_template(template, x, y)
    ctx.state.add_monster(monster)
    logging.info(f"Monster {monster.id} spawned at ({x}, {y}). hp: {monster.hp}, attack: {monster.attack_power}")

    return ctx.respond_text(ResponseCode.SPAWN_COMPLETE, f"monster {monster.id} spawn complete")


@register(PacketType.MONSTER_DEATH_NOTIFICATION)
def handle_monster_death(ctx: HandlerContext) -> bytes:
    """
    Handle death notifications (packet 701).
    Removes the first active monster with the id and credits its gold and score.
    """
    monster_id = ctx.payload.monster_id

    monster = ctx.state.kill_monster(monster_id)
    if monster is None:
        return ctx.reject(MONSTER_NOT_FOUND)

    logging.info(f"Monster {monster_id} died. gold: +{monster.gold}, score: +{monster.score}")
    return ctx.respond_text(ResponseCode.DEATH_PROCESSED, f"monster {monster_id} death processed")


@register(PacketType.STATE_SYNC_NOTIFICATION)
def handle_state_sync(ctx: HandlerContext) -> bytes:
    """
    Handle state sync (packet 702).
    Answers 2202 with the JSON snapshot; any failure building it becomes 9000.
    """
    try:
        body = json.dumps(ctx.state.snapshot()).encode('utf-8')
        return ctx.respond(ResponseCode.STATE_SNAPSHOT, body)
    except Exception as e:
        return report_error(e, ctx.version, ctx.sequence)
