"""Room directory: players, rooms and room membership.

The game services only ever need ``find_room_by_code`` and ``list_members``;
the create/join helpers back the HTTP routes and the ``db-reset`` seed.
"""

from dataclasses import dataclass
from typing import List, Optional

from flask import current_app

from partyroom import db
from partyroom.models import Player, Room, RoomPlayer, generate_room_code


@dataclass(frozen=True)
class Member:
    """Roster entry handed to the game services."""
    id: int
    first_name: str
    last_name: str
    is_owner: bool = False

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'isOwner': self.is_owner,
        }


def normalize_code(code: str) -> str:
    return (code or '').strip().upper()


def as_int(value) -> Optional[int]:
    """Return ``value`` only if it is a real JSON integer; floats, strings and bools give None."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def create_player(first_name: str, last_name: str) -> Player:
    player = Player(first_name=first_name, last_name=last_name)
    db.session.add(player)
    db.session.commit()
    return player


def create_room(owner: Player) -> Room:
    """Create a room and record its creator as owner-member in one commit."""
    length = int(current_app.config.get('ROOM_CODE_LENGTH', 5))
    room = Room(code=generate_room_code(length), owner_id=owner.id)
    db.session.add(room)
    db.session.flush()
    db.session.add(RoomPlayer(player_id=owner.id, room_id=room.id, is_owner=True))
    db.session.commit()
    current_app.logger.info(f"[room-create] room={room.code} owner={owner.id}")
    return room


def join_room(player: Player, room: Room) -> RoomPlayer:
    """Add a player to a room; joining again returns the existing membership."""
    membership = RoomPlayer.query.filter_by(player_id=player.id, room_id=room.id).first()
    if membership:
        return membership
    membership = RoomPlayer(player_id=player.id, room_id=room.id, is_owner=False)
    db.session.add(membership)
    db.session.commit()
    current_app.logger.info(f"[room-join] room={room.code} player={player.id}")
    return membership


def find_room_by_code(code: str) -> Optional[Room]:
    return Room.query.filter_by(code=normalize_code(code)).first()


def list_members(room_id: int) -> List[Member]:
    """Room roster in join order."""
    rows = (
        db.session.query(RoomPlayer, Player)
        .join(Player, Player.id == RoomPlayer.player_id)
        .filter(RoomPlayer.room_id == room_id)
        .order_by(RoomPlayer.joined_at, RoomPlayer.id)
        .all()
    )
    return [
        Member(id=p.id, first_name=p.first_name, last_name=p.last_name, is_owner=bool(rp.is_owner))
        for rp, p in rows
    ]
