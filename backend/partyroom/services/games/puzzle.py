from typing import List, Sequence

from partyroom import broadcast
from partyroom.content import get_puzzle_items
from partyroom.directory import Member, find_room_by_code, list_members, normalize_code
from partyroom.events import Game2CompleteEvent, Game2ProgressEvent, Game2StartEvent
from .results import Reason, Result
from .sessions import PuzzleSessionState, sessions


def owner_first(members: Sequence[Member]) -> List[Member]:
    """Move owner-members to the front, keeping join order otherwise."""
    return sorted(members, key=lambda m: not m.is_owner)


def distribute_items(player_count: int, item_count: int) -> List[int]:
    """How many items each player (owner first) has to find.

    One player takes everything and two players split evenly (the owner takes
    the odd item out). From three players on, everyone but the owner takes one
    item and the owner takes the rest. With more players than items the
    trailing players take none.
    """
    if player_count <= 0:
        return []
    if player_count == 1:
        return [item_count]
    if player_count == 2:
        half = item_count // 2
        return [item_count - half, half]
    if player_count > item_count:
        return [1] * item_count + [0] * (player_count - item_count)
    return [item_count - (player_count - 1)] + [1] * (player_count - 1)


def assignment_order(players: Sequence[Member], distribution: Sequence[int]) -> List[Member]:
    order: List[Member] = []
    for player, count in zip(players, distribution):
        order.extend([player] * count)
    return order


def start_puzzle(app, room_code: str) -> Result:
    """Deal the puzzle items to the room's players and announce the first finder.

    Needs an app context. Restarting replaces the room's previous puzzle.
    """
    code = normalize_code(room_code)
    room = find_room_by_code(code)
    if not room:
        return Result.fail(Reason.ROOM_NOT_FOUND, f'Room {code} not found')
    players = owner_first(list_members(room.id))
    if not players:
        return Result.fail(Reason.NO_PLAYERS, 'Room has no players')

    items = get_puzzle_items(app)
    distribution = distribute_items(len(players), len(items))
    order = assignment_order(players, distribution)

    with sessions.acquire(code) as entry:
        puzzle = PuzzleSessionState(order=order, items=items)
        entry.puzzle = puzzle
        first, item = puzzle.expected_player, puzzle.expected_item
        broadcast.publish(code, Game2StartEvent(
            next_player_id=first.id,
            next_player_name=first.first_name,
            hint=item.hint,
            progress=0,
            total=puzzle.total,
            found=[],
        ))

    app.logger.info(
        f"[puzzle-start] room={code} players={len(players)} distribution={distribution} order={[p.id for p in order]}"
    )
    return Result.ok('Puzzle started', distribution=distribution, total=len(items))


def validate_scan(app, room_code: str, player_id, token: str) -> Result:
    """Check a scanned item against the expected player and item at the cursor.

    Failures leave the room state untouched and broadcast nothing.
    """
    code = normalize_code(room_code)
    with sessions.acquire(code, create=False) as entry:
        puzzle = entry.puzzle if entry else None
        if puzzle is None:
            result = Result.fail(Reason.NOT_STARTED, 'Puzzle has not started')
        elif puzzle.complete:
            result = Result.fail(Reason.ALREADY_COMPLETE, 'Puzzle is already complete')
        elif token != puzzle.expected_item.token:
            result = Result.fail(Reason.WRONG_ITEM, 'This is not the item we are looking for')
        elif player_id != puzzle.expected_player.id:
            result = Result.fail(
                Reason.NOT_YOUR_TURN,
                f"It is {puzzle.expected_player.first_name}'s turn",
                nextPlayerId=puzzle.expected_player.id,
            )
        else:
            if token not in puzzle.found:
                puzzle.found.append(token)
            puzzle.cursor += 1
            if puzzle.complete:
                broadcast.publish(code, Game2CompleteEvent(found=list(puzzle.found), total=puzzle.total))
                result = Result.ok('Puzzle complete', progress=puzzle.cursor, total=puzzle.total)
            else:
                nxt, item = puzzle.expected_player, puzzle.expected_item
                broadcast.publish(code, Game2ProgressEvent(
                    found=list(puzzle.found),
                    progress=puzzle.cursor,
                    total=puzzle.total,
                    next_player_id=nxt.id,
                    next_player_name=nxt.first_name,
                    hint=item.hint,
                ))
                result = Result.ok('Item found', progress=puzzle.cursor, total=puzzle.total)

    app.logger.info(f"[puzzle-scan] room={code} player={player_id} token={token} reason={result.reason.value}")
    return result
