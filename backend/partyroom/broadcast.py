from partyroom import socketio
from partyroom.events import Event

NAMESPACE = '/ws'


def room_channel(room_code: str) -> str:
    return f"room:{room_code.upper()}"


def publish(room_code: str, event: Event) -> None:
    """Deliver an event to every client currently subscribed to the room."""
    socketio.emit(event.name, event.to_dict(), to=room_channel(room_code), namespace=NAMESPACE)
