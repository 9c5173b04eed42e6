"""
Room identity - canonical key for an unordered pair of participants
"""

# Never produced in generated (uuid4) identifiers
ROOM_KEY_SEPARATOR = "_"


def resolve_room_key(user_a_id: str, user_b_id: str) -> str:
    """
    Derive the room key for two participants.

    Order-independent: resolve_room_key(a, b) == resolve_room_key(b, a).
    """
    first, second = sorted((user_a_id, user_b_id))
    return f"{first}{ROOM_KEY_SEPARATOR}{second}"
