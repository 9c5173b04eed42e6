from pairchat.services.room_key import ROOM_KEY_SEPARATOR, resolve_room_key


def test_order_independent():
    """Both insertion orders resolve to the same key"""
    assert resolve_room_key("u1", "u2") == resolve_room_key("u2", "u1")


def test_sorted_and_joined():
    assert resolve_room_key("zed", "amy") == f"amy{ROOM_KEY_SEPARATOR}zed"


def test_different_pairs_differ():
    assert resolve_room_key("a", "b") != resolve_room_key("a", "c")
    assert resolve_room_key("a", "b") != resolve_room_key("b", "c")


def test_equal_ids():
    """Resolving a pair with itself never fails"""
    assert resolve_room_key("same", "same") == f"same{ROOM_KEY_SEPARATOR}same"
