import re

from signage_client.utils.hardware_key import HardwareKey


def test_override_wins():
    assert HardwareKey("  my-display-01 ").key == "my-display-01"


def test_generated_key_is_stable_md5():
    first = HardwareKey().key
    second = HardwareKey(None).key

    assert first == second
    assert re.fullmatch(r"[0-9A-F]{32}", first)
    assert str(HardwareKey()) == first
