from .constants import KEY_COUNT
from .errors import KeypadError


class Keypad:
    """16 key flags, written by the host before each cycle and only read by the CPU"""
    def __init__(self):
        self.keys = [False] * KEY_COUNT

    def _check(self, key):
        if not 0 <= key < KEY_COUNT:
            raise KeypadError(f"Key 0x{key:x} does not exist on the CHIP-8 keypad")

    def __getitem__(self, key):
        self._check(key)
        return self.keys[key]

    def __setitem__(self, key, value):
        self._check(key)
        self.keys[key] = bool(value)

    def __str__(self):
        pressed = [f"{k:X}" for k, down in enumerate(self.keys) if down]
        return "{" + ",".join(pressed) + "}"

    def press(self, key):
        self[key] = True

    def release(self, key):
        self[key] = False

    def untouched(self):
        return not any(self.keys)

    def first(self):
        """lowest-indexed key currently held down, None if no key is pressed"""
        for key, down in enumerate(self.keys):
            if down:
                return key
        return None
