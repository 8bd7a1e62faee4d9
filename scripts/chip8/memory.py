from .constants import C8_FONTS, FONT_START_ADDRESS, MAX_ROM_SIZE, MEMORY_SIZE, ROM_START_ADDRESS, STACK_SIZE
from .errors import MemoryBoundsError, RomTooLargeError, StackOverflowError, StackUnderflowError


# ********** WRAPS A LIST TO REPRESENT A STACK WITH A LIMITED SIZE OF 16 ADDRESSES
class Stack:
    def __init__(self, capacity=STACK_SIZE):
        self.addr_list = []
        self.capacity = capacity

    def __len__(self):
        return len(self.addr_list)

    def __str__(self):
        return "[" + ", ".join(f"0x{a:04x}" for a in self.addr_list) + "]"

    def append(self, address):
        if len(self.addr_list) >= self.capacity:
            raise StackOverflowError(f"The CHIP-8 stack can contain at most {self.capacity} addresses. Limit exceeded")
        self.addr_list.append(address)

    def pop(self):
        if not self.addr_list:
            raise StackUnderflowError("Return with an empty CHIP-8 stack")
        return self.addr_list.pop()


# ********** WRAPS A LIST TO REPRESENT THE MAIN MEMORY WITH A LIMITED SIZE OF 4KB
class Memory:
    def __init__(self, size=MEMORY_SIZE):
        self.size = size
        self.inner = [0] * size
        self.inner[FONT_START_ADDRESS:FONT_START_ADDRESS+len(C8_FONTS)] = C8_FONTS

    def __len__(self):
        return self.size

    def _check(self, start, stop):
        if start < 0 or stop > self.size or start > stop:
            raise MemoryBoundsError(f"Memory access 0x{start:04x}-0x{max(stop - 1, start):04x} outside 0x0000-0x{self.size - 1:04x}")

    def __getitem__(self, index):
        if isinstance(index, slice):
            self._check(index.start, index.stop)
            return self.inner[index]
        self._check(index, index + 1)
        return self.inner[index]

    def __setitem__(self, key, value):
        if isinstance(key, slice):
            value = list(value)
            self._check(key.start, key.start + len(value))
            if key.stop - key.start != len(value):
                raise ValueError("Slice assignment must not resize memory")
            self.inner[key] = [v & 0xFF for v in value]
        else:
            self._check(key, key + 1)
            self.inner[key] = value & 0xFF

    def load_rom(self, rom):
        """copy the ROM bytes at 0x200, raise an exception if they don't fit"""
        if len(rom) > MAX_ROM_SIZE:
            raise RomTooLargeError(f"ROM is {len(rom)} bytes, at most {MAX_ROM_SIZE} bytes fit in memory")
        self.inner[ROM_START_ADDRESS:ROM_START_ADDRESS+len(rom)] = list(rom)
