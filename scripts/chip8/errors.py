class Chip8Error(Exception):
    """base class of every failure the interpreter reports to the host"""


class DecodeError(Chip8Error, ValueError):
    """the fetched word matches no known instruction"""
    def __init__(self, opcode, address=None):
        self.opcode = opcode
        self.address = address
        where = "" if address is None else f" at 0x{address:04x}"
        super().__init__(f"Unknown instruction 0x{opcode:04x}{where}")


class BoundsError(Chip8Error, IndexError):
    pass


class MemoryBoundsError(BoundsError):
    pass


class StackOverflowError(BoundsError):
    pass


class StackUnderflowError(BoundsError):
    pass


class KeypadError(BoundsError):
    pass


class RomTooLargeError(Chip8Error, ValueError):
    pass
