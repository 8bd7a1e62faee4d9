from .cpu import Chip8
from .decoder import Instruction, Op, decode
from .display import PixelBuffer
from .errors import (BoundsError, Chip8Error, DecodeError, KeypadError, MemoryBoundsError, RomTooLargeError,
                     StackOverflowError, StackUnderflowError)
from .keypad import Keypad
from .memory import Memory, Stack
