import os


# ******************** FONTS
# 16 hex digit glyphs, 5 bytes each, stored at the start of memory
C8_FONTS = [0xF0, 0x90, 0x90, 0x90, 0xF0,  # 0
            0x20, 0x60, 0x20, 0x20, 0x70,  # 1
            0xF0, 0x10, 0xF0, 0x80, 0xF0,  # 2
            0xF0, 0x10, 0xF0, 0x10, 0xF0,  # 3
            0x90, 0x90, 0xF0, 0x10, 0x10,  # 4
            0xF0, 0x80, 0xF0, 0x10, 0xF0,  # 5
            0xF0, 0x80, 0xF0, 0x90, 0xF0,  # 6
            0xF0, 0x10, 0x20, 0x40, 0x40,  # 7
            0xF0, 0x90, 0xF0, 0x90, 0xF0,  # 8
            0xF0, 0x90, 0xF0, 0x10, 0xF0,  # 9
            0xF0, 0x90, 0xF0, 0x90, 0x90,  # A
            0xE0, 0x90, 0xE0, 0x90, 0xE0,  # B
            0xF0, 0x80, 0x80, 0x80, 0xF0,  # C
            0xE0, 0x90, 0x90, 0x90, 0xE0,  # D
            0xF0, 0x80, 0xF0, 0x80, 0xF0,  # E
            0xF0, 0x80, 0xF0, 0x80, 0x80]  # F
FONT_START_ADDRESS = 0x000
FONT_GLYPH_SIZE = 5


# ******************** MACHINE LAYOUT
MEMORY_SIZE = 4096
ROM_START_ADDRESS = 0x200
MAX_ROM_SIZE = MEMORY_SIZE - ROM_START_ADDRESS
STACK_SIZE = 16
REGISTER_COUNT = 16
FLAG_REGISTER = 0xF
KEY_COUNT = 16
SCREEN_HEIGHT = 32
SCREEN_WIDTH = 64
SPRITE_WIDTH = 8
INSTRUCTION_SIZE = 0x2
TIMER_HZ = 60


# ******************** CONFIGURATION
DEBUG = True if int(os.getenv('DEBUG', 0)) >= 1 else False
