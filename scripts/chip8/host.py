import argparse
import sys
from array import array
from enum import Enum

import os
os.environ["PYGAME_HIDE_SUPPORT_PROMPT"] = "no welcome message"   # this env var disable pygame's welcome message when imported
import pygame
from pygame.locals import (
    K_0, K_1, K_2, K_3,
    K_4, K_5, K_6, K_7,
    K_8, K_9, K_a, K_b,
    K_c, K_d, K_e, K_f,
    K_ESCAPE, K_p,
)

from .constants import DEBUG, SCREEN_HEIGHT, SCREEN_WIDTH, TIMER_HZ
from .cpu import Chip8
from .errors import Chip8Error


# ******************** STATIC SECTION
KEY_MAPPINGS = {
    K_0: 0x0,
    K_1: 0x1,
    K_2: 0x2,
    K_3: 0x3,
    K_4: 0x4,
    K_5: 0x5,
    K_6: 0x6,
    K_7: 0x7,
    K_8: 0x8,
    K_9: 0x9,
    K_a: 0xA,
    K_b: 0xB,
    K_c: 0xC,
    K_d: 0xD,
    K_e: 0xE,
    K_f: 0xF,
}

DEFAULT_HZ = 540
SCALE = 15
BLUE = pygame.Color(80,69,155,255)
LIGHT_BLUE = pygame.Color(136,126,203,255)
TONE_HZ = 440
SAMPLE_RATE = 22050


class RunState(Enum):
    RUNNING = "running"
    PAUSED = "paused"
    QUIT = "quit"


# ******************** UTILITIES SECTION
def get_args(argv=None):
    parser = argparse.ArgumentParser(prog="chip8", description="CHIP-8 interpreter")
    parser.add_argument("-f", "--file", required=True, help="input rom file")
    parser.add_argument("--hz", type=int, default=DEFAULT_HZ, help="instructions executed per second")
    parser.add_argument("--scale", type=int, default=SCALE, help="size in window pixels of one CHIP-8 pixel")
    parser.add_argument("--mute", action="store_true", help="do not play the buzzer")
    args = parser.parse_args(argv)
    if args.hz < TIMER_HZ:
        parser.error(f"--hz must be at least {TIMER_HZ}")
    return args

def read_rom(path):
    """read the ROM file at path, the interpreter validates its size when loading it"""
    with open(path, mode='rb') as f:
        rom = f.read()
    if DEBUG: print(f"The ROM at path {path} has been read successfully ({len(rom)} bytes)")
    return rom


# ******************** I/O SECTION
class Screen:
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT, s=SCALE, bg_color=BLUE, fg_color=LIGHT_BLUE):
        self.w, self.h, self.scale = w, h, s
        self.background = bg_color
        self.foreground = fg_color
        self.surface = pygame.display.set_mode(
            (w * self.scale, h * self.scale),
        )
        self.surface.fill(self.background)

    def render(self, pixels):
        """paint every pixel of the buffer and make the result visible"""
        self.surface.fill(self.background)
        for x, y in pixels.lit():
            pygame.draw.rect(
                self.surface,
                self.foreground,
                (x * self.scale, y * self.scale, self.scale, self.scale)
            )
        pygame.display.flip()

class Buzzer:
    """square wave tone played in a loop while the sound timer is running"""
    def __init__(self, enabled=True):
        self.sound = None
        self.playing = False
        if not enabled:
            return
        try:
            pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
        except pygame.error as e:
            print(f"Sound disabled, the audio mixer could not be initialized: {e}")
            return
        half_period = SAMPLE_RATE // (TONE_HZ * 2)
        samples = array('h', ([4096] * half_period + [-4096] * half_period) * TONE_HZ)
        self.sound = pygame.mixer.Sound(buffer=samples.tobytes())

    def update(self, on):
        if self.sound is None or on == self.playing:
            return
        if on:
            self.sound.play(loops=-1)
        else:
            self.sound.stop()
        self.playing = on


# ******************** EVENTS SECTION
def handle_event(event, chip, state):
    """apply one pygame event to the keypad and return the new run state, QUIT is final"""
    if state == RunState.QUIT:
        return state
    if event.type == pygame.QUIT:
        return RunState.QUIT
    if event.type == pygame.KEYDOWN:
        if event.key == K_ESCAPE:
            return RunState.QUIT
        if event.key == K_p:
            return RunState.PAUSED if state == RunState.RUNNING else RunState.RUNNING
        if event.key in KEY_MAPPINGS:
            chip.keypad.press(KEY_MAPPINGS[event.key])
    elif event.type == pygame.KEYUP:
        if event.key in KEY_MAPPINGS:
            chip.keypad.release(KEY_MAPPINGS[event.key])
    return state

def run_frame(chip, cycles):
    """emulate one 60Hz frame: a batch of cycles followed by a single timer tick"""
    draw = False
    for _ in range(cycles):
        chip.cycle(tick_timers=False)
        draw = draw or chip.draw
    chip.tick_timers()
    return draw


# ******************** ENTRY POINT SECTION
def main(argv=None):
    args = get_args(argv)
    rom = read_rom(args.file)
    chip = Chip8()
    try:
        chip.load_rom(rom)
    except Chip8Error as e:
        sys.exit(f"Cannot load {args.file}: {e}")
    # pygame initialization
    pygame.init()
    clock = pygame.time.Clock()
    pygame.display.set_caption(os.path.basename(args.file))
    # IO
    s = Screen(s=args.scale)
    b = Buzzer(enabled=not args.mute)
    s.render(chip.screen)
    # emulation loop
    cycles_per_frame = args.hz // TIMER_HZ
    state = RunState.RUNNING
    try:
        while state != RunState.QUIT:
            # frames per second
            clock.tick(TIMER_HZ)
            # process user input
            # loop throught the event queue
            for event in pygame.event.get():
                state = handle_event(event, chip, state)
            if state != RunState.RUNNING:
                b.update(False)
                continue
            try:
                if run_frame(chip, cycles_per_frame):
                    s.render(chip.screen)
            except Chip8Error as e:
                sys.exit(f"********** THE EMULATOR CRASHED: {e}\n********** WITH THE FOLLOWING STATE\n{chip}")
            b.update(chip.sound_on)
    finally:
        pygame.quit()
