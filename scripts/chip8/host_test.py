import os
import tempfile
import unittest
from contextlib import redirect_stderr
from io import StringIO
from unittest import mock

import pygame

from chip8.cpu import Chip8
from chip8.host import Buzzer, RunState, get_args, handle_event, read_rom, run_frame


def key_event(kind, key):
    return pygame.event.Event(kind, key=key, mod=0)


class TestEvents(unittest.TestCase):
    def setUp(self):
        self.chip = Chip8()

    def test_key_down_and_up(self):
        state = handle_event(key_event(pygame.KEYDOWN, pygame.K_a), self.chip, RunState.RUNNING)
        self.assertEqual(state, RunState.RUNNING)
        self.assertTrue(self.chip.keypad[0xA])
        handle_event(key_event(pygame.KEYUP, pygame.K_a), self.chip, state)
        self.assertFalse(self.chip.keypad[0xA])

    def test_unmapped_key_is_ignored(self):
        handle_event(key_event(pygame.KEYDOWN, pygame.K_z), self.chip, RunState.RUNNING)
        self.assertTrue(self.chip.keypad.untouched())

    def test_pause_toggle(self):
        state = handle_event(key_event(pygame.KEYDOWN, pygame.K_p), self.chip, RunState.RUNNING)
        self.assertEqual(state, RunState.PAUSED)
        state = handle_event(key_event(pygame.KEYDOWN, pygame.K_p), self.chip, state)
        self.assertEqual(state, RunState.RUNNING)

    def test_quit(self):
        self.assertEqual(handle_event(key_event(pygame.KEYDOWN, pygame.K_ESCAPE), self.chip, RunState.PAUSED),
                         RunState.QUIT)
        self.assertEqual(handle_event(pygame.event.Event(pygame.QUIT), self.chip, RunState.RUNNING),
                         RunState.QUIT)

    def test_quit_survives_later_events_in_the_batch(self):
        events = [
            pygame.event.Event(pygame.QUIT),
            key_event(pygame.KEYDOWN, pygame.K_p),
            key_event(pygame.KEYDOWN, pygame.K_5),
        ]
        state = RunState.RUNNING
        for event in events:
            state = handle_event(event, self.chip, state)
        self.assertEqual(state, RunState.QUIT)
        self.assertTrue(self.chip.keypad.untouched())

    def test_keys_go_through_keypad_press_and_release(self):
        with mock.patch.object(self.chip.keypad, "press") as press, \
                mock.patch.object(self.chip.keypad, "release") as release:
            handle_event(key_event(pygame.KEYDOWN, pygame.K_c), self.chip, RunState.RUNNING)
            handle_event(key_event(pygame.KEYUP, pygame.K_c), self.chip, RunState.RUNNING)
        press.assert_called_once_with(0xC)
        release.assert_called_once_with(0xC)


class TestFrame(unittest.TestCase):
    def test_frame_runs_cycles_then_ticks_once(self):
        chip = Chip8()
        # LD V0 9, LD DT V0, JP 0x204
        chip.load_rom(bytes([0x60, 0x09, 0xF0, 0x15, 0x12, 0x04]))
        draw = run_frame(chip, 9)
        self.assertFalse(draw)
        self.assertEqual(chip.pc, 0x204)
        self.assertEqual(chip.dt, 8)

    def test_frame_reports_drawing(self):
        chip = Chip8()
        # DRW V0 V0 1, JP 0x202
        chip.load_rom(bytes([0xD0, 0x01, 0x12, 0x02]))
        self.assertTrue(run_frame(chip, 3))


class TestCommandLine(unittest.TestCase):
    def test_defaults(self):
        args = get_args(["-f", "pong.ch8"])
        self.assertEqual(args.file, "pong.ch8")
        self.assertEqual(args.hz, 540)
        self.assertEqual(args.scale, 15)
        self.assertFalse(args.mute)

    def test_rom_is_required(self):
        with redirect_stderr(StringIO()):
            with self.assertRaises(SystemExit):
                get_args([])

    def test_hz_below_timer_rate(self):
        with redirect_stderr(StringIO()):
            with self.assertRaises(SystemExit):
                get_args(["-f", "pong.ch8", "--hz", "30"])

    def test_read_rom(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, "test.ch8")
            with open(path, "wb") as f:
                f.write(b"\x00\xe0")
            self.assertEqual(read_rom(path), b"\x00\xe0")


class TestBuzzer(unittest.TestCase):
    def test_muted_buzzer_does_nothing(self):
        b = Buzzer(enabled=False)
        b.update(True)
        self.assertFalse(b.playing)


if __name__ == "__main__":
    unittest.main()
