import unittest
from unittest import mock

from chip8.display import PixelBuffer


class TestPixelBuffer(unittest.TestCase):
    def setUp(self):
        self.screen = PixelBuffer()

    def test_starts_blank(self):
        self.assertEqual(self.screen.lit(), [])
        self.assertEqual(len(self.screen.buffer), 64 * 32)

    def test_draw_sets_pixels(self):
        collision = self.screen.draw_sprite(10, 5, [0b10100000])
        self.assertEqual(collision, 0)
        self.assertEqual(self.screen.lit(), [(10, 5), (12, 5)])
        self.assertEqual(self.screen[10, 5], 1)
        self.assertEqual(self.screen[11, 5], 0)

    def test_row_major(self):
        self.screen.draw_sprite(1, 2, [0x80])
        self.assertEqual(self.screen.buffer[2 * 64 + 1], 1)

    def test_draw_twice_restores_and_collides(self):
        sprite = [0xF0, 0x90, 0x90, 0x90, 0xF0]
        self.screen.draw_sprite(3, 3, [0xFF])
        before = list(self.screen.buffer)
        self.assertEqual(self.screen.draw_sprite(20, 10, sprite), 0)
        self.assertEqual(self.screen.draw_sprite(20, 10, sprite), 1)
        self.assertEqual(self.screen.buffer, before)

    def test_draw_writes_through_write_pixel(self):
        with mock.patch.object(self.screen, "write_pixel", wraps=self.screen.write_pixel) as write_pixel:
            self.screen.draw_sprite(4, 2, [0b10010000])
        self.assertEqual(write_pixel.call_args_list, [mock.call(4, 2, 1), mock.call(7, 2, 1)])
        self.assertEqual(self.screen.lit(), [(4, 2), (7, 2)])

    def test_empty_sprite_never_collides(self):
        self.screen.draw_sprite(0, 0, [0xFF])
        self.assertEqual(self.screen.draw_sprite(0, 0, [0x00]), 0)
        self.assertEqual(self.screen.read_pixel(0, 0), 1)

    def test_partial_overlap(self):
        self.screen.draw_sprite(0, 0, [0b11000000])
        collision = self.screen.draw_sprite(1, 0, [0b11000000])
        self.assertEqual(collision, 1)
        self.assertEqual(self.screen.lit(), [(0, 0), (2, 0)])

    def test_clip_right_edge(self):
        self.screen.draw_sprite(60, 0, [0xFF])
        self.assertEqual(self.screen.lit(), [(60, 0), (61, 0), (62, 0), (63, 0)])

    def test_clip_bottom_edge(self):
        self.screen.draw_sprite(0, 30, [0x80, 0x80, 0x80, 0x80])
        self.assertEqual(self.screen.lit(), [(0, 30), (0, 31)])

    def test_start_coordinates_wrap(self):
        self.screen.draw_sprite(64 + 2, 32 + 1, [0x80])
        self.assertEqual(self.screen.lit(), [(2, 1)])

    def test_clipped_pixels_do_not_collide(self):
        self.screen.draw_sprite(0, 0, [0xFF])
        self.assertEqual(self.screen.draw_sprite(63, 31, [0xFF, 0xFF]), 0)

    def test_clear(self):
        self.screen.draw_sprite(0, 0, [0xFF] * 15)
        self.screen.clear()
        self.assertEqual(self.screen.buffer, [0] * 64 * 32)

    def test_write_pixel_and_str(self):
        screen = PixelBuffer(w=3, h=2)
        screen.write_pixel(2, 1, 1)
        self.assertEqual(str(screen), "...\n..#")


if __name__ == "__main__":
    unittest.main()
