from .constants import SCREEN_HEIGHT, SCREEN_WIDTH, SPRITE_WIDTH


class PixelBuffer:
    """monochrome 64x32 grid stored row-major, 1 means the pixel is ON"""
    def __init__(self, w=SCREEN_WIDTH, h=SCREEN_HEIGHT):
        self.w, self.h = w, h
        self.buffer = [0] * h * w

    def __getitem__(self, pos):
        x, y = pos
        return self.read_pixel(x, y)

    def __str__(self):
        return "\n".join(
            "".join("#" if p else "." for p in self.buffer[row * self.w:(row + 1) * self.w])
            for row in range(self.h)
        )

    def read_pixel(self, x, y):
        """return 1 if pixel is ON, return 0 if pixel is OFF"""
        return self.buffer[y * self.w + x]

    def write_pixel(self, x, y, color):
        self.buffer[y * self.w + x] = 1 if color else 0

    def clear(self):
        self.buffer = [0] * self.h * self.w

    def lit(self):
        """coordinates of every pixel that is ON"""
        return [(i % self.w, i // self.w) for i, p in enumerate(self.buffer) if p]

    def draw_sprite(self, x, y, sprite):
        """
        XOR each row of sprite (a sequence of bytes, MSB on the left) onto the buffer with its
        top-left corner at (x, y) and return 1 if any pixel was turned OFF, 0 otherwise.
        The starting coordinates wrap around the buffer, the sprite itself does not:
        rows and columns falling past the right or bottom edge are clipped.
        """
        x, y = x % self.w, y % self.h
        collision = 0
        for i, sprite_byte in enumerate(sprite):
            y_coordinate = y + i
            if y_coordinate >= self.h:
                break
            for j in range(SPRITE_WIDTH):
                x_coordinate = x + j
                if x_coordinate >= self.w:
                    break
                if not sprite_byte & (0x80 >> j):
                    continue
                pixel_state = self.read_pixel(x_coordinate, y_coordinate)
                # the only case when a pixel gets erased is when it was ON and is turned ON again
                if pixel_state == 1:
                    collision = 1
                self.write_pixel(x_coordinate, y_coordinate, pixel_state ^ 1)
        return collision
