import os

import numpy as np
from PIL import Image as PIM

from utils import to_rgb8, from_rgb8


class Framebuffer(object):
    """Framebuffer

    Dense (height, width, 3) grid of float colors, row-major, one entry per pixel.
    """

    def __init__(self, width, height, pixels=None):
        if width <= 0 or height <= 0:
            raise ValueError(f"framebuffer size must be positive, got {width}x{height}")
        self._width = int(width)
        self._height = int(height)
        if pixels is None:
            pixels = np.zeros((self._height, self._width, 3), np.float64)
        else:
            pixels = np.array(pixels, np.float64)
            if pixels.shape != (self._height, self._width, 3):
                raise ValueError(f"pixel array has shape {pixels.shape}, "
                                 f"expected {(self._height, self._width, 3)}")
        self.pixels = pixels

    @property
    def width(self):
        return self._width

    @property
    def height(self):
        return self._height

    @property
    def shape(self):
        return np.asarray(self.pixels.shape)[:]

    @property
    def ipixels(self):
        """8-bit pixels, quantized with floor(c * 255.999)."""
        return to_rgb8(self.pixels)

    def _check_bounds(self, x, y):
        if not (0 <= x < self._width and 0 <= y < self._height):
            raise IndexError(f"pixel ({x}, {y}) outside {self._width}x{self._height} framebuffer")

    def set_pixel(self, x, y, color):
        self._check_bounds(x, y)
        self.pixels[y, x] = color

    def get_pixel(self, x, y):
        self._check_bounds(x, y)
        return self.pixels[y, x].copy()

    def PIL(self):
        return PIM.fromarray(self.ipixels)

    def write_ppm(self, output_path):
        """Write a plain-text (P3) PPM file.

        Returns True on success. An unwritable destination only prints a
        warning; the rendered pixels are left untouched.
        """
        lines = ["P3", f"{self._width} {self._height}", "255"]
        for row in self.ipixels:
            lines.append(" ".join(f"{r} {g} {b}" for r, g, b in row.tolist()))
        try:
            with open(output_path, 'w') as f:
                f.write("\n".join(lines) + "\n")
        except OSError as e:
            print(f"Warning: could not write image to {output_path}: {e}")
            return False
        return True

    def write_image(self, output_path):
        """Write the image, choosing the format from the file extension.

        .ppm goes through write_ppm; anything else is encoded by Pillow.
        """
        if os.path.splitext(str(output_path))[1].lower() == '.ppm':
            return self.write_ppm(output_path)
        try:
            self.PIL().save(output_path)
        except (OSError, ValueError) as e:
            print(f"Warning: could not write image to {output_path}: {e}")
            return False
        return True

    @classmethod
    def read_ppm(cls, path):
        """Load a plain-text (P3) PPM file, e.g. one written by write_ppm."""
        with open(path, 'r') as f:
            tokens = []
            for line in f:
                tokens.extend(line.split('#', 1)[0].split())

        if not tokens or tokens[0] != 'P3':
            raise ValueError(f"{path}: not a plain-text PPM (P3) file")
        try:
            width, height, max_value = (int(s) for s in tokens[1:4])
            values = [int(s) for s in tokens[4:]]
        except ValueError:
            raise ValueError(f"{path}: malformed PPM header or pixel data")
        if width <= 0 or height <= 0 or max_value <= 0:
            raise ValueError(f"{path}: bad PPM dimensions {width}x{height} (max {max_value})")
        if len(values) != width * height * 3:
            raise ValueError(f"{path}: expected {width * height * 3} channel values, "
                             f"found {len(values)}")

        samples = np.array(values, np.float64).reshape(height, width, 3)
        if max_value != 255:
            samples = np.round(samples * (255.0 / max_value))
        return cls(width, height, pixels=from_rgb8(samples))
