import numpy as np

def vec(list):
    """Handy shorthand to make a double-precision float array."""
    return np.array(list, dtype=np.float64)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    norm = np.linalg.norm(v)
    if norm == 0:
        raise ValueError("cannot normalize a zero-length vector")
    return v / norm

def reflect(incident, normal):
    """Mirror the incident direction about the (unit) surface normal."""
    return incident - 2 * np.dot(incident, normal) * normal


# Colors are plain 3-vectors with channels nominally in [0, 1]
white = vec([1.0, 1.0, 1.0])
black = vec([0.0, 0.0, 0.0])
red = vec([1.0, 0.0, 0.0])
green = vec([0.0, 1.0, 0.0])
blue = vec([0.0, 0.0, 1.0])


def to_rgb8(img):
    """Quantize float colors to 8 bits per channel using floor(c * 255.999).

    Values are clipped to [0, 1] first so over-bright shading stays white.
    """
    img_clip = np.clip(np.asarray(img, dtype=np.float64), 0, 1)
    return np.floor(img_clip * 255.999).astype(np.uint8)

def from_rgb8(img_rgb8):
    return np.asarray(img_rgb8, dtype=np.float64) / 255.0
