import numpy as np
from utils import vec, white, black, red, green, blue

class Material:

    def __init__(self, color, reflective=False, k_diffuse=0.9):
        """
        Create a new material with the given parameters.

        Parameters:
          color : (3,) -- Surface color, channels in [0, 1]
          reflective : bool -- Mirror surface; traced rays bounce instead of being shaded
          k_diffuse : float -- Diffuse weight in [0, 1]; the ambient weight is 1 - k_diffuse
        """
        if not 0.0 <= k_diffuse <= 1.0:
            raise ValueError(f"k_diffuse must lie in [0, 1], got {k_diffuse}")
        self._color = vec(color)
        self._color.setflags(write=False)
        self._reflective = bool(reflective)
        self._k_diffuse = float(k_diffuse)

    @property
    def color(self):
        return self._color

    @property
    def reflective(self):
        return self._reflective

    @property
    def k_diffuse(self):
        return self._k_diffuse

    @property
    def k_ambient(self):
        return 1.0 - self._k_diffuse

    def __eq__(self, other):
        if not isinstance(other, Material):
            return NotImplemented
        return (np.array_equal(self.color, other.color)
                and self.reflective == other.reflective
                and self.k_diffuse == other.k_diffuse)

    def __hash__(self):
        return hash((tuple(self.color.tolist()), self.reflective, self.k_diffuse))

    def __repr__(self):
        return (f"Material(color={self.color.tolist()!r}, reflective={self.reflective!r}, "
                f"k_diffuse={self.k_diffuse!r})")


matte_white = Material(white)
reflective_white = Material(white, reflective=True)
matte_black = Material(black)

matte_red = Material(red)
matte_green = Material(green)
matte_blue = Material(blue)
