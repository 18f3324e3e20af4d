import numpy as np

class Hit:
    def __init__(self, t, point=None, normal=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          point : (3,) -- the 3D point where the intersection happens
          normal : (3,) -- the 3D outward-facing unit normal to the surface at the hit point
        """
        self.t = t
        self.point = point
        self.normal = normal

    def __bool__(self):
        # only finite, forward hits count
        return bool(0 < self.t < np.inf)

    def __repr__(self):
        return f"Hit(t={self.t!r}, point={self.point!r}, normal={self.normal!r})"

# Value to represent absence of an intersection
no_hit = Hit(np.inf)


class Sphere:

    def __init__(self, center, radius):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius
        """
        if radius <= 0:
            raise ValueError(f"sphere radius must be positive, got {radius}")
        self._center = np.array(center, np.float64)
        self._center.setflags(write=False)
        self._radius = float(radius)

    @property
    def center(self):
        return self._center

    @property
    def radius(self):
        return self._radius

    def __repr__(self):
        return f"Sphere(center={self.center.tolist()!r}, radius={self.radius!r})"

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        Only roots strictly inside (ray.start, ray.end) are considered, so a
        ray starting inside the sphere hits its far side.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit -- the hit data, or no_hit
        """
        # half-b form: t = (-h +- sqrt(h^2 - a c)) / a
        oc = ray.origin - self.center
        a = np.dot(ray.direction, ray.direction)
        h = np.dot(ray.direction, oc)
        c = np.dot(oc, oc) - self.radius * self.radius
        discriminant = h * h - a * c
        if discriminant < 0:
            return no_hit

        root = np.sqrt(discriminant)
        for t in ((-h - root) / a, (-h + root) / a):
            if ray.in_range(t):
                point = ray.at(t)
                return Hit(float(t), point, (point - self.center) / self.radius)
        return no_hit
