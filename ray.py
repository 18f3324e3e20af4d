import numpy as np
from materials import Material
from geometry import Sphere
from framebuffer import Framebuffer
from utils import *

"""
Core implementation of the ray tracer.
"""

MAX_DEPTH = 5 # max recursion depth
EPSILON = 6e-2 # for offsetting shadow and reflection rays off the surface
REFLECTANCE = 0.9 # fraction of the bounced color kept by a mirror
HIGHLIGHT = 0.1 # constant white blended into every mirror bounce


class Ray:

    def __init__(self, origin, direction, start=0., end=np.inf):
        """Create a ray with the given origin and direction.

        The direction does not need to be normalized, but it must not be zero.
        """
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)
        if not np.any(self.direction):
            raise ValueError("ray direction must be non-zero")
        self.start = start
        self.end = end

    def at(self, t):
        """Return the point at parameter t along the ray."""
        return self.origin + t * self.direction

    def in_range(self, t):
        """True if t lies strictly between the ray's start and end."""
        return self.start < t < self.end

class Camera:

    def __init__(self, width, height, focal_length=1.0, viewport_height=2.0, center=vec([0,0,0])):
        """Create a pinhole camera looking down the -z axis.

        Parameters:
          width, height : int -- resolution of the image in pixels
          focal_length : float -- distance from the center to the viewport
          viewport_height : float -- height of the viewport in world units
          center : (3,) -- the eye point shared by all rays
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"resolution must be positive, got {width}x{height}")
        if focal_length <= 0:
            raise ValueError(f"focal length must be positive, got {focal_length}")
        if viewport_height <= 0:
            raise ValueError(f"viewport height must be positive, got {viewport_height}")

        self.width = int(width)
        self.height = int(height)
        self.focal_length = focal_length
        self.center = vec(center)

        self.viewport_height = viewport_height
        self.viewport_width = viewport_height * (self.width / self.height)

        # image x runs along +u, image y runs down the viewport
        viewport_u = vec([self.viewport_width, 0, 0])
        viewport_v = vec([0, -self.viewport_height, 0])

        self.pixel_delta_u = viewport_u / self.width
        self.pixel_delta_v = viewport_v / self.height

        viewport_upper_left = (self.center - vec([0, 0, focal_length])
                               - 0.5 * viewport_u - 0.5 * viewport_v)
        # sample the center of each pixel cell, not its corner
        self.pixel00_loc = viewport_upper_left + 0.5 * (self.pixel_delta_u + self.pixel_delta_v)

    @property
    def aspect(self):
        return self.width / self.height

    def generate_ray(self, x, y):
        """Compute the ray through the center of pixel (x, y)."""
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        pixel_loc = self.pixel00_loc + x * self.pixel_delta_u + y * self.pixel_delta_v
        return Ray(self.center, pixel_loc - self.center)

    ray_for_pixel = generate_ray


class SceneObject:

    def __init__(self, material, surface):
        """Pair a material with the geometric surface it covers."""
        self._material = material
        self._surface = surface

    @classmethod
    def sphere(cls, center, radius, material):
        return cls(material, Sphere(center, radius))

    @property
    def material(self):
        return self._material

    @property
    def surface(self):
        return self._surface

    def intersect(self, ray):
        return self._surface.intersect(ray)

    def __repr__(self):
        return f"SceneObject({self.material!r}, {self.surface!r})"

class HitContext:

    def __init__(self, obj, hit):
        """The nearest object along a ray together with its intersection data."""
        self.obj = obj
        self.hit = hit

    @property
    def material(self):
        return self.obj.material


def _frozen(point):
    point = vec(point)
    point.setflags(write=False)
    return point


class Scene:

    def __init__(self, objects, lights):
        """Create a scene containing the given objects, lit by white point lights.

        Both sequences are copied into tuples; the scene is read-only once built.
        """
        self.objects = tuple(objects)
        self.lights = tuple(_frozen(light) for light in lights)

    def find_nearest(self, ray):
        """Return the HitContext of the closest object along the ray, or None."""
        nearest = None
        nearest_t = np.inf
        for obj in self.objects:
            hit = obj.intersect(ray)
            if hit and hit.t < nearest_t:
                nearest = HitContext(obj, hit)
                nearest_t = hit.t
        return nearest

    def visible_lights(self, point, normal):
        """Return the lights with an unobstructed line of sight from a surface point.

        The shadow ray direction is light - point, so t = 1 is the light itself
        and only hits with t <= 1 block it.
        """
        # nudge off the surface to avoid shadow acne
        origin = point + EPSILON * normal
        visible = []
        for light in self.lights:
            shadow_ray = Ray(origin, light - origin)
            blocker = self.find_nearest(shadow_ray)
            if blocker is None or blocker.hit.t > 1.0:
                visible.append(light)
        return visible


def lambertian(context, scene):
    """Local illumination: ambient term plus cosine-weighted diffuse light.

    The diffuse sum is divided by the total number of lights in the scene,
    so partially shadowed points are proportionally darker. No clamping.
    """
    if not scene.lights:
        raise ValueError("scene has no light sources")
    mat = context.material
    hit = context.hit

    diffuse = 0.0
    for light in scene.visible_lights(hit.point, hit.normal):
        light_dir = normalize(light - hit.point)
        diffuse += max(0.0, np.dot(hit.normal, light_dir))
    diffuse *= mat.k_diffuse / len(scene.lights)

    return (mat.k_ambient + diffuse) * mat.color

def trace_ray(ray, scene, max_depth=MAX_DEPTH):
    """Recursively resolve the color seen along a ray.

    Mirrors keep REFLECTANCE of what they reflect plus a HIGHLIGHT of white;
    running out of depth or missing everything gives black.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if max_depth == 0:
        return black.copy()

    context = scene.find_nearest(ray)
    if context is None:
        return black.copy()

    if context.material.reflective:
        hit = context.hit
        origin = hit.point + EPSILON * hit.normal
        bounce = Ray(origin, reflect(ray.direction, hit.normal))
        return REFLECTANCE * trace_ray(bounce, scene, max_depth - 1) + HIGHLIGHT * white

    return lambertian(context, scene)


def render_image(camera, scene, max_depth=MAX_DEPTH, framebuffer=None, verbose=False):
    """
    render a ray traced image.
    """
    if framebuffer is None:
        framebuffer = Framebuffer(camera.width, camera.height)
    elif (framebuffer.width, framebuffer.height) != (camera.width, camera.height):
        raise ValueError(
            f"framebuffer is {framebuffer.width}x{framebuffer.height}, "
            f"camera renders {camera.width}x{camera.height}")

    for y in range(camera.height):
        if verbose:
            print(f"rendering row {y+1}/{camera.height}...")
        for x in range(camera.width):
            ray = camera.generate_ray(x, y)
            framebuffer.set_pixel(x, y, trace_ray(ray, scene, max_depth))

    return framebuffer
