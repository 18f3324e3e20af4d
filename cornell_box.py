from utils import *
from materials import *
from ray import Scene, SceneObject

# The walls are slices of huge spheres whose surfaces sit 5 units from the origin
WALL_RADIUS = 6371.0
WALL_OFFSET = 6376.0

LIGHTS = (
    vec([3.0, 4.5, -7.0]),
    vec([-3.0, 4.5, -7.0]),
)


def cornell_box_scene():
    """Build the Cornell box: five walls, a green ball and a mirror ball, two lights."""
    walls = [
        SceneObject.sphere(vec([0, 0, -WALL_OFFSET - 5.0]), WALL_RADIUS, matte_white),  # back
        SceneObject.sphere(vec([0, -WALL_OFFSET, 0]), WALL_RADIUS, matte_white),        # floor
        SceneObject.sphere(vec([0, WALL_OFFSET, 0]), WALL_RADIUS, matte_white),         # ceiling
        SceneObject.sphere(vec([-WALL_OFFSET, 0, 0]), WALL_RADIUS, matte_blue),         # left
        SceneObject.sphere(vec([WALL_OFFSET, 0, 0]), WALL_RADIUS, matte_red),           # right
    ]
    balls = [
        SceneObject.sphere(vec([3.0, -4.0, -8.0]), 1.0, matte_green),
        SceneObject.sphere(vec([-1.0, -3.7, -7.0]), 1.3, reflective_white),
    ]
    return Scene(walls + balls, LIGHTS)


if __name__ == '__main__':
    from cli import render
    raise SystemExit(render(cornell_box_scene()))
