import contextlib
import io
import os
import tempfile
import unittest

import numpy as np
from PIL import Image as PIM

from ray import *
from geometry import Hit, no_hit
from materials import Material, matte_white, matte_green, reflective_white
from framebuffer import Framebuffer
from cornell_box import cornell_box_scene
from cli import render
from utils import normalize, reflect, vec, to_rgb8

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


def quietly(fn, *args, **kwargs):
    # swallow the printed warnings so the test output stays readable
    out = io.StringIO()
    with contextlib.redirect_stdout(out):
        result = fn(*args, **kwargs)
    return result, out.getvalue()


class TestVectors(unittest.TestCase):

    def test_reflect(self):
        np.testing.assert_allclose(reflect(vec([1, -1, 0]), vec([0, 1, 0])), [1, 1, 0])
        np.testing.assert_allclose(reflect(vec([0, 0, -2]), vec([0, 0, 1])), [0, 0, 2])

    def test_normalize_zero(self):
        with self.assertRaises(ValueError):
            normalize(vec([0, 0, 0]))

    def test_zero_direction_ray(self):
        with self.assertRaises(ValueError):
            Ray(vec([1, 2, 3]), vec([0, 0, 0]))

    def test_quantization(self):
        np.testing.assert_array_equal(
            to_rgb8(vec([0.0, 0.5, 1.0])), [0, 127, 255])
        # out of range shading clips instead of wrapping
        np.testing.assert_array_equal(
            to_rgb8(vec([-0.2, 1.7, 0.999])), [0, 255, 255])


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray)
        self.assertTrue(hit)
        self.assertLess(hit.t, np.inf)
        np.testing.assert_almost_equal(ray.origin + hit.t * ray.direction, hit.point)
        np.testing.assert_almost_equal(normalize(hit.point - sphere.center), hit.normal)
        self.assertAlmostEqual(np.linalg.norm(hit.point - sphere.center), sphere.radius)
        self.assertAlmostEqual(np.linalg.norm(hit.normal), 1.0)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(np.array([0,0,0]), 1.0)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # dead center with non-unit direction
        hit = self.confirm_hit(unit_sphere, Ray(vec([3.0,0.0,0.0]), vec([-2.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), vec([-2.0,-3.0,-4.0])))
        self.assertAlmostEqual(hit.t, 1 - 1 / np.sqrt(29))

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0)
        # on axis miss
        hit = unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertEqual(hit.t, np.inf)
        self.assertFalse(hit)
        # sphere entirely behind the ray
        hit = unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0])))
        self.assertIs(hit, no_hit)

    def test_inside_hits_far_side(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0)
        hit = self.confirm_hit(unit_sphere, Ray(vec([0.0,0.0,0.0]), vec([0.0,0.0,-1.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        np.testing.assert_almost_equal(hit.normal, [0, 0, -1])

    def test_nonunit_hits(self):
        # all the same as the first case, but scaled by 3 and shifted by (-1, -5, -7)
        sphere = Sphere(vec([-1,-5,-7]), 3.0)
        hit = self.confirm_hit(sphere, Ray(vec([5.0,-5.0,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        hit = self.confirm_hit(sphere, Ray(vec([8.0,-5.0,-7.0]), vec([-6.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        hit = self.confirm_hit(sphere, Ray(vec([2.0,-3.5,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))

    def test_ray_interval(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0)
        # near root cut off by start, far root used instead
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0]), start=1.5))
        self.assertAlmostEqual(hit.t, 3.0)
        # both roots past the end
        hit = unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0]), end=0.5))
        self.assertIs(hit, no_hit)
        ray = Ray(vec([0,0,0]), vec([1,0,0]), start=1.0, end=2.0)
        self.assertTrue(ray.in_range(1.5))
        self.assertFalse(ray.in_range(1.0))
        self.assertFalse(ray.in_range(2.0))

    def test_bad_radius(self):
        with self.assertRaises(ValueError):
            Sphere(vec([0,0,0]), 0.0)

    def test_hit_truthiness(self):
        self.assertFalse(no_hit)
        self.assertFalse(Hit(0.0))
        self.assertFalse(Hit(-1.0))
        self.assertTrue(Hit(0.5, vec([0,0,0]), vec([0,1,0])))


class TestMaterial(unittest.TestCase):

    def test_ambient_weight(self):
        mat = Material(vec([0.2, 0.4, 0.6]), k_diffuse=0.7)
        self.assertAlmostEqual(mat.k_ambient, 0.3)
        self.assertFalse(mat.reflective)
        self.assertAlmostEqual(matte_white.k_diffuse, 0.9)
        self.assertAlmostEqual(matte_white.k_ambient, 0.1)
        self.assertTrue(reflective_white.reflective)

    def test_bad_k_diffuse(self):
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_diffuse=1.5)
        with self.assertRaises(ValueError):
            Material(vec([1, 1, 1]), k_diffuse=-0.1)

    def test_immutable(self):
        mat = Material(vec([0.2, 0.4, 0.6]))
        with self.assertRaises(AttributeError):
            mat.k_diffuse = 0.5
        with self.assertRaises(ValueError):
            mat.color[0] = 1.0
        # the caller's array is copied, not shared
        color = vec([0.2, 0.4, 0.6])
        mat = Material(color)
        color[0] = 1.0
        self.assertAlmostEqual(mat.color[0], 0.2)

    def test_value_equality(self):
        self.assertEqual(Material(vec([1, 1, 1])), matte_white)
        self.assertNotEqual(Material(vec([1, 1, 1]), reflective=True), matte_white)


class TestCamera(unittest.TestCase):

    def test_default_camera(self):
        # 90 degree field of view looking down -z
        cam = Camera(2, 2)
        ray = cam.generate_ray(0, 0)
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        assert_direction_matches(ray.direction, vec([-1,1,-2]))
        ray = cam.generate_ray(1, 0)
        assert_direction_matches(ray.direction, vec([1,1,-2]))
        ray = cam.generate_ray(0, 1)
        assert_direction_matches(ray.direction, vec([-1,-1,-2]))
        ray = cam.generate_ray(1, 1)
        assert_direction_matches(ray.direction, vec([1,-1,-2]))

    def test_center_pixel(self):
        cam = Camera(3, 3)
        ray = cam.generate_ray(1, 1)
        assert_direction_matches(ray.direction, vec([0,0,-1]))

    def test_pixel_centers(self):
        cam = Camera(4, 2, focal_length=1.0, viewport_height=2.0)
        self.assertAlmostEqual(cam.viewport_width, 4.0)
        np.testing.assert_almost_equal(cam.pixel_delta_u, [1, 0, 0])
        np.testing.assert_almost_equal(cam.pixel_delta_v, [0, -1, 0])
        # half a pixel in from the upper-left corner (-2, 1, -1)
        np.testing.assert_almost_equal(cam.pixel00_loc, [-1.5, 0.5, -1])
        np.testing.assert_almost_equal(cam.generate_ray(3, 1).direction, [1.5, -0.5, -1])

    def test_symmetric_corners(self):
        cam = Camera(4, 3, focal_length=1.5, viewport_height=3.0)
        first = cam.ray_for_pixel(0, 0).direction
        last = cam.ray_for_pixel(3, 2).direction
        self.assertAlmostEqual(first[0], -last[0])
        self.assertAlmostEqual(first[1], -last[1])
        self.assertAlmostEqual(first[2], last[2])
        self.assertAlmostEqual(first[2], -1.5)

    def test_aspect(self):
        cam = Camera(200, 100, viewport_height=2.0)
        self.assertAlmostEqual(cam.aspect, 2.0)
        self.assertAlmostEqual(cam.viewport_width, 4.0)

    def test_moved_center(self):
        cam = Camera(3, 3, center=vec([1, 2, 3]))
        ray = cam.generate_ray(1, 1)
        np.testing.assert_almost_equal(ray.origin, [1, 2, 3])
        assert_direction_matches(ray.direction, vec([0, 0, -1]))

    def test_out_of_range(self):
        cam = Camera(2, 2)
        for x, y in [(2, 0), (0, 2), (-1, 0), (0, -1)]:
            with self.assertRaises(IndexError):
                cam.generate_ray(x, y)

    def test_bad_parameters(self):
        with self.assertRaises(ValueError):
            Camera(0, 10)
        with self.assertRaises(ValueError):
            Camera(10, 10, focal_length=0)
        with self.assertRaises(ValueError):
            Camera(10, 10, viewport_height=-2)


class TestScene(unittest.TestCase):

    def test_nearest_hit(self):
        far = SceneObject.sphere(vec([0, 0, -10]), 1.0, matte_white)
        near = SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_green)
        aside = SceneObject.sphere(vec([5, 0, -5]), 1.0, matte_white)
        scene = Scene([far, near, aside], [vec([0, 5, 0])])

        context = scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, -1])))
        self.assertIs(context.obj, near)
        self.assertIs(context.material, matte_green)
        self.assertAlmostEqual(context.hit.t, 4.0, places=4)

        # off axis, closed form: t = 5 - sqrt(r^2 - d^2)
        context = scene.find_nearest(Ray(vec([0, 0.5, 0]), vec([0, 0, -1])))
        self.assertIs(context.obj, near)
        self.assertAlmostEqual(context.hit.t, 5 - np.sqrt(0.75), places=4)

        # non-unit direction scales t
        context = scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, -2])))
        self.assertAlmostEqual(context.hit.t, 2.0, places=4)

    def test_no_false_hits(self):
        scene = Scene([
            SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_white),
            SceneObject.sphere(vec([3, 0, -5]), 1.0, matte_white),
        ], [vec([0, 5, 0])])
        self.assertIsNone(scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, 1]))))
        self.assertIsNone(scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 1, 0]))))
        self.assertIsNone(Scene([], []).find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, -1]))))

    def test_tie_goes_to_first(self):
        first = SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_white)
        second = SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_green)
        scene = Scene([first, second], [])
        self.assertIs(scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, -1]))).obj, first)

    def test_scene_is_read_only(self):
        objects = [SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_white)]
        scene = Scene(objects, [vec([0, 5, 0])])
        objects.append(SceneObject.sphere(vec([0, 0, -2]), 1.0, matte_green))
        self.assertEqual(len(scene.objects), 1)
        self.assertIsInstance(scene.objects, tuple)
        self.assertIsInstance(scene.lights, tuple)

    def test_lights_are_frozen(self):
        light = vec([0, 5, 0])
        scene = cornell_box_scene()
        with self.assertRaises(ValueError):
            scene.lights[0][1] = 100.0
        np.testing.assert_allclose(scene.lights[0], [3.0, 4.5, -7.0])
        # the caller's array is copied, not frozen in place
        scene = Scene([], [light])
        light[1] = 1.0
        np.testing.assert_allclose(scene.lights[0], [0, 5, 0])


class TestShadows(unittest.TestCase):

    point = vec([0, 0, 0])
    normal = vec([0, 1, 0])
    light = vec([0, 5, 0])

    def test_unobstructed(self):
        scene = Scene([], [self.light])
        visible = scene.visible_lights(self.point, self.normal)
        self.assertEqual(len(visible), 1)
        np.testing.assert_allclose(visible[0], self.light)

    def test_occluder_between(self):
        blocker = SceneObject.sphere(vec([0, 2.5, 0]), 0.5, matte_white)
        self.assertEqual(Scene([blocker], [self.light]).visible_lights(self.point, self.normal), [])
        # removing the occluder restores the light
        self.assertEqual(len(Scene([], [self.light]).visible_lights(self.point, self.normal)), 1)

    def test_occluder_beyond_light(self):
        beyond = SceneObject.sphere(vec([0, 8, 0]), 0.5, matte_white)
        visible = Scene([beyond], [self.light]).visible_lights(self.point, self.normal)
        self.assertEqual(len(visible), 1)

    def test_partial_and_ordered(self):
        blocker = SceneObject.sphere(vec([0, 2.5, 0]), 0.5, matte_white)
        other = vec([5, 5, 0])
        scene = Scene([blocker], [self.light, other, vec([-5, 5, 0])])
        visible = scene.visible_lights(self.point, self.normal)
        self.assertEqual(len(visible), 2)
        np.testing.assert_allclose(visible[0], other)
        np.testing.assert_allclose(visible[1], [-5, 5, 0])

    def test_no_self_shadowing(self):
        # a point on top of a sphere must not be shadowed by the sphere itself
        sphere = SceneObject.sphere(vec([0, -1, 0]), 1.0, matte_white)
        scene = Scene([sphere], [vec([4, 3, 0])])
        normal = normalize(vec([1, 1, 0]))
        point = vec([0, -1, 0]) + normal
        self.assertEqual(len(scene.visible_lights(point, normal)), 1)


class TestLambertian(unittest.TestCase):

    color = vec([0.2, 0.4, 0.6])

    def shading_test(self, lights, objects=(), material=None, normal=vec([0, 1, 0])):
        material = material or Material(self.color)
        obj = SceneObject.sphere(vec([0, -1, 0]), 1.0, material)
        context = HitContext(obj, Hit(1.0, vec([0, 0, 0]), normal))
        return lambertian(context, Scene(objects, lights))

    def test_overhead(self):
        # ambient 0.1 plus full diffuse 0.9
        np.testing.assert_allclose(self.shading_test([vec([0, 1, 0])]), self.color)
        # distance doesn't matter, only direction
        np.testing.assert_allclose(self.shading_test([vec([0, 100, 0])]), self.color)

    def test_sixty_degrees(self):
        np.testing.assert_allclose(
            self.shading_test([vec([0, 1, np.sqrt(3)])]),
            (0.1 + 0.9 * 0.5) * self.color
        )

    def test_light_behind_surface(self):
        np.testing.assert_allclose(self.shading_test([vec([0, -5, 0])]), 0.1 * self.color)

    def test_divides_by_all_lights(self):
        # one useful light out of two gives half the diffuse term
        np.testing.assert_allclose(
            self.shading_test([vec([0, 5, 0]), vec([0, -5, 0])]),
            (0.1 + 0.45) * self.color
        )

    def test_shadowed(self):
        blocker = SceneObject.sphere(vec([0, 2.5, 0]), 0.5, matte_white)
        np.testing.assert_allclose(
            self.shading_test([vec([0, 5, 0])], objects=[blocker]),
            0.1 * self.color
        )

    def test_k_diffuse(self):
        mat = Material(self.color, k_diffuse=0.5)
        np.testing.assert_allclose(
            self.shading_test([vec([0, 1, np.sqrt(3)])], material=mat),
            (0.5 + 0.5 * 0.5) * self.color
        )

    def test_no_lights(self):
        with self.assertRaises(ValueError):
            self.shading_test([])


class TestTrace(unittest.TestCase):

    def test_depth_zero_is_black(self):
        scene = cornell_box_scene()
        ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))
        np.testing.assert_array_equal(trace_ray(ray, scene, 0), [0, 0, 0])
        with self.assertRaises(ValueError):
            trace_ray(ray, scene, -1)

    def test_background_is_black(self):
        scene = Scene([SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_white)], [vec([0, 5, 0])])
        np.testing.assert_array_equal(trace_ray(Ray(vec([0, 0, 0]), vec([0, 0, 1])), scene, 5), [0, 0, 0])

    def test_matte_is_shaded(self):
        scene = Scene([SceneObject.sphere(vec([0, 0, -5]), 1.0, matte_green)], [vec([0, 0, 0])])
        ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))
        np.testing.assert_allclose(trace_ray(ray, scene, 1), [0, 1, 0])
        np.testing.assert_allclose(trace_ray(ray, scene, 1), lambertian(scene.find_nearest(ray), scene))

    def test_mirror_into_nothing(self):
        scene = Scene([SceneObject.sphere(vec([0, 0, -5]), 1.0, reflective_white)], [vec([0, 5, 0])])
        ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))
        for depth in (1, 2, 5):
            np.testing.assert_allclose(trace_ray(ray, scene, depth), [0.1, 0.1, 0.1])

    def test_mirror_sees_matte(self):
        mirror = SceneObject.sphere(vec([0, 0, -5]), 1.0, reflective_white)
        # behind the eye, only visible in the mirror
        ball = SceneObject.sphere(vec([0, 0, 5]), 1.0, matte_green)
        scene = Scene([mirror, ball], [vec([0, 0, 0])])
        ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))
        np.testing.assert_allclose(trace_ray(ray, scene, 1), [0.1, 0.1, 0.1])
        np.testing.assert_allclose(trace_ray(ray, scene, 2), [0.1, 1.0, 0.1])

    def test_reflection_energy_bound(self):
        # eye inside a mirror sphere, every primary ray hits a mirror
        scene = Scene([SceneObject.sphere(vec([0, 0, 0]), 10.0, reflective_white)], [vec([0, 5, 0])])
        directions = [vec([0, 0, -1]), vec([1, 2, 3]), vec([-3, 0.5, 1]), vec([0, -1, 0])]
        for depth in range(0, 7):
            for d in directions:
                color = trace_ray(Ray(vec([0, 1, 2]), d), scene, depth)
                self.assertTrue(np.all(color >= 0.0), (depth, color))
                self.assertTrue(np.all(color <= 1.0), (depth, color))


class TestRender(unittest.TestCase):

    def single_sphere(self):
        scene = Scene([SceneObject.sphere(vec([0, 0, 0]), 1.0, matte_white)], [vec([0, 0, 5])])
        # focal length 1 and viewport height 2 is a 90 degree field of view
        camera = Camera(101, 101, focal_length=1.0, viewport_height=2.0, center=vec([0, 0, 5]))
        return camera, scene

    def test_end_to_end(self):
        camera, scene = self.single_sphere()
        center = trace_ray(camera.generate_ray(50, 50), scene, MAX_DEPTH)
        # head-on: ambient plus the whole diffuse weight
        np.testing.assert_allclose(center - matte_white.k_ambient, [0.9, 0.9, 0.9], atol=1e-6)
        # close to the silhouette the surface is seen at a grazing angle
        grazing = trace_ray(camera.generate_ray(60, 50), scene, MAX_DEPTH)
        self.assertGreater(np.sum(center), np.sum(grazing))
        self.assertGreater(np.sum(grazing), 0.0)
        # the corners miss the sphere
        np.testing.assert_array_equal(trace_ray(camera.generate_ray(0, 0), scene, MAX_DEPTH), [0, 0, 0])

    def test_render_image(self):
        scene = cornell_box_scene()
        camera = Camera(8, 6, focal_length=1.5, viewport_height=3.0)
        image = render_image(camera, scene, max_depth=3)
        self.assertEqual((image.width, image.height), (8, 6))
        np.testing.assert_array_equal(image.shape, [6, 8, 3])
        self.assertTrue(np.all(np.isfinite(image.pixels)))
        self.assertTrue(np.all(image.pixels >= 0.0))
        for x, y in [(0, 0), (7, 5), (3, 2)]:
            np.testing.assert_allclose(
                image.get_pixel(x, y), trace_ray(camera.generate_ray(x, y), scene, 3))

    def test_render_progress(self):
        camera = Camera(2, 3)
        _, out = quietly(render_image, camera, cornell_box_scene(), 2, None, True)
        self.assertIn("rendering row 3/3...", out)

    def test_framebuffer_size_mismatch(self):
        with self.assertRaises(ValueError):
            render_image(Camera(4, 4), cornell_box_scene(), framebuffer=Framebuffer(4, 3))


class TestCornellBox(unittest.TestCase):

    def test_layout(self):
        scene = cornell_box_scene()
        self.assertEqual(len(scene.objects), 7)
        self.assertEqual(len(scene.lights), 2)
        # fresh scene each call
        self.assertIsNot(scene, cornell_box_scene())

    def test_back_wall(self):
        scene = cornell_box_scene()
        context = scene.find_nearest(Ray(vec([0, 0, 0]), vec([0, 0, -1])))
        self.assertAlmostEqual(context.hit.t, 10.0, places=4)
        self.assertEqual(context.material, matte_white)
        np.testing.assert_allclose(context.hit.normal, [0, 0, 1], atol=1e-6)

    def test_side_walls(self):
        scene = cornell_box_scene()
        left = scene.find_nearest(Ray(vec([0, 0, -7]), vec([-1, 0, 0])))
        right = scene.find_nearest(Ray(vec([0, 0, -7]), vec([1, 0, 0])))
        np.testing.assert_allclose(left.material.color, [0, 0, 1])
        np.testing.assert_allclose(right.material.color, [1, 0, 0])


class TestFramebuffer(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.image = Framebuffer(3, 2)
        self.image.set_pixel(0, 0, vec([1.0, 0.5, 0.0]))
        self.image.set_pixel(2, 0, vec([0.25, 0.75, 0.999]))
        self.image.set_pixel(1, 1, vec([1.4, -0.3, 0.1]))

    def tearDown(self):
        self.tmpdir.cleanup()

    def path(self, name):
        return os.path.join(self.tmpdir.name, name)

    def test_set_get(self):
        np.testing.assert_allclose(self.image.get_pixel(0, 0), [1.0, 0.5, 0.0])
        # row-major: (x, y) lives at pixels[y, x]
        np.testing.assert_allclose(self.image.pixels[0, 2], [0.25, 0.75, 0.999])
        np.testing.assert_allclose(self.image.get_pixel(2, 1), [0, 0, 0])
        with self.assertRaises(IndexError):
            self.image.set_pixel(3, 0, vec([1, 1, 1]))
        with self.assertRaises(IndexError):
            self.image.get_pixel(0, 2)

    def test_ppm_layout(self):
        self.assertTrue(self.image.write_ppm(self.path("out.ppm")))
        with open(self.path("out.ppm")) as f:
            lines = f.read().splitlines()
        self.assertEqual(lines[:3], ["P3", "3 2", "255"])
        self.assertEqual(lines[3].split()[:3], ["255", "127", "0"])
        self.assertEqual(len(lines), 5)

    def test_ppm_round_trip(self):
        self.assertTrue(self.image.write_image(self.path("out.ppm")))
        loaded = Framebuffer.read_ppm(self.path("out.ppm"))
        self.assertEqual((loaded.width, loaded.height), (3, 2))
        np.testing.assert_array_equal(loaded.ipixels, self.image.ipixels)
        np.testing.assert_array_equal(
            loaded.ipixels[1, 1], np.floor(np.clip([1.4, -0.3, 0.1], 0, 1) * 255.999))

    def test_read_comments(self):
        with open(self.path("c.ppm"), "w") as f:
            f.write("P3\n# made by hand\n1 1\n255\n10 20 30 # one pixel\n")
        loaded = Framebuffer.read_ppm(self.path("c.ppm"))
        np.testing.assert_array_equal(loaded.ipixels[0, 0], [10, 20, 30])

    def test_read_malformed(self):
        with open(self.path("bad.ppm"), "w") as f:
            f.write("P6\n1 1\n255\n0 0 0\n")
        with self.assertRaises(ValueError):
            Framebuffer.read_ppm(self.path("bad.ppm"))
        with open(self.path("short.ppm"), "w") as f:
            f.write("P3\n2 1\n255\n0 0 0\n")
        with self.assertRaises(ValueError):
            Framebuffer.read_ppm(self.path("short.ppm"))

    def test_unwritable_destination(self):
        before = self.image.pixels.copy()
        target = os.path.join(self.path("missing"), "out.ppm")
        ok, out = quietly(self.image.write_ppm, target)
        self.assertFalse(ok)
        self.assertIn("Warning", out)
        np.testing.assert_array_equal(self.image.pixels, before)
        ok, out = quietly(self.image.write_image, os.path.join(self.path("missing"), "out.png"))
        self.assertFalse(ok)

    def test_png(self):
        self.assertTrue(self.image.write_image(self.path("out.png")))
        with PIM.open(self.path("out.png")) as pim:
            np.testing.assert_array_equal(np.array(pim.convert("RGB")), self.image.ipixels)


class TestCli(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def test_render_to_file(self):
        output = os.path.join(self.tmpdir.name, "box.ppm")
        status = render(cornell_box_scene(), ["--width", "4", "--height", "3", "--depth", "2",
                                              "-q", "-o", output])
        self.assertEqual(status, 0)
        loaded = Framebuffer.read_ppm(output)
        self.assertEqual((loaded.width, loaded.height), (4, 3))

    def test_unwritable_output(self):
        output = os.path.join(self.tmpdir.name, "missing", "box.ppm")
        status, _ = quietly(render, cornell_box_scene(),
                            ["--width", "2", "--height", "2", "-q", "-o", output])
        self.assertEqual(status, 1)

    def test_bad_arguments(self):
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                render(cornell_box_scene(), ["--width", "0"])
            with self.assertRaises(SystemExit):
                render(cornell_box_scene(), ["--depth", "-1"])


if __name__ == '__main__':
    unittest.main()
