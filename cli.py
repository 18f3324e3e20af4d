import argparse
import sys
import time

from ray import Camera, render_image, MAX_DEPTH

DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 600
DEFAULT_FOCAL_LENGTH = 1.5
DEFAULT_VIEWPORT_HEIGHT = 3.0
DEFAULT_OUTPUT = "cornell_box.ppm"


def build_parser():
    parser = argparse.ArgumentParser(description="Render a scene with the recursive ray tracer.")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT,
                        help="output image; .ppm is written as plain-text PPM, other "
                             "extensions go through Pillow (default: %(default)s)")
    parser.add_argument("--width", type=int, default=DEFAULT_WIDTH,
                        help="image width in pixels (default: %(default)s)")
    parser.add_argument("--height", type=int, default=DEFAULT_HEIGHT,
                        help="image height in pixels (default: %(default)s)")
    parser.add_argument("--focal-length", type=float, default=DEFAULT_FOCAL_LENGTH,
                        help="distance from eye to viewport (default: %(default)s)")
    parser.add_argument("--viewport-height", type=float, default=DEFAULT_VIEWPORT_HEIGHT,
                        help="viewport height in world units (default: %(default)s)")
    parser.add_argument("--depth", type=int, default=MAX_DEPTH,
                        help="maximum number of mirror bounces (default: %(default)s)")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="don't print per-row progress")
    return parser


def render(scene, argv=None):
    """Render the scene with options taken from the command line and save it.

    Returns the process exit status: 0 on success, 1 if the image could not be written.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.depth < 0:
        parser.error(f"--depth must be non-negative, got {args.depth}")

    try:
        camera = Camera(args.width, args.height,
                        focal_length=args.focal_length,
                        viewport_height=args.viewport_height)
    except ValueError as e:
        parser.error(str(e))

    start = time.time()
    image = render_image(camera, scene, max_depth=args.depth, verbose=not args.quiet)
    if not args.quiet:
        print(f"rendered {camera.width}x{camera.height} in {time.time() - start:.1f}s")

    if not image.write_image(args.output):
        return 1
    if not args.quiet:
        print(f"wrote {args.output}")
    return 0


def main(argv=None):
    from cornell_box import cornell_box_scene
    return render(cornell_box_scene(), argv)


if __name__ == '__main__':
    sys.exit(main())
