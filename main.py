#!/usr/bin/env python3
"""
raytracing - a Monte Carlo path tracer for sphere scenes

Main entry point for rendering scenes.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from raytracing.camera import Camera
from raytracing.renderer import Renderer, RenderSettings
from raytracing.scenes import SCENES

ASPECT_RATIO = 16.0 / 9.0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='raytracing - a Monte Carlo path tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py --scene red --output image.png
  python main.py --scene materials --width 800 --samples 200 --output materials.png
  python main.py --scene random --seed 7 --threads 8 --output cover.ppm
        '''
    )

    parser.add_argument('--width', type=int, default=400, help='Image width (default: 400)')
    parser.add_argument('--height', type=int, default=None,
                        help='Image height (default: width / (16/9))')
    parser.add_argument('--samples', type=int, default=100, help='Samples per pixel (default: 100)')
    parser.add_argument('--depth', type=int, default=5, help='Max ray depth (default: 5)')
    parser.add_argument('--threads', type=int, default=0, help='Number of threads (0=auto)')
    parser.add_argument('--seed', type=int, default=None, help='Seed for a reproducible render')
    parser.add_argument('--output', type=str, default='output/image.png', help='Output filename')
    parser.add_argument('--scene', type=str, default='red', choices=sorted(SCENES),
                        help='Scene to render (default: red)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log render details')
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    height = args.height if args.height is not None else int(args.width / ASPECT_RATIO)
    try:
        settings = RenderSettings(
            width=args.width,
            height=height,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            num_threads=args.threads,
            seed=args.seed,
        )
    except ValueError as e:
        parser.error(str(e))

    print("=" * 60)
    print("raytracing")
    print("=" * 60)

    print(f"\nRender Settings:")
    print(f"  Resolution: {settings.width}x{settings.height}")
    print(f"  Samples: {settings.samples_per_pixel}")
    print(f"  Max Depth: {settings.max_depth}")
    print(f"  Threads: {settings.num_threads}")

    print(f"\nCreating scene: {args.scene}")
    world, camera_args = SCENES[args.scene]()
    camera = Camera(aspect_ratio=settings.aspect_ratio, **camera_args)
    print(f"  Objects in scene: {len(world)}")

    renderer = Renderer(settings)

    # Progress tracking
    last_progress = [0]

    def progress_callback(progress: float):
        pct = int(progress * 100)
        if pct > last_progress[0]:
            last_progress[0] = pct
            bar_len = 40
            filled = int(bar_len * progress)
            bar = '█' * filled + '░' * (bar_len - filled)
            print(f'\rRendering: [{bar}] {pct}%', end='', flush=True)

    renderer.set_progress_callback(progress_callback)

    print("\nRendering...")
    start_time = time.time()

    image = renderer.render(world, camera)

    elapsed = time.time() - start_time
    print(f"\nRender completed in {elapsed:.2f} seconds")
    if elapsed > 0:
        print(f"  Samples per second: {(settings.width * settings.height * settings.samples_per_pixel) / elapsed:.0f}")

    output_path = Path(args.output)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    print(f"\nSaving to: {args.output}")
    renderer.save_image(image, str(output_path))

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
