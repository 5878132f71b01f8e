#!/usr/bin/env python3
"""
spheretrace - A Python Path Tracer

Main entry point for rendering scene files.
"""

import argparse
import logging
import sys
from pathlib import Path

from spheretrace.renderer import Renderer, get_platform_info
from spheretrace.scene_parser import SceneParseError, load_scene
from spheretrace.scheduler import RenderError, DEFAULT_CHUNK_ROWS
from spheretrace.animation import render_animation


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='spheretrace - A Python Path Tracer',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  python main.py scenes/cover.json --output render.png
  python main.py scenes/earth.yaml --width 400 --height 300 --samples 8 --threads 8
  python main.py scenes/earth.yaml --frames 30 --output frames/earth.png
        '''
    )

    parser.add_argument('scene', nargs='?', help='Scene file (JSON or YAML)')
    parser.add_argument('--output', '-o', type=str, default='output/render.png', help='Output filename')
    parser.add_argument('--threads', type=int, default=0, help='Number of worker threads (0=auto)')
    parser.add_argument('--chunks', type=int, default=None, help='Exact number of row chunks')
    parser.add_argument('--chunk-rows', type=int, default=DEFAULT_CHUNK_ROWS,
                        help=f'Rows per chunk when --chunks is not given (default: {DEFAULT_CHUNK_ROWS})')
    parser.add_argument('--width', type=int, default=None, help='Override image width')
    parser.add_argument('--height', type=int, default=None, help='Override image height')
    parser.add_argument('--samples', type=int, default=None, help='Override samples per pixel')
    parser.add_argument('--depth', type=int, default=None, help='Override max ray depth')
    parser.add_argument('--seed', type=int, default=None, help='Override the sampling seed')
    parser.add_argument('--frames', type=int, default=1, help='Render a spinning sequence of N frames')
    parser.add_argument('--orbit', type=float, default=0.0, help='Camera orbit radius for sequences')
    parser.add_argument('--info', action='store_true', help='Show platform info and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Log per-chunk timings')
    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='[%(asctime)s] [%(threadName)s] %(levelname)s %(name)s: %(message)s'
    )

    # Show platform info
    if args.info:
        info = get_platform_info()
        print("spheretrace Platform Info:")
        print(f"  System: {info['system']}")
        print(f"  Machine: {info['machine']}")
        print(f"  Processor: {info['processor']}")
        print(f"  Python: {info['python_version']}")
        print(f"  CPU Cores: {info['cpu_count']}")
        print(f"  ARM: {info['is_arm']}")
        print(f"  x86: {info['is_x86']}")
        return 0

    if not args.scene:
        parser.error('a scene file is required')

    # Print header
    print("=" * 60)
    print("spheretrace Path Tracer")
    print("=" * 60)

    try:
        world, camera, config = load_scene(args.scene)
        config = config.with_overrides(
            width=args.width,
            height=args.height,
            samples_per_pixel=args.samples,
            max_depth=args.depth,
            seed=args.seed
        )
        renderer = Renderer(config, args.threads, args.chunks, args.chunk_rows)
    except (SceneParseError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"\nRender Settings:")
    print(f"  Resolution: {config.width}x{config.height}")
    print(f"  Samples: {config.samples_per_pixel}")
    print(f"  Max Depth: {config.max_depth}")
    print(f"  Threads: {renderer.num_workers}")
    print(f"  Objects in scene: {len(world)}")

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

    def report(index=None, path=None):
        stats = renderer.last_stats
        rays = config.width * config.height * config.samples_per_pixel
        last_progress[0] = 0
        print(f"\nFrame time: {stats.frame_seconds * 1000:.0f}ms")
        print(f"  Rays per second: {rays / max(stats.frame_seconds, 1e-9):.0f}")
        print(f"  Chunks: {len(stats.chunks)} "
              f"(fastest {stats.fastest.seconds * 1000:.0f}ms, slowest {stats.slowest.seconds * 1000:.0f}ms)")
        if path is not None:
            print(f"  Saved: {path}")

    print("\nRendering...")
    try:
        if args.frames > 1:
            render_animation(renderer, world, camera, args.output, args.frames,
                             orbit_radius=args.orbit, on_frame=report)
        else:
            image = renderer.render(world, camera)
            report()
            output_path = Path(args.output)
            print(f"\nSaving to: {output_path}")
            renderer.save_image(image, output_path)
    except RenderError as exc:
        print(f"\nRender failed: {exc}", file=sys.stderr)
        return 1

    print("\nDone!")
    return 0


if __name__ == '__main__':
    sys.exit(main())
