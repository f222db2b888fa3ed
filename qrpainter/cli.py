"""qrpainter CLI: render dotted QR codes, dump finder-zone maps, verify output."""

import argparse
import string
import sys
from pathlib import Path

from PIL import Image, ImageOps

from qrpainter.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _parse_color(s: str) -> tuple[int, int, int, int]:
    """Parse '#RRGGBB', 'RRGGBB', '#RRGGBBAA' or a colour name to RGBA."""
    from qrpainter.surface import to_rgba

    if s and s[0] != "#" and all(ch in string.hexdigits for ch in s) and len(s) in (6, 8):
        s = "#" + s
    try:
        return to_rgba(s)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid colour {s!r}: {e}")


def cmd_render(args) -> int:
    """Render a dotted QR code to a file."""
    from qrpainter.painter import QrPainter
    from qrpainter.surface import ImageFormat, encode_image

    result = QrPainter.create(
        args.data,
        version=args.version,
        error_correction_level=args.ecc,
        color=args.color,
        empty_color=args.background,
        gapless=args.gapless,
    )
    if not isinstance(result, QrPainter):
        print(f"Cannot encode: {result.reason} ({result.kind.value})", file=sys.stderr)
        return 1

    painter = result
    img = painter.to_image(args.size, supersample=args.supersample)
    if args.quiet_zone:
        border = round(args.quiet_zone * painter.module_size(args.size))
        fill = args.background or (255, 255, 255, 255)
        img = ImageOps.expand(img, border=border, fill=fill)

    fmt = ImageFormat(args.format)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(encode_image(img, fmt))

    grid = painter.grid
    print(f"Rendered: {output} ({img.size[0]}x{img.size[1]}, {fmt.value})")
    print(f"  Grid: {grid.size}x{grid.size} (version {grid.version}), ECC {painter.error_correction_level}")
    print(f"  Module size: {painter.module_size(args.size):.2f}px{' (gapless)' if args.gapless else ''}")
    return 0


def cmd_zones(args) -> int:
    """Write a colour-coded map of finder zones vs dotted modules."""
    from qrpainter.encoder import EncodeFailure, encode_grid
    from qrpainter.render import render_zone_map

    grid = encode_grid(args.data, version=args.version, ecc=args.ecc)
    if isinstance(grid, EncodeFailure):
        print(f"Cannot encode: {grid.reason} ({grid.kind.value})", file=sys.stderr)
        return 1

    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    render_zone_map(grid, scale=args.scale, output_path=str(output))
    print(f"QR Version {grid.version} ({grid.size}x{grid.size} = {grid.size * grid.size} modules)")
    print(f"Saved to: {output}")
    return 0


def cmd_verify(args) -> int:
    """Decode a rendered image with every available decoder."""
    from qrpainter.verify import verify

    results = verify(Image.open(args.image), expected_data=args.expected)
    all_pass = True
    for r in results:
        status = "PASS" if r.success else "FAIL"
        all_pass = all_pass and r.success
        print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")
    return 0 if all_pass else 1


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="qrpainter", description="Dotted QR codes with ring-and-dot finder eyes")

    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a QR code")
    p_render.add_argument("data", help="Text or URL to encode")
    p_render.add_argument("-o", "--output", default="output/qr.png", help="Output file path")
    p_render.add_argument("-v", "--version", type=int, default=-1, help="QR version 1-40 (-1 = auto)")
    p_render.add_argument("-e", "--ecc", default="L", choices=["L", "M", "Q", "H"], help="Error correction level")
    p_render.add_argument("-s", "--size", type=int, default=400, help="Image side in pixels")
    p_render.add_argument("--color", type=_parse_color, default=(0, 0, 0, 255), help="Dot colour (hex or name)")
    p_render.add_argument("--background", type=_parse_color, default=None,
                          help="Background colour (transparent if omitted)")
    p_render.add_argument("--gapless", action="store_true", help="Enlarge modules by 1px to hide seams")
    p_render.add_argument("--format", default="png", choices=["png", "raw"], help="png or raw RGBA bytes")
    p_render.add_argument("--quiet-zone", type=int, default=0, help="Margin around the code, in modules")
    p_render.add_argument("--supersample", type=int, default=4, help="Anti-aliasing factor")

    # --- zones ---
    p_zones = subparsers.add_parser("zones", help="Colour-coded finder-zone map")
    p_zones.add_argument("data", help="Text or URL to encode")
    p_zones.add_argument("-o", "--output", default="output/zones.png", help="Output file path")
    p_zones.add_argument("-v", "--version", type=int, default=-1, help="QR version")
    p_zones.add_argument("-e", "--ecc", default="L", choices=["L", "M", "Q", "H"])
    p_zones.add_argument("--scale", type=int, default=20, help="Pixels per module")

    # --- verify ---
    p_ver = subparsers.add_parser("verify", help="Decode a rendered QR image")
    p_ver.add_argument("image", help="Path to image")
    p_ver.add_argument("--expected", default=None, help="Expected decoded data (fails if mismatch)")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(level="DEBUG" if args.verbose else "INFO", log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        return 1

    commands = {
        "render": cmd_render,
        "zones": cmd_zones,
        "verify": cmd_verify,
    }
    code = commands[args.command](args)
    audit("cli.done", logger=log, command=args.command, exit_code=code)
    return code


if __name__ == "__main__":
    sys.exit(main())
