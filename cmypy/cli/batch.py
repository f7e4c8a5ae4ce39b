"""cmypy CLI batch renderer.

Applies an enlarger filtration change to scanned test prints without a GUI.
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
import time
from typing import Any, Dict, List, Optional

from cmypy.domain.models import Channel, EditMode, FilterSetting
from cmypy.domain.types import PixelBuffer
from cmypy.features.filtration.logic import format_signed
from cmypy.features.filtration.models import FiltrationConfig
from cmypy.kernel.system.config import APP_CONFIG, DEFAULT_FILTER_SETTING
from cmypy.kernel.system.logging import get_logger, setup_logging
from cmypy.services.export.encoder import ExportFormat, FILE_EXTENSIONS, encode_export
from cmypy.services.export.templating import (
    DEFAULT_FILENAME_PATTERN,
    render_export_filename,
)
from cmypy.services.rendering.scheduler import RenderTask
from cmypy.services.rendering.source import SourceImage
from cmypy.services.session.manager import SessionManager

logger = get_logger("cli")

SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".tif", ".tiff", ".bmp", ".webp")

FORMAT_MAP = {
    "jpeg": ExportFormat.JPEG,
    "png": ExportFormat.PNG,
    "tiff": ExportFormat.TIFF,
}
FORMAT_CHOICES = tuple(FORMAT_MAP.keys())

CONFIG_DIR = os.path.expanduser("~/.cmypy")
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.json")


def load_user_config() -> dict:
    """Loads ~/.cmypy/config.json if it exists. Returns {"cli": {}, "processing": {}}."""
    if not os.path.isfile(CONFIG_FILE):
        return {"cli": {}, "processing": {}}
    with open(CONFIG_FILE, "r") as f:
        data = json.load(f)
    return {
        "cli": data.get("cli", {}),
        "processing": data.get("processing", {}),
    }


def generate_default_config() -> int:
    """Creates ~/.cmypy/config.json with documented defaults. Returns 0 on success, 1 if exists."""
    if os.path.isfile(CONFIG_FILE):
        print(f"Config already exists: {CONFIG_FILE}", file=sys.stderr)
        return 1
    os.makedirs(CONFIG_DIR, exist_ok=True)
    config = FiltrationConfig()
    default = {
        "cli": {
            "output": "./export",
            "format": "jpeg",
            "full_res": False,
            "filename_pattern": DEFAULT_FILENAME_PATTERN,
        },
        "processing": {
            "base": list(DEFAULT_FILTER_SETTING.as_tuple()),
            "target": list(DEFAULT_FILTER_SETTING.as_tuple()),
            "strength": config.strength,
            "crosstalk": config.crosstalk,
        },
    }
    with open(CONFIG_FILE, "w") as f:
        json.dump(default, f, indent=4)
    print(f"Config created: {CONFIG_FILE}", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmypy",
        description="cmypy -- Preview enlarger CMY filtration changes on a test print",
        epilog="Example: cmypy --base 0 50 50 --target 0 60 45 --output ./export print.jpg",
    )

    parser.add_argument(
        "inputs",
        nargs="*",
        metavar="FILE_OR_DIR",
        help="Scanned or photographed test prints, or directories containing them",
    )

    parser.add_argument(
        "--base",
        nargs=3,
        type=float,
        default=None,
        metavar=("C", "M", "Y"),
        help="Filter pack the test print was made with (default: 0 50 50)",
    )

    parser.add_argument(
        "--target",
        nargs=3,
        type=float,
        default=None,
        metavar=("C", "M", "Y"),
        help="New filter pack to simulate (default: same as base)",
    )

    parser.add_argument(
        "--strength",
        type=float,
        default=None,
        metavar="FLOAT",
        help="RGB levels per filtration unit (default: 1.8)",
    )

    parser.add_argument(
        "--crosstalk",
        type=float,
        default=None,
        metavar="FLOAT",
        help="Cross-channel suppression fraction (default: 0.15)",
    )

    parser.add_argument(
        "--format",
        choices=FORMAT_CHOICES,
        default=None,
        dest="output_format",
        help="Output file format (default: jpeg)",
    )

    parser.add_argument(
        "--output",
        default=None,
        metavar="DIR",
        help="Output directory (default: ./export)",
    )

    parser.add_argument(
        "--filename-pattern",
        default=None,
        metavar="TEMPLATE",
        help='Jinja2 filename template (default: "filtered_{{ original_name }}")',
    )

    parser.add_argument(
        "--full-res",
        action="store_true",
        default=False,
        help="Render at the file's own resolution instead of the 1200px working size",
    )

    parser.add_argument(
        "--settings",
        default=None,
        metavar="JSON_FILE",
        help="Load base/target/strength/crosstalk from a JSON file",
    )

    parser.add_argument(
        "--init-config",
        action="store_true",
        default=False,
        help="Generate default config at ~/.cmypy/config.json and exit",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )

    return parser


def discover_files(inputs: List[str]) -> List[str]:
    """Resolves input paths to a sorted list of supported image files."""
    files = []
    for input_path in inputs:
        path = os.path.abspath(input_path)
        if os.path.isfile(path):
            ext = os.path.splitext(path)[1].lower()
            if ext in SUPPORTED_IMAGE_EXTENSIONS:
                files.append(path)
            else:
                print(f"Warning: Skipping unsupported file: {path}", file=sys.stderr)
        elif os.path.isdir(path):
            for root, _dirs, filenames in os.walk(path):
                for fname in sorted(filenames):
                    ext = os.path.splitext(fname)[1].lower()
                    if ext in SUPPORTED_IMAGE_EXTENSIONS:
                        files.append(os.path.join(root, fname))
        else:
            print(f"Warning: Path not found: {path}", file=sys.stderr)
    return files


@dataclasses.dataclass(frozen=True)
class BatchSettings:
    base: FilterSetting
    target: FilterSetting
    filtration: FiltrationConfig
    export_fmt: ExportFormat
    output_dir: str
    filename_pattern: str
    full_res: bool


def _setting_from(value: Any) -> FilterSetting:
    if isinstance(value, dict):
        return FilterSetting.from_dict(value)
    c, m, y = (float(v) for v in value)
    return FilterSetting.clamped(c, m, y)


def build_settings(args: argparse.Namespace, user_config: dict) -> BatchSettings:
    """Builds BatchSettings with loading priority:
    DEFAULT -> user config -> --settings -> CLI flags
    """
    defaults = FiltrationConfig()

    # Layer 1: defaults
    processing: Dict[str, Any] = {
        "base": list(DEFAULT_FILTER_SETTING.as_tuple()),
        "target": None,
        "strength": defaults.strength,
        "crosstalk": defaults.crosstalk,
    }
    cli: Dict[str, Any] = {
        "output": "./export",
        "format": "jpeg",
        "full_res": False,
        "filename_pattern": DEFAULT_FILENAME_PATTERN,
    }

    # Layer 2: user config
    processing.update(user_config.get("processing", {}))
    cli.update(user_config.get("cli", {}))

    # Layer 3: --settings file
    if args.settings:
        with open(os.path.abspath(args.settings), "r") as f:
            processing.update(json.load(f))

    # Layer 4: CLI flags always win
    if args.base is not None:
        processing["base"] = args.base
    if args.target is not None:
        processing["target"] = args.target
    if args.strength is not None:
        processing["strength"] = args.strength
    if args.crosstalk is not None:
        processing["crosstalk"] = args.crosstalk
    if args.output_format is not None:
        cli["format"] = args.output_format
    if args.output is not None:
        cli["output"] = args.output
    if args.filename_pattern is not None:
        cli["filename_pattern"] = args.filename_pattern
    if args.full_res:
        cli["full_res"] = True

    base = _setting_from(processing["base"])
    target = base if processing["target"] is None else _setting_from(processing["target"])

    return BatchSettings(
        base=base,
        target=target,
        filtration=FiltrationConfig(
            strength=float(processing["strength"]),
            crosstalk=float(processing["crosstalk"]),
        ),
        export_fmt=FORMAT_MAP[str(cli["format"]).lower()],
        output_dir=os.path.abspath(cli["output"]),
        filename_pattern=str(cli["filename_pattern"]),
        full_res=bool(cli["full_res"]),
    )


def render_file(
    session: SessionManager, frames: List[PixelBuffer], file_path: str, settings: BatchSettings
) -> PixelBuffer:
    """
    Drives the session the way the interactive tool is used: enter the base
    pack for the loaded print, then dial in the target and take one frame.
    """
    max_size = None if settings.full_res else APP_CONFIG.preview_render_size
    session.load_image(SourceImage.from_file(file_path, max_size=max_size))

    for channel, value in zip(Channel, settings.base.as_tuple()):
        session.set_channel(channel, value)
    session.set_edit_mode(EditMode.EDITING_TARGET)
    for channel, value in zip(Channel, settings.target.as_tuple()):
        session.set_channel(channel, value)

    frames.clear()
    session.scheduler.on_frame()
    if not frames:
        raise RuntimeError("Renderer produced no frame")
    return frames[-1]


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns 0 on success, 1 on failure."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.init_config:
        return generate_default_config()

    files = discover_files(args.inputs)
    if not files:
        print("Error: No supported image files found.", file=sys.stderr)
        return 1

    try:
        user_config = load_user_config()
        settings = build_settings(args, user_config)
    except (json.JSONDecodeError, FileNotFoundError, KeyError, TypeError, ValueError) as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    os.makedirs(settings.output_dir, exist_ok=True)

    frames: List[PixelBuffer] = []

    def collect(buffer: PixelBuffer, _task: RenderTask) -> None:
        frames.append(buffer)

    session = SessionManager(collect, config=settings.filtration)

    delta = session.delta
    total = len(files)
    failed = 0
    print(f"Processing {total} file(s) -> {settings.output_dir}", file=sys.stderr)
    t_start = time.monotonic()

    for i, file_path in enumerate(files, 1):
        name = os.path.splitext(os.path.basename(file_path))[0]
        print(f"  [{i}/{total}] {name} ...", file=sys.stderr, end="", flush=True)
        t_file = time.monotonic()

        try:
            result = render_file(session, frames, file_path, settings)
            delta = session.delta
            bits = encode_export(result, settings.export_fmt)

            filename = render_export_filename(name, delta, settings.filename_pattern)
            ext = FILE_EXTENSIONS[settings.export_fmt]
            out_path = os.path.join(settings.output_dir, f"{filename}.{ext}")

            with open(out_path, "wb") as f:
                f.write(bits)

            elapsed = time.monotonic() - t_file
            print(f" OK ({elapsed:.1f}s)", file=sys.stderr)
        except (OSError, ValueError, RuntimeError) as e:
            logger.debug(f"Failed to render {file_path}", exc_info=True)
            print(f" ERROR: {e}", file=sys.stderr)
            failed += 1

    readout = " ".join(
        f"{label}{format_signed(value)}" for label, value in zip("CMY", delta.as_tuple())
    )
    total_time = time.monotonic() - t_start
    print(
        f"Done: {total - failed}/{total} succeeded in {total_time:.1f}s (delta {readout})",
        file=sys.stderr,
    )

    return 1 if failed > 0 else 0


def cli_entry() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    sys.exit(main())
