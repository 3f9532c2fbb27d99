"""Command-line interface."""
from typing import List, Optional
import argparse
import json
import logging
import sys

from circlematrix.config import PROJECT, UI
from circlematrix.logging_config import setup_logging
from circlematrix.model.io import build_share_url

logger = logging.getLogger("circlematrix.cli")


def _read_record(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as fh:
        record = json.load(fh)
    if not isinstance(record, dict):
        raise ValueError(f"'{path}' does not contain a settings object.")
    return record


def render(settings_path: Optional[str], output: str, width: int, height: int) -> None:
    """Render one frame off-screen and write it as an image."""
    # VTK is only needed here, keep `share` and `--help` light
    import pyvista as pv

    from circlematrix.controller.scene import SceneController
    from circlematrix.controller.scheduler import ManualFrameScheduler
    from circlematrix.model.state import ProjectState
    from circlematrix.view.render_adapter import PyVistaRenderAdapter, configure_camera

    state = ProjectState()
    if settings_path:
        state.apply_record(_read_record(settings_path))

    plotter = pv.Plotter(off_screen=True, window_size=(width, height))
    scheduler = ManualFrameScheduler()
    adapter = PyVistaRenderAdapter(plotter)
    scene = SceneController(adapter, scheduler, state)
    try:
        scene.build()
        scheduler.run_until_idle()
        configure_camera(plotter)
        plotter.screenshot(output)
        logger.info(f"Rendered {len(scene.units)} units to: {output}")
    finally:
        scene.dispose()
        logger.debug(f"Live render resources after dispose: {adapter.live_counts}")
        plotter.close()


def share(settings_path: str, base_url: str) -> str:
    return build_share_url(_read_record(settings_path), base_url)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="circlematrix", description=UI["WINDOW_TITLE"])
    parser.add_argument("--debug", action="store_true", help="verbose logging")
    parser.add_argument("--log-file", help="also write the log to this file")
    sub = parser.add_subparsers(dest="command")

    gui = sub.add_parser("gui", help="start the desktop application (default)")
    gui.add_argument("--share-url", help="open the project encoded in a share URL")

    rnd = sub.add_parser("render", help="render one frame off-screen")
    rnd.add_argument("--settings", help="settings record (JSON); defaults when omitted")
    rnd.add_argument("--output", required=True, help="image file to write (PNG)")
    rnd.add_argument("--width", type=int, default=UI["PREVIEW_SIZE"])
    rnd.add_argument("--height", type=int, default=UI["PREVIEW_SIZE"])

    shr = sub.add_parser("share", help="print the share URL of a settings record")
    shr.add_argument("--settings", required=True)
    shr.add_argument("--base-url", default=PROJECT["SHARE_BASE_URL"])
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.DEBUG if args.debug else logging.INFO

    if args.command in (None, "gui"):
        from circlematrix.main import main as gui_main
        return gui_main(share_url=getattr(args, "share_url", None), log_level=level, log_file=args.log_file)

    setup_logging(level=level, log_file=args.log_file)
    try:
        if args.command == "render":
            render(args.settings, args.output, args.width, args.height)
        elif args.command == "share":
            print(share(args.settings, args.base_url))
    except (OSError, ValueError) as e:
        # SettingsError is a ValueError
        logger.error(f"{args.command} failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
