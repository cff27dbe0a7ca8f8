"""3D Vision Setup - Command Line Interface

Entry point for the nvidia-3dv-setup command.  Runs the whole pipeline
unattended and reports the outcome through the exit code:
0 installed, 1 a stage failed, 2 this machine cannot take the driver.
"""

import argparse
import ctypes
import os
import sys
import traceback
from pathlib import Path

from nvidia_3dv_setup import __version__
from nvidia_3dv_setup.config import RunConfig
from nvidia_3dv_setup.pipeline import EXIT_FAILED, Pipeline, PipelineResult
from nvidia_3dv_setup.utils.logging import log_error, log_info, log_step, log_success


def show_banner() -> None:
    """Display application banner."""
    banner = f"""
╔══════════════════════════════════════════════════════════════╗
║                3D Vision Driver Setup {__version__:<23}║
║        Version-matched stereo driver for DCH systems         ║
╚══════════════════════════════════════════════════════════════╝
"""
    print(banner)


def is_admin() -> bool:
    """True when running elevated (Administrator on Windows, root elsewhere)."""
    if os.name == "nt":
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


def parse_args(argv=None) -> RunConfig:
    parser = argparse.ArgumentParser(
        prog="nvidia-3dv-setup",
        description="Install the 3D Vision driver patched to match the running NVIDIA driver.",
    )
    parser.add_argument("--root", type=Path, default=Path.cwd(),
                        help="Bundle directory holding Resource.dat, NVidia\\ and Tools\\ "
                             "(default: current directory)")
    parser.add_argument("--skip-fixup", action="store_true",
                        help="Do not copy Resource.dat into ProgramData")
    parser.add_argument("--skip-enable", action="store_true",
                        help="Install and configure, but leave 3D Vision disabled")
    parser.add_argument("--support-dir", type=Path, default=None,
                        help="Where to copy Resource.dat (default: C:\\ProgramData\\NVIDIA)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = parser.parse_args(argv)
    return RunConfig(root=args.root, skip_fixup=args.skip_fixup, skip_enable=args.skip_enable,
                     support_dest_dir=args.support_dir)


def show_summary(result: PipelineResult) -> None:
    """Print which stages ran and how the run ended."""
    print("\n" + "=" * 70)
    print("                          Setup Summary")
    print("=" * 70)
    for stage_result in result.stages:
        mark = "[OK]" if stage_result.ok else "[!!]"
        print(f"  {mark} {stage_result.stage.value}")
    if result.error is not None:
        print(f"\n  Failed stage: {result.error.stage.value}")
        print(f"  Cause:        {result.error.message}")
        if result.error.target:
            print(f"  File/key:     {result.error.target}")
    print("=" * 70)


def main(argv=None) -> None:
    """Run the installer and exit with its status code."""
    try:
        config = parse_args(argv)

        if not is_admin():
            log_error("This tool must be run as Administrator.")
            sys.exit(EXIT_FAILED)

        show_banner()
        paths = config.resolve_paths()
        log_info(f"Bundle directory: {paths.root}")

        result = Pipeline(paths, skip_fixup=config.skip_fixup,
                          skip_enable=config.skip_enable).run()
        show_summary(result)

        if result.ineligible:
            log_info("Nothing was changed on this system.")
        elif result.error is None:
            log_success("Setup completed successfully!")
            log_step("Next: restart any running games before using 3D Vision")
        sys.exit(result.exit_code)

    except KeyboardInterrupt:
        print()
        log_info("Cancelled.")
        sys.exit(EXIT_FAILED)
    except Exception as e:
        log_error(f"Setup failed: {str(e)}")
        log_error(f"Traceback: {traceback.format_exc()}")
        sys.exit(EXIT_FAILED)


if __name__ == "__main__":
    main()
