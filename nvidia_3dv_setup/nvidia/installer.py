"""Running the 3D Vision installer and turning stereo on"""

from pathlib import Path

from ..errors import ExternalToolFailure, IOFailure, Stage
from ..utils.logging import log_info, log_step, log_success
from ..utils.system import Launcher, run_command

# setup.exe is an InstallShield package; /s runs it without the wizard.
# That is what the full driver install does: 3D Vision ends up installed
# but disabled.
SILENT_FLAG = "/s"

ENABLE_ARG = "enable"


def run_installer(setup_exe, launcher: Launcher = run_command) -> int:
    """Install the patched 3D Vision driver silently and return setup.exe's exit code."""
    log_step("Installing 3D Vision driver")
    setup_exe = Path(setup_exe)
    if not setup_exe.is_file():
        raise IOFailure(Stage.INSTALLING, "installer not found", str(setup_exe))

    log_info(f"Starting 3D Vision setup: {setup_exe}")
    return launcher([str(setup_exe), SILENT_FLAG])


def enable_stereo(toggle_exe, launcher: Launcher = run_command) -> int:
    """Switch 3D Vision on with the bundled toggle tool and return its exit code."""
    log_step("Enabling 3D Vision")
    toggle_exe = Path(toggle_exe)
    if not toggle_exe.is_file():
        raise IOFailure(Stage.ENABLING, "toggle tool not found", str(toggle_exe))

    return launcher([str(toggle_exe), ENABLE_ARG])


def check_exit(stage: Stage, tool, returncode: int) -> None:
    """Turn a non-zero exit code from ``tool`` into a stage failure."""
    if returncode != 0:
        raise ExternalToolFailure(stage, f"{Path(tool).name} exited with code {returncode}",
                                  str(tool), returncode)
    log_success(f"{Path(tool).name} finished")
