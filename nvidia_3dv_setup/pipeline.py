"""Installation pipeline for the version-matched 3D Vision driver.

The run moves through a fixed sequence of stages.  Each stage either
succeeds and hands over to the next, or raises an ``InstallerError`` that
ends the run.  Nothing is retried and nothing is rolled back; every stage
is safe to repeat, so the fix for a failed run is to run it again.

Collaborators (GPU probe, process launcher, registry store) are passed in,
so the whole sequence can be driven without a GPU or real executables.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from .config import FilePaths
from .errors import InstallerError, Stage
from .nvidia.installer import check_exit, enable_stereo, run_installer
from .nvidia.patches import extract_driver_package, patch_driver_files, version_string
from .nvidia.stereo_config import RegistryStore, apply_stereo_config
from .system.checks import Eligibility, ProbeResult, check_eligibility, probe_driver
from .system.fixup import install_support_file
from .utils.logging import log_error, log_info, log_step, log_success, log_warn
from .utils.system import Launcher, run_command

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INELIGIBLE = 2

_INELIGIBLE_REASONS = {
    Eligibility.NO_DEVICE: "No NVIDIA GPU or driver detected. 3D Vision cannot be installed.",
    Eligibility.OLD_DRIVER: "Driver 452.06 or older: install the 3D Vision package that ships with it.",
}


@dataclass(frozen=True)
class StageResult:
    """Outcome of one stage."""
    stage: Stage
    ok: bool
    error: Optional[InstallerError] = None


@dataclass
class PipelineResult:
    """Where the run ended and how it got there."""
    state: Stage
    eligibility: Optional[Eligibility] = None
    stages: list[StageResult] = field(default_factory=list)
    error: Optional[InstallerError] = None
    driver_version: int = 0

    @property
    def ineligible(self) -> bool:
        return self.eligibility is not None and self.eligibility is not Eligibility.ELIGIBLE

    @property
    def failed_stage(self) -> Optional[Stage]:
        return self.error.stage if self.error is not None else None

    @property
    def executed(self) -> list[Stage]:
        return [result.stage for result in self.stages]

    @property
    def exit_code(self) -> int:
        if self.state is Stage.DONE:
            return EXIT_OK
        if self.ineligible:
            return EXIT_INELIGIBLE
        return EXIT_FAILED


class Pipeline:
    """Runs probe → gate → fixup → extract → patch → install → configure → enable."""

    def __init__(self, paths: FilePaths, launcher: Launcher = run_command,
                 store=None, prober: Callable[[], ProbeResult] = probe_driver,
                 skip_fixup: bool = False, skip_enable: bool = False):
        self.paths = paths
        self.launcher = launcher
        self.store = store if store is not None else RegistryStore()
        self.prober = prober
        self.skip_fixup = skip_fixup
        self.skip_enable = skip_enable

    def _stages(self) -> list[tuple[Stage, Callable[[int], None]]]:
        stages = []
        if not self.skip_fixup:
            stages.append((Stage.FIXING_UP, self._fix_up))
        stages += [
            (Stage.EXTRACTING, self._extract),
            (Stage.PATCHING, self._patch),
            (Stage.INSTALLING, self._install),
            (Stage.CONFIGURING, self._configure),
        ]
        if not self.skip_enable:
            stages.append((Stage.ENABLING, self._enable))
        return stages

    # ── Stages ──────────────────────────────────────────────────────

    def _fix_up(self, version: int) -> None:
        log_step("Adding DCH support file")
        install_support_file(self.paths.support_file, self.paths.support_dest_dir)

    def _extract(self, version: int) -> None:
        extract_driver_package(
            self.paths.seven_zip,
            self.paths.driver_archive,
            self.paths.extract_dir,
            required=self.paths.patch_targets + (self.paths.setup_exe,),
            launcher=self.launcher,
        )

    def _patch(self, version: int) -> None:
        patch_driver_files(self.paths.patch_targets, version, self.paths.rcedit,
                           launcher=self.launcher)

    def _install(self, version: int) -> None:
        returncode = run_installer(self.paths.setup_exe, launcher=self.launcher)
        check_exit(Stage.INSTALLING, self.paths.setup_exe, returncode)

    def _configure(self, version: int) -> None:
        apply_stereo_config(self.store)

    def _enable(self, version: int) -> None:
        returncode = enable_stereo(self.paths.toggle_exe, launcher=self.launcher)
        check_exit(Stage.ENABLING, self.paths.toggle_exe, returncode)

    # ── Driver ──────────────────────────────────────────────────────

    def run(self) -> PipelineResult:
        log_step("Detecting NVIDIA driver")
        probe = self.prober()
        result = PipelineResult(state=Stage.PROBING, driver_version=probe.version)
        result.stages.append(StageResult(Stage.PROBING, True))

        result.state = Stage.GATED
        result.eligibility = check_eligibility(probe.present, probe.version)
        result.stages.append(StageResult(Stage.GATED, True))
        if result.ineligible:
            log_warn(_INELIGIBLE_REASONS[result.eligibility])
            return result

        log_info(f"Driver {probe.version // 100}.{probe.version % 100:02d} is eligible; "
                 f"3D Vision will be stamped {version_string(probe.version)}")

        for stage, action in self._stages():
            result.state = stage
            try:
                action(probe.version)
            except InstallerError as exc:
                result.stages.append(StageResult(stage, False, exc))
                result.error = exc
                result.state = Stage.ABORTED
                log_error(f"Aborted while {stage.value}: {exc}")
                return result
            result.stages.append(StageResult(stage, True))

        result.state = Stage.DONE
        if self.skip_enable:
            log_success("3D Vision installed and configured (left disabled)")
        else:
            log_success("3D Vision installed and enabled")
        return result
