"""Version-match patching of the 3D Vision driver package

setup.exe refuses to install when the file version of its stereo API
DLLs does not line up with the running display driver.  The package is
unpacked with 7za, and each version-bearing DLL is rewritten with rcedit
so both its product and file version carry the live driver's number.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from ..errors import ExternalToolFailure, IOFailure, Stage
from ..utils.logging import log_info, log_step, log_success, log_error
from ..utils.system import Launcher, run_command

# 3D Vision's own version namespace; the driver build follows it
VERSION_PREFIX = "7.17.1"

# The separator goes before the last four digits: 52531 -> "5.2531"
_BUILD_DIGITS = 4


@dataclass(frozen=True)
class PatchOutcome:
    """Result of stamping a version onto one file."""
    path: Path
    returncode: int

    @property
    def ok(self) -> bool:
        return self.returncode == 0


def version_string(driver_version: int) -> str:
    """Build the file version setup.exe expects for a packed driver version.

    >>> version_string(52531)
    '7.17.15.2531'
    """
    if driver_version < 0:
        raise ValueError(f"driver version cannot be negative, got {driver_version}")
    digits = str(driver_version)
    if len(digits) <= _BUILD_DIGITS:
        raise ValueError(f"driver version {driver_version} is too short to split")
    return f"{VERSION_PREFIX}{digits[:-_BUILD_DIGITS]}.{digits[-_BUILD_DIGITS:]}"


def rcedit_command(rcedit, target, version: str) -> list[str]:
    """Argument list that stamps ``version`` on both version fields of ``target``."""
    return [
        str(rcedit), str(target),
        "--set-product-version", version,
        "--set-file-version", version,
    ]


def _is_extracted(extract_dir: Path, required: Sequence[Path]) -> bool:
    return extract_dir.is_dir() and all(Path(p).is_file() for p in required)


def extract_driver_package(seven_zip, archive, extract_dir, required=(),
                           launcher: Launcher = run_command) -> bool:
    """Unpack the 3D Vision self-extractor so individual files can be patched.

    Extraction is skipped when every file in ``required`` is already
    present, so a pre-extracted tree can be supplied instead of the archive.

    Returns:
        True if 7za ran, False if the existing tree was reused.

    Raises:
        IOFailure: the archive or 7za is missing.
        ExternalToolFailure: 7za exited non-zero.
    """
    log_step("Extracting 3D Vision driver package")
    extract_dir = Path(extract_dir)

    if required and _is_extracted(extract_dir, required):
        log_info(f"Using pre-extracted files in {extract_dir}")
        return False

    for needed in (archive, seven_zip):
        if not Path(needed).is_file():
            raise IOFailure(Stage.EXTRACTING, "file not found", str(needed))

    returncode = launcher([str(seven_zip), "x", str(archive), f"-o{extract_dir}", "-y"])
    if returncode != 0:
        raise ExternalToolFailure(Stage.EXTRACTING, f"7za exited with code {returncode}",
                                  str(archive), returncode)

    log_success(f"Extracted {Path(archive).name} to {extract_dir}")
    return True


def patch_driver_files(files: Sequence, driver_version: int, rcedit,
                       launcher: Launcher = run_command) -> list[PatchOutcome]:
    """Stamp the live driver's version onto every file in ``files``.

    Each file is attempted regardless of earlier failures so the report
    covers all of them; the stage still fails if any one did.

    Raises:
        ExternalToolFailure: at least one file could not be patched.  The
            first failed file is the error's target.
    """
    log_step("Patching 3D Vision driver version")
    version = version_string(driver_version)
    log_info(f"Target version: {version}")

    if not Path(rcedit).is_file():
        raise IOFailure(Stage.PATCHING, "resource editor not found", str(rcedit))

    outcomes: list[PatchOutcome] = []
    for target in files:
        target = Path(target)
        if not target.is_file():
            log_error(f"Missing file: {target}")
            outcomes.append(PatchOutcome(target, -1))
            continue
        outcomes.append(PatchOutcome(target, launcher(rcedit_command(rcedit, target, version))))

    failed = [o for o in outcomes if not o.ok]
    if failed:
        names = ", ".join(o.path.name for o in failed)
        raise ExternalToolFailure(
            Stage.PATCHING,
            f"could not set version {version} on {len(failed)} of {len(outcomes)} file(s): {names}",
            str(failed[0].path),
            failed[0].returncode,
        )

    log_success(f"Patched {len(outcomes)} file(s) to {version}")
    return outcomes
