"""GPU detection and installation eligibility"""

import re
import subprocess
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import pynvml

from ..utils.logging import log_info, log_warn

# Last driver (452.06) whose own 3D Vision package still installs unmodified.
# Anything at or below it has nothing to match against.
SUPPORTED_FLOOR = 45206

# major.minor with an optional build suffix, e.g. "525.31", "452.06", "525.31.01"
_VERSION_PATTERN = re.compile(r"^\s*(\d+)\.(\d{2})(?:\.\d+)*\s*$")


class Eligibility(Enum):
    """Outcome of the eligibility gate."""
    NO_DEVICE = "no-device"
    OLD_DRIVER = "old-driver"
    ELIGIBLE = "eligible"


@dataclass(frozen=True)
class ProbeResult:
    """What the GPU query found: whether an NVIDIA driver answered, and its version."""
    present: bool
    version: int = 0


def parse_driver_version(text: str) -> Optional[int]:
    """Pack a driver version string the way NvAPI reports it.

    "525.31" -> 52531, "452.06" -> 45206.

    Returns:
        The packed version, or None if ``text`` is not a driver version.
    """
    match = _VERSION_PATTERN.match(text or "")
    if not match:
        return None
    major = int(match.group(1))
    minor = int(match.group(2))
    return major * 100 + minor


def _query_nvml() -> Optional[str]:
    """Ask NVML for the system driver version string."""
    try:
        pynvml.nvmlInit()
    except (pynvml.NVMLError, OSError) as exc:
        log_warn(f"NVML unavailable: {exc}")
        return None

    try:
        version = pynvml.nvmlSystemGetDriverVersion()
        if isinstance(version, bytes):
            version = version.decode("ascii", "replace")
        return version
    except pynvml.NVMLError as exc:
        log_warn(f"NVML could not report the driver version: {exc}")
        return None
    finally:
        try:
            pynvml.nvmlShutdown()
        except pynvml.NVMLError:
            pass


def _query_nvidia_smi() -> Optional[str]:
    """Fallback when NVML cannot be loaded: ask nvidia-smi."""
    try:
        result = subprocess.run(
            ["nvidia-smi", "--query-gpu=driver_version", "--format=csv,noheader"],
            capture_output=True, text=True, errors="replace", stdin=subprocess.DEVNULL,
        )
    except OSError:
        return None
    if result.returncode != 0:
        return None
    lines = result.stdout.strip().splitlines()
    return lines[0].strip() if lines else None


def probe_driver() -> ProbeResult:
    """Detect an NVIDIA GPU and the version of the driver it is running.

    Tries NVML first and nvidia-smi second.  A machine with no NVIDIA
    device, no driver, or a version string we cannot read is reported as
    ``present=False``; this function never raises for those cases.
    """
    for source, query in (("NVML", _query_nvml), ("nvidia-smi", _query_nvidia_smi)):
        text = query()
        if text is None:
            continue
        version = parse_driver_version(text)
        if version is None:
            log_warn(f"{source} returned an unrecognised driver version: {text!r}")
            continue
        log_info(f"NVIDIA driver {text} detected via {source}")
        return ProbeResult(present=True, version=version)

    return ProbeResult(present=False)


def check_eligibility(present: bool, version: int) -> Eligibility:
    """Decide whether this machine can take the version-matched 3D Vision driver."""
    if not present:
        return Eligibility.NO_DEVICE
    if version <= SUPPORTED_FLOOR:
        return Eligibility.OLD_DRIVER
    return Eligibility.ELIGIBLE
