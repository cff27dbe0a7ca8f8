"""Run configuration and resolved file locations.

All paths are resolved once, from a working-directory root, before any
stage runs.  Stages only ever read them.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Layout of the unpacked installer bundle, relative to the working root
_SUPPORT_FILE = "Resource.dat"
_DRIVER_ARCHIVE = Path("NVidia") / "3DVision.exe"
_EXTRACT_DIR = "NVidia3DVision"
_SETUP_EXE = "setup.exe"
_SEVEN_ZIP = Path("Tools") / "7za.exe"
_RCEDIT = Path("Tools") / "rcedit-x64.exe"
_TOGGLE_EXE = Path("Tools") / "Toggle3DVision.exe"

# Version-bearing 3D Vision binaries checked by setup.exe against the live driver
PATCH_TARGETS: tuple[str, ...] = ("nvSCPAPI.dll", "nvSCPAPI64.dll")

# DCH drivers no longer ship Resource.dat; setup.exe looks for it here
SUPPORT_FILE_DEST = r"C:\ProgramData\NVIDIA"


@dataclass(frozen=True)
class FilePaths:
    """Absolute locations of every file the pipeline reads or writes."""
    root: Path
    support_file: Path
    support_dest_dir: Path
    driver_archive: Path
    extract_dir: Path
    setup_exe: Path
    seven_zip: Path
    rcedit: Path
    toggle_exe: Path
    patch_targets: tuple[Path, ...] = field(default_factory=tuple)

    @classmethod
    def from_root(cls, root, support_dest_dir=None) -> "FilePaths":
        """Resolve the standard bundle layout under ``root``.

        Args:
            root: Directory holding Resource.dat, NVidia/ and Tools/.
            support_dest_dir: Override for the Resource.dat destination,
                C:\\ProgramData\\NVIDIA when omitted.
        """
        root = Path(root).resolve()
        extract_dir = root / _EXTRACT_DIR
        dest = Path(support_dest_dir) if support_dest_dir else Path(SUPPORT_FILE_DEST)
        return cls(
            root=root,
            support_file=root / _SUPPORT_FILE,
            support_dest_dir=dest,
            driver_archive=root / _DRIVER_ARCHIVE,
            extract_dir=extract_dir,
            setup_exe=extract_dir / _SETUP_EXE,
            seven_zip=root / _SEVEN_ZIP,
            rcedit=root / _RCEDIT,
            toggle_exe=root / _TOGGLE_EXE,
            patch_targets=tuple(extract_dir / name for name in PATCH_TARGETS),
        )


@dataclass(frozen=True)
class RunConfig:
    """Options chosen on the command line for a single run."""
    root: Path
    skip_fixup: bool = False
    skip_enable: bool = False
    support_dest_dir: Optional[Path] = None

    def resolve_paths(self) -> FilePaths:
        return FilePaths.from_root(self.root, self.support_dest_dir)
