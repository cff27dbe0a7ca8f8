"""DCH driver fixup for the 3D Vision installer.

DCH packages stopped shipping Resource.dat, and without it setup.exe
fails.  Copying it into ProgramData before the installer runs is enough.
Requires administrator privileges.
"""

import os
import shutil
from pathlib import Path

from ..errors import IOFailure, Stage
from ..utils.logging import log_info, log_success


def install_support_file(source, dest_dir) -> Path:
    """Copy ``source`` into ``dest_dir``, replacing any existing copy.

    Args:
        source: The support file shipped with the bundle.
        dest_dir: Directory to copy into; created with parents if missing.

    Returns:
        Path of the copied file.

    Raises:
        IOFailure: source missing, or destination not writable.
    """
    source = Path(source)
    dest_dir = Path(dest_dir)

    if not source.is_file():
        raise IOFailure(Stage.FIXING_UP, "support file not found", str(source))

    dest = dest_dir / source.name
    try:
        os.makedirs(dest_dir, exist_ok=True)
        shutil.copyfile(source, dest)
    except OSError as exc:
        raise IOFailure(Stage.FIXING_UP, f"could not write support file: {exc}", str(dest)) from exc

    log_info(f"Copied {source.name} to {dest_dir}")
    log_success("DCH support file in place")
    return dest
