"""3D Vision registry configuration.

The stereo driver reads its settings from REG_DWORD values under a single
key.  A fresh install leaves most of them unset, so the full default table
is written first and the preferred settings are layered on top.
"""

from typing import Mapping, Optional

from ..errors import ConfigurationWriteFailure, Stage
from ..utils.logging import log_detail, log_info, log_step, log_success

try:
    import winreg
except ImportError:  # not on Windows
    winreg = None


STEREO_KEY_PATH = r"SOFTWARE\WOW6432Node\NVIDIA Corporation\Global\Stereo3D"

_DWORD_MAX = 0xFFFFFFFF

# Hotkey values are a virtual-key code OR'd with modifier bits
_SHIFT = 0x100
_CTRL = 0x200
_ALT = 0x400
_VK_F1 = 0x70

# Baseline for a fresh install.
STEREO_DEFAULTS: dict[str, int] = {
    "StereoSeparation": 15,
    "StereoConvergence": 0,
    "StereoDefaultOn": 1,
    "StereoAdjustEnable": 1,
    "StereoMemoEnabled": 1,
    "StereoTextureEnable": 0x23,
    "StereoCutoff": 1,
    "StereoImageType": 0,
    "StereoViewerType": 0,
    "StereoVisionConfirmed": 0,
    "StereoAdvancedHKConfig": 0,
    "StereoHotkeysEnabled": 1,
    "StereoSuggestSettings": 0,
    "LaserSightEnabled": 1,
    "EnableWindowedMode": 0,
    "SnapShotQuality": 50,
    "SaveStereoImage": _ALT | _VK_F1,
    "StereoToggle": _CTRL | 0x54,                           # Ctrl+T
    "StereoSeparationAdjustLess": _CTRL | (_VK_F1 + 2),     # Ctrl+F3
    "StereoSeparationAdjustMore": _CTRL | (_VK_F1 + 3),     # Ctrl+F4
    "StereoConvergenceAdjustLess": _CTRL | (_VK_F1 + 4),    # Ctrl+F5
    "StereoConvergenceAdjustMore": _CTRL | (_VK_F1 + 5),    # Ctrl+F6
    "WriteConfig": _CTRL | (_VK_F1 + 6),                    # Ctrl+F7
    "ToggleLaserSight": _CTRL | (_VK_F1 + 8),               # Ctrl+F9
    "CycleFrustumAdjust": _CTRL | (_VK_F1 + 10),            # Ctrl+F11
    "ToggleMemo": _CTRL | _ALT | 0x2D,                      # Ctrl+Alt+Insert
    "DeleteConfig": _CTRL | (_VK_F1 + 7),                   # Ctrl+F8
    "GlassesDelayMinus": _CTRL | _ALT | 0xBC,               # Ctrl+Alt+,
    "GlassesDelayPlus": _CTRL | _ALT | 0xBE,                # Ctrl+Alt+.
    "RHWAtScreenLess": _CTRL | _ALT | (_VK_F1 + 2),         # Ctrl+Alt+F3
    "RHWAtScreenMore": _CTRL | _ALT | (_VK_F1 + 3),         # Ctrl+Alt+F4
    "RHWLessAtScreenLess": _CTRL | _SHIFT | (_VK_F1 + 2),   # Ctrl+Shift+F3
    "RHWLessAtScreenMore": _CTRL | _SHIFT | (_VK_F1 + 3),   # Ctrl+Shift+F4
}

# Preferred settings, applied after the defaults.
STEREO_OVERRIDES: dict[str, int] = {
    "StereoSeparation": 20,
    "StereoAdvancedHKConfig": 1,
    "LaserSightEnabled": 0,
    "SnapShotQuality": 85,
    "EnableWindowedMode": 5,
    "StereoVisionConfirmed": 1,
    "StereoViewerType": 1,
}


class RegistryStore:
    """Writes DWORD values under the Stereo3D key in HKEY_LOCAL_MACHINE.

    Use as a context manager; the key is opened on entry and closed on exit.
    The key must already exist, which it does once setup.exe has run.
    """

    def __init__(self, path: str = STEREO_KEY_PATH):
        self.path = path
        self._key = None

    def __enter__(self):
        if winreg is None:
            raise ConfigurationWriteFailure(Stage.CONFIGURING,
                                            "the Windows registry is not available", self.path)
        try:
            self._key = winreg.OpenKey(winreg.HKEY_LOCAL_MACHINE, self.path, 0,
                                       winreg.KEY_SET_VALUE)
        except OSError as exc:
            raise ConfigurationWriteFailure(Stage.CONFIGURING,
                                            f"cannot open registry key: {exc}", self.path) from exc
        return self

    def __exit__(self, exc_type, exc, tb):
        if self._key is not None:
            winreg.CloseKey(self._key)
            self._key = None
        return False

    def set_dword(self, name: str, value: int) -> None:
        try:
            winreg.SetValueEx(self._key, name, 0, winreg.REG_DWORD, value)
        except OSError as exc:
            raise ConfigurationWriteFailure(Stage.CONFIGURING,
                                            f"cannot write {name}: {exc}", name) from exc


def _validate(table: Mapping[str, int]) -> None:
    for name, value in table.items():
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= _DWORD_MAX:
            raise ConfigurationWriteFailure(Stage.CONFIGURING,
                                            f"value {value!r} does not fit in a DWORD", name)


def apply_stereo_config(store, baseline: Optional[Mapping[str, int]] = None,
                        overrides: Optional[Mapping[str, int]] = None) -> dict[str, int]:
    """Write the default table, then the overrides, into ``store``.

    Every entry is written in table order, so a key present in both tables
    ends up holding the override value.  Any failure aborts the whole
    stage; a half-written configuration is reported, not accepted.

    Args:
        store: Context manager with a ``set_dword(name, value)`` method,
            normally a ``RegistryStore``.
        baseline: Defaults table, ``STEREO_DEFAULTS`` when omitted.
        overrides: Preferred settings, ``STEREO_OVERRIDES`` when omitted.

    Returns:
        The effective value of every key written.
    """
    log_step("Configuring 3D Vision registry settings")
    baseline = STEREO_DEFAULTS if baseline is None else baseline
    overrides = STEREO_OVERRIDES if overrides is None else overrides

    _validate(baseline)
    _validate(overrides)

    effective: dict[str, int] = {}
    with store as writer:
        for label, table in (("defaults", baseline), ("overrides", overrides)):
            log_info(f"Writing {len(table)} {label}")
            for name, value in table.items():
                writer.set_dword(name, value)
                log_detail(f"{name} = {value:#x}")
                effective[name] = value

    log_success(f"Wrote {len(effective)} stereo settings")
    return effective
