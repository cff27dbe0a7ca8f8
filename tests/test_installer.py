"""Tests for the silent installer and the stereo toggle."""

import pytest

from conftest import FakeLauncher
from nvidia_3dv_setup.errors import ExternalToolFailure, IOFailure, Stage
from nvidia_3dv_setup.nvidia.installer import check_exit, enable_stereo, run_installer


def test_installer_runs_silently(bundle, launcher):
    assert run_installer(bundle.setup_exe, launcher=launcher) == 0
    assert launcher.calls == [[str(bundle.setup_exe), "/s"]]


def test_installer_returns_exit_code(bundle):
    launcher = FakeLauncher({"setup.exe": 1603})
    assert run_installer(bundle.setup_exe, launcher=launcher) == 1603


def test_missing_installer(bundle, launcher):
    bundle.setup_exe.unlink()
    with pytest.raises(IOFailure) as excinfo:
        run_installer(bundle.setup_exe, launcher=launcher)
    assert excinfo.value.stage is Stage.INSTALLING
    assert launcher.calls == []


def test_enable_passes_enable_argument(bundle, launcher):
    assert enable_stereo(bundle.toggle_exe, launcher=launcher) == 0
    assert launcher.calls == [[str(bundle.toggle_exe), "enable"]]


def test_check_exit_accepts_zero(bundle):
    check_exit(Stage.ENABLING, bundle.toggle_exe, 0)


def test_check_exit_rejects_non_zero(bundle):
    with pytest.raises(ExternalToolFailure) as excinfo:
        check_exit(Stage.INSTALLING, bundle.setup_exe, 1603)

    assert excinfo.value.stage is Stage.INSTALLING
    assert excinfo.value.returncode == 1603
    assert "setup.exe" in str(excinfo.value)
