"""Tests for package extraction and version patching."""

import pytest

from conftest import FakeLauncher
from nvidia_3dv_setup.errors import ExternalToolFailure, IOFailure, Stage
from nvidia_3dv_setup.nvidia.patches import (
    VERSION_PREFIX,
    extract_driver_package,
    patch_driver_files,
    rcedit_command,
    version_string,
)


def test_version_string_for_known_driver():
    assert version_string(52531) == "7.17.15.2531"


@pytest.mark.parametrize("driver_version", [45207, 47214, 52531, 53161, 100001])
def test_version_string_shape(driver_version):
    result = version_string(driver_version)

    assert result.startswith(VERSION_PREFIX)
    suffix = result[len(VERSION_PREFIX):]
    assert suffix.count(".") == 1
    assert suffix.replace(".", "") == str(driver_version)
    assert suffix.split(".")[1] == str(driver_version)[-4:]
    assert version_string(driver_version) == result


@pytest.mark.parametrize("driver_version", [-1, 0, 4520])
def test_version_string_rejects_short_versions(driver_version):
    with pytest.raises(ValueError):
        version_string(driver_version)


def test_rcedit_command_sets_both_fields():
    assert rcedit_command("rcedit.exe", "nvSCPAPI.dll", "7.17.15.2531") == [
        "rcedit.exe", "nvSCPAPI.dll",
        "--set-product-version", "7.17.15.2531",
        "--set-file-version", "7.17.15.2531",
    ]


def test_patch_runs_rcedit_on_every_file(bundle, launcher):
    outcomes = patch_driver_files(bundle.patch_targets, 52531, bundle.rcedit, launcher=launcher)

    assert [o.path for o in outcomes] == list(bundle.patch_targets)
    assert all(o.ok for o in outcomes)
    assert launcher.calls == [
        rcedit_command(bundle.rcedit, target, "7.17.15.2531") for target in bundle.patch_targets
    ]


def test_patch_failure_still_attempts_remaining_files(bundle):
    first, second = bundle.patch_targets
    launcher = FakeLauncher({first.name: 3})

    with pytest.raises(ExternalToolFailure) as excinfo:
        patch_driver_files(bundle.patch_targets, 52531, bundle.rcedit, launcher=launcher)

    assert len(launcher.calls) == 2
    assert excinfo.value.stage is Stage.PATCHING
    assert excinfo.value.target == str(first)
    assert excinfo.value.returncode == 3


def test_patch_missing_file_is_reported(bundle, launcher):
    first, second = bundle.patch_targets
    second.unlink()

    with pytest.raises(ExternalToolFailure) as excinfo:
        patch_driver_files(bundle.patch_targets, 52531, bundle.rcedit, launcher=launcher)

    assert excinfo.value.target == str(second)
    assert len(launcher.calls) == 1


def test_patch_without_rcedit_is_io_failure(bundle, launcher):
    bundle.rcedit.unlink()

    with pytest.raises(IOFailure):
        patch_driver_files(bundle.patch_targets, 52531, bundle.rcedit, launcher=launcher)
    assert launcher.calls == []


def test_extract_skipped_when_tree_present(bundle, launcher):
    ran = extract_driver_package(bundle.seven_zip, bundle.driver_archive, bundle.extract_dir,
                                 required=bundle.patch_targets, launcher=launcher)

    assert ran is False
    assert launcher.calls == []


def test_extract_runs_7za(bundle, launcher, tmp_path):
    target = tmp_path / "fresh"

    ran = extract_driver_package(bundle.seven_zip, bundle.driver_archive, target,
                                 required=[target / "setup.exe"], launcher=launcher)

    assert ran is True
    assert launcher.calls == [
        [str(bundle.seven_zip), "x", str(bundle.driver_archive), f"-o{target}", "-y"],
    ]


def test_extract_failure_is_external_tool_failure(bundle, tmp_path):
    launcher = FakeLauncher({"7za.exe": 2})

    with pytest.raises(ExternalToolFailure) as excinfo:
        extract_driver_package(bundle.seven_zip, bundle.driver_archive, tmp_path / "fresh",
                               launcher=launcher)

    assert excinfo.value.stage is Stage.EXTRACTING
    assert excinfo.value.returncode == 2


def test_extract_without_archive_is_io_failure(bundle, launcher, tmp_path):
    bundle.driver_archive.unlink()

    with pytest.raises(IOFailure) as excinfo:
        extract_driver_package(bundle.seven_zip, bundle.driver_archive, tmp_path / "fresh",
                               launcher=launcher)

    assert excinfo.value.target == str(bundle.driver_archive)
    assert launcher.calls == []
