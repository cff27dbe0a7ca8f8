"""Shared fixtures: a fake bundle on disk, a scripted launcher, an in-memory registry."""

from pathlib import Path

import pytest

from nvidia_3dv_setup.config import FilePaths
from nvidia_3dv_setup.errors import ConfigurationWriteFailure, Stage


class FakeLauncher:
    """Records every command and answers with scripted exit codes.

    ``returncodes`` maps a file name to the exit code returned for any
    command that has an argument with that name.  Everything else exits 0.
    """

    def __init__(self, returncodes=None):
        self.returncodes = dict(returncodes or {})
        self.calls: list[list[str]] = []

    def __call__(self, args):
        args = [str(arg) for arg in args]
        self.calls.append(args)
        for arg in args:
            code = self.returncodes.get(Path(arg).name)
            if code is not None:
                return code
        return 0

    def programs(self) -> list[str]:
        return [Path(call[0]).name for call in self.calls]


class MemoryStore:
    """Stands in for the Stereo3D registry key."""

    def __init__(self, fail_on=None, fail_open=False):
        self.fail_on = fail_on
        self.fail_open = fail_open
        self.writes: list[tuple[str, int]] = []
        self.values: dict[str, int] = {}
        self.opened = 0
        self.closed = 0

    def __enter__(self):
        if self.fail_open:
            raise ConfigurationWriteFailure(Stage.CONFIGURING, "cannot open registry key", "Stereo3D")
        self.opened += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed += 1
        return False

    def set_dword(self, name, value):
        if name == self.fail_on:
            raise ConfigurationWriteFailure(Stage.CONFIGURING, f"cannot write {name}", name)
        self.writes.append((name, value))
        self.values[name] = value


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def bundle(tmp_path) -> FilePaths:
    """A pre-extracted installer bundle with placeholder binaries."""
    root = tmp_path / "bundle"
    paths = FilePaths.from_root(root, support_dest_dir=tmp_path / "ProgramData" / "NVIDIA")
    for path in (paths.support_file, paths.driver_archive, paths.seven_zip, paths.rcedit,
                 paths.toggle_exe, paths.setup_exe, *paths.patch_targets):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"MZ" + path.name.encode())
    return paths
