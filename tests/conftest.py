"""Shared fixtures: a fake external toolchain behind ``subprocess.run``.

Each fake tool does the smallest thing that lets the pipelines observe real
files on disk:

- image codec: writes ``image(<source bytes>)`` to the destination
- config compiler: ``-bin`` wraps the text as ``bin(...)``, ``-txt`` unwraps it
- archive tool: ``pack`` zips the unit folder into ``<cwd>/<unit>.pbo``,
  ``unpack`` extracts ``X.pbo`` into ``<cwd>/X``
- signer: writes ``<cwd>/<archive name>.<authority>.bisign``
"""

import json
import subprocess
import threading
import zipfile
from pathlib import Path
from unittest.mock import patch

import pytest

from modpacker.config.settings import ToolPaths
from modpacker.tools import Toolchain

IMAGE_TOOL = "fake-image-tool"
CONFIG_TOOL = "fake-config-tool"
RVMAT_TOOL = "fake-rvmat-tool"
PBO_TOOL = "fake-pbo-tool"
SIGN_TOOL = "fake-sign-tool"


class FakeTools:
    """Side effect for ``subprocess.run`` that simulates every external tool."""

    def __init__(self):
        self.calls = []
        self.failing = {}
        self.hooks = {}
        self._lock = threading.Lock()

    def fail(self, tool, stderr="boom", returncode=1):
        """Make every run of ``tool`` exit non-zero."""
        self.failing[tool] = (returncode, stderr)

    def on_run(self, tool, callback):
        """Call ``callback(command)`` whenever ``tool`` runs."""
        self.hooks[tool] = callback

    def commands_for(self, tool):
        return [command for command, _ in self.calls if command[0] == tool]

    def __call__(self, command, cwd=None, **kwargs):
        with self._lock:
            self.calls.append((list(command), cwd))

        tool = command[0]
        if tool in self.hooks:
            self.hooks[tool](command)
        if tool in self.failing:
            returncode, stderr = self.failing[tool]
            return subprocess.CompletedProcess(command, returncode, stdout="", stderr=stderr)

        handler = {
            IMAGE_TOOL: self._image,
            CONFIG_TOOL: self._config,
            RVMAT_TOOL: self._config,
            PBO_TOOL: self._archive,
            SIGN_TOOL: self._sign,
        }.get(tool)
        if handler is None:
            raise FileNotFoundError(tool)

        handler(command[1:], Path(cwd) if cwd else None)
        return subprocess.CompletedProcess(command, 0, stdout=f"{tool} ok\n", stderr="")

    def _image(self, args, cwd):
        source, destination = Path(args[0]), Path(args[1])
        destination.write_bytes(b"image(" + source.read_bytes() + b")")

    def _config(self, args, cwd):
        mode, _, destination, source = args
        text = Path(source).read_text()
        if mode == "-bin":
            Path(destination).write_text(f"bin({text})")
        elif text.startswith("bin(") and text.endswith(")"):
            Path(destination).write_text(text[4:-1])
        else:
            Path(destination).write_text(text)

    def _archive(self, args, cwd):
        action, target = args[0], Path(args[1])
        if action == "pack":
            with zipfile.ZipFile(cwd / f"{target.name}.pbo", "w") as archive:
                for path in sorted(target.rglob("*")):
                    if path.is_file():
                        archive.write(path, path.relative_to(target).as_posix())
        else:
            with zipfile.ZipFile(target) as archive:
                archive.extractall(cwd / target.stem)

    def _sign(self, args, cwd):
        private_key, archive = Path(args[0]), Path(args[1])
        (cwd / f"{archive.name}.{private_key.stem}.bisign").write_text("signature")


@pytest.fixture
def fake_tools():
    tools = FakeTools()
    with patch("modpacker.tools.runner.subprocess.run", side_effect=tools):
        yield tools


@pytest.fixture
def tool_paths():
    return ToolPaths(
        paa_converter_path=IMAGE_TOOL,
        rvmat_converter_path=RVMAT_TOOL,
        config_converter_path=CONFIG_TOOL,
        pbo_packer_path=PBO_TOOL,
        pbo_signer_path=SIGN_TOOL,
    )


@pytest.fixture
def toolchain(tool_paths):
    return Toolchain.from_settings(tool_paths)


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


def write_file(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def make_mod(tmp_path):
    """Build a source mod with one signed addon, as shipped by a mod author."""

    def _make(name="my_mod", addon="my_addon", authority="dev"):
        root = tmp_path / name
        unit = root / "addons" / addon
        write_file(unit / "config.cpp", "class CfgPatches {};")
        write_json(unit / "pbo.json", {"headers": [], "compress": None})
        if authority:
            write_json(unit / "key.json", {"authority_name": authority})
        write_file(root / "keys" / f"{authority or 'dev'}.bikey", "public")
        write_file(root / "keys" / f"{authority or 'dev'}.biprivatekey", "private")
        return root

    return _make
