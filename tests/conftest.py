"""Shared test fixtures for the unitypackage_util test suite.

WHY: Container tests, aggregator tests and CLI tests all need the same
small package in each of its three shapes (folder, tar, tar.gz) to show
that results do not depend on the container kind.

HOW: PACKAGE_FILES describes one logical package. Builder helpers write
it to tmp_path as a directory tree, a plain tar and a gzip-tar. The
``package_path`` fixture is parametrized over all three kinds.

RULES:
- GUIDs are 32 characters; README is container bookkeeping
- Archives also contain directory members, which must never be yielded
- Every fixture writes below tmp_path only
"""

import io
import tarfile
from pathlib import Path
from typing import Dict

import pytest

GUID_MINIMAL = "A" * 32
GUID_PREFAB = "b" * 32
GUID_TEXTURE = "c" * 32
GUID_FOLDER = "d" * 32

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 24

MINIMAL_META = (
    "fileFormatVersion: 2\n"
    "guid: " + GUID_MINIMAL + "\n"
    "DefaultImporter:\n"
    "  x: 1"
)

PREFAB_ASSET = (
    "%YAML 1.1\n"
    "%TAG !u! tag:unity3d.com,2011:\n"
    "--- !u!1001 &100100000\n"
    "Prefab:\n"
    "  m_ObjectHideFlags: 1\n"
    "  m_RootGameObject: {fileID: 1000011}\n"
    "--- !u!1 &1000011\n"
    "GameObject:\n"
    "  m_Name: Foo\n"
    "  m_Component:\n"
    "  - component: {fileID: 4000011}\n"
    "--- !u!114 &-5 stripped\n"
    "MonoBehaviour:\n"
    "  m_Name: First\n"
    "  m_Name: Second\n"
    "  m_Script: {fileID: 11500000, guid: 0123456789abcdef0123456789abcdef, type: 3}\n"
)

PREFAB_META = (
    "fileFormatVersion: 2\n"
    "guid: " + GUID_PREFAB + "\n"
    "labels:\n"
    "- tagA\n"
    "- tagB\n"
    "timeCreated: 1500000000\n"
    "licenseType: Free\n"
    "PrefabImporter:\n"
    "  externalObjects: {}\n"
    "  userData: \n"
    "  assetBundleName: \n"
    "  assetBundleVariant: \n"
)

TEXTURE_META = (
    "fileFormatVersion: 2\n"
    "guid: " + GUID_TEXTURE + "\n"
    "TextureImporter:\n"
    "  spriteMode: 1\n"
    "  spritePixelsToUnits: 100\n"
)

FOLDER_META = (
    "fileFormatVersion: 2\n"
    "guid: " + GUID_FOLDER + "\n"
    "folderAsset: yes\n"
    "DefaultImporter:\n"
    "  userData: \n"
)

PACKAGE_FILES: Dict[str, bytes] = {
    "README": b"not an asset\n",
    GUID_MINIMAL + "/pathname": b"Assets/Foo.prefab\n",
    GUID_MINIMAL + "/asset.meta": MINIMAL_META.encode("utf-8"),
    GUID_PREFAB + "/pathname": b"Assets/Prefabs/Hero.prefab\n",
    GUID_PREFAB + "/asset": PREFAB_ASSET.encode("utf-8"),
    GUID_PREFAB + "/asset.meta": PREFAB_META.encode("utf-8"),
    GUID_TEXTURE + "/pathname": b"Assets/Textures/hero.png\n00\n",
    GUID_TEXTURE + "/asset": PNG_BYTES,
    GUID_TEXTURE + "/asset.meta": TEXTURE_META.encode("utf-8"),
    GUID_FOLDER + "/pathname": b"Assets/Prefabs",
    GUID_FOLDER + "/asset.meta": FOLDER_META.encode("utf-8"),
}


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def write_folder(root: Path, files: Dict[str, bytes]) -> Path:
    """Write ``files`` below ``root`` as a directory tree."""
    root.mkdir(parents=True, exist_ok=True)
    for name, data in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return root


def write_tar(path: Path, files: Dict[str, bytes], gzip: bool = False, prefix: str = "") -> Path:
    """Write ``files`` into a (gzip-)tar, with a directory member per GUID."""
    mode = "w:gz" if gzip else "w"
    with tarfile.open(path, mode, format=tarfile.USTAR_FORMAT) as archive:
        seen_dirs = set()
        for name, data in files.items():
            directory = name.rpartition("/")[0]
            if directory and directory not in seen_dirs:
                seen_dirs.add(directory)
                dir_info = tarfile.TarInfo(prefix + directory)
                dir_info.type = tarfile.DIRTYPE
                dir_info.mode = 0o755
                archive.addfile(dir_info)
            info = tarfile.TarInfo(prefix + name)
            info.size = len(data)
            info.mode = 0o644
            archive.addfile(info, io.BytesIO(data))
    return path


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def folder_package(tmp_path):
    return write_folder(tmp_path / "package", PACKAGE_FILES)


@pytest.fixture
def tar_package(tmp_path):
    return write_tar(tmp_path / "package.tar", PACKAGE_FILES)


@pytest.fixture
def targz_package(tmp_path):
    return write_tar(tmp_path / "package.unitypackage", PACKAGE_FILES, gzip=True)


@pytest.fixture(params=["folder", "tar", "targz"])
def package_path(request, tmp_path):
    """The same logical package as a folder, a tar and a gzip-tar."""
    if request.param == "folder":
        return write_folder(tmp_path / "package", PACKAGE_FILES)
    if request.param == "tar":
        return write_tar(tmp_path / "package.tar", PACKAGE_FILES)
    return write_tar(tmp_path / "package.unitypackage", PACKAGE_FILES, gzip=True)
