"""Tests for the command-line interface.

WHY: The CLI is the contract engine plugins and scripts code against:
stdout payloads, stderr messages and exit codes. A change in any of them
breaks callers that never import the library.

HOW: main(argv) is called in-process with capsys capturing stdout and
stderr. The external converter is monkeypatched.

RULES:
- Payload assertions parse stdout rather than comparing raw text
- Exit codes: 0 ok, 1 failure, 65 malformed dialect, 66 missing input
"""

import base64
import json

import pytest
import yaml

from conftest import (
    GUID_FOLDER,
    GUID_MINIMAL,
    GUID_PREFAB,
    GUID_TEXTURE,
    PNG_BYTES,
    write_tar,
)
from unitypackage_util import cli
from unitypackage_util.cli import build_parser, main
from unitypackage_util.core.errors import ConverterError


class TestParser:

    def test_subcommand_required(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_parser().parse_args(["package.unitypackage"])
        assert exc_info.value.code == 2

    def test_extract_flags(self):
        args = build_parser().parse_args(["pkg", "extract", GUID_PREFAB, "-m", "-j", "-p", "-o", "out.json"])
        assert args.meta and args.json and args.pretty
        assert args.output_file == "out.json"
        assert not args.base64 and not args.fbx2gltf

    def test_list_defaults(self):
        args = build_parser().parse_args(["pkg", "list"])
        assert args.dir is None
        assert args.no_guid is False
        assert args.format == "json"


class TestInfo:

    def test_tar(self, tar_package, capsys):
        assert main([str(tar_package), "info"]) == 0
        assert capsys.readouterr().out == "Package: Tar: {}\n".format(tar_package)

    def test_folder(self, folder_package, capsys):
        assert main([str(folder_package), "info"]) == 0
        assert capsys.readouterr().out.startswith("Package: Folder: ")

    def test_missing_package(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.unitypackage"), "info"]) == 66
        err = capsys.readouterr().err
        assert err.startswith("Error: ")
        assert "nope.unitypackage" in err

    def test_not_a_container(self, tmp_path, capsys):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        assert main([str(path), "info"]) == 66
        assert "Not a package container" in capsys.readouterr().err


class TestName:

    def test_prints_pathname(self, package_path, capsys):
        assert main([str(package_path), "name", GUID_PREFAB]) == 0
        assert capsys.readouterr().out == "Assets/Prefabs/Hero.prefab\n"

    def test_missing_guid(self, package_path, capsys):
        assert main([str(package_path), "name", "f" * 32]) == 66
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Could not find {}/pathname in package".format("f" * 32) in captured.err


class TestDump:

    def test_json(self, package_path, capsys):
        assert main([str(package_path), "dump"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert list(payload) == [GUID_MINIMAL, GUID_PREFAB, GUID_TEXTURE, GUID_FOLDER]
        assert payload[GUID_MINIMAL] == {
            "pathname": "Assets/Foo.prefab",
            "content_type": None,
            "asset": None,
            "asset_meta": {
                "type": "DefaultImporter",
                "content": {"x": 1},
                "fileFormatVersion": 2,
                "guid": GUID_MINIMAL,
            },
        }
        assert payload[GUID_PREFAB]["asset"][2]["_file_id"] == "-5"

    def test_compact_is_one_line(self, tar_package, capsys):
        main([str(tar_package), "dump"])
        assert capsys.readouterr().out.count("\n") == 1

    def test_pretty(self, tar_package, capsys):
        main([str(tar_package), "dump", "-p"])
        out = capsys.readouterr().out
        assert out.startswith('{\n  "')
        assert json.loads(out)[GUID_TEXTURE]["content_type"] == "image/png"

    def test_yaml_format(self, tar_package, capsys):
        assert main([str(tar_package), "dump", "--format", "yaml"]) == 0
        payload = yaml.safe_load(capsys.readouterr().out)
        assert payload[GUID_FOLDER]["asset_meta"]["folderAsset"] is True

    def test_malformed_asset_exit_code(self, tmp_path, capsys):
        path = write_tar(tmp_path / "bad.tar", {"e" * 32 + "/asset": b"%YAML 1.1\nBroken: 1\n"})
        assert main([str(path), "dump"]) == 65
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "e" * 32 + "/asset" in captured.err

    def test_keep_going(self, tmp_path, capsys):
        path = write_tar(tmp_path / "bad.tar", {
            "e" * 32 + "/asset": b"%YAML 1.1\nBroken: 1\n",
            "e" * 32 + "/pathname": b"Assets/Broken.asset\n",
        })
        assert main([str(path), "dump", "--keep-going"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["e" * 32]["pathname"] == "Assets/Broken.asset"
        assert payload["e" * 32]["asset"] is None


class TestDebug:

    def test_traces_entries(self, tar_package, capsys):
        assert main([str(tar_package), "debug"]) == 0
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == GUID_MINIMAL + "/pathname"
        assert GUID_PREFAB + "/asset" in lines
        assert len(lines) == 10

    def test_trace_ends_at_failing_entry(self, tmp_path, capsys):
        path = write_tar(tmp_path / "bad.tar", {
            GUID_MINIMAL + "/pathname": b"Assets/Foo.prefab\n",
            "e" * 32 + "/asset": b"%YAML 1.1\nBroken: 1\n",
            GUID_PREFAB + "/pathname": b"Assets/Hero.prefab\n",
        })
        assert main([str(path), "debug"]) == 65
        lines = capsys.readouterr().out.splitlines()
        assert lines[-1] == "e" * 32 + "/asset"


class TestList:

    def test_with_guids(self, package_path, capsys):
        assert main([str(package_path), "list"]) == 0
        assert json.loads(capsys.readouterr().out) == [
            [GUID_MINIMAL, "Assets/Foo.prefab"],
            [GUID_FOLDER, "Assets/Prefabs"],
            [GUID_PREFAB, "Assets/Prefabs/Hero.prefab"],
            [GUID_TEXTURE, "Assets/Textures/hero.png"],
        ]

    def test_no_guid(self, tar_package, capsys):
        main([str(tar_package), "list", "-n"])
        assert json.loads(capsys.readouterr().out) == [
            "Assets/Foo.prefab",
            "Assets/Prefabs",
            "Assets/Prefabs/Hero.prefab",
            "Assets/Textures/hero.png",
        ]

    def test_dir_filter(self, tar_package, capsys):
        main([str(tar_package), "list", "-n", "-d", "Assets/Prefabs"])
        assert json.loads(capsys.readouterr().out) == ["Assets/Prefabs/Hero.prefab"]


class TestExtract:

    def test_raw_bytes(self, package_path, capsysbinary):
        assert main([str(package_path), "extract", GUID_TEXTURE]) == 0
        assert capsysbinary.readouterr().out == PNG_BYTES

    def test_base64(self, tar_package, capsys):
        assert main([str(tar_package), "extract", GUID_TEXTURE, "-b"]) == 0
        assert base64.b64decode(capsys.readouterr().out.strip()) == PNG_BYTES

    def test_output_file(self, tar_package, tmp_path, capsys):
        target = tmp_path / "hero.png"
        assert main([str(tar_package), "extract", GUID_TEXTURE, "-o", str(target)]) == 0
        assert target.read_bytes() == PNG_BYTES
        assert "Saved:" in capsys.readouterr().err

    def test_asset_json_is_array(self, tar_package, capsys):
        assert main([str(tar_package), "extract", GUID_PREFAB, "-j"]) == 0
        documents = json.loads(capsys.readouterr().out)
        assert isinstance(documents, list)
        assert [doc["_class_id"] for doc in documents] == [1001, 1, 114]
        assert documents[2]["content"]["m_Name1"] == "Second"

    def test_meta_json_is_object(self, tar_package, capsys):
        assert main([str(tar_package), "extract", GUID_PREFAB, "-m", "-j", "-p"]) == 0
        meta = json.loads(capsys.readouterr().out)
        assert meta["guid"] == GUID_PREFAB
        assert meta["labels"] == ["tagA", "tagB"]

    def test_json_of_binary_asset_is_malformed(self, tar_package, capsys):
        assert main([str(tar_package), "extract", GUID_TEXTURE, "-j"]) == 65
        assert GUID_TEXTURE + "/asset" in capsys.readouterr().err

    def test_missing_asset(self, tar_package, capsys):
        assert main([str(tar_package), "extract", GUID_FOLDER]) == 66
        assert "Could not find {}/asset in package".format(GUID_FOLDER) in capsys.readouterr().err

    def test_fbx2gltf(self, tar_package, monkeypatch, capsysbinary):
        received = []

        def _convert(buf):
            received.append(buf)
            return b"glTF-binary"

        monkeypatch.setattr(cli, "convert_fbx2gltf", _convert)
        assert main([str(tar_package), "extract", GUID_TEXTURE, "-f"]) == 0
        assert received == [PNG_BYTES]
        assert capsysbinary.readouterr().out == b"glTF-binary"

    def test_converter_failure_exit_code(self, tar_package, monkeypatch, capsys):
        def _fail(buf):
            raise ConverterError("Could not run ./FBX2glTF: not found")

        monkeypatch.setattr(cli, "convert_fbx2gltf", _fail)
        assert main([str(tar_package), "extract", GUID_TEXTURE, "-f", "-b"]) == 1
        assert "Could not run ./FBX2glTF" in capsys.readouterr().err


class TestXxHash:

    def test_empty_string(self, tar_package, capsys):
        assert main([str(tar_package), "xx-hash", ""]) == 0
        assert capsys.readouterr().out == "{}\n".format(0xEF46DB3751D8E999 - 2 ** 64)
