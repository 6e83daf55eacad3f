"""Tests for generator config loading."""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core.codegen_config import (
    DEFAULT_OUTPUT_DIR,
    CodegenConfig,
    ConfigValidationError,
    load_codegen_config,
    resolve_strict_config_validation,
)
from grammar.models import GMarkerKind
from manifest.types import NamedKind

_CLEAN_ENV = {
    "MANIFEST_OUTPUT_DIR": "",
    "MANIFEST_REPORT_DIR": "",
    "STRICT_CONFIG_VALIDATION": "",
}


class TestCodegenConfig(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmpdir = Path(self._tmp.name)
        patcher = mock.patch.dict(os.environ, _CLEAN_ENV)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, content: str) -> str:
        path = self.tmpdir / name
        path.write_text(content, encoding="utf-8")
        return str(path)

    def test_defaults_without_file(self) -> None:
        config = load_codegen_config()
        self.assertEqual(config.output_dir, DEFAULT_OUTPUT_DIR)
        self.assertIn(".h", config.header_suffixes)
        self.assertEqual(config.known_types, {})
        self.assertTrue(config.continue_on_error)

    def test_yaml_file(self) -> None:
        path = self._write(
            "codegen.yml",
            "output_dir: generated\n"
            "header_suffixes: [h]\n"
            "continue_on_error: false\n"
            "known_types:\n"
            "  TWData: struct\n"
            "  TWCoinType: enum\n"
            "marker_aliases:\n"
            "  MY_EXPORT_METHOD: export_method\n",
        )
        config = load_codegen_config(path)
        self.assertEqual(config.output_dir, "generated")
        self.assertEqual(config.header_suffixes, (".h",))
        self.assertFalse(config.continue_on_error)
        self.assertEqual(
            config.known_types, {"TWData": NamedKind.STRUCT, "TWCoinType": NamedKind.ENUM}
        )
        self.assertEqual(config.marker_aliases, {"MY_EXPORT_METHOD": GMarkerKind.EXPORT_METHOD})

    def test_json_file(self) -> None:
        path = self._write("codegen.json", json.dumps({"known_types": {"TWData": "struct"}}))
        config = load_codegen_config(path)
        self.assertEqual(config.type_table().lookup("TWData"), NamedKind.STRUCT)

    def test_env_overrides_output_dir(self) -> None:
        path = self._write("codegen.yml", "output_dir: generated\n")
        with mock.patch.dict(os.environ, {"MANIFEST_OUTPUT_DIR": "from-env"}):
            config = load_codegen_config(path)
        self.assertEqual(config.output_dir, "from-env")

    def test_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(str(self.tmpdir / "missing.yml"))

    def test_invalid_payload_raises(self) -> None:
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(self._write("list.yml", "- a\n- b\n"))
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(self._write("broken.json", "{not json"))
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(self._write("suffixes.yml", "header_suffixes: []\n"))

    def test_continue_on_error_must_be_bool(self) -> None:
        quoted = self._write("quoted.yml", 'continue_on_error: "false"\n')
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(quoted)
        numeric = self._write("numeric.json", json.dumps({"continue_on_error": 0}))
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(numeric)
        plain = self._write("plain.json", json.dumps({"continue_on_error": False}))
        self.assertFalse(load_codegen_config(plain).continue_on_error)

    def test_unknown_kind_non_strict_is_dropped(self) -> None:
        path = self._write("codegen.yml", "known_types:\n  TWData: union\n  TWKind: enum\n")
        config = load_codegen_config(path, strict=False)
        self.assertEqual(config.known_types, {"TWKind": NamedKind.ENUM})

    def test_unknown_kind_strict_raises(self) -> None:
        path = self._write("codegen.yml", "marker_aliases:\n  MY_MACRO: export_everything\n")
        with self.assertRaises(ConfigValidationError):
            load_codegen_config(path, strict=True)

    def test_strict_flag_from_env(self) -> None:
        self.assertFalse(resolve_strict_config_validation())
        with mock.patch.dict(os.environ, {"STRICT_CONFIG_VALIDATION": "true"}):
            self.assertTrue(resolve_strict_config_validation())

    def test_type_table_is_fresh(self) -> None:
        config = CodegenConfig(known_types={"TWData": NamedKind.STRUCT})
        table = config.type_table()
        table.register("TWOther", NamedKind.ENUM)
        self.assertNotIn("TWOther", config.type_table())


if __name__ == "__main__":
    unittest.main()
