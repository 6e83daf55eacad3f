"""
Unit tests for manifest/serialization.py
"""

import unittest

import yaml

from manifest.models import (
    DeinitInfo,
    EnumInfo,
    FileInfo,
    FunctionInfo,
    ImportInfo,
    InitInfo,
    ParamInfo,
    PropertyInfo,
    StructInfo,
    TypeInfo,
    TypeVariant,
    VariantKind,
)
from manifest.serialization import (
    dump_file_info,
    file_info_from_dict,
    file_info_to_dict,
    load_file_info,
    type_info_from_dict,
    type_info_to_dict,
)

FOO_PTR = TypeInfo(variant=TypeVariant.struct("TWFoo"), is_pointer=True)


def _sample_manifest():
    return FileInfo(
        name="TWFoo",
        imports=(ImportInfo(path=("TrustWalletCore", "TWData.h")),),
        structs=(
            StructInfo(name="TWFoo", is_public=True, tags=("TW_EXPORT_CLASS",)),
            StructInfo(
                name="TWFooPoint",
                is_public=True,
                fields=(("raw", TypeInfo(variant=TypeVariant.primitive(VariantKind.UINT8_T), tags=("array:4",))),),
            ),
        ),
        inits=(InitInfo(name="TWFooCreate", comments=("Creates a foo.",)),),
        deinits=(DeinitInfo(name="TWFooDelete", params=(ParamInfo(name="foo", type=FOO_PTR),)),),
        enums=(EnumInfo(name="TWFooKind", is_public=True, variants=(("TWFooKindA", None), ("TWFooKindB", 4))),),
        functions=(
            FunctionInfo(
                name="TWFooEqual",
                is_public=True,
                is_static=False,
                return_type=TypeInfo(variant=TypeVariant.primitive(VariantKind.BOOL)),
                params=(ParamInfo(name="lhs", type=FOO_PTR), ParamInfo(name="rhs", type=FOO_PTR)),
            ),
        ),
        properties=(
            PropertyInfo(
                name="TWFooKindOf",
                is_public=True,
                is_static=False,
                return_type=TypeInfo(variant=TypeVariant.enum("TWFooKind"), is_constant=True),
            ),
        ),
    )


class TestTypeInfoEncoding(unittest.TestCase):
    def test_primitive_has_no_value_key(self):
        payload = type_info_to_dict(TypeInfo(variant=TypeVariant.primitive(VariantKind.SHORT_INT)))
        self.assertEqual(
            payload,
            {
                "variant": "short_int",
                "is_constant": False,
                "is_nullable": False,
                "is_pointer": False,
                "tags": [],
            },
        )

    def test_named_variant_is_flattened(self):
        payload = type_info_to_dict(FOO_PTR)
        self.assertEqual(payload["variant"], "struct")
        self.assertEqual(payload["value"], "TWFoo")
        self.assertTrue(payload["is_pointer"])

    def test_unknown_variant_rejected(self):
        with self.assertRaises(ValueError):
            type_info_from_dict({"variant": "long_long"})
        with self.assertRaises(ValueError):
            type_info_from_dict({})


class TestFileInfoEncoding(unittest.TestCase):
    def test_list_keys_in_order(self):
        payload = file_info_to_dict(_sample_manifest())
        self.assertEqual(
            list(payload),
            ["name", "imports", "structs", "inits", "deinits", "enums", "functions", "properties"],
        )
        self.assertEqual(payload["enums"][0]["variants"], [["TWFooKindA", None], ["TWFooKindB", 4]])
        self.assertEqual(payload["deinits"][0]["params"][0]["type"]["value"], "TWFoo")

    def test_yaml_document_round_trip(self):
        manifest = _sample_manifest()
        text = dump_file_info(manifest)
        self.assertTrue(text.startswith("name: TWFoo"))
        self.assertEqual(yaml.safe_load(text), file_info_to_dict(manifest))
        self.assertEqual(load_file_info(text), manifest)

    def test_rejects_non_manifest(self):
        with self.assertRaises(ValueError):
            file_info_from_dict(["not", "a", "manifest"])
        with self.assertRaises(ValueError):
            load_file_info("imports: []\n")


if __name__ == "__main__":
    unittest.main()
