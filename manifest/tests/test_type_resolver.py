"""
Unit tests for manifest/types.py

Tests primitive mapping, qualifier handling and named-type resolution.
"""

import unittest

from grammar.models import GPrimitive, GQualifier, GType, GTypeCategory, GTypeUse
from manifest.errors import BadType
from manifest.models import TypeInfo, TypeVariant, VariantKind
from manifest.types import (
    PRIMITIVE_VARIANTS,
    NamedKind,
    TypeKindTable,
    keyword_for_variant,
    resolve_type,
    resolve_type_use,
)


def _expr(category, qualifier=GQualifier.MUTABLE):
    return GType(qualifier=qualifier, category=category)


class TestPrimitiveMapping(unittest.TestCase):
    """The eighteen primitive keywords map one-to-one onto variants."""

    def test_all_keywords_covered(self):
        self.assertEqual(len(GPrimitive), 18)
        self.assertEqual(set(PRIMITIVE_VARIANTS), set(GPrimitive))

    def test_variants_distinct(self):
        variants = {
            resolve_type(_expr(GTypeCategory.of(keyword))).variant for keyword in GPrimitive
        }
        self.assertEqual(len(variants), 18)

    def test_round_trip_identity(self):
        for keyword in GPrimitive:
            with self.subTest(keyword=keyword):
                variant = resolve_type(_expr(GTypeCategory.of(keyword))).variant
                self.assertEqual(keyword_for_variant(variant), keyword)

    def test_named_variant_has_no_keyword(self):
        with self.assertRaises(ValueError):
            keyword_for_variant(TypeVariant.struct("TWFoo"))


class TestQualifiers(unittest.TestCase):
    """Only the const qualifier makes a type constant."""

    def test_constness(self):
        expected = {
            GQualifier.CONST: True,
            GQualifier.MUTABLE: False,
            GQualifier.EXTERN: False,
        }
        for qualifier, is_constant in expected.items():
            with self.subTest(qualifier=qualifier):
                info = resolve_type(_expr(GTypeCategory.of(GPrimitive.INT), qualifier))
                self.assertEqual(info.is_constant, is_constant)

    def test_base_type_has_no_declarator_flags(self):
        info = resolve_type(_expr(GTypeCategory.of(GPrimitive.INT)))
        self.assertEqual(
            info,
            TypeInfo(
                variant=TypeVariant.primitive(VariantKind.INT),
                is_constant=False,
                is_nullable=False,
                is_pointer=False,
                tags=(),
            ),
        )


class TestNamedTypes(unittest.TestCase):
    """Struct/enum ambiguity is settled only by the kind table."""

    def test_without_table_fails(self):
        with self.assertRaises(BadType) as ctx:
            resolve_type(_expr(GTypeCategory.unrecognized("TWFoo")))
        self.assertEqual(ctx.exception.name, "TWFoo")

    def test_unknown_name_fails(self):
        table = TypeKindTable({"TWBar": NamedKind.STRUCT})
        with self.assertRaises(BadType):
            resolve_type(_expr(GTypeCategory.unrecognized("TWFoo")), table)

    def test_struct_and_enum_lookup(self):
        table = TypeKindTable({"TWFoo": NamedKind.STRUCT, "TWColor": NamedKind.ENUM})
        self.assertEqual(
            resolve_type(_expr(GTypeCategory.unrecognized("TWFoo")), table).variant,
            TypeVariant.struct("TWFoo"),
        )
        self.assertEqual(
            resolve_type(_expr(GTypeCategory.unrecognized("TWColor")), table).variant,
            TypeVariant.enum("TWColor"),
        )

    def test_same_name_same_kind_registers_twice(self):
        table = TypeKindTable()
        table.register("TWFoo", NamedKind.STRUCT)
        table.register("TWFoo", NamedKind.STRUCT)
        self.assertEqual(len(table), 1)

    def test_conflicting_kind_fails(self):
        table = TypeKindTable({"TWFoo": NamedKind.STRUCT})
        with self.assertRaises(BadType):
            table.register("TWFoo", NamedKind.ENUM)

    def test_copy_is_independent(self):
        table = TypeKindTable({"TWFoo": NamedKind.STRUCT})
        copy = table.copy()
        copy.register("TWBar", NamedKind.ENUM)
        self.assertNotIn("TWBar", table)
        self.assertIn("TWBar", copy)


class TestTypeUse(unittest.TestCase):
    """Declarator flags are applied on top of the base type."""

    def test_const_nullable_struct_pointer(self):
        table = TypeKindTable({"TWFoo": NamedKind.STRUCT})
        use = GTypeUse(
            ty=_expr(GTypeCategory.unrecognized("TWFoo"), GQualifier.CONST),
            is_pointer=True,
            is_nullable=True,
            tags=("null_unspecified",),
        )
        info = resolve_type_use(use, table)
        self.assertEqual(info.variant, TypeVariant.struct("TWFoo"))
        self.assertTrue(info.is_constant)
        self.assertTrue(info.is_pointer)
        self.assertTrue(info.is_nullable)
        self.assertEqual(info.tags, ("null_unspecified",))


class TestTypeVariantInvariants(unittest.TestCase):
    def test_named_requires_name(self):
        with self.assertRaises(ValueError):
            TypeVariant(kind=VariantKind.STRUCT)
        with self.assertRaises(ValueError):
            TypeVariant.enum("")

    def test_primitive_rejects_name(self):
        with self.assertRaises(ValueError):
            TypeVariant(kind=VariantKind.INT, name="int")


if __name__ == "__main__":
    unittest.main()
