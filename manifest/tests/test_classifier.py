"""
Unit tests for manifest/classifier.py

Tests routing, list ordering, skip notices and per-header atomicity.
"""

import unittest

from grammar.models import (
    GEnumDecl,
    GEnumVariant,
    GField,
    GFunctionDecl,
    GHeader,
    GHeaderInclude,
    GMarker,
    GMarkerKind,
    GMarkers,
    GOther,
    GParam,
    GPrimitive,
    GQualifier,
    GStructDecl,
    GStructIndicator,
    GType,
    GTypeCategory,
    GTypeUse,
)
from manifest.classifier import (
    ClassificationEngine,
    ManifestAggregator,
    SkipNotice,
    classify_declarations,
    classify_header,
    header_stem,
)
from manifest.errors import BadObject
from manifest.models import InitInfo, StructInfo, TypeInfo, TypeVariant, VariantKind
from manifest.rules import Route
from manifest.types import NamedKind, TypeKindTable


def _markers(*kinds):
    return GMarkers(items=tuple(GMarker(kind=k, text=f"TW_{k.name}") for k in kinds))


def _use(category, is_pointer=False):
    return GTypeUse(
        ty=GType(qualifier=GQualifier.MUTABLE, category=category), is_pointer=is_pointer
    )


def _fn(name, *kinds, params=(), return_type=None, comments=()):
    return GFunctionDecl(
        name=name,
        return_type=return_type or _use(GTypeCategory.of(GPrimitive.VOID)),
        params=params,
        markers=_markers(*kinds),
        comments=comments,
    )


FOO_PTR = _use(GTypeCategory.unrecognized("TWFoo"), is_pointer=True)


class TestScenarios(unittest.TestCase):
    def test_primitive_struct_field(self):
        decl = GStructDecl(
            name="Foo", fields=(GField(name="x", ty=_use(GTypeCategory.of(GPrimitive.INT))),)
        )
        result = classify_declarations("Foo", [decl])
        self.assertEqual(
            result.file_info.structs[0],
            StructInfo(
                name="Foo",
                is_public=False,
                fields=(
                    (
                        "x",
                        TypeInfo(
                            variant=TypeVariant.primitive(VariantKind.INT),
                            is_constant=False,
                            is_nullable=False,
                            is_pointer=False,
                            tags=(),
                        ),
                    ),
                ),
            ),
        )

    def test_constructor_without_type_table(self):
        decl = _fn(
            "TWFooCreate",
            GMarkerKind.EXPORT_STATIC_METHOD,
            return_type=_use(GTypeCategory.unrecognized("Foo"), is_pointer=True),
            comments=("Creates a foo.",),
        )
        result = classify_declarations("TWFoo", [decl])
        self.assertEqual(
            result.file_info.inits,
            (InitInfo(name="TWFooCreate", params=(), comments=("Creates a foo.",)),),
        )

    def test_unmarked_function_is_skipped(self):
        with self.assertLogs("manifest.classifier", level="INFO") as logs:
            result = classify_declarations("TWFoo", [_fn("internalHelper")])
        self.assertEqual(result.file_info.record_count(), 0)
        self.assertEqual(result.skipped, (SkipNotice(file_name="TWFoo", declaration="internalHelper"),))
        self.assertTrue(any("Skipped: internalHelper" in line for line in logs.output))


class TestClassificationEngine(unittest.TestCase):
    def setUp(self):
        self.declarations = [
            GOther(kind="preproc_call"),
            GHeaderInclude(path="TWBase.h"),
            GHeaderInclude(path="TrustWalletCore/TWData.h"),
            GStructIndicator(name="TWFoo", markers=_markers(GMarkerKind.EXPORT_CLASS)),
            GEnumDecl(
                name="TWFooKind",
                variants=(GEnumVariant(name="TWFooKindA"), GEnumVariant(name="TWFooKindB", value="4")),
                markers=_markers(GMarkerKind.EXPORT_ENUM),
            ),
            _fn("TWFooCreate", GMarkerKind.EXPORT_STATIC_METHOD, return_type=FOO_PTR),
            _fn(
                "TWFooCreateWithKind",
                GMarkerKind.EXPORT_STATIC_METHOD,
                params=(GParam(name="kind", ty=_use(GTypeCategory.unrecognized("TWFooKind"))),),
                return_type=FOO_PTR,
            ),
            _fn("TWFooDelete", GMarkerKind.EXPORT_METHOD, params=(GParam(name="foo", ty=FOO_PTR),)),
            _fn(
                "TWFooKindOf",
                GMarkerKind.EXPORT_PROPERTY,
                params=(GParam(name="foo", ty=FOO_PTR),),
                return_type=_use(GTypeCategory.unrecognized("TWFooKind")),
            ),
            _fn(
                "TWFooEqual",
                GMarkerKind.EXPORT_METHOD,
                params=(GParam(name="lhs", ty=FOO_PTR), GParam(name="rhs", ty=FOO_PTR)),
                return_type=_use(GTypeCategory.of(GPrimitive.BOOL)),
            ),
            _fn("fooInternal"),
        ]

    def test_lists_in_source_order(self):
        info = classify_declarations("TWFoo", self.declarations).file_info
        self.assertEqual(info.name, "TWFoo")
        self.assertEqual([i.path for i in info.imports], [("TWBase.h",), ("TrustWalletCore", "TWData.h")])
        self.assertEqual([s.name for s in info.structs], ["TWFoo"])
        self.assertEqual([i.name for i in info.inits], ["TWFooCreate", "TWFooCreateWithKind"])
        self.assertEqual([d.name for d in info.deinits], ["TWFooDelete"])
        self.assertEqual([e.name for e in info.enums], ["TWFooKind"])
        self.assertEqual([f.name for f in info.functions], ["TWFooEqual"])
        self.assertEqual([p.name for p in info.properties], ["TWFooKindOf"])

    def test_names_declared_earlier_resolve(self):
        info = classify_declarations("TWFoo", self.declarations).file_info
        self.assertEqual(info.inits[1].params[0].type.variant, TypeVariant.enum("TWFooKind"))
        self.assertEqual(info.deinits[0].params[0].type.variant, TypeVariant.struct("TWFoo"))
        self.assertEqual(info.properties[0].return_type.variant, TypeVariant.enum("TWFooKind"))

    def test_skip_notices(self):
        result = classify_declarations("TWFoo", self.declarations)
        self.assertEqual([s.declaration for s in result.skipped], ["fooInternal"])

    def test_classify_returns_route(self):
        engine = ClassificationEngine(name="TWFoo")
        self.assertEqual(engine.classify(GHeaderInclude(path="TWBase.h")), Route.IMPORT)
        self.assertIsNone(engine.classify(GOther(kind="comment")))
        self.assertIsNone(engine.classify(_fn("helper")))

    def test_caller_table_is_not_mutated(self):
        kinds = TypeKindTable({"TWData": NamedKind.STRUCT})
        classify_declarations("TWFoo", self.declarations, kinds)
        self.assertNotIn("TWFoo", kinds)
        self.assertEqual(len(kinds), 1)

    def test_seeded_table_resolves_foreign_types(self):
        decl = _fn(
            "TWFooData",
            GMarkerKind.EXPORT_METHOD,
            params=(GParam(name="foo", ty=FOO_PTR),),
            return_type=_use(GTypeCategory.unrecognized("TWData"), is_pointer=True),
        )
        kinds = TypeKindTable({"TWFoo": NamedKind.STRUCT, "TWData": NamedKind.STRUCT})
        info = classify_declarations("TWFoo", [decl], kinds).file_info
        self.assertEqual(info.functions[0].return_type.variant, TypeVariant.struct("TWData"))

    def test_failure_returns_no_partial_manifest(self):
        declarations = [
            GHeaderInclude(path="TWBase.h"),
            _fn(
                "TWFooBroken",
                GMarkerKind.EXPORT_METHOD,
                return_type=_use(GTypeCategory.unrecognized("TWUnknown")),
            ),
        ]
        with self.assertRaises(BadObject):
            classify_declarations("TWFoo", declarations)


class TestManifestAggregator(unittest.TestCase):
    def test_finish_freezes_lists(self):
        aggregator = ManifestAggregator("TWFoo")
        aggregator.append(Route.STRUCT, StructInfo(name="TWFoo", is_public=True))
        info = aggregator.finish()
        self.assertEqual(len(info.structs), 1)
        self.assertEqual(info.record_count(), 1)

    def test_closed_after_finish(self):
        aggregator = ManifestAggregator("TWFoo")
        aggregator.finish()
        with self.assertRaises(RuntimeError):
            aggregator.append(Route.STRUCT, StructInfo(name="TWFoo", is_public=True))
        with self.assertRaises(RuntimeError):
            aggregator.finish()


class TestHeaderHelpers(unittest.TestCase):
    def test_header_stem(self):
        self.assertEqual(header_stem("include/TrustWalletCore/TWFoo.h"), "TWFoo")
        self.assertEqual(header_stem("TWBar.hpp"), "TWBar")

    def test_classify_header_uses_stem(self):
        header = GHeader(path="include/TWFoo.h", declarations=(GHeaderInclude(path="TWBase.h"),))
        result = classify_header(header)
        self.assertEqual(result.file_info.name, "TWFoo")
        self.assertEqual(len(result.file_info.imports), 1)


if __name__ == "__main__":
    unittest.main()
