"""
Tests for the in-process type system: descriptor parsing, typedefs,
categorical construction, abstractness and instantiation.
"""

import pytest

from nestype.shared.errors import (
    CategoricalError, InstantiationError, TypeSystemError, UndefinedTypeError,
)
from nestype.shared.types import (
    FixedDimType, NominalType, OptionType, RecordType, SymbolicDimType, TypeVar, VarDimType,
    FLOAT64, INT64, SCALAR_TYPES,
)


class TestParse:

    def test_scalar_names(self, registry):
        assert registry.parse("int32") == SCALAR_TYPES["int32"]
        assert registry.parse(" float64 ") == FLOAT64

    def test_option_prefix(self, registry):
        assert registry.parse("?int64") == OptionType(INT64)

    def test_type_passes_through(self, registry):
        t = FixedDimType(2, INT64)
        assert registry.parse(t) is t

    def test_undefined_name(self, registry):
        with pytest.raises(UndefinedTypeError, match="undefined type or typedef: 'nope'"):
            registry.parse("nope")

    def test_invalid_descriptor(self, registry):
        with pytest.raises(TypeSystemError):
            registry.parse(3)

    def test_typedef_name(self, typedef_registry):
        t = typedef_registry.parse("pair")
        assert t == NominalType("pair", FixedDimType(2, INT64))
        assert str(t) == "pair"


class TestTypedef:

    def test_define_and_resolve(self, registry):
        registry.typedef("pair", FixedDimType(2, INT64))
        assert "pair" in registry
        assert registry.resolve("pair").definition == FixedDimType(2, INT64)
        assert registry.definition("pair") == FixedDimType(2, INT64)

    def test_define_from_name(self, registry):
        registry.typedef("temperature", "float64")
        assert registry.definition("temperature") == FLOAT64

    def test_alias_of_alias(self, typedef_registry):
        typedef_registry.typedef("couple", "pair")
        assert typedef_registry.definition("couple") == NominalType("pair", FixedDimType(2, INT64))

    def test_redefinition(self, typedef_registry):
        with pytest.raises(TypeSystemError, match="already defined"):
            typedef_registry.typedef("pair", INT64)

    def test_scalar_name_is_reserved(self, registry):
        with pytest.raises(TypeSystemError):
            registry.typedef("int64", FLOAT64)

    def test_invalid_name(self, registry):
        with pytest.raises(TypeSystemError, match="invalid typedef name"):
            registry.typedef("not valid", INT64)

    def test_registries_are_independent(self, registry, typedef_registry):
        assert "pair" in typedef_registry
        assert "pair" not in registry

    def test_resolve_undefined(self, registry):
        with pytest.raises(UndefinedTypeError):
            registry.resolve("pair")
        with pytest.raises(UndefinedTypeError):
            registry.definition("pair")


class TestCategorical:

    def test_labels_and_rendering(self, registry):
        t = registry.categorical(["a", "b", None])
        assert t.labels == ("a", "b", None)
        assert str(t) == "categorical('a', 'b', NA)"

    def test_mixed_label_kinds(self, registry):
        assert str(registry.categorical([1, True, 2.5])) == "categorical(1, True, 2.5)"

    def test_duplicate_label(self, registry):
        with pytest.raises(CategoricalError, match="duplicate"):
            registry.categorical(["a", "a"])

    @pytest.mark.parametrize("label", [1j, [1], b"x"])
    def test_invalid_label(self, registry, label):
        with pytest.raises(CategoricalError, match="invalid categorical label"):
            registry.categorical([label])


class TestAbstract:

    def test_is_abstract(self, registry):
        assert registry.is_abstract(SymbolicDimType("N", INT64))
        assert registry.is_abstract(FixedDimType(2, TypeVar("T")))
        assert not registry.is_abstract(FixedDimType(2, INT64))

    def test_nominal_abstractness_follows_definition(self, typedef_registry):
        assert typedef_registry.is_abstract(typedef_registry.resolve("vec"))
        assert not typedef_registry.is_abstract(typedef_registry.resolve("pair"))

    def test_hidden_dtype(self, typedef_registry):
        assert typedef_registry.hidden_dtype(typedef_registry.resolve("vec")) == TypeVar("T")
        assert typedef_registry.hidden_dtype(typedef_registry.resolve("grid")) == FLOAT64


class TestInstantiate:

    def test_symbolic_dim_and_typevar(self, typedef_registry):
        t = typedef_registry.instantiate("vec", FixedDimType(3, INT64))
        assert t == NominalType("vec", FixedDimType(3, INT64))
        assert not t.is_abstract()

    def test_symbolic_dim_rejects_var(self, typedef_registry):
        with pytest.raises(InstantiationError):
            typedef_registry.instantiate("vec", VarDimType(INT64, (0, 3)))

    def test_var_without_offsets_matches_any_var(self, typedef_registry):
        t = typedef_registry.instantiate("ragged", VarDimType(INT64, (0, 1, 3)))
        assert t.definition.offsets == (0, 1, 3)

    def test_dtype_must_match(self, typedef_registry):
        with pytest.raises(InstantiationError, match="cannot instantiate 'grid'"):
            typedef_registry.instantiate("grid", FixedDimType(2, FixedDimType(2, INT64)))

    def test_symbols_bind_consistently(self, registry):
        registry.typedef("square", SymbolicDimType("N", SymbolicDimType("N", TypeVar("T"))))
        registry.instantiate("square", FixedDimType(2, FixedDimType(2, INT64)))
        with pytest.raises(InstantiationError):
            registry.instantiate("square", FixedDimType(2, FixedDimType(3, INT64)))

    def test_typevars_bind_consistently(self, registry):
        registry.typedef("point", RecordType([("x", TypeVar("T")), ("y", TypeVar("T"))]))
        registry.instantiate("point", RecordType([("x", INT64), ("y", INT64)]))
        with pytest.raises(InstantiationError):
            registry.instantiate("point", RecordType([("x", INT64), ("y", FLOAT64)]))
