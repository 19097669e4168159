"""
Symbol table and label generator tests.
"""

import pytest
from jackc import SymbolTable, Kind, LabelGenerator
from jackc.symbol_table import SymbolEntry


class TestSymbolTableDefine:
    """Index assignment tests."""

    def test_indices_are_dense_per_kind(self):
        table = SymbolTable()
        assert [table.define(f"v{i}", "int", Kind.VAR) for i in range(4)] == [0, 1, 2, 3]

    def test_kinds_count_independently(self):
        table = SymbolTable()
        table.define("a", "int", Kind.STATIC)
        table.define("b", "int", Kind.FIELD)
        table.define("c", "int", Kind.FIELD)
        table.define("d", "int", Kind.STATIC)
        assert table.index_of("a") == 0
        assert table.index_of("b") == 0
        assert table.index_of("c") == 1
        assert table.index_of("d") == 1
        assert table.var_count(Kind.STATIC) == 2
        assert table.var_count(Kind.FIELD) == 2
        assert table.var_count(Kind.ARG) == 0

    def test_string_kinds(self):
        table = SymbolTable()
        table.define("x", "int", "argument")
        table.define("y", "int", "local")
        assert table.kind_of("x") == Kind.ARG
        assert table.kind_of("y") == Kind.VAR
        assert table.var_count("argument") == 1

    def test_illegal_kind(self):
        table = SymbolTable()
        with pytest.raises(ValueError):
            table.define("x", "int", "global")
        with pytest.raises(ValueError):
            table.var_count("var")

    def test_lookup(self):
        table = SymbolTable()
        table.define("p", "Point", Kind.FIELD)
        assert table.lookup("p") == SymbolEntry("p", "Point", Kind.FIELD, 0)
        assert table.type_of("p") == "Point"

    def test_unknown_name(self):
        table = SymbolTable()
        assert table.lookup("nope") is None
        assert table.kind_of("nope") is None
        assert table.type_of("nope") is None
        assert table.index_of("nope") is None
        assert "nope" not in table

    def test_redefinition_last_wins(self):
        table = SymbolTable()
        table.define("x", "int", Kind.VAR)
        table.define("x", "char", Kind.VAR)
        assert table.type_of("x") == "char"
        assert table.index_of("x") == 1
        assert len(table) == 2

    def test_entries_in_declaration_order(self):
        table = SymbolTable()
        for name in ("c", "a", "b"):
            table.define(name, "int", Kind.VAR)
        assert [e.name for e in table] == ["c", "a", "b"]
        assert [e.name for e in table.entries] == ["c", "a", "b"]


class TestSymbolTableReset:
    """Reset tests."""

    def test_reset_forgets_names_and_counts(self):
        table = SymbolTable()
        table.define("this", "Point", Kind.ARG)
        table.define("x", "int", Kind.ARG)
        table.define("tmp", "int", Kind.VAR)
        table.reset()
        assert len(table) == 0
        assert "x" not in table
        for kind in Kind:
            assert table.var_count(kind) == 0

    def test_indices_restart_after_reset(self):
        table = SymbolTable()
        table.define("a", "int", Kind.VAR)
        table.define("b", "int", Kind.VAR)
        table.reset()
        assert table.define("c", "int", Kind.VAR) == 0


class TestLabelGenerator:
    """Label generator tests."""

    def test_sequence(self):
        labels = LabelGenerator("WHILE")
        assert labels.new_labels("START", "END") == ["WHILE_START_0", "WHILE_END_0"]
        assert labels.new_labels("START", "END") == ["WHILE_START_1", "WHILE_END_1"]

    def test_label_format(self):
        labels = LabelGenerator("IF")
        assert labels.label("GOTO_END", labels.next_id()) == "IF_GOTO_END_0"
        assert labels.next_id() == 1

    def test_invalid_prefix(self):
        with pytest.raises(ValueError):
            LabelGenerator("")
