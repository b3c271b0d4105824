"""Tests for the dexdump filter."""

from __future__ import annotations

from kotlin_explorer.disasm.dex import (
    extract_class_name,
    extract_method_name,
    extract_method_type,
    filter_dex,
)
from kotlin_explorer.disasm.suppression import SuppressionPredicate


def _class_block(descriptor: str, methods: str = "") -> str:
    return (
        "Class #0            -\n"
        f"  Class descriptor  : '{descriptor}'\n"
        "  Access flags      : 0x0011 (PUBLIC FINAL)\n"
        "  Direct methods    -\n"
        f"{methods}"
        "  Virtual methods   -\n"
        "  source_file_idx   : 1 (X.kt)\n"
        "\n"
    )


def _method(name_line: str, type_line: str, body: str = "") -> str:
    return (
        "    #0              : (in LX;)\n"
        f"      {name_line}\n"
        f"      {type_line}\n"
        "      access        : 0x0019 (PUBLIC STATIC FINAL)\n"
        f"{body}"
        "\n"
    )


class TestExtractors:
    def test_class_name_converts_slashes(self):
        assert extract_class_name("  Class descriptor  : 'Lcom/example/Bar;'") == "com.example.Bar"

    def test_class_name_unknown(self):
        assert extract_class_name("  Access flags      : 0x0011") == "<UNKNOWN>"

    def test_class_name_missing_line(self):
        assert extract_class_name(None) == "<UNKNOWN>"

    def test_method_name_and_type(self):
        assert extract_method_name("      name          : 'bar'") == "bar"
        assert extract_method_type("      type          : '(ILjava/lang/String;)V'") == (
            "(ILjava/lang/String;)V"
        )

    def test_method_name_unknown(self):
        assert extract_method_name("      type          : '()V'") == "<UNKNOWN>"
        assert extract_method_type("garbage") == "<UNKNOWN>"


class TestFilterDex:
    def test_sample_dump(self, dex_dump, expected_dex):
        assert filter_dex(dex_dump) == expected_dex

    def test_suppressed_class_leaves_no_trace(self, dex_dump):
        out = filter_dex(dex_dump)
        assert "kotlin.Foo" not in out
        assert "foo()V" not in out

    def test_spec_example(self):
        dump = _class_block("Lkotlin/Foo;", _method("name : 'foo'", "type : '()V'")) + _class_block(
            "Lcom/example/Bar;", _method("name : 'bar'", "type : '()V'")
        )
        out = filter_dex(dump)
        assert "class com.example.Bar\n" in out
        assert "    bar()V // com.example.Bar.bar()\n" in out
        assert "kotlin.Foo" not in out

    def test_one_header_per_kept_class_in_order(self):
        dump = "".join(
            _class_block(d)
            for d in ("Lcom/a/First;", "Ljava/lang/String;", "Lcom/b/Second;", "Lkotlinx/X;")
        )
        headers = [line for line in filter_dex(dump).splitlines() if line.startswith("class ")]
        assert headers == ["class com.a.First", "class com.b.Second"]

    def test_unknown_name_and_type(self):
        dump = _class_block("Lcom/x/Y;", _method("nope", "also nope"))
        assert "    <UNKNOWN><UNKNOWN> // com.x.Y.<UNKNOWN>()\n" in filter_dex(dump)

    def test_unparseable_descriptor_uses_sentinel(self):
        dump = _class_block("com/x/NoPrefix", _method("name : 'm'", "type : '()V'"))
        out = filter_dex(dump)
        assert out.startswith("class <UNKNOWN>\n")
        assert "    m()V // <UNKNOWN>.m()\n" in out

    def test_blank_line_after_every_method(self):
        dump = _class_block(
            "Lcom/x/Y;",
            _method("name : 'a'", "type : '()V'") + _method("name : 'b'", "type : '()V'"),
        )
        assert filter_dex(dump) == (
            "class com.x.Y\n"
            "    a()V // com.x.Y.a()\n"
            "\n"
            "    b()V // com.x.Y.b()\n"
            "\n"
        )

    def test_catch_tables_do_not_end_method(self):
        body = (
            "000200:                                        |[000200] com.x.Y.t:()V\n"
            "000210: 0e00                                   |0000: invoke-static {}, Lcom/x/Y;.a:()V\n"
            "000216: 0e00                                   |0003: return-void\n"
            "      catches       : 1\n"
            "        0x0000 - 0x0003\n"
            "          Ljava/lang/Exception; -> 0x0004\n"
            "          <any> -> 0x0005\n"
            "000218: 0d00                                   |0004: move-exception v0\n"
        )
        out = filter_dex(_class_block("Lcom/x/Y;", _method("name : 't'", "type : '()V'", body)))
        assert "        0004: move-exception v0\n" in out

    def test_no_direct_methods_section(self):
        dump = "Class #0 -\n  Class descriptor  : 'Lcom/x/Y;'\n  Access flags : 0x0001\n"
        assert filter_dex(dump) == "class com.x.Y\n"

    def test_empty_and_garbage_input(self):
        assert filter_dex("") == ""
        assert filter_dex("random\nnoise\n") == ""

    def test_accepts_line_iterable(self, dex_dump, expected_dex):
        lines = (line + "\n" for line in dex_dump.splitlines())
        assert filter_dex(lines) == expected_dex

    def test_idempotent(self, dex_dump):
        assert filter_dex(dex_dump) == filter_dex(dex_dump)

    def test_custom_suppression(self, dex_dump):
        out = filter_dex(dex_dump, suppressed=SuppressionPredicate(["com.example"]))
        assert "class kotlin.Foo\n" in out
        assert "com.example.Bar" not in out
