"""
Content synthesizer tests.
"""

import re

from core.config import Range
from core.content import (
    HELPER_LINES,
    VULNERABILITY_MARKER,
    VULNERABILITY_PATTERNS,
    ContentSynthesizer,
    count_lines,
    include_guard,
)
from core.entities import Language, Module


def make_module(name, language=Language.C):
    return Module(
        id=f"{name}_id",
        name=name,
        path=f"sys/sub/comp/{name}",
        language=language,
        artifact_id="artifact_1",
    )


class TestPadding:
    """Tests for reaching the target line count."""

    def test_never_undershoots_target(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("pad_c"), [], 100)

        assert module.lines_of_code >= 100
        assert module.lines_of_code < 100 + HELPER_LINES
        assert module.lines_of_code == count_lines(module.source_content)

    def test_cpp_never_undershoots_target(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("pad_cpp", Language.CPP), [], 150)
        assert 150 <= module.lines_of_code < 150 + HELPER_LINES

    def test_small_target_leaves_scaffold_untouched(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("tiny"), [], 1)

        assert "_helper_" not in module.source_content
        assert module.lines_of_code > 1

    def test_synthesize_all_uses_line_range(self, rng):
        modules = [make_module(f"bulk_{i}") for i in range(10)]
        total = ContentSynthesizer(rng).synthesize_all(modules, {}, Range(80, 120))

        assert total == sum(m.lines_of_code for m in modules)
        for module in modules:
            assert 80 <= module.lines_of_code < 120 + HELPER_LINES


class TestHeaders:
    """Tests for include guards and the per-language API."""

    def test_c_include_guard(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("sys_a_module_0"), [], 50)
        guard = include_guard(module)

        assert guard == "SYS_A_MODULE_0_H"
        assert module.header_content.startswith(f"#ifndef {guard}\n#define {guard}\n")
        assert module.header_content.rstrip().endswith(f"#endif // {guard}")
        assert "sys_a_module_0_context_t" in module.header_content

    def test_cpp_header_declares_class(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("widget", Language.CPP), [], 50)

        assert include_guard(module) == "WIDGET_HPP"
        assert "namespace widget {" in module.header_content
        assert "class Context {" in module.header_content
        assert module.header_filename == "widget.hpp"
        assert module.source_filename == "widget.cpp"

    def test_guard_and_symbols_from_unsafe_name(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("my-app v2_system_0_module_0"), [], 80)
        guard = include_guard(module)

        assert guard == "MY_APP_V2_SYSTEM_0_MODULE_0_H"
        assert re.fullmatch(r"[A-Z_][A-Z0-9_]*", guard)
        assert "my_app_v2_system_0_module_0_context_t" in module.header_content
        assert "int my_app_v2_system_0_module_0_init(" in module.source_content
        assert "static int my_app_v2_system_0_module_0_helper_0(" in module.source_content

    def test_guard_never_starts_with_digit(self, rng):
        module = ContentSynthesizer(rng).synthesize(make_module("2024_module_0", Language.CPP), [], 50)

        assert include_guard(module) == "_2024_MODULE_0_HPP"
        assert "namespace _2024_module_0 {" in module.header_content

    def test_guards_unique_per_module(self, rng):
        synthesizer = ContentSynthesizer(rng)
        first = synthesizer.synthesize(make_module("alpha_module_0"), [], 50)
        second = synthesizer.synthesize(make_module("alpha_module_1"), [], 50)
        assert include_guard(first) != include_guard(second)


class TestSources:
    """Tests for source text and vulnerability embedding."""

    def test_includes_dependency_headers(self, rng):
        dep_c = make_module("dep_c")
        dep_cpp = make_module("dep_cpp", Language.CPP)
        module = ContentSynthesizer(rng).synthesize(make_module("user"), [dep_c, dep_cpp], 50)

        assert '#include "user.h"' in module.source_content
        assert '#include "dep_c.h"' in module.source_content
        assert '#include "dep_cpp.hpp"' in module.source_content

    def test_no_marker_when_disabled(self, rng):
        module = ContentSynthesizer(rng, include_vulnerabilities=False).synthesize(make_module("safe"), [], 50)

        assert VULNERABILITY_MARKER not in module.source_content
        assert module.vulnerability is None

    def test_marker_when_enabled(self, rng):
        synthesizer = ContentSynthesizer(rng, include_vulnerabilities=True)
        for language in (Language.C, Language.CPP):
            module = synthesizer.synthesize(make_module(f"unsafe_{language.value}", language), [], 50)

            assert VULNERABILITY_MARKER in module.source_content
            assert module.vulnerability in VULNERABILITY_PATTERNS
            assert "vulnerable_function" in module.header_content

    def test_every_pattern_carries_marker(self):
        for body in VULNERABILITY_PATTERNS.values():
            assert VULNERABILITY_MARKER in body
