import logging
import re
from typing import Dict, List, Sequence

import numpy as np

from core.config import Range
from core.entities import Language, Module
from core.hierarchy import sample_in_range

VULNERABILITY_MARKER = "CVE-XXXX"

# Each body is emitted verbatim inside <module>_vulnerable_function(char* input)
VULNERABILITY_PATTERNS: Dict[str, str] = {
    'buffer_overflow': """\
    // CVE-XXXX-XXXX: Potential buffer overflow vulnerability
    char buffer[256];
    strcpy(buffer, input); // No bounds checking""",

    'use_after_free': """\
    // CVE-XXXX-XXXX: Use after free vulnerability
    char* ptr = (char*)malloc(64);
    free(ptr);
    return ptr[0]; // Accessing freed memory""",

    'null_pointer': """\
    // CVE-XXXX-XXXX: Null pointer dereference
    char* ptr = strchr(input, ':');
    if (ptr == NULL) {
        // Should return here but doesn't
    }
    return ptr[1];""",

    'integer_overflow': """\
    // CVE-XXXX-XXXX: Integer overflow vulnerability
    int a = (int)strlen(input);
    int b = a * 65536;
    int result = a * b; // No overflow check
    char* buf = (char*)malloc(result);
    free(buf);""",
}

HELPER_LINES = 6


def count_lines(text: str) -> int:
    return len(text.split("\n"))


def c_identifier(text: str) -> str:
    """Map a module name onto a valid C/C++ identifier"""
    identifier = re.sub(r"[^A-Za-z0-9_]", "_", text)
    if not identifier or identifier[0].isdigit():
        identifier = f"_{identifier}"
    return identifier


def include_guard(module: Module) -> str:
    suffix = "HPP" if module.language is Language.CPP else "H"
    return f"{c_identifier(module.name).upper()}_{suffix}"


class ContentSynthesizer:
    """Fills in header and source text for every module"""

    def __init__(self, rng: np.random.Generator, include_vulnerabilities: bool = False):
        self.rng = rng
        self.include_vulnerabilities = include_vulnerabilities
        self.logger = logging.getLogger(__name__)

    def synthesize_all(self, modules: List[Module], dependency_map: Dict[str, List[Module]],
                       lines_per_file: Range) -> int:
        total = 0
        for module in modules:
            target = sample_in_range(self.rng, lines_per_file.min, lines_per_file.max)
            self.synthesize(module, dependency_map.get(module.id, []), target)
            total += module.lines_of_code

        vulnerable = len([m for m in modules if m.vulnerability])
        self.logger.info(f"Synthesized {len(modules)} modules, {total} lines, {vulnerable} vulnerable")
        return total

    def synthesize(self, module: Module, dependency_modules: Sequence[Module], target_lines: int) -> Module:
        vulnerability = None
        if self.include_vulnerabilities:
            keys = list(VULNERABILITY_PATTERNS)
            vulnerability = keys[int(self.rng.integers(0, len(keys)))]

        if module.language is Language.CPP:
            module.header_content = self._cpp_header(module, vulnerability is not None)
            source = self._cpp_source(module, dependency_modules, vulnerability)
        else:
            module.header_content = self._c_header(module, vulnerability is not None)
            source = self._c_source(module, dependency_modules, vulnerability)

        module.source_content = self._pad(module, source, target_lines)
        module.lines_of_code = count_lines(module.source_content)
        module.vulnerability = vulnerability
        return module

    def _pad(self, module: Module, source: str, target_lines: int) -> str:
        lines = count_lines(source)
        helpers = []
        i = 0
        while lines < target_lines:
            helpers.append(f"""static int {c_identifier(module.name)}_helper_{i}(int param) {{
    int result = param * 2 + {i};
    if (result > 100) result = result % 100;
    return result;
}}

""")
            lines += HELPER_LINES
            i += 1
        return source + "".join(helpers)

    def _c_header(self, module: Module, vulnerable: bool) -> str:
        guard = include_guard(module)
        name = c_identifier(module.name)
        vuln_decl = f"int {name}_vulnerable_function(char* input);\n" if vulnerable else ""
        return f"""#ifndef {guard}
#define {guard}

#include <stdio.h>
#include <stdlib.h>
#include <string.h>

// Module: {name}
// Path: {module.path}

typedef struct {name}_context {{
    int initialized;
    void* data;
    size_t data_size;
}} {name}_context_t;

// Public API
int {name}_init({name}_context_t* ctx);
int {name}_process({name}_context_t* ctx, const char* input);
int {name}_cleanup({name}_context_t* ctx);
{vuln_decl}
#endif // {guard}
"""

    def _c_source(self, module: Module, dependency_modules: Sequence[Module], vulnerability: str) -> str:
        name = c_identifier(module.name)
        parts = [f'#include "{module.header_filename}"\n']
        parts.extend(f'#include "{dep.header_filename}"\n' for dep in dependency_modules)
        parts.append(f"\n// Implementation for {name}\n// Part of: {module.path}\n\n")

        parts.append(f"""int {name}_init({name}_context_t* ctx) {{
    if (ctx == NULL) return -1;
    ctx->initialized = 1;
    ctx->data = malloc(1024);
    ctx->data_size = 1024;
    if (ctx->data == NULL) return -1;
    return 0;
}}

""")
        parts.append(f"""int {name}_process({name}_context_t* ctx, const char* input) {{
    if (ctx == NULL || !ctx->initialized) return -1;
    if (input == NULL) return -1;
    size_t len = strlen(input);
    if (len > ctx->data_size) {{
        void* new_data = realloc(ctx->data, len + 1);
        if (new_data == NULL) return -1;
        ctx->data = new_data;
        ctx->data_size = len + 1;
    }}
    memcpy(ctx->data, input, len + 1);
    return 0;
}}

""")
        parts.append(f"""int {name}_cleanup({name}_context_t* ctx) {{
    if (ctx == NULL) return -1;
    if (ctx->data != NULL) {{
        free(ctx->data);
        ctx->data = NULL;
    }}
    ctx->initialized = 0;
    ctx->data_size = 0;
    return 0;
}}

""")
        if vulnerability:
            parts.append(self._vulnerable_function(f"{name}_vulnerable_function", vulnerability))
        return "".join(parts)

    def _cpp_header(self, module: Module, vulnerable: bool) -> str:
        guard = include_guard(module)
        name = c_identifier(module.name)
        vuln_decl = "int vulnerable_function(char* input);\n\n" if vulnerable else ""
        return f"""#ifndef {guard}
#define {guard}

#include <cstddef>
#include <string>
#include <vector>

// Module: {name}
// Path: {module.path}

namespace {name} {{

class Context {{
public:
    Context();
    ~Context();

    int init();
    int process(const std::string& input);
    int cleanup();
    bool initialized() const {{ return initialized_; }}

private:
    bool initialized_;
    std::vector<char> data_;
}};

{vuln_decl}}}  // namespace {name}

#endif // {guard}
"""

    def _cpp_source(self, module: Module, dependency_modules: Sequence[Module], vulnerability: str) -> str:
        name = c_identifier(module.name)
        parts = [f'#include "{module.header_filename}"\n']
        parts.extend(f'#include "{dep.header_filename}"\n' for dep in dependency_modules)
        parts.append("\n#include <cstdlib>\n#include <cstring>\n")
        parts.append(f"\n// Implementation for {name}\n// Part of: {module.path}\n\n")
        parts.append(f"namespace {name} {{\n\n")

        parts.append("""Context::Context() : initialized_(false) {}

Context::~Context() {
    cleanup();
}

int Context::init() {
    data_.reserve(1024);
    initialized_ = true;
    return 0;
}

int Context::process(const std::string& input) {
    if (!initialized_) return -1;
    if (input.empty()) return -1;
    data_.assign(input.begin(), input.end());
    data_.push_back('\\0');
    return 0;
}

int Context::cleanup() {
    data_.clear();
    data_.shrink_to_fit();
    initialized_ = false;
    return 0;
}

""")
        if vulnerability:
            parts.append(self._vulnerable_function("vulnerable_function", vulnerability))
        parts.append(f"}}  // namespace {name}\n\n")
        return "".join(parts)

    def _vulnerable_function(self, function_name: str, vulnerability: str) -> str:
        return f"""int {function_name}(char* input) {{
{VULNERABILITY_PATTERNS[vulnerability]}
    return 0;
}}

"""
