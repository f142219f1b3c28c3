"""
Pytest configuration and shared fixtures for cbind tests.

C snippets are parsed in memory through libclang; tests that need the
parser skip when the libclang shared library cannot be loaded.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from clang.cindex import Index, LibclangError

from cbind.parser import ClangParser
from cbind.translator import Translator

try:
    Index.create()
    HAS_LIBCLANG = True
except LibclangError as e:
    HAS_LIBCLANG = False
    LIBCLANG_ERROR = str(e)


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture(scope="session")
def requires_libclang():
    """Skip test if the libclang shared library is not available."""
    if not HAS_LIBCLANG:
        pytest.skip(f"libclang not available: {LIBCLANG_ERROR}")


@pytest.fixture
def parse(requires_libclang):
    """Parse a C source string into a NativeUnit."""
    def _parse(source, std="c99", filename="test.h"):
        return ClangParser(std=std).parse_source(source, filename)
    return _parse


@pytest.fixture
def translate(parse):
    """Parse and walk a C source string, returning the TranslatorState."""
    def _translate(source, std="c99", const_rules=None, foreign_prefix="C."):
        translator = Translator(const_rules=const_rules, foreign_prefix=foreign_prefix)
        return translator.walk(parse(source, std=std))
    return _translate


@pytest.fixture
def fixtures_dir():
    """Directory holding sample headers."""
    return FIXTURES_DIR


# =============================================================================
# Helpers
# =============================================================================

def find_decl(decls, name):
    """Return the declaration called ``name``."""
    for decl in decls:
        if decl.name == name:
            return decl
    raise AssertionError(f"no declaration named {name!r} in {[d.name for d in decls]}")
