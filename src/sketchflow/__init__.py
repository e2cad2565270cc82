import tree_sitter_c
import tree_sitter_cpp
from tree_sitter import Language

__version__ = "0.3.0"

_language_map = {}


def get_language_map():
    """Load the prebuilt C and C++ grammars once per process."""
    if not _language_map:
        _language_map["c"] = Language(tree_sitter_c.language())
        _language_map["cpp"] = Language(tree_sitter_cpp.language())
    return _language_map
