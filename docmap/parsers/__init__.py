"""Comment, declaration and code-body parsers for JS/TS sources."""

from .declarations import FileAnnotations, parse_file, parse_records, scan_declarations
from .function_body import extract_function_code
from .literals import count_braces, find_matching_brace
from .tags import ParsedComment, find_preceding_comment, parse_comment_block, parse_list

__all__ = [
    "FileAnnotations",
    "ParsedComment",
    "count_braces",
    "extract_function_code",
    "find_matching_brace",
    "find_preceding_comment",
    "parse_comment_block",
    "parse_file",
    "parse_list",
    "parse_records",
    "scan_declarations",
]
