"""
Task bodies: models, parsing, markdown rendering and tree views.

Public API:
    - TaskBody / TaskView: Task content and its join with the index entry
    - parse_json, parse_markdown, parse_content, serialize_json
    - render_markdown: ``hod get --markdown`` output
    - build_tree, detect_orphans, tree_to_json: Hierarchical listing
"""

from .models import (
    DEPENDENCIES_FIELD,
    DESCRIPTION_FIELD,
    RESERVED_FIELDS,
    STATUS_FIELD,
    TITLE_FIELD,
    TaskBody,
    TaskView,
)
from .parser import (
    ParseError,
    is_json_content,
    parse_content,
    parse_json,
    parse_markdown,
    serialize_json,
)
from .render import render_markdown, title_case_key
from .tree import TreeBuildResult, TreeNode, build_tree, detect_orphans, tree_to_json

__all__ = [
    # Models
    "TaskBody",
    "TaskView",
    "TITLE_FIELD",
    "DESCRIPTION_FIELD",
    "STATUS_FIELD",
    "DEPENDENCIES_FIELD",
    "RESERVED_FIELDS",
    # Parsing
    "ParseError",
    "is_json_content",
    "parse_content",
    "parse_json",
    "parse_markdown",
    "serialize_json",
    # Rendering
    "render_markdown",
    "title_case_key",
    # Tree
    "TreeNode",
    "TreeBuildResult",
    "build_tree",
    "detect_orphans",
    "tree_to_json",
]
