"""
cvmark - CV markdown parsing, validation and editor support

Reads a curriculum vitae written as markdown (frontmatter, H1 sections and
fenced resume:<kind> YAML blocks) into a typed document model that keeps the
source range of every value.

Architecture:
- Parsing Context: Section registry, metadata resolution and document parsing
- Validation Context: Checks a parsed CV against an output format
- Editor Context: Diagnostics and hover payloads for language servers
"""

__version__ = "0.1.0"
