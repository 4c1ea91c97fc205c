"""
Editor Context

Responsibilities:
- Converts parse issues, validation errors and warnings into diagnostics
- Answers hover queries from the ranges kept on parsed values

Never: Talks to a language server transport directly
"""

from cvmark.contexts.editor.diagnostics import (
    Diagnostic,
    DiagnosticSeverity,
    HoverPayload,
    collect_diagnostics,
    hover_at,
    iter_located,
)

__all__ = [
    "collect_diagnostics",
    "hover_at",
    "iter_located",
    "Diagnostic",
    "DiagnosticSeverity",
    "HoverPayload",
]
