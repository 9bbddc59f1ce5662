"""
Rewriter Package.

Turns diagnostics into text edits (``generator``) and applies them in
conflict-free rounds (``edits``).
"""
