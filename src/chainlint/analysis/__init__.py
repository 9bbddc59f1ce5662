"""
Static Analysis Package.

This package holds the data model of member chains and the per-scope
bookkeeping the extraction rule relies on.

Modules:
    - ``chain``: Canonicalization of access expressions into chain paths.
    - ``occurrences``: Scope arena and hierarchical occurrence tables.
    - ``mutations``: Invalidation of chains on writes, deletions and calls.
    - ``selector``: Choice of the chain to report and the diagnostic type.
    - ``bindings``: Classification of chain roots via LibCST scopes.
"""
