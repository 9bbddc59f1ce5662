"""
Core Package.

Contains the lint pipeline:
- Lint Engine and analysis sessions
- Tree-walking driver and the extraction rule
- Result models and trace logging
"""
