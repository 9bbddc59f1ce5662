from .check import handle_check, _check_single_file, _collect_files, _print_report
from .fix import handle_fix, _fix_single_file

__all__ = [
  "_check_single_file",
  "_collect_files",
  "_fix_single_file",
  "_print_report",
  "handle_check",
  "handle_fix",
]
