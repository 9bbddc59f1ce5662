"""
Console and Logging Output.

The CLI prints its reports through ``console`` and its status lines through the
``log_*`` helpers, which go through standard ``logging`` to a ``RichHandler``.
Both write to one swappable Rich backend, so a test can capture the whole run
with ``set_console``.
"""

import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

SUCCESS_LEVEL_NUM = 25
logging.addLevelName(SUCCESS_LEVEL_NUM, "SUCCESS")

_THEME = Theme(
  {
    "logging.level.success": "green",
    "error": "bold red",
    "path": "bold blue",
    "chain": "bold magenta",
  }
)


class _ConsoleProxy:
  """
  Stable module-level handle on the active Rich console.

  Attribute access is delegated to the backend, which ``set_backend`` replaces
  together with the root logger's RichHandler.
  """

  def __init__(self) -> None:
    self._backend = Console(theme=_THEME)
    self._bind_logging()

  def set_backend(self, backend: Console) -> None:
    self._backend = backend
    self._bind_logging()

  def _bind_logging(self) -> None:
    root = logging.getLogger()
    for handler in [h for h in root.handlers if isinstance(h, RichHandler)]:
      root.removeHandler(handler)
    root.setLevel(logging.INFO)
    root.addHandler(RichHandler(console=self._backend, show_time=False, show_path=False, markup=True))

  def print(self, *args: Any, **kwargs: Any) -> None:
    self._backend.print(*args, **kwargs)

  def __getattr__(self, name: str) -> Any:
    return getattr(self._backend, name)


console = _ConsoleProxy()


def set_console(new_console: Console) -> None:
  """
  Routes report and log output to ``new_console``.

  Args:
      new_console (Console): E.g. ``Console(record=True)`` for capture.
  """
  console.set_backend(new_console)


def reset_console() -> None:
  console.set_backend(Console(theme=_THEME))


def get_console() -> Console:
  return console._backend


def log_info(msg: str) -> None:
  logging.info(f"ℹ️  {msg}", extra={"markup": True})


def log_success(msg: str) -> None:
  logging.log(SUCCESS_LEVEL_NUM, f"✅ {msg}", extra={"markup": True})


def log_warning(msg: str) -> None:
  logging.warning(f"⚠️  {msg}", extra={"markup": True})


def log_error(msg: str) -> None:
  """
  Logs a failure; the message may carry rich markup such as ``[path]``.

  Args:
      msg (str): The message content.
  """
  logging.error(f"❌ {msg}", extra={"markup": True})
