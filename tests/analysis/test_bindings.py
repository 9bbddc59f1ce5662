"""
Tests for Binding Resolution via LibCST scopes.
"""

import textwrap

import libcst as cst
import libcst.matchers as m
from libcst.metadata import MetadataWrapper, ScopeProvider

from chainlint.analysis.bindings import ScopeBindingTable, is_enum_class
from chainlint.enums import BindingKind


def resolve(code: str):
  """
  Parses code and returns the binding table plus the wrapped module.
  """
  wrapper = MetadataWrapper(cst.parse_module(textwrap.dedent(code)))
  return ScopeBindingTable(wrapper.resolve(ScopeProvider)), wrapper.module


def last_reference(module: cst.Module, name: str) -> cst.Name:
  """Finds the last Name node spelling ``name`` (a read after the bindings)."""
  return m.findall(module, m.Name(name))[-1]


def test_import_alias_is_import():
  table, module = resolve(
    """
    import os.path as osp
    x = osp.sep
    """
  )
  assert table.kind_of(last_reference(module, "osp")) == BindingKind.IMPORT


def test_builtin_is_import():
  table, module = resolve("x = print.__name__\n")
  assert table.kind_of(last_reference(module, "print")) == BindingKind.IMPORT


def test_enum_class_is_enum_member():
  table, module = resolve(
    """
    import enum

    class Color(enum.Enum):
      RED = 1

    x = Color.RED
    """
  )
  assert table.kind_of(last_reference(module, "Color")) == BindingKind.ENUM_MEMBER


def test_plain_class_and_function_are_const():
  table, module = resolve(
    """
    class Config:
      pass

    def helper():
      pass

    a = Config.x
    b = helper.y
    """
  )
  assert table.kind_of(last_reference(module, "Config")) == BindingKind.CONST
  assert table.kind_of(last_reference(module, "helper")) == BindingKind.CONST


def test_assignment_and_parameter_are_mutable():
  table, module = resolve(
    """
    data = load()

    def f(ctx):
      return ctx.data, data.x
    """
  )
  assert table.kind_of(last_reference(module, "data")) == BindingKind.MUTABLE
  assert table.kind_of(last_reference(module, "ctx")) == BindingKind.MUTABLE


def test_unbound_name_is_unknown():
  table, module = resolve("x = ghost.attr\n")
  assert table.kind_of(last_reference(module, "ghost")) == BindingKind.UNKNOWN


def test_is_taken_and_binding_count():
  table, module = resolve(
    """
    _cfg = 1
    use(_other)
    """
  )
  stmt = module.body[0]
  assert table.is_taken("_cfg", stmt)
  assert table.is_taken("_other", stmt)
  assert not table.is_taken("_free", stmt)
  assert table.binding_count("_cfg", stmt) == 1
  assert table.binding_count("_free", stmt) == 0


def test_binding_scope_tracks_shadowing():
  table, module = resolve(
    """
    cfg = load()

    class Holder:
        cfg = None

    class Plain:
        cfg.clear()

    names = [cfg for cfg in items]
    """
  )
  holder, plain = module.body[1], module.body[2]
  (comp,) = m.findall(module, m.ListComp())

  module_binding = table.binding_scope("cfg", module)
  assert module_binding is not None
  assert table.binding_scope("cfg", plain.body) is module_binding
  assert table.binding_scope("cfg", holder.body) is not module_binding
  assert table.binding_scope("cfg", comp) is not module_binding
  assert table.binding_scope("ghost", module) is None


def test_is_enum_class_detects_bases():
  enum_cls = cst.parse_statement("class A(IntEnum):\n  X = 1\n")
  plain = cst.parse_statement("class B(Base):\n  X = 1\n")
  assert is_enum_class(enum_cls)
  assert not is_enum_class(plain)
