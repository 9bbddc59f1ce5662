"""
Enumerations for chainlint.

This module defines the standard enumerations used across the codebase for
binding classification, chain segment typing and scope categorization.
"""

from enum import Enum


class BindingKind(str, Enum):
  """
  Classification of the binding a chain root resolves to.

  Used to exclude chains rooted at namespace-like constants (imports, enums)
  which are not cacheable object instances.
  """

  CONST = "const"  # class / function definitions
  MUTABLE = "mutable"  # plain assignments, parameters, loop targets
  IMPORT = "import"  # import aliases and builtins
  ENUM_MEMBER = "enum-member"  # Enum subclasses defined in the module
  UNKNOWN = "unknown"  # undeclared globals


class SegmentKind(str, Enum):
  """
  Type of a single step in a member chain.
  """

  NAME = "name"  # .attr (and the root identifier)
  INDEX = "index"  # [literal]


class ScopeKind(str, Enum):
  """
  Categorization of counting scopes.

  Only scopes with a statement body can host an extracted declaration.
  """

  MODULE = "module"
  BLOCK = "block"  # IndentedBlock
  SUITE = "suite"  # SimpleStatementSuite (`if x: a; b`)
  LAMBDA = "lambda"
  COMPREHENSION = "comprehension"

  @property
  def has_body(self) -> bool:
    """True if statements can be inserted into this scope."""
    return self in (ScopeKind.MODULE, ScopeKind.BLOCK, ScopeKind.SUITE)


class MutationKind(str, Enum):
  """
  Write-like events observed by the Mutation Tracker.
  """

  ASSIGNMENT = "assignment"
  UPDATE = "update"  # augmented assignment, e.g. a.b += 1
  DELETION = "deletion"
  CALL = "call"  # method call on a receiver chain
