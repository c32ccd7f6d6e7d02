"""Core type definitions for sample-workflows.

This module defines the tagged variants used throughout the workflow engine.
Every string-typed field of the node and transition configuration is modelled
as a ``StrEnum`` so branch and progress logic compares against members
instead of raw strings.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TypeAlias

# StrEnum backport for Python < 3.11
if sys.version_info >= (3, 11):
    from enum import StrEnum
else:

    class StrEnum(str, Enum):
        """String enumeration compatibility for Python < 3.11."""

        def __str__(self) -> str:
            return str(self.value)


__all__ = [
    "ConditionOperator",
    "ConditionType",
    "InputFieldType",
    "NodeData",
    "NodeType",
    "RecordStatus",
    "StateStatus",
]


class NodeType(StrEnum):
    """Classification of workflow nodes.

    Attributes:
        ACTION: A step an officer performs and records data for.
        DECISION: A branching point whose outgoing transitions depend on a
            recorded value such as the lab result.
        END: A terminal step, never part of the main path.
    """

    ACTION = "action"
    DECISION = "decision"
    END = "end"


class ConditionType(StrEnum):
    """Kind of guard attached to a transition.

    Attributes:
        ALWAYS: The transition is unconditional.
        LAB_RESULT: The transition applies when the sample's lab result matches.
        FIELD_VALUE: The transition applies when a named node_data field matches.
    """

    ALWAYS = "always"
    LAB_RESULT = "lab_result"
    FIELD_VALUE = "field_value"


class ConditionOperator(StrEnum):
    """Comparison used by field and lab result conditions."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"


class RecordStatus(StrEnum):
    """Soft-deprecation status of nodes and transitions."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class StateStatus(StrEnum):
    """Status of a sample's recorded state for one node.

    Attributes:
        ACTIVE: The node has been entered but not completed.
        COMPLETED: Data has been submitted for the node.
        SKIPPED: Reserved. No flow currently produces it.
    """

    ACTIVE = "active"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class InputFieldType(StrEnum):
    """Input widget types a node can ask for."""

    TEXT = "text"
    DATE = "date"
    SELECT = "select"
    TEXTAREA = "textarea"
    NUMBER = "number"
    IMAGE = "image"


NodeData: TypeAlias = dict[str, Any]
"""Open key/value map recorded for a node. Values are strings or numbers."""
