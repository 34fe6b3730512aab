"""Block-program arena.

Nodes live in a flat arena keyed by id and reference each other only through
ids stored in their sockets. A node has at most one parent slot, which keeps
the program a forest: value sockets, body sockets and ``next`` links never
share a child and never form a cycle.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional, Union


class SlotKind(Enum):
    VALUE = "value"
    STATEMENT = "statement"
    NEXT = "next"


@dataclass(frozen=True)
class GlobalVariable:
    name: str
    type: str


@dataclass
class Node:
    id: str
    type: str
    fields: Dict[str, Any] = field(default_factory=dict)
    inputs: Dict[str, str] = field(default_factory=dict)
    statements: Dict[str, str] = field(default_factory=dict)
    next: Optional[str] = None

    def field(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)

    def text_field(self, name: str) -> str:
        """Field value as a single trimmed line; whitespace runs become one space."""
        value = self.fields.get(name)
        if value is None:
            return ""
        return " ".join(str(value).split())


@dataclass(frozen=True)
class _ParentSlot:
    parent_id: str
    kind: SlotKind
    socket: Optional[str] = None


NodeRef = Union[Node, str]


class Workspace:
    """Arena of block nodes plus the document's global variables."""

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.variables: List[GlobalVariable] = []
        self._top: List[str] = []
        self._parents: Dict[str, _ParentSlot] = {}
        self._ids = itertools.count(1)

    # Building

    def new_node(
        self,
        node_type: str,
        *,
        fields: Optional[Dict[str, Any]] = None,
        inputs: Optional[Dict[str, NodeRef]] = None,
        statements: Optional[Dict[str, NodeRef]] = None,
        next: Optional[NodeRef] = None,
        node_id: Optional[str] = None,
    ) -> Node:
        """Create a top-level node and optionally connect children to it."""
        if node_id is None:
            node_id = self._fresh_id()
        elif node_id in self.nodes:
            raise ValueError(f"Node id '{node_id}' is already used.")

        node = Node(id=node_id, type=node_type, fields=dict(fields or {}))
        self.nodes[node_id] = node
        self._top.append(node_id)

        for socket, child in (inputs or {}).items():
            self.connect_value(node, socket, child)
        for socket, child in (statements or {}).items():
            self.connect_statement(node, socket, child)
        if next is not None:
            self.connect_next(node, next)
        return node

    def connect_value(self, parent: NodeRef, socket: str, child: NodeRef) -> None:
        parent_node = self.node(parent)
        if socket in parent_node.inputs:
            raise ValueError(
                f"Value socket '{socket}' of node '{parent_node.id}' is already connected."
            )
        child_node = self._attach(parent_node, child, SlotKind.VALUE, socket)
        parent_node.inputs[socket] = child_node.id

    def connect_statement(self, parent: NodeRef, socket: str, child: NodeRef) -> None:
        parent_node = self.node(parent)
        if socket in parent_node.statements:
            raise ValueError(
                f"Statement socket '{socket}' of node '{parent_node.id}' is already connected."
            )
        child_node = self._attach(parent_node, child, SlotKind.STATEMENT, socket)
        parent_node.statements[socket] = child_node.id

    def connect_next(self, parent: NodeRef, child: NodeRef) -> None:
        parent_node = self.node(parent)
        if parent_node.next is not None:
            raise ValueError(f"Node '{parent_node.id}' already has a next statement.")
        child_node = self._attach(parent_node, child, SlotKind.NEXT)
        parent_node.next = child_node.id

    def chain(self, *nodes: NodeRef) -> Optional[Node]:
        """Link ``nodes`` through their ``next`` slots and return the head."""
        resolved = [self.node(ref) for ref in nodes]
        for previous, current in zip(resolved, resolved[1:]):
            self.connect_next(previous, current)
        return resolved[0] if resolved else None

    # Reading

    def node(self, ref: NodeRef) -> Node:
        node_id = ref.id if isinstance(ref, Node) else ref
        try:
            return self.nodes[node_id]
        except KeyError as exc:
            raise KeyError(f"Unknown node '{node_id}'.") from exc

    def value_target(self, node: Node, socket: str) -> Optional[Node]:
        child_id = node.inputs.get(socket)
        return self.nodes.get(child_id) if child_id is not None else None

    def statement_target(self, node: Node, socket: str) -> Optional[Node]:
        child_id = node.statements.get(socket)
        return self.nodes.get(child_id) if child_id is not None else None

    def next_node(self, node: Node) -> Optional[Node]:
        return self.nodes.get(node.next) if node.next is not None else None

    def iter_chain(self, head: Optional[Node]) -> Iterator[Node]:
        current = head
        while current is not None:
            yield current
            current = self.next_node(current)

    def top_nodes(self, node_type: Optional[str] = None) -> List[Node]:
        """Return unconnected nodes in top-level order, optionally by type."""
        nodes = [self.nodes[node_id] for node_id in self._top]
        if node_type is None:
            return nodes
        return [node for node in nodes if node.type == node_type]

    def parent_of(self, node: NodeRef) -> Optional[Node]:
        slot = self._parents.get(self.node(node).id)
        return self.nodes[slot.parent_id] if slot is not None else None

    # Mutation

    def dispose(self, node: NodeRef, *, heal_stack: bool = True) -> int:
        """Remove ``node`` with its value and body subtrees.

        With ``heal_stack`` the following sibling takes the removed node's
        place; otherwise the rest of the chain is removed as well. Returns the
        number of removed nodes.
        """
        target = self.node(node)
        slot = self._parents.get(target.id)
        follower = self.next_node(target)

        removed = 0
        if follower is not None:
            self._detach(follower)
            if not heal_stack:
                removed += self.dispose(follower, heal_stack=False)
                follower = None

        self._detach(target)
        top_index = self._top.index(target.id)
        removed += self._remove_subtree(target)

        if follower is None:
            return removed
        if slot is None:
            self._top.remove(follower.id)
            self._top.insert(top_index, follower.id)
        elif slot.kind == SlotKind.STATEMENT:
            self.connect_statement(self.nodes[slot.parent_id], slot.socket, follower)
        elif slot.kind == SlotKind.NEXT:
            self.connect_next(self.nodes[slot.parent_id], follower)
        return removed

    def purge(self, predicate: Callable[[Node], bool]) -> int:
        removed = 0
        for node_id in list(self.nodes):
            node = self.nodes.get(node_id)
            if node is None or not predicate(node):
                continue
            removed += self.dispose(node, heal_stack=True)
        return removed

    # Variables

    def add_variable(self, name: str, var_type: str) -> GlobalVariable:
        if self.variable(name) is not None:
            raise ValueError(f"Variable '{name}' already exists.")
        variable = GlobalVariable(name=name, type=var_type)
        self.variables.append(variable)
        return variable

    def variable(self, name: Optional[str]) -> Optional[GlobalVariable]:
        for variable in self.variables:
            if variable.name == name:
                return variable
        return None

    def remove_variable(self, name: str) -> bool:
        for index, variable in enumerate(self.variables):
            if variable.name == name:
                del self.variables[index]
                return True
        return False

    # Serialization

    def to_dict(self) -> Dict[str, Any]:
        return {
            "variables": [
                {"name": variable.name, "type": variable.type}
                for variable in self.variables
            ],
            "blocks": [_node_to_dict(node) for node in self.nodes.values()],
            "top": list(self._top),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Workspace":
        """Rebuild a workspace from :meth:`to_dict` output.

        Raises ``ValueError``/``KeyError``/``TypeError`` on malformed input;
        :mod:`blocksharp.document` turns those into ``DocumentError``.
        """
        workspace = cls()
        for entry in payload.get("variables", []):
            workspace.add_variable(str(entry["name"]), str(entry["type"]))

        blocks = payload.get("blocks", [])
        for entry in blocks:
            workspace.new_node(
                str(entry["type"]),
                fields=dict(entry.get("fields") or {}),
                node_id=str(entry["id"]),
            )
        for entry in blocks:
            node = workspace.nodes[str(entry["id"])]
            for socket, child_id in (entry.get("inputs") or {}).items():
                workspace.connect_value(node, socket, str(child_id))
            for socket, child_id in (entry.get("statements") or {}).items():
                workspace.connect_statement(node, socket, str(child_id))
            if entry.get("next") is not None:
                workspace.connect_next(node, str(entry["next"]))

        top = payload.get("top")
        if top is not None:
            ordered = [str(node_id) for node_id in top]
            if sorted(ordered) != sorted(workspace._top):
                raise ValueError("Top-level order does not match unconnected blocks.")
            workspace._top = ordered
        return workspace

    # Internals

    def _fresh_id(self) -> str:
        while True:
            candidate = f"n{next(self._ids)}"
            if candidate not in self.nodes:
                return candidate

    def _attach(
        self,
        parent: Node,
        child: NodeRef,
        kind: SlotKind,
        socket: Optional[str] = None,
    ) -> Node:
        child_node = self.node(child)
        if child_node.id in self._parents:
            raise ValueError(f"Node '{child_node.id}' is already connected.")
        if self._is_ancestor(child_node.id, parent.id):
            raise ValueError(
                f"Connecting '{child_node.id}' under '{parent.id}' would create a cycle."
            )
        self._parents[child_node.id] = _ParentSlot(parent.id, kind, socket)
        self._top.remove(child_node.id)
        return child_node

    def _detach(self, node: Node) -> None:
        slot = self._parents.pop(node.id, None)
        if slot is None:
            return
        parent = self.nodes[slot.parent_id]
        if slot.kind == SlotKind.VALUE:
            del parent.inputs[slot.socket]
        elif slot.kind == SlotKind.STATEMENT:
            del parent.statements[slot.socket]
        else:
            parent.next = None
        self._top.append(node.id)

    def _is_ancestor(self, candidate_id: str, node_id: Optional[str]) -> bool:
        current = node_id
        while current is not None:
            if current == candidate_id:
                return True
            slot = self._parents.get(current)
            current = slot.parent_id if slot is not None else None
        return False

    def _remove_subtree(self, node: Node) -> int:
        removed = 1
        children = list(node.inputs.values()) + list(node.statements.values())
        for child_id in children:
            child = self.nodes[child_id]
            self._detach(child)
            removed += self._remove_chain(child)
        self._top.remove(node.id)
        del self.nodes[node.id]
        return removed

    def _remove_chain(self, head: Node) -> int:
        removed = 0
        current: Optional[Node] = head
        while current is not None:
            follower = self.next_node(current)
            if follower is not None:
                self._detach(follower)
            removed += self._remove_subtree(current)
            current = follower
        return removed


def _node_to_dict(node: Node) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": node.id, "type": node.type}
    if node.fields:
        out["fields"] = dict(node.fields)
    if node.inputs:
        out["inputs"] = dict(node.inputs)
    if node.statements:
        out["statements"] = dict(node.statements)
    if node.next is not None:
        out["next"] = node.next
    return out
