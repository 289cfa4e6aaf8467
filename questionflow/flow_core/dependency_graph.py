"""Directed graph of question dependencies.

An edge ``dependent -> dependency`` means the dependent question's conditional
logic reads the dependency's answer.
"""

from __future__ import annotations

from collections import deque


class DependencyGraph:
    """Tracks which questions read which other questions' answers."""

    def __init__(self) -> None:
        self._dependencies: dict[str, set[str]] = {}
        self._dependents: dict[str, set[str]] = {}

    def add_dependency(self, dependent: str, dependency: str) -> None:
        self._dependencies.setdefault(dependent, set()).add(dependency)
        self._dependents.setdefault(dependency, set()).add(dependent)

    def get_dependencies(self, node: str) -> list[str]:
        """Questions ``node`` reads directly."""
        return sorted(self._dependencies.get(node, ()))

    def get_dependents(self, node: str) -> list[str]:
        """Questions whose logic reads ``node`` directly."""
        return sorted(self._dependents.get(node, ()))

    def find_cycles(self) -> list[list[str]]:
        """Find circular dependencies using DFS.

        At most one cycle is reported per DFS root. Each cycle path starts at
        the first node of the loop and repeats it at the end, so ``A -> A``
        yields ``["A", "A"]``.
        """
        cycles: list[list[str]] = []
        visited: set[str] = set()

        def visit(node: str, path: list[str], on_stack: set[str]) -> list[str] | None:
            visited.add(node)
            on_stack.add(node)
            path.append(node)

            for dependency in sorted(self._dependencies.get(node, ())):
                if dependency not in visited:
                    cycle = visit(dependency, path, on_stack)
                    if cycle:
                        return cycle
                elif dependency in on_stack:
                    start = path.index(dependency)
                    return [*path[start:], dependency]

            on_stack.discard(node)
            path.pop()
            return None

        for node in list(self._dependencies):
            if node not in visited:
                cycle = visit(node, [], set())
                if cycle:
                    cycles.append(cycle)

        return cycles

    def has_path(self, source: str, target: str) -> bool:
        """Check whether ``target`` is reachable from ``source`` using BFS."""
        if source == target:
            return True

        visited: set[str] = set()
        queue = deque([source])

        while queue:
            current = queue.popleft()
            if current == target:
                return True
            if current in visited:
                continue
            visited.add(current)

            for dependency in self._dependencies.get(current, ()):
                if dependency not in visited:
                    queue.append(dependency)

        return False

    def get_all_nodes(self) -> list[str]:
        nodes = dict.fromkeys(self._dependencies)
        nodes.update(dict.fromkeys(self._dependents))
        return list(nodes)

    def clear(self) -> None:
        self._dependencies.clear()
        self._dependents.clear()

    def size(self) -> int:
        """Number of nodes that have at least one outgoing dependency."""
        return len(self._dependencies)

    def __len__(self) -> int:
        return self.size()

    def __contains__(self, node: object) -> bool:
        return node in self._dependencies or node in self._dependents
