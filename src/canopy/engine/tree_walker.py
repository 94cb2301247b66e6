"""Recursive discovery and execution of a tree of suites.

Each node is classified once (container, suite, case or empty). A level
spawns its children first and its own suite run last, through one
TaskGroup, then merges: a suite's child results sit next to its case
results under the same key.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from canopy.config.models import EngineConfig
from canopy.core.errors import StructuralError
from canopy.engine.futures import describe_error
from canopy.engine.host import HostNode, is_node
from canopy.engine.models import (
    ASYNC_KEY,
    FOCUS_KEY,
    RESERVED_KEYS,
    NodeKind,
    ResultEntry,
    ResultTree,
    SuiteResult,
)
from canopy.engine.suite_runner import SuiteRunner
from canopy.engine.task_group import TaskGroup, Work

log = structlog.get_logger(__name__)

# Result key for a suite that failed validation but still has child results
SUITE_ERROR_KEY = "_suite"


def classify(node: object, test_module_suffix: str = "_test") -> NodeKind:
    """Decide the shape of a node from static rules.

    - Mapping with a reserved key or a callable entry: SUITE (may also have children)
    - Mapping whose entries include nodes: CONTAINER
    - Host node named like a test module: SUITE; any other host node: CONTAINER
    - Bare callable: CASE
    """
    if isinstance(node, Mapping):
        if any(key in RESERVED_KEYS for key in node):
            return NodeKind.SUITE
        values = list(node.values())
        if any(callable(value) and not is_node(value) for value in values):
            return NodeKind.SUITE
        if any(is_node(value) for value in values):
            return NodeKind.CONTAINER
        return NodeKind.EMPTY
    if isinstance(node, HostNode):
        if node.name.endswith(test_module_suffix):
            return NodeKind.SUITE
        return NodeKind.CONTAINER
    if callable(node):
        return NodeKind.CASE
    return NodeKind.EMPTY


def _join(path: str, key: str) -> str:
    return f"{path}/{key}" if path else key


class TreeWalker:
    """Walks a node tree, running every suite it finds.

    focus_requested becomes True as soon as any suite in the walked tree
    sets _focus; callers then prune the result with prune_unfocused().

    A suite's own _async flag also sets the mode for its nested child
    nodes, unless a child suite sets _async itself.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        bindings: Mapping[str, Any] | None = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.bindings = bindings
        self.suite_runner = SuiteRunner(self.config)
        self.focus_requested = False

    async def walk(self, node: object, path: str = "", *, concurrent: bool) -> ResultEntry | None:
        """Run everything under node. Returns None for nodes that produce nothing."""
        kind = classify(node, self.config.test_module_suffix)
        if kind is NodeKind.EMPTY:
            return None
        if kind is NodeKind.CASE:
            name = path or getattr(node, "__name__", "case")
            return await self._run_suite({name: node}, name, concurrent)

        try:
            suite, children = self._expand(node, kind)
        except Exception as exc:
            log.info("module_load_failed", node=path, exc_info=True)
            return StructuralError.module_load_failed(path or "<root>", describe_error(exc)).message
        if isinstance(suite, str):
            return suite

        if isinstance(suite, Mapping) and isinstance(suite.get(ASYNC_KEY), bool):
            concurrent = suite[ASYNC_KEY]

        group = TaskGroup(
            path or "<root>",
            concurrent=concurrent,
            max_concurrency=self.config.max_concurrency,
            watch_initial_delay_sec=self.config.watch_initial_delay_sec,
            watch_interval_sec=self.config.watch_interval_sec,
        )
        child_results: ResultTree = {}
        for key, child in children:
            await group.spawn(key, self._child_work(child, key, path, concurrent, child_results))

        # Deferred until every child is spawned, so discovery is never blocked by a suite
        own: list[SuiteResult | str] = []
        if suite is not None:
            work = self._suite_work(suite, path, concurrent, own)
            await group.spawn(f"{path or '<root>'} (suite)", work)

        await group.wait()
        return self._merge(own, child_results, has_suite=suite is not None)

    def _expand(
        self, node: object, kind: NodeKind
    ) -> tuple[Mapping[str, Any] | str | None, list[tuple[str, Any]]]:
        """Split a node into its own suite mapping (if any) and its child nodes."""
        if isinstance(node, HostNode):
            children: list[tuple[str, Any]] = [(child.name, child) for child in node.children()]
            if kind is not NodeKind.SUITE:
                return None, children
            suite = node.load()
            if not isinstance(suite, Mapping):
                reason = f"expected a suite mapping, got {type(suite).__name__}"
                return StructuralError.module_load_failed(node.name, reason).message, []
            return suite, children + _mapping_children(suite)

        assert isinstance(node, Mapping)
        return (node if kind is NodeKind.SUITE else None), _mapping_children(node)

    def _child_work(
        self, child: object, key: str, path: str, concurrent: bool, results: ResultTree
    ) -> Work:
        async def work() -> None:
            entry = await self.walk(child, _join(path, key), concurrent=concurrent)
            if entry is not None:
                results[key] = entry

        return work

    def _suite_work(
        self, suite: Mapping[str, Any], path: str, concurrent: bool, own: list[SuiteResult | str]
    ) -> Work:
        async def work() -> None:
            own.append(await self._run_suite(suite, path or "<root>", concurrent))

        return work

    async def _run_suite(
        self, suite: Mapping[str, Any], name: str, concurrent: bool
    ) -> SuiteResult | str:
        result = await self.suite_runner.run(
            suite, name, concurrent=concurrent, bindings=self.bindings
        )
        if isinstance(result, SuiteResult) and result.focused:
            self.focus_requested = True
        elif isinstance(result, str) and suite.get(FOCUS_KEY) is True:
            # Keep the focus of a suite that failed validation so its error is reported
            self.focus_requested = True
            return SuiteResult(entries={SUITE_ERROR_KEY: result}, focused=True)
        return result

    @staticmethod
    def _merge(
        own: list[SuiteResult | str], child_results: ResultTree, *, has_suite: bool
    ) -> ResultEntry | None:
        if not has_suite:
            return child_results or None
        if not own:
            # The suite task itself crashed; TaskGroup already logged why
            own = ["suite run failed, see log for details"]
        result = own[0]
        if isinstance(result, str):
            if not child_results:
                return result
            return {**child_results, SUITE_ERROR_KEY: result}
        result.entries.update(child_results)
        return result


def _mapping_children(node: Mapping[str, Any]) -> list[tuple[str, Any]]:
    return [(str(key), value) for key, value in node.items() if is_node(value)]


def prune_unfocused(entry: ResultEntry | None, *, focused: bool = False) -> ResultEntry | None:
    """Keep only focused branches of a result tree.

    A focused suite is kept whole; elsewhere only descendants that are, or
    contain, focused suites survive. Dropped branches vanish from the tree
    and so contribute nothing to the counts.
    """
    if entry is None or focused:
        return entry
    if isinstance(entry, SuiteResult):
        if entry.focused:
            return entry
        kept = _prune_children(entry.entries.items())
        if not kept:
            return None
        return SuiteResult(entries=kept, duration_seconds=entry.duration_seconds)
    if isinstance(entry, Mapping):
        return _prune_children(entry.items()) or None
    return None


def _prune_children(items: Iterable[tuple[str, ResultEntry]]) -> ResultTree:
    kept: ResultTree = {}
    for key, child in items:
        if not isinstance(child, SuiteResult | Mapping):
            continue
        pruned = prune_unfocused(child)
        if pruned is not None:
            kept[key] = pruned
    return kept
