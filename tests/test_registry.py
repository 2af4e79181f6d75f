from __future__ import annotations

import threading

from discovery_flow.registry import RunnerRegistry


class StubRunner:
    def __init__(self, name: str) -> None:
        self.name = name

    async def ask(self, message: str) -> str:
        return f"{self.name}: {message}"


def test_set_get_delete() -> None:
    registry = RunnerRegistry()
    runner = StubRunner("a")

    registry.set("s1", runner)

    assert registry.get("s1") is runner
    assert "s1" in registry
    registry.delete("s1")
    assert registry.get("s1") is None
    registry.delete("s1")
    assert len(registry) == 0


def test_get_or_create_builds_once() -> None:
    registry = RunnerRegistry()
    calls = []

    def factory() -> StubRunner:
        calls.append(1)
        return StubRunner("built")

    first, created_first = registry.get_or_create("s1", factory)
    second, created_second = registry.get_or_create("s1", factory)

    assert first is second
    assert (created_first, created_second) == (True, False)
    assert len(calls) == 1


def test_concurrent_first_messages_share_one_runner() -> None:
    registry = RunnerRegistry()
    built = []
    results = []
    barrier = threading.Barrier(8)

    def factory() -> StubRunner:
        runner = StubRunner(f"runner-{len(built)}")
        built.append(runner)
        return runner

    def worker() -> None:
        barrier.wait()
        runner, _ = registry.get_or_create("shared", factory)
        results.append(runner)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(built) == 1
    assert all(runner is built[0] for runner in results)


def test_unbounded_by_default() -> None:
    registry = RunnerRegistry()
    for index in range(100):
        registry.set(f"s{index}", StubRunner(str(index)))
    assert len(registry) == 100


def test_max_size_evicts_least_recently_used() -> None:
    registry = RunnerRegistry(max_size=2)
    registry.set("a", StubRunner("a"))
    registry.set("b", StubRunner("b"))
    registry.get("a")

    registry.set("c", StubRunner("c"))

    assert "a" in registry
    assert "b" not in registry
    assert "c" in registry

    registry.clear()
    assert len(registry) == 0
