"""Tests for inline todo() annotations."""

import inspect

from todotxt.annotate import todo
from todotxt.parser import parse_task
from todotxt.registry import get_registry, reset_registry


def annotated_function(registry):
    return todo("handle the edge case", registry=registry)


class TestTodo:
    """Test call-site capture."""

    def test_records_caller_location_and_module(self, registry):
        line = annotated_function(registry)
        expected_line = inspect.getsourcelines(annotated_function)[1] + 1
        task = parse_task(line)

        assert list(task.projects()) == [__name__]
        assert list(task.contexts()) == [f"{__file__}:{expected_line}"]
        assert task.description.startswith("handle the edge case +")

    def test_repeated_execution_counts_hits(self, registry):
        for _ in range(4):
            line = annotated_function(registry)

        assert len(registry) == 1
        assert registry.count(line) == 4

    def test_untracked_registry_only_records(self, untracked_registry):
        line = annotated_function(untracked_registry)

        assert untracked_registry.count(line) == 0
        assert len(untracked_registry) == 1

    def test_generated_code_ignored(self, registry):
        namespace = {"todo": todo, "registry": registry}
        exec(compile("result = todo('from a string', registry=registry)", "<string>", "exec"), namespace)

        assert namespace["result"] is None
        assert len(registry) == 0

    def test_main_module_uses_file_stem(self, registry):
        namespace = {"todo": todo, "registry": registry, "__name__": "__main__"}
        exec(compile("result = todo('script work', registry=registry)", "/work/run_job.py", "exec"), namespace)

        task = parse_task(namespace["result"])
        assert list(task.projects()) == ["run_job"]
        assert list(task.contexts()) == ["/work/run_job.py:1"]

    def test_defaults_to_global_registry(self):
        registry = reset_registry(tracking_enabled=True)
        line = todo("use the global one")

        assert registry is get_registry()
        assert registry.count(line) == 1
