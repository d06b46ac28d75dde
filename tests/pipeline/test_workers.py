"""Tests for per-unit execution and cancellation."""

import threading

import pytest

from modpacker.core.errors import PipelineCancelled, ToolExecutionError
from modpacker.pipeline.workers import check_cancelled, run_for_each


class TestCheckCancelled:
    def test_no_flag(self):
        check_cancelled(None, "anywhere")

    def test_unset_flag(self):
        check_cancelled(threading.Event(), "anywhere")

    def test_set_flag_raises(self):
        flag = threading.Event()
        flag.set()

        with pytest.raises(PipelineCancelled, match="before packing"):
            check_cancelled(flag, "before packing")


class TestRunForEach:
    def test_sequential_runs_in_order(self):
        seen = []

        run_for_each([1, 2, 3], seen.append, label=str)

        assert seen == [1, 2, 3]

    def test_empty_items(self):
        run_for_each([], lambda item: pytest.fail("should not run"), label=str)

    def test_sequential_stops_at_first_failure(self):
        seen = []

        def action(item):
            if item == 2:
                raise ToolExecutionError("unit 2 failed")
            seen.append(item)

        with pytest.raises(ToolExecutionError, match="unit 2 failed"):
            run_for_each([1, 2, 3], action, label=str)

        assert seen == [1]

    def test_cancel_between_items(self):
        flag = threading.Event()
        seen = []

        def action(item):
            seen.append(item)
            flag.set()

        with pytest.raises(PipelineCancelled):
            run_for_each([1, 2, 3], action, label=str, cancel_flag=flag)

        assert seen == [1]

    def test_pool_runs_every_item(self):
        seen = set()
        lock = threading.Lock()

        def action(item):
            with lock:
                seen.add(item)

        run_for_each(list(range(10)), action, label=str, max_workers=4)

        assert seen == set(range(10))

    def test_pool_reraises_first_error(self):
        def action(item):
            if item == 3:
                raise ToolExecutionError("unit 3 failed")

        with pytest.raises(ToolExecutionError, match="unit 3 failed"):
            run_for_each(list(range(6)), action, label=str, max_workers=2)

    def test_pool_cancelled_before_start(self):
        flag = threading.Event()
        flag.set()

        with pytest.raises(PipelineCancelled):
            run_for_each([1, 2], lambda item: None, label=str, max_workers=2, cancel_flag=flag)
