"""Tests for ExecutionContext."""

import pytest

from fragment_kernel.context import ExecutionContext


class TestExecutionContext:
    def test_mapping_behaviour(self):
        ctx = ExecutionContext({"a": 1})
        ctx["b"] = "x"
        assert dict(ctx) == {"a": 1, "b": "x"}
        assert len(ctx) == 2
        del ctx["a"]
        assert "a" not in ctx

    def test_dirty_flag(self):
        ctx = ExecutionContext({"a": 1})
        assert not ctx.dirty
        ctx["a"] = 1
        assert not ctx.dirty
        ctx["a"] = 2
        assert ctx.dirty
        ctx.clear_dirty()
        assert not ctx.dirty

    def test_get_int(self):
        ctx = ExecutionContext({"n": 3, "flag": True, "s": "3"})
        assert ctx.get_int("n") == 3
        assert ctx.get_int("missing") is None
        assert ctx.get_int("missing", 0) == 0
        with pytest.raises(TypeError):
            ctx.get_int("flag")
        with pytest.raises(TypeError):
            ctx.get_int("s")

    def test_put_int(self):
        ctx = ExecutionContext()
        ctx.put_int("n", 5)
        assert ctx["n"] == 5
        with pytest.raises(TypeError):
            ctx.put_int("n", "5")
        with pytest.raises(TypeError):
            ctx.put_int("n", False)

    def test_to_dict_is_a_snapshot(self):
        ctx = ExecutionContext({"n": 1})
        snapshot = ctx.to_dict()
        ctx["n"] = 2
        assert snapshot == {"n": 1}
