#!/usr/bin/env python3
"""
Parametrized demo tests - loads every examples/demos/*.xylo program upfront
and renders each one at a small size.
"""

import numpy as np
import pytest
from pathlib import Path
from tests.test_utils import compile_and_execute


# Load all file contents once at module import time
_DEMOS_CACHE = {}

def _demos_dir() -> Path:
    return Path(__file__).parent.parent.parent / "examples" / "demos"

def _load_all_demos():
    """Load all demo file contents into cache once"""
    if _DEMOS_CACHE:
        return _DEMOS_CACHE

    demos_dir = _demos_dir()
    if demos_dir.exists():
        for f in sorted(demos_dir.glob("*.xylo")):
            with open(f, 'r', encoding='utf-8') as fp:
                _DEMOS_CACHE[f.stem] = fp.read()
    return _DEMOS_CACHE

# Trigger load at import
_load_all_demos()


def get_demo_params():
    return [pytest.param(name, id=name) for name in _DEMOS_CACHE]


class TestDemos:
    """Every demo compiles, renders and is reproducible."""

    @pytest.mark.parametrize("demo_name", get_demo_params())
    def test_execution(self, compiler, runtime, demo_name):
        content = _DEMOS_CACHE[demo_name]
        source_file = str(_demos_dir() / f"{demo_name}.xylo")

        result = compile_and_execute(content, compiler, runtime, seed=7, width=64, height=48,
                                     source_file=source_file)

        assert result.success, f"{demo_name} failed: {result.get_errors()}"
        assert result.value.shape == (48, 64, 4)
        assert result.value[..., 3].any(), f"{demo_name} painted nothing"

    @pytest.mark.parametrize("demo_name", get_demo_params())
    def test_names_resolve(self, compiler, demo_name):
        result = compiler.compile(_DEMOS_CACHE[demo_name], f"{demo_name}.xylo", check_names=True)
        assert result.success, result.get_errors()

    @pytest.mark.slow
    @pytest.mark.parametrize("demo_name", get_demo_params())
    def test_reproducible(self, compiler, runtime, demo_name):
        content = _DEMOS_CACHE[demo_name]
        first = compile_and_execute(content, compiler, runtime, seed="demo", width=40, height=40)
        second = compile_and_execute(content, compiler, runtime, seed="demo", width=40, height=40)
        assert first.success and second.success
        assert np.array_equal(first.value, second.value)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
