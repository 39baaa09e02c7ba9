"""Import tests for the routesketch package."""

import importlib
import sys

import pytest


class TestNoCircularImports:
    """Importing submodules must not cause circular import errors."""

    def test_import_routesketch_fresh(self):
        """routesketch imports cleanly from an empty module cache."""
        modules_to_clear = [k for k in sys.modules if k.startswith("routesketch")]
        for mod in modules_to_clear:
            sys.modules.pop(mod, None)

        rs = importlib.import_module("routesketch")
        assert hasattr(rs, "DrawingSessionController")

    @pytest.mark.parametrize(
        "module_name",
        [
            "routesketch.capture",
            "routesketch.sequence",
            "routesketch.projection",
            "routesketch.controller",
            "routesketch.selector",
            "routesketch.app",
            "routesketch._napari_backend",
            "routesketch._napari_widget",
        ],
    )
    def test_import_submodule(self, module_name):
        """Each submodule imports without napari installed."""
        assert importlib.import_module(module_name) is not None


class TestPublicApi:
    """Top-level exports."""

    def test_all_exports_resolve(self):
        """Every name in __all__ exists."""
        import routesketch

        for name in routesketch.__all__:
            assert hasattr(routesketch, name), name

