"""Pytest configuration for ray tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would discard
    every field declared by the store and integrator modules.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_render_state():
    """Clear the entity store and render target around each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are declared after ti.init()
    from raycast.core.integrator import clear_render_target
    from raycast.scene.store import clear_entities

    def _clear_all():
        clear_entities()
        clear_render_target()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def make_scene():
    """Factory for small scenes with the default test light."""
    from raycast.scene.entities import Light, Scene

    def _make(entities=(), width=8, height=6, field_of_view=75.0, light=None):
        if light is None:
            light = Light(direction=(0.0, -1.0, -1.0), color=(1.0, 1.0, 1.0), intensity=10.0)
        return Scene(
            width=width,
            height=height,
            field_of_view=field_of_view,
            light=light,
            entities=tuple(entities),
        )

    return _make
