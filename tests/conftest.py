import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from factories import make_task  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Provide a shared QApplication for tests that instantiate widgets."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def forest():
    """A -> (A1, A2 -> (A2a)), B, C -> (C1)."""
    a2 = make_task("A2", parent_id="A", children=(make_task("A2a", parent_id="A2"),))
    a = make_task("A", is_expanded=True, children=(make_task("A1", parent_id="A"), a2))
    c = make_task("C", children=(make_task("C1", parent_id="C"),))
    return (a, make_task("B"), c)
