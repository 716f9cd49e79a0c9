"""Main PyQt application entry point."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from typing import List, Optional, Tuple

from PyQt6.QtCore import QPoint, QRectF, Qt
from PyQt6.QtGui import QAction, QColor, QKeySequence, QPainter, QPen
from PyQt6.QtWidgets import (
    QApplication,
    QInputDialog,
    QMainWindow,
    QMenu,
    QMessageBox,
    QScrollArea,
    QWidget,
)

from .actions import (
    AddTask,
    AddTaskAtPosition,
    DeleteTask,
    SelectTask,
    SetViewMode,
    SetZoomLevel,
    ToggleMaximize,
    ToggleTaskExpansion,
    UpdateTask,
)
from .forms import blank_form, new_task_from_form, parse_task_form
from .models import Task, format_task_date, get_status_color
from .sessions import MoveSession, ReorderSession, ResizeSession, display_tasks
from .store import GanttStore
from .timeline import (
    DEFAULT_ZOOM,
    ZOOM_STEP,
    TimelineWindow,
    effective_day_width,
    task_position,
    timeline_window,
)
from .tree import find_task, visible_rows

logger = logging.getLogger(__name__)

NAME_COLUMN_WIDTH = 240
HEADER_HEIGHT = 24
ROW_HEIGHT = 32
BAR_MARGIN = 6
INDENT_WIDTH = 16
DRAG_HANDLE_TOLERANCE = 6


@dataclass(slots=True)
class RowHit:
    task: Task
    depth: int
    part: str  # "label", "bar", "start", "end" or "row"


class TimelineWidget(QWidget):
    """Task rows with their bars drawn against the timeline.

    Pressing a bar edge starts a resize, pressing the bar body starts a
    move, and pressing the label of a root row starts a row reorder. Only
    one gesture is active at a time; Escape cancels the active one.
    """

    def __init__(self, store: GanttStore, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.move_session = MoveSession(store.dispatch)
        self.resize_session = ResizeSession(store.dispatch)
        self.reorder_session = ReorderSession(store.dispatch)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)
        self.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.customContextMenuRequested.connect(self._show_context_menu)
        store.state_changed.connect(self._handle_state_changed)
        self._refresh_size()

    # --- Geometry -------------------------------------------------------------

    def window_range(self) -> TimelineWindow:
        return timeline_window(self.store.state.view_mode)

    def day_width(self) -> float:
        return effective_day_width(self.window_range().base_day_width, self.store.state.zoom_level)

    def displayed_roots(self) -> List[Task]:
        return display_tasks(self.store.state.tasks)

    def rows(self) -> List[Tuple[Task, int]]:
        return list(visible_rows(self.displayed_roots()))

    def bar_rect(self, task: Task, row: int) -> QRectF:
        position = task_position(task, self.window_range().start, self.day_width())
        top = HEADER_HEIGHT + row * ROW_HEIGHT + BAR_MARGIN
        return QRectF(NAME_COLUMN_WIDTH + position.left, top, position.width, ROW_HEIGHT - 2 * BAR_MARGIN)

    def hit_test(self, x: float, y: float) -> Optional[RowHit]:
        """Resolve a point in widget coordinates to a row and the part under it."""
        if y < HEADER_HEIGHT:
            return None
        row = int((y - HEADER_HEIGHT) // ROW_HEIGHT)
        rows = self.rows()
        if row >= len(rows):
            return None
        task, depth = rows[row]
        if x < NAME_COLUMN_WIDTH:
            return RowHit(task, depth, "label")
        rect = self.bar_rect(task, row)
        # Grab edges a few pixels outside the bar as well.
        if abs(x - rect.left()) <= DRAG_HANDLE_TOLERANCE:
            return RowHit(task, depth, "start")
        if abs(x - rect.right()) <= DRAG_HANDLE_TOLERANCE:
            return RowHit(task, depth, "end")
        if rect.left() < x < rect.right():
            return RowHit(task, depth, "bar")
        return RowHit(task, depth, "row")

    def _refresh_size(self) -> None:
        width = NAME_COLUMN_WIDTH + self.window_range().day_count() * self.day_width()
        height = HEADER_HEIGHT + max(1, len(self.rows())) * ROW_HEIGHT
        self.setMinimumSize(int(width), int(height))

    def _handle_state_changed(self, _state) -> None:
        self._refresh_size()
        self.update()

    # --- Gestures ---------------------------------------------------------------

    def gesture_active(self) -> bool:
        return self.move_session.is_active or self.resize_session.is_active or self.reorder_session.is_active

    def press_at(self, x: float, y: float) -> Optional[RowHit]:
        """Start whichever gesture the pressed point calls for."""
        if self.gesture_active():
            return None
        hit = self.hit_test(x, y)
        if hit is None:
            return None
        self.store.dispatch(SelectTask(hit.task.id))
        if hit.part in ("start", "end"):
            self.resize_session.begin(hit.task, hit.part, x, self.day_width())
        elif hit.part == "bar":
            self.move_session.begin(hit.task, x, self.day_width())
        elif hit.part == "label" and hit.depth == 0:
            self.reorder_session.begin(hit.task, self.displayed_roots())
        return hit

    def drag_to(self, x: float) -> bool:
        if self.resize_session.is_active:
            return self.resize_session.move(x)
        if self.move_session.is_active:
            return self.move_session.move(x)
        return False

    def release_at(self, x: float, y: float) -> None:
        self.move_session.release()
        self.resize_session.release()
        if self.reorder_session.is_active:
            hit = self.hit_test(x, y)
            target = hit.task.id if hit is not None and hit.depth == 0 else None
            self.reorder_session.drop(target, self.store.state.tasks)

    def cancel_gesture(self) -> None:
        self.move_session.cancel()
        self.resize_session.cancel()
        self.reorder_session.cancel()

    def mousePressEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self.press_at(event.position().x(), event.position().y())
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):  # type: ignore[override]
        self.drag_to(event.position().x())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            self.release_at(event.position().x(), event.position().y())
        super().mouseReleaseEvent(event)

    def mouseDoubleClickEvent(self, event):  # type: ignore[override]
        hit = self.hit_test(event.position().x(), event.position().y())
        if hit is not None and hit.part == "label" and hit.task.has_children:
            self.store.dispatch(ToggleTaskExpansion(hit.task.id))
        super().mouseDoubleClickEvent(event)

    def keyPressEvent(self, event):  # type: ignore[override]
        if event.key() == Qt.Key.Key_Escape and self.gesture_active():
            self.cancel_gesture()
            return
        if event.key() == Qt.Key.Key_Delete:
            self.delete_selected()
            return
        super().keyPressEvent(event)

    # --- Row actions ------------------------------------------------------------

    def _show_context_menu(self, position: QPoint) -> None:
        """Provide row actions (insert/nest/rename/delete)."""
        hit = self.hit_test(position.x(), position.y())
        if hit is None:
            return
        menu = QMenu(self)
        above_action = menu.addAction("Insert task above")
        below_action = menu.addAction("Insert task below")
        subtask_action = menu.addAction("Add subtask")
        menu.addSeparator()
        rename_action = menu.addAction("Rename...")
        dates_action = menu.addAction("Set dates...")
        toggle_action = menu.addAction("Collapse" if hit.task.is_expanded else "Expand")
        toggle_action.setEnabled(hit.task.has_children)
        menu.addSeparator()
        delete_action = menu.addAction("Delete task")
        action = menu.exec(self.mapToGlobal(position))
        if action == above_action:
            self.insert_new_task(hit.task.id, "above")
        elif action == below_action:
            self.insert_new_task(hit.task.id, "below")
        elif action == subtask_action:
            self.insert_new_task(hit.task.id, "subtask")
        elif action == rename_action:
            self._rename_task(hit.task)
        elif action == dates_action:
            self._edit_dates(hit.task)
        elif action == toggle_action:
            self.store.dispatch(ToggleTaskExpansion(hit.task.id))
        elif action == delete_action:
            self.store.dispatch(DeleteTask(hit.task.id))

    def insert_new_task(self, target_id: str, position: str) -> Task:
        task = new_task_from_form(blank_form(), len(self.store.state.tasks))
        self.store.dispatch(AddTaskAtPosition(task, position, target_id))
        return task

    def delete_selected(self) -> None:
        selected = self.store.state.selected_task_id
        if selected is None:
            return
        self.store.dispatch(DeleteTask(selected))
        self.store.dispatch(SelectTask(None))

    def _rename_task(self, task: Task) -> None:
        name, ok = QInputDialog.getText(self, "Rename task", "Name", text=task.name)
        if not ok:
            return
        self.store.dispatch(UpdateTask(task.id, parse_task_form({"name": name})))

    def _edit_dates(self, task: Task) -> None:
        current = f"{format_task_date(task.start_date)}, {format_task_date(task.end_date)}"
        text, ok = QInputDialog.getText(self, "Task dates", "Start, End (YYYY-MM-DD)", text=current)
        if not ok:
            return
        start, _, end = text.partition(",")
        try:
            updates = parse_task_form({"start_date": start, "end_date": end or start})
        except ValueError as exc:
            QMessageBox.warning(self, "Invalid dates", str(exc))
            return
        self.store.dispatch(UpdateTask(task.id, updates))

    # --- Painting ---------------------------------------------------------------

    def paintEvent(self, event):  # type: ignore[override]
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor("white"))
        window = self.window_range()
        day_width = self.day_width()
        grid_pen = QPen(QColor("#e5e7eb"))
        painter.setPen(grid_pen)
        for offset, day in enumerate(window.dates()):
            x = NAME_COLUMN_WIDTH + offset * day_width
            painter.drawLine(int(x), 0, int(x), self.height())
            if day_width >= 24 or day.day == 1:
                painter.setPen(QColor("#6b7280"))
                painter.drawText(int(x) + 2, HEADER_HEIGHT - 8, day.strftime("%d"))
                painter.setPen(grid_pen)

        selected = self.store.state.selected_task_id
        for row, (task, depth) in enumerate(self.rows()):
            top = HEADER_HEIGHT + row * ROW_HEIGHT
            if task.id == selected:
                painter.fillRect(0, top, self.width(), ROW_HEIGHT, QColor("#eef2ff"))
            marker = ""
            if task.has_children:
                marker = "- " if task.is_expanded else "+ "
            painter.setPen(QColor(get_status_color(task.status)))
            painter.drawText(
                8 + depth * INDENT_WIDTH,
                top + ROW_HEIGHT - 10,
                f"{marker}{task.name}",
            )
            rect = self.bar_rect(task, row)
            painter.fillRect(rect, QColor(task.color))
            done = QRectF(rect.left(), rect.top(), rect.width() * task.progress / 100, rect.height())
            painter.fillRect(done, QColor(0, 0, 0, 60))
        painter.end()


class MainWindow(QMainWindow):
    """Primary window with menus and the timeline."""

    def __init__(self, store: Optional[GanttStore] = None) -> None:
        super().__init__()
        self.setWindowTitle("Gantt Editor")
        self.store = store if store is not None else GanttStore(parent=self)
        self.timeline = TimelineWidget(self.store)
        self.store.state_changed.connect(self._handle_state_changed)
        self._maximized = self.store.state.is_maximized
        self._build_layout()
        self._build_menu()
        self.resize(1200, 600)

    def _build_layout(self) -> None:
        scroll = QScrollArea()
        scroll.setWidget(self.timeline)
        scroll.setWidgetResizable(True)
        self.setCentralWidget(scroll)

    def _build_menu(self) -> None:
        """Create Edit/View menus along with shortcuts."""
        menu = self.menuBar()
        edit_menu = menu.addMenu("Edit")

        add_action = QAction("Add task", self)
        add_action.setShortcut(QKeySequence.StandardKey.New)
        add_action.triggered.connect(self.action_add_task)
        edit_menu.addAction(add_action)

        delete_action = QAction("Delete task", self)
        delete_action.triggered.connect(self.timeline.delete_selected)
        edit_menu.addAction(delete_action)

        edit_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        edit_menu.addAction(quit_action)

        view_menu = menu.addMenu("View")
        for mode in ("day", "week", "month"):
            mode_action = QAction(mode.capitalize(), self)
            mode_action.triggered.connect(lambda _checked=False, m=mode: self.store.dispatch(SetViewMode(m)))
            view_menu.addAction(mode_action)
        view_menu.addSeparator()

        zoom_in = QAction("Zoom in", self)
        zoom_in.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in.triggered.connect(lambda: self.action_zoom(ZOOM_STEP))
        view_menu.addAction(zoom_in)

        zoom_out = QAction("Zoom out", self)
        zoom_out.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out.triggered.connect(lambda: self.action_zoom(-ZOOM_STEP))
        view_menu.addAction(zoom_out)

        zoom_reset = QAction("Reset zoom", self)
        zoom_reset.setShortcut("Ctrl+0")
        zoom_reset.triggered.connect(lambda: self.store.dispatch(SetZoomLevel(DEFAULT_ZOOM)))
        view_menu.addAction(zoom_reset)

        view_menu.addSeparator()
        maximize_action = QAction("Toggle maximize", self)
        maximize_action.setShortcut("F11")
        maximize_action.triggered.connect(lambda: self.store.dispatch(ToggleMaximize()))
        view_menu.addAction(maximize_action)

    # Menu actions ------------------------------------------------------
    def action_add_task(self) -> None:
        """Append a fresh root task."""
        task = new_task_from_form(blank_form(), len(self.store.state.tasks))
        self.store.dispatch(AddTask(task))
        self.store.dispatch(SelectTask(task.id))
        self.statusBar().showMessage(f"Added {task.name}", 3000)

    def action_zoom(self, step: float) -> None:
        state = self.store.dispatch(SetZoomLevel(self.store.state.zoom_level + step))
        self.statusBar().showMessage(f"Zoom: {round(state.zoom_level * 100)}%", 3000)

    def _handle_state_changed(self, state) -> None:
        """Mirror window-level flags and the selection into the chrome."""
        if state.is_maximized != self._maximized:
            self._maximized = state.is_maximized
            if state.is_maximized:
                self.showMaximized()
            else:
                self.showNormal()
        selected = find_task(state.tasks, state.selected_task_id) if state.selected_task_id else None
        if selected is not None:
            self.statusBar().showMessage(
                f"{selected.name}: {format_task_date(selected.start_date)} - {format_task_date(selected.end_date)}"
            )


def run() -> None:
    """Entry point used by the `gantt-editor` console script."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    logger.info("Gantt editor started with %d root tasks", len(window.store.state.tasks))
    app.exec()


if __name__ == "__main__":
    run()
