"""Desktop runtime: frameless indicator window driven by the refresh scheduler."""

from __future__ import annotations

import os
import signal
import sys

from PySide6.QtCore import QObject, QTimer, Qt, Signal, Slot
from PySide6.QtGui import QAction, QIcon, QImage, QPainter
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon, QWidget

from sema_core import AppConfig, Indicator, LoopClosedError, RefreshScheduler, RenderTargetError, open_session
from sema_core.logging_setup import get_logger, install_crash_hooks
from sema_renderer.models import FrameBuffer
from sema_telemetry import StatusSnapshot


class RefreshBridge(QObject):
    """Carries snapshots from the refresh thread into the GUI thread."""

    refreshReady = Signal(object)

    def __init__(self) -> None:
        super().__init__()
        self._closed = False

    def close(self) -> None:
        self._closed = True

    def post(self, snapshot: StatusSnapshot) -> None:
        if self._closed:
            raise LoopClosedError("indicator window has closed")
        self.refreshReady.emit(snapshot)


class IndicatorWindow(QWidget):
    """Borderless window that paints the latest frame buffer 1:1."""

    exposed = Signal()

    def __init__(self, cfg: AppConfig, width: int, height: int) -> None:
        flags = Qt.WindowType.FramelessWindowHint | Qt.WindowType.Tool
        if cfg.ui.always_on_top:
            flags |= Qt.WindowType.WindowStaysOnTopHint
        super().__init__(None, flags)
        if cfg.ui.transparent:
            self.setAttribute(Qt.WidgetAttribute.WA_TranslucentBackground, True)
        self.setWindowTitle("sema")
        self.setFixedSize(width, height)
        if cfg.ui.x is not None and cfg.ui.y is not None:
            self.move(cfg.ui.x, cfg.ui.y)
        self._image: QImage | None = None
        self.menu: QMenu | None = None

    def present(self, frame: FrameBuffer) -> None:
        image = QImage(
            bytes(frame.bytes),
            frame.width,
            frame.height,
            frame.stride,
            QImage.Format.Format_RGBA8888,
        ).copy()
        if image.isNull():
            raise RenderTargetError(f"could not build a {frame.width}x{frame.height} image")
        self._image = image
        self.update()

    def showEvent(self, event) -> None:
        super().showEvent(event)
        self.exposed.emit()

    def paintEvent(self, _event) -> None:
        if self._image is None:
            return
        painter = QPainter(self)
        painter.setCompositionMode(QPainter.CompositionMode.CompositionMode_Source)
        painter.drawImage(0, 0, self._image)
        painter.end()

    def contextMenuEvent(self, event) -> None:
        if self.menu is not None:
            self.menu.exec(event.globalPos())


class IndicatorController(QObject):
    def __init__(self, app: QApplication, cfg: AppConfig) -> None:
        super().__init__()
        self.app = app
        self.logger = get_logger("app")
        self.session = open_session(cfg)
        layout = self.session.layout
        self.window = IndicatorWindow(cfg, layout.frame_width, layout.frame_height)
        self.indicator: Indicator = self.session.indicator(self.window)

        self.bridge = RefreshBridge()
        self.bridge.refreshReady.connect(self._on_refresh, Qt.ConnectionType.QueuedConnection)
        self.scheduler: RefreshScheduler = self.session.scheduler(post=self.bridge.post)

        self.menu = QMenu()
        refresh_action = QAction("Refresh now", self.menu)
        refresh_action.triggered.connect(self.scheduler.request_refresh)
        self.menu.addAction(refresh_action)
        self.menu.addSeparator()
        quit_action = QAction("Quit", self.menu)
        quit_action.triggered.connect(app.quit)
        self.menu.addAction(quit_action)
        self.window.menu = self.menu
        self.window.exposed.connect(self._on_exposed)

    def start(self) -> bool:
        try:
            self.indicator.refresh(self.session.sample())
        except RenderTargetError as exc:
            self.logger.error(f"render target failed: {exc}", extra={"event": "render_target_failed"})
            return False
        self.window.show()
        self.scheduler.start()
        return True

    def _fail(self, exc: RenderTargetError) -> None:
        self.logger.error(f"render target failed: {exc}", extra={"event": "render_target_failed"})
        self.bridge.close()
        self.app.exit(1)

    @Slot(object)
    def _on_refresh(self, snapshot: StatusSnapshot) -> None:
        try:
            self.indicator.refresh(snapshot)
        except RenderTargetError as exc:
            self._fail(exc)

    @Slot()
    def _on_exposed(self) -> None:
        try:
            self.indicator.redraw()
        except RenderTargetError as exc:
            self._fail(exc)

    @Slot()
    def shutdown(self) -> None:
        self.bridge.close()
        self.scheduler.stop()


def run_gui(cfg: AppConfig) -> int:
    install_crash_hooks()
    logger = get_logger()

    os.environ.setdefault("QT_ENABLE_HIGHDPI_SCALING", "1")
    QApplication.setHighDpiScaleFactorRoundingPolicy(Qt.HighDpiScaleFactorRoundingPolicy.PassThrough)

    app = QApplication(sys.argv)
    app.setApplicationName("sema")
    app.setQuitOnLastWindowClosed(True)

    controller = IndicatorController(app, cfg)
    app.aboutToQuit.connect(controller.shutdown)
    if not controller.start():
        controller.shutdown()
        return 1

    # Ctrl+C only reaches Python while the interpreter gets a chance to run.
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    heartbeat = QTimer()
    heartbeat.timeout.connect(lambda: None)
    heartbeat.start(250)

    tray = None
    if QSystemTrayIcon.isSystemTrayAvailable():
        tray = QSystemTrayIcon(QIcon.fromTheme("utilities-system-monitor"), app)
        tray.setToolTip("sema")
        tray.setContextMenu(controller.menu)
        tray.show()

    exit_code = app.exec()
    controller.shutdown()
    logger.info("app shutdown", extra={"event": "shutdown", "exit_code": int(exit_code)})
    return int(exit_code)
