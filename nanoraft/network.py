"""TCP sessions carrying framed packets, and the server and client built on them."""

from __future__ import annotations

import logging
import socket
import threading
import uuid
import weakref
from collections import deque
from typing import Optional

from .events import EventDispatcher
from .packet import HEAD_SIZE, PacketTooLargeError, body_size, frame
from .sessions import SessionManager

_log = logging.getLogger(__name__)

MAX_PENDING_SENDS = 64
_ACCEPT_POLL_SECONDS = 0.2


class Session:
    """One connection: reads framed packets and writes queued ones.

    Every received body is handed to the dispatcher's data-ready handlers.
    The session is closed on any read or write failure, on end of stream and
    on a packet head announcing a body over the size limit.
    """

    def __init__(self, sock: socket.socket, events: EventDispatcher) -> None:
        self.uid = str(uuid.uuid4())
        self._sock = sock
        self._events = events
        self._cond = threading.Condition()
        self._pending: deque[bytes] = deque()
        self._closed = False
        self._started = False

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def start(self) -> None:
        """Announce the connection and begin reading and writing."""
        with self._cond:
            if self._started or self._closed:
                return
            self._started = True
        try:
            self._events.on_connected(self)
        except Exception:
            _log.exception("connect handler failed for session %s", self.uid)
            self.close()
            return
        if self.closed:
            return
        threading.Thread(target=self._read_loop, name=f"session-read-{self.uid}", daemon=True).start()
        threading.Thread(target=self._write_loop, name=f"session-write-{self.uid}", daemon=True).start()

    def close(self) -> None:
        """Close the connection once, telling the close handlers first."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._pending.clear()
            self._cond.notify_all()
        try:
            self._events.on_closed(self)
        finally:
            try:
                self._sock.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            self._sock.close()

    def send(self, data: bytes) -> bool:
        """Queue data as one packet; False when closed or too many sends are pending."""
        packet = frame(bytes(data))
        with self._cond:
            if self._closed or len(self._pending) >= MAX_PENDING_SENDS:
                return False
            self._pending.append(packet)
            self._cond.notify_all()
        return True

    def _recv_exact(self, size: int) -> Optional[bytes]:
        chunks = bytearray()
        while len(chunks) < size:
            chunk = self._sock.recv(size - len(chunks))
            if not chunk:
                return None
            chunks += chunk
        return bytes(chunks)

    def _read_loop(self) -> None:
        try:
            while True:
                head = self._recv_exact(HEAD_SIZE)
                if head is None:
                    break
                size = body_size(head)
                body = self._recv_exact(size) if size else b""
                if body is None:
                    break
                self._events.on_data_ready(self, body)
        except (OSError, PacketTooLargeError):
            pass
        except Exception:
            _log.exception("data handler failed for session %s", self.uid)
        finally:
            self.close()

    def _write_loop(self) -> None:
        while True:
            with self._cond:
                while not self._pending and not self._closed:
                    self._cond.wait()
                if self._closed:
                    return
                packet = self._pending[0]
            try:
                self._sock.sendall(packet)
            except OSError:
                self.close()
                return
            with self._cond:
                if self._pending and self._pending[0] is packet:
                    self._pending.popleft()

    def __repr__(self) -> str:
        return f"Session(uid={self.uid!r}, closed={self.closed})"


class BaseServer:
    """Accepts connections and runs a session for each of them."""

    def __init__(self, port: int, host: str = "0.0.0.0") -> None:
        self.events = EventDispatcher()
        self.sessions = SessionManager()
        self.events.add_connect_handler(self.sessions)
        self.events.add_close_handler(self.sessions)
        self._listener: Optional[socket.socket] = socket.create_server((host, port))
        self.host, self.port = self._listener.getsockname()[:2]
        self._lock = threading.Lock()
        self._running = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._accepted: "weakref.WeakSet[Session]" = weakref.WeakSet()

    @property
    def running(self) -> bool:
        return self._running.is_set()

    def start(self) -> None:
        """Begin accepting connections in the background."""
        with self._lock:
            if self._running.is_set():
                return
            if self._listener is None:
                raise RuntimeError("server has been stopped")
            listener = self._listener
            listener.settimeout(_ACCEPT_POLL_SECONDS)
            self._running.set()
            self._thread = threading.Thread(
                target=self._accept_loop, args=(listener,), name="server-accept", daemon=True
            )
            self._thread.start()

    def serve_forever(self) -> None:
        """Start and block until stopped or interrupted."""
        self.start()
        try:
            while self._running.is_set():
                self._running.wait(0.5)
                if not self._thread or not self._thread.is_alive():
                    break
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    def stop(self) -> None:
        """Stop accepting, close the listener and every open session."""
        with self._lock:
            self._running.clear()
            listener, self._listener = self._listener, None
            thread, self._thread = self._thread, None
        if listener is not None:
            listener.close()
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        with self._lock:
            open_sessions = list(self._accepted)
        for session in open_sessions:
            session.close()

    def _accept_loop(self, listener: socket.socket) -> None:
        while self._running.is_set():
            try:
                conn, _ = listener.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            conn.settimeout(None)
            session = Session(conn, self.events)
            with self._lock:
                self._accepted.add(session)
            session.start()

    def __enter__(self) -> "BaseServer":
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()


class BaseClient:
    """A single outgoing connection carried by one session."""

    def __init__(self) -> None:
        self.events = EventDispatcher()
        self._lock = threading.Lock()
        self._session: Optional[Session] = None

    @property
    def connected(self) -> bool:
        session = self._session
        return session is not None and not session.closed

    def connect(self, host: str, port: int) -> bool:
        """Connect to host and port; False when already connected or it fails."""
        with self._lock:
            if self._session is not None and not self._session.closed:
                return False
            try:
                sock = socket.create_connection((host, port))
            except OSError as exc:
                _log.debug("connect to %s:%s failed: %s", host, port, exc)
                return False
            session = Session(sock, self.events)
            self._session = session
        session.start()
        return True

    def disconnect(self) -> None:
        with self._lock:
            session, self._session = self._session, None
        if session is not None:
            session.close()

    def send(self, data: bytes) -> bool:
        """Send data as one packet; False when not connected."""
        session = self._session
        if session is None or session.closed:
            return False
        return session.send(data)

    def __enter__(self) -> "BaseClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()