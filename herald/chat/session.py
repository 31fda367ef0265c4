"""Persistent, self-healing chat session.

The session manager owns the only connection to the chat server. A single
driver task moves it through an explicit state machine::

    DISCONNECTED -> CONNECTING -> LOGGING_IN -> READY
          ^              |             |         |
          +--------------+-------------+---------+

Any failure returns the session to ``DISCONNECTED``; the driver then waits
out an exponential backoff and starts again. Other tasks interact with the
session only through :meth:`ChatSessionManager.send` and
:meth:`ChatSessionManager.join`, which enqueue frames for the driver's
writer.

Usage
-----
>>> session = ChatSessionManager(config.chat, rooms=config.all_rooms())
>>> session.start()
>>> await session.send("dev", "hello")
True
>>> await session.close()

"""

from __future__ import annotations

import asyncio
import collections
import collections.abc as cabc
import contextlib
import enum
import time
import typing as typ

from herald.config import BackpressurePolicy
from herald.logging import (
    get_logger,
    log_debug,
    log_exception,
    log_info,
    log_warning,
)
from herald.routing import to_room_id

from .backoff import ExponentialBackoff
from .errors import ChatError, ChatLoginError, ChatTransportError
from .login import ShowdownLoginClient
from .protocol import (
    ServerMessage,
    away_command,
    challenge_of,
    format_chat,
    join_command,
    parse_frame,
    strip_rank,
    to_user_id,
    trn_command,
)
from .transport import WebSocketTransport

if typ.TYPE_CHECKING:
    from herald.config import ChatConfig
    from herald.observability import RelayEventLogger

    from .login import LoginClient
    from .transport import ChatConnection, ChatTransport

logger = get_logger(__name__)


class ConnectionState(enum.StrEnum):
    """Lifecycle states of the chat session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    LOGGING_IN = "logging_in"
    READY = "ready"


StateListener: typ.TypeAlias = cabc.Callable[[ConnectionState], None]


class OutboundQueue:
    """FIFO of client frames shared by senders and the writer.

    Chat messages are bounded by ``maxsize``. Control frames (room joins) are
    sent ahead of queued messages and do not count towards the bound.
    """

    def __init__(self, maxsize: int) -> None:
        """Create an empty queue holding at most ``maxsize`` chat messages."""
        self._maxsize = maxsize
        self._messages: collections.deque[str] = collections.deque()
        self._control: collections.deque[str] = collections.deque()
        self._available = asyncio.Event()
        self._space = asyncio.Event()
        self._space.set()
        self._closed = False

    def __len__(self) -> int:
        """Return the number of queued chat messages."""
        return len(self._messages)

    @property
    def full(self) -> bool:
        """Return True when no further chat message fits."""
        return len(self._messages) >= self._maxsize

    def offer(self, frame: str) -> bool:
        """Append ``frame`` if there is room, without waiting."""
        if self._closed or self.full:
            return False
        self._messages.append(frame)
        self._available.set()
        return True

    async def put(self, frame: str) -> bool:
        """Append ``frame``, waiting for room. Returns False once closed."""
        while True:
            if self._closed:
                return False
            if not self.full:
                self._messages.append(frame)
                self._available.set()
                return True
            self._space.clear()
            await self._space.wait()

    def push_control(self, frame: str) -> None:
        """Append a control frame, ahead of every chat message."""
        self._control.append(frame)
        self._available.set()

    def clear_control(self) -> None:
        """Forget pending control frames."""
        self._control.clear()

    def requeue(self, frame: str, *, control: bool) -> None:
        """Put back a frame the writer took but could not transmit."""
        (self._control if control else self._messages).appendleft(frame)
        self._available.set()

    async def get(self) -> tuple[str, bool]:
        """Wait for the next frame; the flag reports whether it is a control frame."""
        while not (self._control or self._messages):
            self._available.clear()
            await self._available.wait()
        if self._control:
            return (self._control.popleft(), True)
        frame = self._messages.popleft()
        self._space.set()
        return (frame, False)

    def close(self) -> None:
        """Refuse further frames and release waiting producers."""
        self._closed = True
        self._space.set()


class ChatSessionManager:
    """Owner of the chat connection, its login and its room memberships.

    Parameters
    ----------
    config
        Chat server, credentials, queue and timing settings.
    rooms
        Rooms to join whenever the session becomes ready.
    transport
        Connection factory. Defaults to :class:`WebSocketTransport`.
    login_client
        Login server client. Defaults to :class:`ShowdownLoginClient`.
    event_logger
        Structured event sink.
    clock
        Monotonic clock, replaceable in tests.

    """

    def __init__(  # noqa: PLR0913
        self,
        config: ChatConfig,
        *,
        rooms: cabc.Iterable[str] = (),
        transport: ChatTransport | None = None,
        login_client: LoginClient | None = None,
        event_logger: RelayEventLogger | None = None,
        clock: cabc.Callable[[], float] = time.monotonic,
    ) -> None:
        """Create a disconnected session; call :meth:`start` to connect."""
        self._config = config
        self._transport = transport or WebSocketTransport(
            open_timeout=config.connect_timeout
        )
        self._login_client = login_client or ShowdownLoginClient(config.login_url)
        if event_logger is None:
            from herald.observability import RelayEventLogger as _RelayEventLogger

            event_logger = _RelayEventLogger()
        self._event_logger = event_logger
        self._clock = clock
        self._backoff = ExponentialBackoff(config.backoff_min, config.backoff_max)
        self._outbound = OutboundQueue(config.queue_size)

        self._state = ConnectionState.DISCONNECTED
        self._ready = asyncio.Event()
        self._closing = asyncio.Event()
        self._listeners: list[StateListener] = []
        self._desired_rooms: dict[str, None] = dict.fromkeys(
            to_room_id(room) for room in rooms
        )
        self._joined_rooms: set[str] = set()
        self._pending_joins: set[str] = set()
        self._identity: str | None = None
        self._driver: asyncio.Task[None] | None = None
        self._attempt = 0
        self._ready_since: float | None = None
        self._last_sent: float | None = None

    @property
    def state(self) -> ConnectionState:
        """Return the current lifecycle state."""
        return self._state

    @property
    def identity(self) -> str | None:
        """Return the name the server last confirmed for this connection."""
        return self._identity

    @property
    def desired_rooms(self) -> tuple[str, ...]:
        """Return every room the session keeps itself joined to."""
        return tuple(self._desired_rooms)

    @property
    def joined_rooms(self) -> frozenset[str]:
        """Return the rooms the server confirmed on the current connection."""
        return frozenset(self._joined_rooms)

    @property
    def queued_messages(self) -> int:
        """Return the number of chat messages awaiting transmission."""
        return len(self._outbound)

    def add_state_listener(self, listener: StateListener) -> None:
        """Call ``listener`` with the new state after every transition."""
        self._listeners.append(listener)

    async def wait_ready(self) -> bool:
        """Wait until the session is ready; False if it was closed instead."""
        await self._ready.wait()
        return self._state is ConnectionState.READY

    def join(self, room: str) -> None:
        """Keep the session joined to ``room`` from now on.

        Idempotent. A room already joined on the current connection is not
        joined again; every desired room is re-joined after a reconnect.
        """
        room_id = to_room_id(room)
        self._desired_rooms[room_id] = None
        if (
            self._state is ConnectionState.READY
            and room_id not in self._joined_rooms
            and room_id not in self._pending_joins
        ):
            self._request_join(room_id)

    async def send(self, room: str, text: str) -> bool:
        """Queue ``text`` for ``room``.

        With the ``drop`` policy, messages offered while the session is not
        ready, or while the queue is full, are discarded. With ``block``, the
        call waits for the session to become ready and for queue space.

        Returns
        -------
        bool
            True when the message was queued for transmission.

        """
        if self._closing.is_set():
            return self._drop(room, "closed")

        frame = format_chat(room, text)
        if self._config.backpressure is BackpressurePolicy.DROP:
            if self._state is not ConnectionState.READY:
                return self._drop(room, "not_ready")
            if not self._outbound.offer(frame):
                return self._drop(room, "queue_full")
            return True

        while not self._closing.is_set() and self._state is not ConnectionState.READY:
            await self._ready.wait()
        if self._closing.is_set() or not await self._outbound.put(frame):
            return self._drop(room, "closed")
        return True

    def start(self) -> asyncio.Task[None]:
        """Start the driver task if it is not already running."""
        if self._driver is None or self._driver.done():
            self._driver = asyncio.create_task(self.run(), name="herald-chat-session")
        return self._driver

    async def run(self) -> None:
        """Drive the session until :meth:`close` is called.

        Connection and login failures are logged and retried with backoff;
        they never propagate out of this coroutine.
        """
        if self._driver is None:
            self._driver = asyncio.current_task()
        while not self._closing.is_set():
            self._attempt += 1
            self._ready_since = None
            try:
                await self._connect_and_serve()
            except ChatError as exc:
                self._event_logger.log_connection_failed(
                    attempt=self._attempt, error=exc
                )
            except Exception as exc:  # noqa: BLE001
                log_exception(logger, "Unexpected chat session failure", exc)
            finally:
                self._set_state(ConnectionState.DISCONNECTED)

            if self._closing.is_set():
                break
            await self._wait_before_reconnect()

    async def close(self) -> None:
        """Stop the driver, close the connection and release waiting senders."""
        self._closing.set()
        self._outbound.close()
        driver, self._driver = self._driver, None
        if driver is not None and driver is not asyncio.current_task():
            driver.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await driver
        self._set_state(ConnectionState.DISCONNECTED)
        self._ready.set()
        await self._login_client.aclose()

    async def _wait_before_reconnect(self) -> None:
        ready_since = self._ready_since
        if (
            ready_since is not None
            and self._clock() - ready_since >= self._config.backoff_grace
        ):
            self._backoff.reset()
            self._attempt = 0

        delay = self._backoff.next_delay()
        self._event_logger.log_reconnect_scheduled(
            attempt=self._attempt + 1, delay_seconds=delay
        )
        with contextlib.suppress(TimeoutError):
            async with asyncio.timeout(delay):
                await self._closing.wait()

    async def _connect_and_serve(self) -> None:
        url = self._config.server_url
        self._set_state(ConnectionState.CONNECTING)
        try:
            async with asyncio.timeout(self._config.connect_timeout):
                connection = await self._transport.connect(url)
        except TimeoutError as exc:
            raise ChatTransportError.connect_timeout(
                url, self._config.connect_timeout
            ) from exc

        try:
            self._set_state(ConnectionState.LOGGING_IN)
            try:
                async with asyncio.timeout(self._config.login_timeout):
                    await self._log_in(connection)
            except TimeoutError as exc:
                raise ChatLoginError.timeout(self._config.login_timeout) from exc
            self._enter_ready()
            await self._serve(connection)
        finally:
            self._joined_rooms.clear()
            self._pending_joins.clear()
            await connection.close()

    async def _log_in(self, connection: ChatConnection) -> None:
        username = self._config.username
        logged_in = False
        while not logged_in:
            for message in parse_frame(await connection.recv()):
                if logged_in:
                    self._handle(message)
                elif message.kind == "challstr":
                    assertion = await self._login_client.get_assertion(
                        username, self._config.password, challenge_of(message)
                    )
                    await connection.send(trn_command(username, assertion))
                elif message.kind == "updateuser" and self._confirms_login(message):
                    self._identity = strip_rank(message.args[0])
                    logged_in = True
                elif message.kind == "nametaken":
                    detail = message.args[-1] if message.args else "name taken"
                    raise ChatLoginError.rejected(username, detail)
        log_info(
            logger, "Logged in to %s as %s", self._config.server_url, self._identity
        )

    def _confirms_login(self, message: ServerMessage) -> bool:
        args = message.args
        return (
            len(args) >= 2  # noqa: PLR2004
            and args[1] == "1"
            and to_user_id(args[0]) == to_user_id(self._config.username)
        )

    def _enter_ready(self) -> None:
        self._ready_since = self._clock()
        self._outbound.clear_control()
        self._outbound.push_control(away_command())
        for room in self._desired_rooms:
            self._request_join(room)
        self._set_state(ConnectionState.READY)

    def _request_join(self, room: str) -> None:
        self._pending_joins.add(room)
        self._outbound.push_control(join_command(room))

    async def _serve(self, connection: ChatConnection) -> None:
        reader = asyncio.create_task(self._read_loop(connection))
        writer = asyncio.create_task(self._write_loop(connection))
        try:
            done, _ = await asyncio.wait(
                {reader, writer}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            reader.cancel()
            writer.cancel()
            await asyncio.gather(reader, writer, return_exceptions=True)

        for task in done:
            error = task.exception()
            if error is not None:
                raise error
        raise ChatTransportError.connection_lost("session loop ended")

    async def _read_loop(self, connection: ChatConnection) -> None:
        idle_timeout = self._config.idle_timeout
        while True:
            if idle_timeout is None:
                frame = await connection.recv()
            else:
                try:
                    async with asyncio.timeout(idle_timeout):
                        frame = await connection.recv()
                except TimeoutError as exc:
                    raise ChatTransportError.idle_timeout(idle_timeout) from exc
            for message in parse_frame(frame):
                self._handle(message)

    def _handle(self, message: ServerMessage) -> None:
        match message.kind:
            case "init" if message.room:
                self._pending_joins.discard(message.room)
                self._joined_rooms.add(message.room)
                log_info(logger, "Joined room %s", message.room)
            case "deinit" if message.room:
                self._joined_rooms.discard(message.room)
                log_warning(logger, "Left room %s", message.room)
            case "noinit":
                self._pending_joins.discard(message.room)
                log_warning(
                    logger,
                    "Could not join room %s: %s",
                    message.room,
                    " ".join(message.args),
                )
            case "updateuser" if message.args:
                self._identity = strip_rank(message.args[0])
            case "popup":
                log_info(logger, "Server popup: %s", "|".join(message.args))
            case _:
                log_debug(
                    logger, "Ignored %s message (room=%s)", message.kind, message.room
                )

    async def _write_loop(self, connection: ChatConnection) -> None:
        while True:
            frame, control = await self._outbound.get()
            try:
                await self._throttle()
                await connection.send(frame)
            except BaseException:
                self._outbound.requeue(frame, control=control)
                raise
            self._last_sent = self._clock()

    async def _throttle(self) -> None:
        if self._last_sent is None:
            return
        wait = self._config.send_interval - (self._clock() - self._last_sent)
        if wait > 0:
            await asyncio.sleep(wait)

    def _drop(self, room: str, reason: str) -> bool:
        self._event_logger.log_message_dropped(room=room, reason=reason)
        return False

    def _set_state(self, state: ConnectionState) -> None:
        previous = self._state
        if previous is state:
            return
        self._state = state
        if state is ConnectionState.READY:
            self._ready.set()
        else:
            self._ready.clear()
        self._event_logger.log_state_changed(previous=previous, current=state)
        for listener in tuple(self._listeners):
            listener(state)


__all__ = ["ChatSessionManager", "ConnectionState", "OutboundQueue", "StateListener"]
