"""
WebSocket Connection Manager
============================

This module owns the single WebSocket session to the remote music player.
It drives the connection state machine, reconnects after a fixed delay
whenever the socket closes, and routes inbound events to registered handlers.

State machine:
    IDLE -> CONNECTING -> OPEN -> CLOSING -> CLOSED -> RECONNECTING -> CONNECTING ...
    STOPPED is terminal and only reached through stop().
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Callable, Dict, List, Optional

import aiohttp

from music_remote.utils.constants import ABNORMAL_CLOSE_CODE, MESSAGES, RECONNECT_DELAY
from music_remote.utils.exceptions import ConnectionNotOpenError, ProtocolError
from music_remote.utils.notifications import (
    Notifier, create_info_notification, create_warning_notification, safe_notify
)
from music_remote.utils.protocol import Envelope

HEARTBEAT = 30.0


class ConnectionState(Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"
    RECONNECTING = "reconnecting"
    STOPPED = "stopped"


class ConnectionManager:
    """
    Owns the WebSocket session to the remote player

    Only one session is live at a time. Commands issued while the socket is
    not open are dropped, never queued.
    """

    def __init__(self, url: str, http_session: Optional[aiohttp.ClientSession] = None,
                 headers: Optional[Dict[str, str]] = None,
                 reconnect_delay: float = RECONNECT_DELAY,
                 notifier: Optional[Notifier] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the Connection Manager

        Args:
            url: WebSocket endpoint (see protocol.endpoint_url)
            http_session: Optional aiohttp session. If None, one is created on
                first connect and closed by stop()
            headers: Extra handshake headers (bearer credential)
            reconnect_delay: Seconds between a close and the next attempt
            notifier: Receives connection loss and reconnect notifications
            logger: Logger instance for debugging
        """
        self.logger = logger or logging.getLogger(__name__)
        self.url = url
        self.headers = headers or {}
        self.reconnect_delay = reconnect_delay
        self.notifier = notifier
        self.event_handlers: Dict[str, Callable] = {}
        self.open_callbacks: List[Callable] = []

        self._http = http_session
        self._owns_http = http_session is None
        self._ws = None
        self._state = ConnectionState.IDLE
        self._session_task: Optional[asyncio.Task] = None
        self._reconnect_handle: Optional[asyncio.TimerHandle] = None
        self._stopped = False

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def status(self) -> str:
        return self._state.value

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN and self._ws is not None and not self._ws.closed

    @property
    def reconnect_pending(self) -> bool:
        return self._reconnect_handle is not None

    def _set_state(self, state: ConnectionState):
        if state is not self._state:
            self.logger.debug(f"Connection state {self._state.name} -> {state.name}")
            self._state = state

    def register_event_handler(self, event: str, handler: Callable):
        """
        Register an event handler

        Args:
            event: Inbound event name
            handler: Function or coroutine called with the event payload
        """
        self.event_handlers[event] = handler
        self.logger.debug(f"Registered handler for event type: {event}")

    def register_open_callback(self, callback: Callable):
        """Register a function or coroutine run each time the socket opens"""
        self.open_callbacks.append(callback)

    # Lifecycle

    def start(self):
        """Begin connecting. Must be called from a running event loop."""
        if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN,
                           ConnectionState.CLOSING, ConnectionState.RECONNECTING):
            self.logger.debug(f"start() ignored, connection is {self.status}")
            return
        self._stopped = False
        self._spawn_session()

    async def stop(self):
        """
        Tear down the session for good

        Cancels any scheduled reconnect, closes the socket only if it is open
        and waits for the reader task to finish. Safe to call repeatedly.
        """
        self._stopped = True

        if self._reconnect_handle is not None:
            self._reconnect_handle.cancel()
            self._reconnect_handle = None
            self.logger.debug("Cancelled scheduled reconnect")

        ws = self._ws
        if ws is not None and not ws.closed and self._state is ConnectionState.OPEN:
            self.logger.info("Closing WebSocket...")
            self._set_state(ConnectionState.CLOSING)
            await ws.close()

        task = self._session_task
        self._session_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            if ws is None:
                # Still connecting
                task.cancel()
            try:
                await asyncio.wait_for(task, timeout=2.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                self.logger.debug("Session task cancelled or timed out")

        self._ws = None
        if self._owns_http and self._http is not None:
            await self._http.close()
            self._http = None

        self._set_state(ConnectionState.STOPPED)
        self.logger.info("Connection manager stopped")

    def _spawn_session(self):
        self._set_state(ConnectionState.CONNECTING)
        self._session_task = asyncio.get_running_loop().create_task(self._run_session())

    async def _run_session(self):
        """One connect/read/close cycle, followed by a reconnect schedule"""
        close_code = await self._connect_and_read()

        self._ws = None
        self._set_state(ConnectionState.CLOSED)
        self.logger.info(f"WebSocket disconnected (code {close_code})")
        if self._stopped:
            return

        safe_notify(self.notifier, create_warning_notification(
            MESSAGES['DISCONNECTED_TITLE'], MESSAGES['DISCONNECTED'].format(close_code)
        ), self.logger)
        self._schedule_reconnect()

    async def _connect_and_read(self) -> int:
        if self._http is None:
            self._http = aiohttp.ClientSession()

        self.logger.info(f"Connecting to {self.url}...")
        try:
            self._ws = await self._http.ws_connect(
                self.url, headers=self.headers, heartbeat=HEARTBEAT
            )
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            self.logger.error(f"Failed to connect to {self.url}: {e}")
            return ABNORMAL_CLOSE_CODE

        ws = self._ws
        self._set_state(ConnectionState.OPEN)
        self.logger.info("WebSocket connected")
        await self._run_open_callbacks()

        try:
            async for message in ws:
                await self._handle_message(message)
        except Exception as e:
            self.logger.error(f"Error in WebSocket reader: {e}")

        if self._state is ConnectionState.OPEN:
            self._set_state(ConnectionState.CLOSING)
        if not ws.closed:
            await ws.close()
        return ws.close_code if ws.close_code is not None else ABNORMAL_CLOSE_CODE

    def _schedule_reconnect(self):
        self._set_state(ConnectionState.RECONNECTING)
        self.logger.info(f"Reconnecting in {self.reconnect_delay} seconds")
        loop = asyncio.get_running_loop()
        self._reconnect_handle = loop.call_later(self.reconnect_delay, self._reconnect)

    def _reconnect(self):
        self._reconnect_handle = None
        if self._stopped:
            return
        safe_notify(self.notifier, create_info_notification(
            MESSAGES['RECONNECTING_TITLE'], MESSAGES['RECONNECTING']
        ), self.logger)
        self._spawn_session()

    async def _run_open_callbacks(self):
        for callback in self.open_callbacks:
            try:
                result = callback()
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(f"Error in open callback: {e}")

    # Inbound

    async def _handle_message(self, message: aiohttp.WSMessage):
        if message.type == aiohttp.WSMsgType.TEXT:
            await self._dispatch_frame(message.data)
        elif message.type == aiohttp.WSMsgType.ERROR:
            error = self._ws.exception() if self._ws is not None else None
            self.logger.error(f"WebSocket error: {error}")
            safe_notify(self.notifier, create_warning_notification(
                MESSAGES['WS_ERROR_TITLE'], MESSAGES['WS_ERROR']
            ), self.logger)
        else:
            self.logger.debug(f"Ignoring {message.type.name} frame")

    async def _dispatch_frame(self, data: str):
        try:
            envelope = Envelope.from_json(data)
        except ProtocolError as e:
            self.logger.error(f"Error processing WebSocket message: {e}")
            return

        self.logger.debug(f"Received WebSocket event {envelope.event}")
        handler = self.event_handlers.get(envelope.event)
        if handler is None:
            self.logger.info(f"Unhandled event: {envelope.event}")
            return

        try:
            result = handler(envelope.payload)
            if inspect.isawaitable(result):
                await result
        except ProtocolError as e:
            self.logger.error(f"Discarding malformed {envelope.event} event: {e}")
        except Exception as e:
            self.logger.error(f"Error handling event {envelope.event}: {e}")

    # Outbound

    async def _write(self, envelope: Envelope):
        if not self.is_open:
            raise ConnectionNotOpenError(f"Connection is {self.status}")
        await self._ws.send_str(envelope.to_json())

    async def send(self, envelope: Envelope) -> bool:
        """
        Send an envelope if the socket is open

        Args:
            envelope: Outbound envelope

        Returns:
            True if written to the socket, False if dropped
        """
        try:
            await self._write(envelope)
        except ConnectionNotOpenError as e:
            self.logger.warning(f"Dropping {envelope.event} command: {e}")
            return False
        except (aiohttp.ClientError, ConnectionError) as e:
            self.logger.error(f"Error sending {envelope.event} command: {e}")
            return False
        return True
