"""Blocking rtnetlink client socket."""

from __future__ import annotations

import socket
from collections import deque
from types import TracebackType
from typing import Iterator, Self

from loguru import logger

from netstatus.exceptions import ProtocolDecodeError, TransportError
from netstatus.rtnl.constants import (
    AF_UNSPEC,
    NETLINK_ROUTE,
    NLM_F_DUMP,
    NLM_F_MULTI,
    NLM_F_REQUEST,
    NLMSG_DONE,
    RTM_GETADDR,
    RTM_GETLINK,
    RTM_GETNEIGH,
    RTM_GETROUTE,
)
from netstatus.rtnl.messages import (
    IfAddrMessage,
    IfInfoMessage,
    NdMessage,
    NetlinkMessage,
    RtMessage,
    pack_message,
    parse_messages,
)


class RtnlSocket:
    """rtnetlink (``NETLINK_ROUTE``) client.

    Dump requests return a lazy iterator over the reply messages; consumers may
    stop early. The remainder of an abandoned dump is read and discarded
    before the next request is sent, and replies are matched by sequence
    number.
    """

    RECV_BUFSIZE = 65536

    def __init__(self) -> None:
        self._sock: socket.socket | None = None
        self._seq = 0
        self._pending: int | None = None
        self._backlog: deque[NetlinkMessage] = deque()

    def connect(self) -> None:
        """Open and bind the netlink socket."""
        try:
            sock = socket.socket(socket.AF_NETLINK, socket.SOCK_RAW | socket.SOCK_CLOEXEC, NETLINK_ROUTE)
        except OSError as e:
            raise TransportError(f"Failed to connect to netlink: {e.strerror or e}", errno=e.errno) from e
        try:
            sock.bind((0, 0))
        except OSError as e:
            sock.close()
            raise TransportError(f"Failed to bind netlink socket: {e.strerror or e}", errno=e.errno) from e
        self._sock = sock
        logger.debug("rtnetlink socket opened")

    def disconnect(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None
        self._pending = None
        self._backlog.clear()

    def is_connected(self) -> bool:
        return self._sock is not None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.disconnect()

    # ── low level ─────────────────────────────────────────────────────

    def _send(self, msg_type: int, flags: int, payload: bytes) -> int:
        if self._sock is None:
            raise TransportError("netlink socket is not connected")
        if self._pending is not None:
            self._drain(self._pending)
        self._seq += 1
        try:
            self._sock.send(pack_message(msg_type, flags, self._seq, payload))
        except OSError as e:
            raise TransportError(f"Failed to send netlink request: {e.strerror or e}", errno=e.errno) from e
        self._pending = self._seq
        return self._seq

    def _next_message(self) -> NetlinkMessage:
        assert self._sock is not None
        while not self._backlog:
            try:
                data = self._sock.recv(self.RECV_BUFSIZE)
            except OSError as e:
                raise TransportError(f"Failed to receive netlink reply: {e.strerror or e}", errno=e.errno) from e
            if not data:
                raise TransportError("netlink socket closed")
            try:
                self._backlog.extend(parse_messages(data))
            except ProtocolDecodeError:
                # the rest of the reply is unrecoverable; never wait for its NLMSG_DONE
                self._backlog.clear()
                self._pending = None
                raise
        return self._backlog.popleft()

    def _receive(self, seq: int) -> Iterator[NetlinkMessage]:
        """Yield the replies to ``seq`` until ``NLMSG_DONE`` or a single-part reply."""
        while True:
            msg = self._next_message()
            if msg.seq != seq:
                logger.debug(f"skipping netlink message with stale seq {msg.seq} (want {seq})")
                continue
            if msg.type == NLMSG_DONE:
                self._pending = None
                return
            if not msg.flags & NLM_F_MULTI:
                self._pending = None
                yield msg
                return
            yield msg

    def _drain(self, seq: int) -> None:
        # the kernel refuses a new dump while another one is still in progress
        logger.debug(f"draining unfinished netlink dump {seq}")
        for _ in self._receive(seq):
            pass

    def dump(self, msg_type: int, payload: bytes) -> Iterator[NetlinkMessage]:
        """Send a dump request and return an iterator over the reply stream."""
        seq = self._send(msg_type, NLM_F_REQUEST | NLM_F_DUMP, payload)
        return self._receive(seq)

    # ── typed queries ─────────────────────────────────────────────────

    def dump_links(self) -> Iterator[NetlinkMessage]:
        return self.dump(RTM_GETLINK, IfInfoMessage().encode())

    def dump_addresses(self, family: int = AF_UNSPEC) -> Iterator[NetlinkMessage]:
        return self.dump(RTM_GETADDR, IfAddrMessage(family=family).encode())

    def dump_routes(self, family: int = AF_UNSPEC) -> Iterator[NetlinkMessage]:
        return self.dump(RTM_GETROUTE, RtMessage(family=family).encode())

    def dump_neighbors(self, family: int = AF_UNSPEC, ifindex: int = 0) -> Iterator[NetlinkMessage]:
        return self.dump(RTM_GETNEIGH, NdMessage(family=family, ifindex=ifindex).encode())
