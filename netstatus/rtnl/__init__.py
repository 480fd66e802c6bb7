"""rtnetlink client: socket transport and message codec."""

from netstatus.rtnl.messages import (
    IfAddrMessage,
    IfInfoMessage,
    NdMessage,
    NetlinkMessage,
    RtMessage,
    pack_message,
    parse_attributes,
    parse_messages,
)
from netstatus.rtnl.transport import RtnlSocket

__all__ = [
    "RtnlSocket",
    "NetlinkMessage",
    "IfInfoMessage",
    "IfAddrMessage",
    "NdMessage",
    "RtMessage",
    "pack_message",
    "parse_messages",
    "parse_attributes",
]
