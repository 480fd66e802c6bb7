"""rtnetlink constants from linux/netlink.h, linux/rtnetlink.h and linux/if_arp.h."""

import socket

AF_UNSPEC = socket.AF_UNSPEC
AF_INET = socket.AF_INET
AF_INET6 = socket.AF_INET6

NETLINK_ROUTE = 0

# Message types
NLMSG_NOOP = 1
NLMSG_ERROR = 2
NLMSG_DONE = 3
NLMSG_OVERRUN = 4

RTM_NEWLINK = 16
RTM_DELLINK = 17
RTM_GETLINK = 18
RTM_NEWADDR = 20
RTM_DELADDR = 21
RTM_GETADDR = 22
RTM_NEWROUTE = 24
RTM_DELROUTE = 25
RTM_GETROUTE = 26
RTM_NEWNEIGH = 28
RTM_DELNEIGH = 29
RTM_GETNEIGH = 30

# Message flags
NLM_F_REQUEST = 0x01
NLM_F_MULTI = 0x02
NLM_F_ACK = 0x04
NLM_F_ROOT = 0x100
NLM_F_MATCH = 0x200
NLM_F_DUMP = NLM_F_ROOT | NLM_F_MATCH

# Attribute type flags
NLA_F_NESTED = 0x8000
NLA_F_NET_BYTEORDER = 0x4000
NLA_TYPE_MASK = ~(NLA_F_NESTED | NLA_F_NET_BYTEORDER) & 0xFFFF

# IFLA_*
IFLA_ADDRESS = 1
IFLA_BROADCAST = 2
IFLA_IFNAME = 3
IFLA_MTU = 4

# IFA_*
IFA_ADDRESS = 1
IFA_LOCAL = 2
IFA_LABEL = 3
IFA_FLAGS = 8

IFA_F_DEPRECATED = 0x20

# NDA_*
NDA_DST = 1
NDA_LLADDR = 2

# RTA_*
RTA_DST = 1
RTA_OIF = 4
RTA_GATEWAY = 5
RTA_PRIORITY = 6
RTA_TABLE = 15

RT_TABLE_MAIN = 254
RTN_UNICAST = 1

RT_SCOPE_UNIVERSE = 0
RT_SCOPE_SITE = 200
RT_SCOPE_LINK = 253
RT_SCOPE_HOST = 254
RT_SCOPE_NOWHERE = 255

# ARPHRD_* hardware types
ARPHRD_ETHER = 1
ARPHRD_LOOPBACK = 772
ARPHRD_NONE = 0xFFFE
ARPHRD_VOID = 0xFFFF

ARPHRD_NAMES: dict[int, str] = {
    0: "NETROM",
    1: "ETHER",
    2: "EETHER",
    3: "AX25",
    4: "PRONET",
    5: "CHAOS",
    6: "IEEE802",
    7: "ARCNET",
    8: "APPLETLK",
    15: "DLCI",
    19: "ATM",
    23: "METRICOM",
    24: "IEEE1394",
    27: "EUI64",
    32: "INFINIBAND",
    256: "SLIP",
    257: "CSLIP",
    258: "SLIP6",
    259: "CSLIP6",
    260: "RSRVD",
    264: "ADAPT",
    270: "ROSE",
    271: "X25",
    272: "HWX25",
    280: "CAN",
    512: "PPP",
    513: "CISCO",
    516: "LAPB",
    517: "DDCMP",
    518: "RAWHDLC",
    519: "RAWIP",
    768: "TUNNEL",
    769: "TUNNEL6",
    770: "FRAD",
    771: "SKIP",
    772: "LOOPBACK",
    773: "LOCALTLK",
    774: "FDDI",
    775: "BIF",
    776: "SIT",
    777: "IPDDP",
    778: "IPGRE",
    779: "PIMREG",
    780: "HIPPI",
    781: "ASH",
    782: "ECONET",
    783: "IRDA",
    784: "FCPP",
    785: "FCAL",
    786: "FCPL",
    787: "FCFABRIC",
    800: "IEEE802_TR",
    801: "IEEE80211",
    802: "IEEE80211_PRISM",
    803: "IEEE80211_RADIOTAP",
    804: "IEEE802154",
    805: "IEEE802154_MONITOR",
    820: "PHONET",
    821: "PHONET_PIPE",
    822: "CAIF",
    823: "IP6GRE",
    824: "NETLINK",
    825: "6LOWPAN",
    826: "VSOCKMON",
    ARPHRD_NONE: "NONE",
    ARPHRD_VOID: "VOID",
}
