"""
Topic classification and per-topic mastery breakdown.

Questions normally carry a topic from the parser; when they don't, the
topic is guessed from keyword hits in the question text.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from netquiz.core.mastery import MasteryLevel, QuestionStat
from netquiz.core.models import Question

DEFAULT_TOPIC = "General Networking"

TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "Network Infrastructure": (
        "switch", "router", "hub", "access point", "firewall", "load balancer", "bridge",
        "modem", "transceiver", "rack", "patch panel", "UPS", "PDU", "NIC", "media converter",
    ),
    "IP Addressing & Subnetting": (
        "subnet", "IP address", "CIDR", "VLSM", "APIPA", "169.254", "IPv4", "IPv6", "NAT",
        "PAT", "DHCP", "default gateway", "/28", "/30", "/24", "broadcast address",
        "network address", "supernet",
    ),
    "Routing & Switching Protocols": (
        "OSPF", "EIGRP", "BGP", "RIP", "routing", "administrative distance", "static route",
        "dynamic route", "STP", "spanning tree", "RSTP", "VLAN", "802.1Q", "trunking", "trunk",
        "LACP", "link aggregation", "EtherChannel",
    ),
    "Wireless Networking": (
        "wireless", "Wi-Fi", "SSID", "2.4GHz", "5GHz", "802.11", "antenna", "omnidirectional",
        "heat map", "WPA", "WPA2", "WPA3", "channel", "interference", "mesh network", "ad hoc",
    ),
    "Network Security": (
        "firewall", "ACL", "VPN", "IPsec", "IDS", "IPS", "SIEM", "encryption", "AES", "ESP",
        "AH", "certificate", "SSL", "TLS", "802.1X", "RADIUS", "TACACS", "port security",
        "MAC filtering", "NAC", "MFA", "SSO",
    ),
    "Network Services & Protocols": (
        "DNS", "DHCP", "NTP", "SNMP", "SMTP", "HTTP", "HTTPS", "FTP", "TFTP", "SSH", "Telnet",
        "LDAP", "NFS", "SMB", "Syslog", "MIB", "IMAP", "POP3", "MX record", "TTL", "A record",
    ),
    "Network Troubleshooting": (
        "troubleshoot", "ping", "tracert", "traceroute", "netstat", "nslookup", "dig", "nmap",
        "tcpdump", "Wireshark", "packet capture", "cable tester", "OTDR", "loopback", "baseline",
    ),
    "Cabling & Physical Layer": (
        "fiber", "Cat 5", "Cat 6", "Cat 8", "RJ45", "RJ11", "coaxial", "SFP", "LC", "SC", "ST",
        "MPO", "patch cable", "crossover", "straight-through", "TIA", "punch down", "keystone",
        "crimping", "multimode", "single-mode", "plenum", "shielded", "copper tape",
        "jumbo frame",
    ),
    "Cloud & Virtualization": (
        "cloud", "SaaS", "IaaS", "PaaS", "hybrid", "private cloud", "public cloud", "virtual",
        "VM", "hypervisor", "NFV", "SDN", "SD-WAN", "VXLAN", "container",
    ),
    "Network Attacks & Threats": (
        "attack", "spoofing", "ARP spoofing", "MAC flooding", "evil twin", "rogue",
        "DNS poisoning", "DDoS", "DoS", "phishing", "man-in-the-middle", "brute force",
        "social engineering", "ransomware", "botnet", "CAM table",
    ),
    "Disaster Recovery & Documentation": (
        "backup", "RPO", "RTO", "MTTR", "MTBF", "disaster recovery", "redundancy", "failover",
        "SLA", "change management", "documentation", "diagram", "logical diagram", "baseline",
        "audit", "compliance",
    ),
}


def classify_topic(question_text: str) -> str:
    """
    Pick the topic with the most keyword hits.

    Matching is case-insensitive substring search; ties go to the topic
    listed first. Text with no hits falls back to ``General Networking``.
    """
    text = question_text.lower()
    best_topic = DEFAULT_TOPIC
    best_score = 0
    for topic, keywords in TOPIC_KEYWORDS.items():
        score = sum(1 for kw in keywords if kw.lower() in text)
        if score > best_score:
            best_topic, best_score = topic, score
    return best_topic


def topic_of(question: Question) -> str:
    return question.topic or classify_topic(question.text)


@dataclass
class TopicStats:
    """Mastery breakdown for one topic."""

    total: int = 0
    attempted: int = 0
    correct: int = 0
    mastered: int = 0
    review: int = 0
    weak: int = 0

    @property
    def unseen(self) -> int:
        return self.total - self.attempted

    @property
    def mastery_percent(self) -> float:
        if self.total == 0:
            return 0.0
        return self.mastered / self.total * 100


def get_topic_stats(
    questions: Iterable[Question], stats: Mapping[str, QuestionStat]
) -> dict[str, TopicStats]:
    """Group questions by topic and tally attempts and mastery per topic."""
    topics: dict[str, TopicStats] = {}
    for question in questions:
        entry = topics.setdefault(topic_of(question), TopicStats())
        entry.total += 1
        stat = stats.get(question.id)
        if stat is None:
            continue
        entry.attempted += 1
        entry.correct += stat.correct
        level = stat.mastery
        if level == MasteryLevel.MASTERED:
            entry.mastered += 1
        elif level == MasteryLevel.REVIEW:
            entry.review += 1
        else:
            entry.weak += 1
    return topics
