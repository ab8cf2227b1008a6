"""
Subject IP resolution

An explicit override wins, then the forwarded-for value set by a proxy,
then the peer address of the connection. No syntax validation is done:
whatever string is found is what gets looked up.
"""

from typing import Optional, Tuple


def first_forwarded_hop(value: Optional[str]) -> Optional[str]:
    """Leftmost entry of an X-Forwarded-For list, or None if blank"""
    if not value:
        return None
    hop = value.split(",")[0].strip()
    return hop or None


def resolve_subject_ip(
    override: Optional[str],
    forwarded_for: Optional[str] = None,
    peer_addr: Optional[str] = None,
) -> Optional[str]:
    if override:
        return override
    if forwarded_for:
        return forwarded_for
    if peer_addr:
        return peer_addr
    return None


def client_context_from_request(request, trust_forwarded: bool = True) -> Tuple[Optional[str], Optional[str]]:
    """Extract (forwarded_for, peer_addr) from a Starlette request"""
    forwarded_for = None
    if trust_forwarded:
        forwarded_for = first_forwarded_hop(request.headers.get("x-forwarded-for"))
    peer_addr = request.client.host if request.client else None
    return forwarded_for, peer_addr
