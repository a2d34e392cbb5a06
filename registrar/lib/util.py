import typing as t
from collections.abc import Mapping

KT = t.TypeVar("KT")
VT = t.TypeVar("VT")
RecursiveMapping = VT | Mapping[KT, "RecursiveMapping[KT, VT]"]


def deep_update(
    d1: dict[KT, RecursiveMapping[KT, VT]], d2: Mapping[KT, RecursiveMapping[KT, VT]]
) -> dict[KT, RecursiveMapping[KT, VT]]:
    result = d1.copy()
    for k, v in d2.items():
        if isinstance(v, Mapping) and k in result and isinstance(result[k], Mapping):
            result[k] = deep_update(result[k], v)  # type: ignore
        else:
            result[k] = v
    return result


# width of system_logs.ip_address
MaxAddressLength = 64


def client_address(forwarded_for: str | None, peer: str | None) -> str | None:
    """First hop of X-Forwarded-For if present, otherwise the peer address.

    The header is client-controlled, so the result is cut to MaxAddressLength.
    """
    address = peer
    if forwarded_for:
        address = forwarded_for.split(",")[0].strip() or peer
    return address[:MaxAddressLength] if address else address
