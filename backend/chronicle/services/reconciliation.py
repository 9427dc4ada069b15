from typing import Iterable, Set, Tuple


def diff(remote_ids: Iterable[str], persisted_ids: Iterable[str]) -> Tuple[Set[str], Set[str]]:
    """Split remote ids into (existing, missing) relative to the persisted ids."""
    remote = set(remote_ids)
    persisted = set(persisted_ids)
    return remote & persisted, remote - persisted
