"""Share identifier validation and remote path helpers."""

from __future__ import annotations

from share_store._errors import InvalidShareID


def validate_sid(sid: str) -> str:
    """Return ``sid`` unchanged if it is usable as a flat remote object name.

    :raises InvalidShareID: If the identifier is empty, contains a separator
        or null byte, or is a dot segment.
    """
    if not isinstance(sid, str) or not sid:
        raise InvalidShareID("Share ID must be a non-empty string", path=str(sid))
    if "\0" in sid:
        raise InvalidShareID("Share ID contains null byte", path=sid)
    if "/" in sid or "\\" in sid:
        raise InvalidShareID("Share ID must not contain path separators", path=sid)
    if sid in (".", ".."):
        raise InvalidShareID("Share ID must not be a dot segment", path=sid)
    return sid


def normalize_remote_path(raw: str) -> str:
    """Normalize a backend-native path to a root-relative key.

    Backslashes become forward slashes, and empty and ``.`` segments are
    dropped, so ``"/Apps//x/"`` becomes ``"Apps/x"``. The root is ``""``.
    """
    parts = [seg for seg in raw.replace("\\", "/").split("/") if seg not in ("", ".")]
    return "/".join(parts)


def base_name(path: str) -> str:
    """Final component of a remote path."""
    return normalize_remote_path(path).rsplit("/", 1)[-1]


def top_level_name(path: str) -> str:
    """First component of a remote path: the direct child of the root that contains it."""
    return normalize_remote_path(path).split("/", 1)[0]
