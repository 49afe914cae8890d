"""Initials avatars derived from a user's name."""

from __future__ import annotations

AVATAR_COLORS = [
    "#1abc9c", "#2ecc71", "#3498db", "#9b59b6", "#34495e",
    "#16a085", "#27ae60", "#2980b9", "#8e44ad", "#2c3e50",
    "#f1c40f", "#e67e22", "#e74c3c", "#95a5a6", "#f39c12",
    "#d35400", "#c0392b", "#7f8c8d",
]


def generate_initials(name: str | None) -> str:
    """Up to two uppercase initials. "U" when the name is blank."""
    if not name or not name.strip():
        return "U"
    parts = name.split()
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


def generate_background_color(initials: str) -> str:
    """Stable palette colour for a set of initials."""
    return AVATAR_COLORS[sum(ord(c) for c in initials) % len(AVATAR_COLORS)]


def generate_avatar_data(name: str | None) -> dict[str, str]:
    initials = generate_initials(name)
    return {"initials": initials, "backgroundColor": generate_background_color(initials)}
