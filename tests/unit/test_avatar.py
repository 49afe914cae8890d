"""Tests for initials avatars."""

from opphub.utils.avatar import AVATAR_COLORS, generate_avatar_data, generate_background_color, generate_initials


def test_two_word_name() -> None:
    assert generate_initials("Alice Anderson") == "AA"


def test_uses_first_and_last_word() -> None:
    assert generate_initials("mary jane watson") == "MW"


def test_single_word_takes_two_letters() -> None:
    assert generate_initials("plato") == "PL"


def test_blank_name() -> None:
    assert generate_initials("   ") == "U"
    assert generate_initials(None) == "U"


def test_color_is_stable_and_from_palette() -> None:
    color = generate_background_color("AA")
    assert color == generate_background_color("AA")
    assert color in AVATAR_COLORS
    assert len(AVATAR_COLORS) == 18


def test_avatar_data_shape() -> None:
    data = generate_avatar_data("Alice A")
    assert data == {"initials": "AA", "backgroundColor": generate_background_color("AA")}
