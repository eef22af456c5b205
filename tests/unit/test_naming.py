from __future__ import annotations

import pytest

from roster_sync.models.student_record import StudentName
from roster_sync.services.naming import (
    MAX_TITLE_LENGTH,
    parse_full_name,
    sanitize_sheet_title,
    student_sheet_title,
    titles_match,
)


def test_parse_full_name_with_middle():
    name = parse_full_name("Maria de la Cruz Santos")
    assert (name.first, name.middle, name.last) == ("Maria", "de la Cruz", "Santos")
    assert name.display_key == "Santos, Maria de la Cruz"


def test_parse_full_name_collapses_whitespace():
    name = parse_full_name("  Ann \t  Lee  ")
    assert name == StudentName(first="Ann", middle="", last="Lee")
    assert name.display_key == "Lee, Ann"


def test_parse_single_token():
    assert parse_full_name("Cher").display_key == "Cher, Cher"


def test_parse_empty_name():
    with pytest.raises(ValueError):
        parse_full_name("   ")


def test_sanitize_removes_disallowed_characters():
    assert sanitize_sheet_title("O'Brien/Smith: Jr?") == "O'BrienSmith Jr"
    assert sanitize_sheet_title("a\\b*c[d]e") == "abcde"


def test_sanitize_removes_control_characters_and_trims():
    assert sanitize_sheet_title("\x01 Lee, Ann\x7f\x9f \n") == "Lee, Ann"


def test_sanitize_truncates():
    title = sanitize_sheet_title("x" * 150)
    assert len(title) == MAX_TITLE_LENGTH


def test_student_sheet_title():
    assert student_sheet_title(parse_full_name("Jr? Sean O'Brien/Smith")) == "O'BrienSmith, Jr Sean"


def test_titles_match_ignores_case():
    assert titles_match("Santos, Maria", "SANTOS, maria")
    assert not titles_match("Santos, Maria", "Santos, Mario")
