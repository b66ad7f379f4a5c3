from __future__ import annotations

import pytest

from src.credilocker.credilocker.core.exceptions import ValidationError
from src.credilocker.credilocker.students.service import parse_roster_csv


def test_parses_header_in_any_case_and_order():
    text = "Name,UID,Class,Email,Semester,Phone_Number\nAsha,24BIT001,FYIT,asha@x.edu,1,9999\n"

    rows = parse_roster_csv(text)

    assert len(rows) == 1
    assert rows[0].uid == "24BIT001"
    assert rows[0].name == "Asha"
    assert rows[0].class_name == "FYIT"
    assert rows[0].semester == 1
    assert rows[0].phone_number == "9999"


def test_missing_required_column_names_the_column():
    with pytest.raises(ValidationError, match="CSV missing required column: class"):
        parse_roster_csv("uid,email,name\n24BIT001,a@x.edu,Asha\n")


def test_invalid_class_reports_row_number_among_non_blank_lines():
    text = "uid,email,name,class\n24BIT001,a@x.edu,Asha,FYIT\n\n24BIT002,b@x.edu,Ravi,TYIT\n"

    with pytest.raises(ValidationError, match=r"Row 3: invalid class 'TYIT'"):
        parse_roster_csv(text)


def test_blank_lines_and_rows_without_uid_are_skipped():
    text = "uid,email,name,class\n\n,ghost@x.edu,Ghost,FYIT\n24BIT002,b@x.edu,Ravi,FYSD\n"

    rows = parse_roster_csv(text)

    assert [r.uid for r in rows] == ["24BIT002"]


def test_optional_columns_default_to_none():
    text = "uid,email,name,class,semester\n24BIT001,a@x.edu,Asha,FYIT,\n24BIT002,b@x.edu,Ravi,FYIT,two\n"

    rows = parse_roster_csv(text)

    assert [r.semester for r in rows] == [None, None]
    assert all(r.phone_number is None for r in rows)


def test_quoted_fields_keep_commas():
    text = 'uid,email,name,class\n24BIT001,a@x.edu,"Patel, Asha",FYIT\n'

    assert parse_roster_csv(text)[0].name == "Patel, Asha"


def test_empty_text_returns_no_rows():
    assert parse_roster_csv("") == []
