"""Tests for the annotated result file parser."""

# ruff: noqa: PLR2004

from __future__ import annotations

from src.core.result_parser import (
    ParseStatus,
    list_markers,
    locate_record_line,
    parse_result_text,
    scan_records,
)

BASIC_RESULT = """#SQL[@2,N22]Result[10, 1]
SELECT 1 as test_value
test_value
1

#SQL[@5,N31]Result[7, 11]
SELECT 'Hello World' as message
message
Hello World
"""

ADVANCED_RESULT = """#SQL[@2,N73]Result[]
CREATE TABLE test_table (
    id INT PRIMARY KEY,
    name VARCHAR(100)
)

#SQL[@7,N54]Result[]
INSERT INTO test_table VALUES (1, 'Alice'), (2, 'Bob')

#SQL[@9,N24]Result[12, 12, 10]
SELECT * FROM test_table
id  ¦  name
1  ¦  Alice
2  ¦  Bob
"""

JSON_CELL = '{\n  "method": "Flush",\n  "result": [\n    {\n      "returnStr": "OK"\n    }\n  ]\n}'

MIXED_RESULT = (
    "#SQL[@1,N32]Error[]\n"
    "create database if not exists db\n"
    "#SQL[@9,N43]Error[53]\n"
    "insert into t values (1, 1), (1, 1), (2, 2)\n"
    "1062 (HY000): Duplicate entry '(1,1)' for key '(a,b)'\n"
    "#SQL[@12,N36]Result[23, 78]\n"
    "select mo_ctl('dn', 'flush', 'db.t')\n"
    "mo_ctl(dn, flush, db.t)\n"
    f"{JSON_CELL}\n"
    "#SQL[@16,N61]Result[48, 10]\n"
    "select \n"
    "    current_account_name(),\n"
    "    current_account_id()\n"
    "\n"
    "current_account_name()  ¦  current_account_id()\n"
    "sys  ¦  0\n"
)


def test_parse_basic_result_records() -> None:
    records = parse_result_text(BASIC_RESULT)

    assert list(records) == [2, 5]

    first = records[2]
    assert first.sql_text == "SELECT 1 as test_value"
    assert first.kind == "Result"
    assert first.outcome_kind == "result"
    assert first.result_text == "test_value\n1"
    assert first.error_text is None
    assert first.metadata.header_byte_length == 10
    assert first.metadata.row_byte_lengths == (1,)
    assert first.metadata.result_length == 2
    assert first.status is ParseStatus.PARSED

    second = records[5]
    assert second.sql_text == "SELECT 'Hello World' as message"
    assert second.result_text == "message\nHello World"
    assert second.metadata.header_byte_length == 7
    assert second.metadata.row_byte_lengths == (11,)


def test_single_section_scenario() -> None:
    text = "#SQL[@2,N22]Result[10, 1]\nSELECT 1 as test_value\ntest_value\n1"

    records = parse_result_text(text)

    assert len(records) == 1
    record = records[2]
    assert record.source_line == 2
    assert record.sql_byte_length == 22
    assert record.sql_text == "SELECT 1 as test_value"
    assert record.outcome_kind == "result"
    assert record.result_text == "test_value\n1"
    assert record.metadata.header_byte_length == 10
    assert record.metadata.row_byte_lengths == (1,)


def test_statements_without_rows_are_empty() -> None:
    records = parse_result_text(ADVANCED_RESULT)

    create = records[2]
    assert create.outcome_kind == "empty"
    assert create.sql_text == (
        "CREATE TABLE test_table (\n    id INT PRIMARY KEY,\n    name VARCHAR(100)\n)"
    )
    assert create.result_text is None
    assert create.metadata.header_byte_length is None
    assert create.metadata.row_byte_lengths is None
    assert create.metadata.result_length is None

    insert = records[7]
    assert insert.outcome_kind == "empty"
    assert insert.sql_text == "INSERT INTO test_table VALUES (1, 'Alice'), (2, 'Bob')"

    select = records[9]
    assert select.outcome_kind == "result"
    assert select.result_text == "id  ¦  name\n1  ¦  Alice\n2  ¦  Bob"
    assert select.metadata.header_byte_length == 12
    assert select.metadata.row_byte_lengths == (12, 10)
    assert select.metadata.result_length == 3


def test_error_marker_without_message_is_empty() -> None:
    records = parse_result_text("#SQL[@1,N32]Error[]\ncreate database if not exists db")

    record = records[1]
    assert record.kind == "Error"
    assert record.outcome_kind == "empty"
    assert record.error_text is None
    assert record.sql_text == "create database if not exists db"
    assert record.metadata.error_byte_length is None


def test_error_marker_with_message() -> None:
    records = parse_result_text(MIXED_RESULT)

    record = records[9]
    assert record.outcome_kind == "error"
    assert record.sql_text == "insert into t values (1, 1), (1, 1), (2, 2)"
    assert record.error_text == "1062 (HY000): Duplicate entry '(1,1)' for key '(a,b)'"
    assert record.result_text is None
    assert record.metadata.error_byte_length == 53
    assert record.metadata.header_byte_length is None


def test_multiline_cell_and_multiline_sql() -> None:
    records = parse_result_text(MIXED_RESULT)

    flush = records[12]
    assert flush.sql_text == "select mo_ctl('dn', 'flush', 'db.t')"
    assert flush.result_text == f"mo_ctl(dn, flush, db.t)\n{JSON_CELL}"
    assert flush.metadata.header_byte_length == 23
    assert flush.metadata.row_byte_lengths == (78,)

    account = records[16]
    assert account.sql_text == "select \n    current_account_name(),\n    current_account_id()"
    assert account.result_text == "current_account_name()  ¦  current_account_id()\nsys  ¦  0"
    assert account.metadata.header_byte_length == 48
    assert account.metadata.row_byte_lengths == (10,)


def test_sql_length_counts_utf8_bytes() -> None:
    sql = "SELECT '日本' AS name"
    assert len(sql) != len(sql.encode("utf-8"))
    text = f"#SQL[@3,N{len(sql.encode('utf-8'))}]Result[4, 6]\n{sql}\nname\n日本\n"

    record = parse_result_text(text)[3]

    assert record.sql_text == sql
    assert record.result_text == "name\n日本"
    assert record.status is ParseStatus.PARSED


def test_untrimmed_sql_bytes_match_declared_length() -> None:
    for record in scan_records(BASIC_RESULT + ADVANCED_RESULT):
        assert len(record.sql_text.encode("utf-8")) == record.sql_byte_length


def test_terminator_after_sql_is_consumed() -> None:
    record = parse_result_text("#SQL[@4,N8]Result[1, 1]\nSELECT 1;\nx\n1\n")[4]

    assert record.sql_text == "SELECT 1"
    assert record.result_text == "x\n1"


def test_later_marker_overwrites_same_source_line() -> None:
    text = (
        "#SQL[@4,N8]Result[1, 1]\nSELECT 1\nx\n1\n"
        "#SQL[@6,N8]Result[]\nSELECT 3\n"
        "#SQL[@4,N8]Result[1, 1]\nSELECT 2\ny\n2\n"
    )

    records = parse_result_text(text)

    assert len(scan_records(text)) == 3
    assert list(records) == [4, 6]
    assert records[4].sql_text == "SELECT 2"
    assert records[4].result_text == "y\n2"


def test_marker_without_newline_is_degenerate() -> None:
    record = parse_result_text("#SQL[@3,N10]Result[5, 1]")[3]

    assert record.sql_text == ""
    assert record.outcome_kind == "empty"
    assert record.status is ParseStatus.DEGRADED
    assert [item.reason for item in record.degradations][0] == "marker_without_body"


def test_unparsable_lengths_default_to_zero() -> None:
    record = parse_result_text("#SQL[@1,N8]Result[abc, 5x]\nSELECT 1\nv\n1")[1]

    assert record.outcome_kind == "result"
    assert record.metadata.header_byte_length == 0
    assert record.metadata.row_byte_lengths == (5,)
    assert record.status is ParseStatus.DEGRADED
    assert [item.reason for item in record.degradations] == ["invalid_length", "invalid_length"]


def test_sql_length_past_section_keeps_payload_as_sql() -> None:
    record = parse_result_text("#SQL[@1,N99]Result[]\nSELECT 1\n")[1]

    assert record.sql_text == "SELECT 1"
    assert record.outcome_kind == "empty"
    assert record.degradations[0].reason == "sql_length_exceeds_section"


def test_sql_length_inside_multibyte_character_is_flagged() -> None:
    record = parse_result_text("#SQL[@1,N9]Result[]\nSELECT '日'\n")[1]

    reasons = [item.reason for item in record.degradations]
    assert "sql_length_splits_character" in reasons
    assert record.sql_text.startswith("SELECT '")


def test_leading_blank_lines_are_skipped() -> None:
    record = parse_result_text("#SQL[@2,N8]Result[1, 1]\n\n\nSELECT 1\nx\n1")[2]

    assert record.sql_text == "SELECT 1"
    assert record.result_text == "x\n1"


def test_sql_length_zero_uses_whole_payload() -> None:
    record = parse_result_text("#SQL[@2,N0]Result[1, 1]\nSELECT 1\nx\n1\n")[2]

    assert record.sql_text == "SELECT 1\nx\n1"
    assert record.outcome_kind == "empty"


def test_empty_and_comment_only_text_yield_no_records() -> None:
    assert parse_result_text("") == {}
    assert parse_result_text("# This is a comment\n# Another comment") == {}


def test_record_to_dict_is_serializable() -> None:
    payload = parse_result_text(ADVANCED_RESULT)[9].to_dict()

    assert payload["metadata"]["row_byte_lengths"] == [12, 10]
    assert payload["status"] == "parsed"
    assert payload["degradations"] == []


def test_list_markers_reports_physical_lines() -> None:
    markers = list_markers(MIXED_RESULT)

    assert [marker.source_line for marker in markers] == [1, 9, 12, 16]
    assert [marker.physical_line for marker in markers] == [1, 3, 6, 17]
    assert [marker.kind for marker in markers] == ["Error", "Error", "Result", "Result"]
    assert markers[2].sql_byte_length == 36


def test_locate_record_line() -> None:
    assert locate_record_line(MIXED_RESULT, 16) == 17
    assert locate_record_line(MIXED_RESULT, 9) == 3
    assert locate_record_line(MIXED_RESULT, 99) is None
    assert locate_record_line("", 1) is None
