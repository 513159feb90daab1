from datetime import date, datetime, timezone

from ledger.domain import Account, Category, Transaction, DEFAULT_CATEGORIES
from ledger.functional import (
    Left, Nothing, Right, Some,
    amount_or_zero, pipe, safe_account, safe_amount, safe_category, safe_timestamp,
    validate_transaction,
)

ACCOUNTS = (Account("acc1", "Main", "checking", 1000),)


def make_tx(amount, kind, cat="1", acc="acc1"):
    return Transaction("t1", "Test", amount, cat, acc, "2025-01-01", kind)


def test_maybe_map_and_bind():
    assert Some(5).map(lambda x: x * 2) == Some(10)
    assert Nothing().map(lambda x: x * 2).is_none()
    assert Some(2).bind(lambda x: Nothing() if x == 0 else Some(10 // x)) == Some(5)
    assert Some(0).bind(lambda x: Nothing() if x == 0 else Some(10 // x)).is_none()
    assert Nothing().get_or_else(3) == 3


def test_either_map_and_bind():
    assert Right(5).map(lambda x: x + 1).get_or_else(0) == 6
    left = Left("boom").map(lambda x: x + 1)
    assert left.is_left()
    assert left.get_error() == "boom"
    assert Right(1).bind(lambda x: Left("no")) == Left("no")


def test_safe_amount_parses_numbers_and_numeric_strings():
    assert safe_amount(12) == Some(12.0)
    assert safe_amount("-3.5") == Some(-3.5)
    assert safe_amount(" 7 ") == Some(7.0)


def test_safe_amount_rejects_garbage():
    for value in (None, True, "abc", "50abc", "1,000", "", float("nan"), float("inf"), [1], {}):
        assert safe_amount(value).is_none()


def test_amount_or_zero():
    assert amount_or_zero("12.5") == 12.5
    assert amount_or_zero(None) == 0.0
    assert amount_or_zero("n/a") == 0.0


def test_safe_timestamp_accepts_common_shapes():
    assert safe_timestamp("2025-09-01T10:00:00") == Some(datetime(2025, 9, 1, 10))
    assert safe_timestamp("2025-09-01") == Some(datetime(2025, 9, 1))
    assert safe_timestamp(date(2025, 9, 1)) == Some(datetime(2025, 9, 1))
    assert safe_timestamp(datetime(2025, 9, 1, 5)) == Some(datetime(2025, 9, 1, 5))


def test_safe_timestamp_converts_utc_to_local_naive():
    expected = datetime(2025, 9, 1, 10, tzinfo=timezone.utc).astimezone().replace(tzinfo=None)
    assert safe_timestamp("2025-09-01T10:00:00Z") == Some(expected)
    assert safe_timestamp("2025-09-01T10:00:00.000Z") == Some(expected)


def test_safe_timestamp_rejects_garbage():
    for value in (None, "", "yesterday", 12345):
        assert safe_timestamp(value).is_none()


def test_safe_category_and_account():
    assert safe_category(DEFAULT_CATEGORIES, "7").get_or_else(None).name == "Salary"
    assert safe_category(DEFAULT_CATEGORIES, "x").is_none()
    assert safe_account(ACCOUNTS, "acc1").is_some()
    assert safe_account(ACCOUNTS, "nope").is_none()


def test_validate_transaction_success():
    result = validate_transaction(make_tx(-100, "expense"), ACCOUNTS, DEFAULT_CATEGORIES)
    assert result.is_right()
    assert result.get_or_else(None).id == "t1"


def test_validate_transaction_account_not_found():
    result = validate_transaction(make_tx(-100, "expense", acc="ghost"), ACCOUNTS, DEFAULT_CATEGORIES)
    assert result.get_error()["error"] == "account_not_found"
    assert "ghost" in result.get_error()["message"]


def test_validate_transaction_category_not_found():
    result = validate_transaction(make_tx(-100, "expense", cat="ghost"), ACCOUNTS, DEFAULT_CATEGORIES)
    assert result.get_error()["error"] == "category_not_found"


def test_validate_transaction_sign_must_match_type():
    income_negative = validate_transaction(make_tx(-100, "income", cat="7"), ACCOUNTS, DEFAULT_CATEGORIES)
    expense_positive = validate_transaction(make_tx(100, "expense"), ACCOUNTS, DEFAULT_CATEGORIES)
    assert income_negative.get_error()["error"] == "type_sign_mismatch"
    assert expense_positive.get_error()["error"] == "type_sign_mismatch"


def test_validate_transaction_category_type_must_match():
    cats = (Category("7", "Salary", "💼", "#22c55e", "income"),)
    result = validate_transaction(make_tx(-100, "expense", cat="7"), ACCOUNTS, cats)
    assert result.get_error()["error"] == "category_type_mismatch"
    assert "Income category Salary" in result.get_error()["message"]


def test_validate_transaction_invalid_amount_and_type():
    bad_amount = validate_transaction(make_tx("lots", "expense"), ACCOUNTS, DEFAULT_CATEGORIES)
    bad_type = validate_transaction(make_tx(-1, "transfer"), ACCOUNTS, DEFAULT_CATEGORIES)
    assert bad_amount.get_error()["error"] == "invalid_amount"
    assert bad_type.get_error()["error"] == "invalid_type"


def test_pipe_simple():
    def add1(x):
        return x + 1

    def mul2(x):
        return x * 2

    # pipe(3, add1, mul2) -> mul2(add1(3)) = 8
    assert pipe(3, add1, mul2) == 8
