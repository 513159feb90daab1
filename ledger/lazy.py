from collections import defaultdict
from typing import Callable, Iterable, Iterator

from ledger.domain import Category, Transaction, UNKNOWN_NAME
from ledger.functional import amount_or_zero


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def lazy_top_categories(
    trans: Iterable[Transaction], cats: tuple[Category, ...], k: int
) -> Iterator[tuple[str, float]]:
    category_name_by_id: dict[str, str] = {c.id: c.name for c in cats}
    totals_by_name: dict[str, float] = defaultdict(float)

    for t in trans:
        if t.type == "expense":
            name = category_name_by_id.get(t.category, UNKNOWN_NAME)
            totals_by_name[name] += abs(amount_or_zero(t.amount))

    ordered = sorted(totals_by_name.items(), key=lambda item: item[1], reverse=True)

    for name, total in ordered[: max(0, k)]:
        yield name, total
