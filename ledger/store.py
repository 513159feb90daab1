"""In-memory ledger store.

Owns the record collections and every mutation of them. Each mutation
replaces the affected tuple, so snapshots handed to the aggregator are
never changed underneath it.
"""
import logging
from dataclasses import replace
from datetime import datetime
from typing import NamedTuple, Optional

from ledger import aggregator
from ledger.domain import (
    Account, Achievement, Category, Goal, Transaction, ACCOUNT_TYPES, DEFAULT_CATEGORIES,
)
from ledger.events import (
    EventBus, GOAL_UPDATED, TRANSACTION_ADDED, TRANSACTION_DELETED, register_default_handlers,
)
from ledger.functional import Either, Left, Right, safe_amount, validate_transaction
from ledger.transforms import (
    add_transaction, apply_balance_delta, new_id, remove_transaction, replace_record,
)

logger = logging.getLogger(__name__)


class LedgerSnapshot(NamedTuple):
    accounts: tuple[Account, ...]
    transactions: tuple[Transaction, ...]
    categories: tuple[Category, ...]
    goals: tuple[Goal, ...]


def _not_found(kind: str, record_id: str) -> Left:
    return Left({
        "error": f"{kind}_not_found",
        "message": f"{kind.capitalize()} with ID {record_id} does not exist",
        f"{kind}_id": record_id,
    })


def _invalid_account_type(kind) -> Left:
    return Left({
        "error": "invalid_account_type",
        "message": f"Account type must be one of {', '.join(ACCOUNT_TYPES)}",
        "type": kind,
    })


def _invalid_target(target) -> Left:
    return Left({
        "error": "invalid_target",
        "message": "Goal target must be a positive number",
        "target_amount": target,
    })


def _id_is_immutable(kind: str, record_id: str) -> Left:
    return Left({
        "error": "immutable_id",
        "message": f"{kind.capitalize()} {record_id} cannot change its ID",
        f"{kind}_id": record_id,
    })


class LedgerStore:
    def __init__(
        self,
        accounts: tuple[Account, ...] = (),
        transactions: tuple[Transaction, ...] = (),
        categories: tuple[Category, ...] = DEFAULT_CATEGORIES,
        goals: tuple[Goal, ...] = (),
        achievements: tuple[Achievement, ...] = (),
        bus: Optional[EventBus] = None,
    ):
        self._accounts = tuple(accounts)
        self._transactions = tuple(transactions)
        self._categories = tuple(categories)
        self._goals = tuple(goals)
        self._achievements = tuple(achievements)
        self.bus = bus if bus is not None else register_default_handlers(EventBus())
        self._refresh_achievements()

    # --- reads

    def fetch_accounts(self) -> tuple[Account, ...]:
        return self._accounts

    def fetch_transactions(self) -> tuple[Transaction, ...]:
        return self._transactions

    def fetch_categories(self) -> tuple[Category, ...]:
        return self._categories

    def fetch_goals(self) -> tuple[Goal, ...]:
        return self._goals

    def fetch_achievements(self) -> tuple[Achievement, ...]:
        return self._achievements

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(self._accounts, self._transactions, self._categories, self._goals)

    # --- transactions

    def add_transaction(self, tx: Transaction) -> Either[dict, Transaction]:
        if not tx.id:
            tx = replace(tx, id=new_id())
        if tx.date is None:
            tx = replace(tx, date=datetime.now().isoformat())

        result = validate_transaction(tx, self._accounts, self._categories)
        if result.is_left():
            logger.warning("rejected transaction %s: %s", tx.id, result.get_error()["message"])
            return result

        self._transactions = add_transaction(self._transactions, tx)
        self._publish_transaction_event(TRANSACTION_ADDED, tx)
        logger.info("added transaction %s (%s) to account %s", tx.id, tx.amount, tx.account_id)
        return Right(tx)

    def delete_transaction(self, tx_id: str) -> Either[dict, Transaction]:
        tx = next((t for t in self._transactions if t.id == tx_id), None)
        if tx is None:
            return _not_found("transaction", tx_id)

        self._transactions = remove_transaction(self._transactions, tx_id)
        self._publish_transaction_event(TRANSACTION_DELETED, tx)
        logger.info("deleted transaction %s, reversed %s on account %s", tx.id, tx.amount, tx.account_id)
        return Right(tx)

    def _publish_transaction_event(self, name: str, tx: Transaction) -> None:
        payload = {"amount": tx.amount, "account_id": tx.account_id, "transaction_id": tx.id}
        for result in self.bus.publish(name, payload):
            if "balance_delta" in result:
                self._accounts = apply_balance_delta(
                    self._accounts, result["account_id"], result["balance_delta"]
                )
        self._refresh_achievements()

    def _refresh_achievements(self) -> None:
        monthly_net = aggregator.net_income(self._transactions, "month")
        refreshed = []
        for a in self._achievements:
            if a.title == "First Step" and self._transactions:
                a = replace(a, unlocked=True)
            elif a.target is not None:
                a = replace(a, current=monthly_net, unlocked=a.unlocked or monthly_net >= a.target)
            refreshed.append(a)
        self._achievements = tuple(refreshed)

    # --- accounts

    def add_account(self, account: Account) -> Either[dict, Account]:
        if account.type not in ACCOUNT_TYPES:
            return _invalid_account_type(account.type)
        balance = safe_amount(account.balance)
        if balance.is_none():
            return Left({
                "error": "invalid_amount",
                "message": f"Balance {account.balance!r} is not a number",
                "amount": account.balance,
            })

        account = replace(account, id=account.id or new_id(), balance=balance.get_or_else(0.0))
        self._accounts = self._accounts + (account,)
        logger.info("added account %s (%s)", account.id, account.name)
        return Right(account)

    def update_account(self, acc_id: str, **changes) -> Either[dict, Account]:
        if not any(a.id == acc_id for a in self._accounts):
            return _not_found("account", acc_id)
        if "id" in changes:
            return _id_is_immutable("account", acc_id)
        if "type" in changes and changes["type"] not in ACCOUNT_TYPES:
            return _invalid_account_type(changes["type"])
        if "balance" in changes:
            balance = safe_amount(changes["balance"])
            if balance.is_none():
                return Left({
                    "error": "invalid_amount",
                    "message": f"Balance {changes['balance']!r} is not a number",
                    "amount": changes["balance"],
                })
            changes["balance"] = balance.get_or_else(0.0)

        self._accounts = replace_record(self._accounts, acc_id, **changes)
        return Right(next(a for a in self._accounts if a.id == acc_id))

    def delete_account(self, acc_id: str) -> Either[dict, Account]:
        account = next((a for a in self._accounts if a.id == acc_id), None)
        if account is None:
            return _not_found("account", acc_id)
        if len(self._accounts) == 1:
            logger.warning("refused to delete last account %s", acc_id)
            return Left({
                "error": "last_account",
                "message": "At least one account must exist",
                "account_id": acc_id,
            })

        # transactions of the account are kept
        self._accounts = tuple(a for a in self._accounts if a.id != acc_id)
        logger.info("deleted account %s", acc_id)
        return Right(account)

    # --- goals

    def add_goal(self, goal: Goal) -> Either[dict, Goal]:
        target = safe_amount(goal.target_amount)
        if target.is_none() or target.get_or_else(0.0) <= 0:
            return _invalid_target(goal.target_amount)
        goal = replace(
            goal,
            id=goal.id or new_id(),
            target_amount=target.get_or_else(0.0),
            current_amount=safe_amount(goal.current_amount).get_or_else(0.0),
        )
        self._goals = self._goals + (goal,)
        logger.info("added goal %s (%s)", goal.id, goal.title)
        return Right(goal)

    def update_goal(self, goal_id: str, **changes) -> Either[dict, Goal]:
        if not any(g.id == goal_id for g in self._goals):
            return _not_found("goal", goal_id)
        if "id" in changes:
            return _id_is_immutable("goal", goal_id)
        if "target_amount" in changes:
            target = safe_amount(changes["target_amount"])
            if target.is_none() or target.get_or_else(0.0) <= 0:
                return _invalid_target(changes["target_amount"])
            changes["target_amount"] = target.get_or_else(0.0)
        if "current_amount" in changes:
            changes["current_amount"] = safe_amount(changes["current_amount"]).get_or_else(0.0)

        self._goals = replace_record(self._goals, goal_id, **changes)
        goal = next(g for g in self._goals if g.id == goal_id)
        self.bus.publish(GOAL_UPDATED, {"goal_id": goal_id, "progress": goal.progress})
        return Right(goal)

    def delete_goal(self, goal_id: str) -> Either[dict, Goal]:
        goal = next((g for g in self._goals if g.id == goal_id), None)
        if goal is None:
            return _not_found("goal", goal_id)
        self._goals = tuple(g for g in self._goals if g.id != goal_id)
        return Right(goal)
