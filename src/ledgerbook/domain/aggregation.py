"""Pure report functions over an account snapshot and posted lines.

Every function here takes the chart of accounts and the postings it needs and
returns frozen report entities. Nothing touches the database, so the same
snapshot always yields the same report.

Grouping accounts show the rolled-up sums of their descendants. Report totals
only add detail accounts, so nothing is counted twice.
"""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from ledgerbook.domain import errors
from ledgerbook.domain.chart import (
    BALANCE_SHEET_TYPES,
    CATEGORY_NAMES,
    CATEGORY_ORDER,
    INCOME_STATEMENT_TYPES,
    SECTION_NAMES,
    ZERO,
    balance_type_for,
    calculate_account_level,
    get_balance_sheet_section,
    get_income_statement_category,
    percentage,
    signed_balance,
    to_cents,
    variance_percentage,
)
from ledgerbook.domain.entities import (
    Account,
    AccountMovement,
    AccountMovements,
    AccountSums,
    BalanceSheet,
    BalanceSheetEntry,
    BalanceSheetSection,
    BalanceSheetSectionTotal,
    IncomeStatement,
    IncomeStatementCategory,
    IncomeStatementCategoryTotal,
    IncomeStatementEntry,
    Posting,
    TrialBalance,
    TrialBalanceEntry,
)
from ledgerbook.domain.errors import IntegrityError, ValidationError

logger = logging.getLogger(__name__)

MAX_ACCOUNT_DEPTH = 32


def check_date_range(start: date, end: date) -> None:
    """Raise ValidationError when start is after end."""
    if start > end:
        raise ValidationError(errors.INVALID_DATE_RANGE)


def sum_postings(
    postings: Iterable[Posting],
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> dict[int, AccountSums]:
    """Sum debits and credits per account for postings in [start, end]."""
    debits: dict[int, Decimal] = defaultdict(lambda: ZERO)
    credits: dict[int, Decimal] = defaultdict(lambda: ZERO)
    for posting in postings:
        if start is not None and posting.entry_date < start:
            continue
        if end is not None and posting.entry_date > end:
            continue
        debits[posting.account_id] += posting.debit_amount
        credits[posting.account_id] += posting.credit_amount
    return {
        account_id: AccountSums(debit=debits[account_id], credit=credits[account_id])
        for account_id in debits
    }


def ancestor_chain(account: Account, by_id: dict[int, Account]) -> list[int]:
    """Return the account ID followed by its ancestors' IDs, nearest first.

    A parent that is missing from by_id ends the chain.

    Raises:
        IntegrityError: If the parent links form a cycle or exceed
            MAX_ACCOUNT_DEPTH
    """
    chain = [account.id]
    seen = {account.id}
    parent_id = account.parent_account_id
    while parent_id is not None and parent_id in by_id:
        if parent_id in seen:
            logger.warning("Account hierarchy cycle through account %s", parent_id)
            raise IntegrityError(errors.account_cycle_detected(parent_id))
        if len(chain) >= MAX_ACCOUNT_DEPTH:
            logger.warning("Account hierarchy deeper than %d at account %s", MAX_ACCOUNT_DEPTH, account.id)
            raise IntegrityError(errors.ACCOUNT_DEPTH_EXCEEDED)
        chain.append(parent_id)
        seen.add(parent_id)
        parent_id = by_id[parent_id].parent_account_id
    return chain


def rollup_balances(
    accounts: Sequence[Account], direct: dict[int, AccountSums]
) -> dict[int, AccountSums]:
    """Roll direct sums up the account hierarchy.

    Each account's result is its own direct sums plus those of every
    descendant. Parent links are followed iteratively over the flat index.

    Args:
        accounts: Account snapshot
        direct: Direct sums per account ID

    Returns:
        Rolled-up sums for every account in the snapshot

    Raises:
        IntegrityError: If the parent links form a cycle
    """
    by_id = {account.id: account for account in accounts}
    debits = {account.id: ZERO for account in accounts}
    credits = {account.id: ZERO for account in accounts}

    for account in accounts:
        chain = ancestor_chain(account, by_id)
        sums = direct.get(account.id)
        if sums is None:
            continue
        for account_id in chain:
            debits[account_id] += sums.debit
            credits[account_id] += sums.credit

    return {
        account_id: AccountSums(debit=debits[account_id], credit=credits[account_id])
        for account_id in by_id
    }


def _visible(account: Account, include_inactive: bool) -> bool:
    return include_inactive or account.is_active


def _sorted(accounts: Iterable[Account]) -> list[Account]:
    return sorted(accounts, key=lambda account: account.account_number)


def trial_balance(
    accounts: Sequence[Account],
    postings: Iterable[Posting],
    start: date,
    end: date,
    account_level: Optional[int] = None,
    include_inactive: bool = False,
    only_with_movements: bool = True,
) -> TrialBalance:
    """Build the trial balance for [start, end].

    Args:
        accounts: Account snapshot
        postings: Posted lines; those outside the range are ignored
        start: Inclusive start date
        end: Inclusive end date
        account_level: If given, only list accounts at this level
        include_inactive: List inactive accounts too
        only_with_movements: Skip accounts with no debits or credits

    Returns:
        TrialBalance whose totals add every detail account in the range
    """
    check_date_range(start, end)
    direct = sum_postings(postings, start, end)
    rolled = rollup_balances(accounts, direct)

    entries = []
    for account in _sorted(accounts):
        if not _visible(account, include_inactive):
            continue
        level = calculate_account_level(account.account_number)
        if account_level is not None and level != account_level:
            continue
        sums = rolled[account.id]
        if only_with_movements and sums.debit == 0 and sums.credit == 0:
            continue
        balance = signed_balance(account.type, sums.debit, sums.credit)
        entries.append(
            TrialBalanceEntry(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                account_type=account.type,
                account_level=level,
                is_detail=account.is_detail,
                parent_account_id=account.parent_account_id,
                debit_amount=to_cents(sums.debit),
                credit_amount=to_cents(sums.credit),
                balance=to_cents(balance),
                balance_type=balance_type_for(account.type, balance),
            )
        )

    total_debits = ZERO
    total_credits = ZERO
    for account in accounts:
        if account.is_detail and account.id in direct:
            total_debits += direct[account.id].debit
            total_credits += direct[account.id].credit

    logger.debug("Trial balance %s..%s: %d entries", start, end, len(entries))
    return TrialBalance(
        entries=tuple(entries),
        total_debits=to_cents(total_debits),
        total_credits=to_cents(total_credits),
        difference=to_cents(abs(total_debits - total_credits)),
        is_balanced=total_debits == total_credits,
        account_count=len(entries),
        period_start=start,
        period_end=end,
    )


def balance_sheet(
    accounts: Sequence[Account],
    postings: Sequence[Posting],
    as_of_date: date,
    start_date: Optional[date] = None,
    compare_date: Optional[date] = None,
    include_inactive: bool = False,
    show_zero_balances: bool = False,
) -> BalanceSheet:
    """Build the balance sheet at as_of_date.

    Balances cover postings from start_date (or the beginning of the ledger)
    up to as_of_date. With compare_date, each entry and section also carries
    the balance at compare_date and the variance against it.

    Returns:
        BalanceSheet with assets, liabilities and equity sections
    """
    if start_date is not None:
        check_date_range(start_date, as_of_date)

    sheet_accounts = [acc for acc in accounts if acc.type in BALANCE_SHEET_TYPES]
    current = rollup_balances(sheet_accounts, sum_postings(postings, start_date, as_of_date))
    previous = None
    if compare_date is not None:
        previous = rollup_balances(
            sheet_accounts, sum_postings(postings, start_date, compare_date)
        )

    entries = []
    totals = {section: ZERO for section in BalanceSheetSection}
    previous_totals = {section: ZERO for section in BalanceSheetSection}
    counts = {section: 0 for section in BalanceSheetSection}

    for account in _sorted(sheet_accounts):
        section = get_balance_sheet_section(account.type)
        sums = current[account.id]
        balance = signed_balance(account.type, sums.debit, sums.credit)
        previous_balance = None
        if previous is not None:
            prev = previous[account.id]
            previous_balance = signed_balance(account.type, prev.debit, prev.credit)

        if account.is_detail:
            totals[section] += balance
            if previous_balance is not None:
                previous_totals[section] += previous_balance

        if not _visible(account, include_inactive):
            continue
        if not show_zero_balances and balance == 0:
            continue
        if account.is_detail:
            counts[section] += 1

        entries.append(
            BalanceSheetEntry(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                account_type=account.type,
                account_level=calculate_account_level(account.account_number),
                is_detail=account.is_detail,
                parent_account_id=account.parent_account_id,
                section=section,
                balance=to_cents(balance),
                balance_type=balance_type_for(account.type, balance),
                previous_balance=None if previous_balance is None else to_cents(previous_balance),
                variance=None if previous_balance is None else to_cents(balance - previous_balance),
                variance_percentage=(
                    None
                    if previous_balance is None
                    else variance_percentage(balance, previous_balance)
                ),
            )
        )

    sections = []
    for section in BalanceSheetSection:
        has_previous = previous is not None
        sections.append(
            BalanceSheetSectionTotal(
                section=section,
                section_name=SECTION_NAMES[section],
                total=to_cents(totals[section]),
                account_count=counts[section],
                previous_total=to_cents(previous_totals[section]) if has_previous else None,
                variance=(
                    to_cents(totals[section] - previous_totals[section]) if has_previous else None
                ),
                variance_percentage=(
                    variance_percentage(totals[section], previous_totals[section])
                    if has_previous
                    else None
                ),
            )
        )

    total_assets = totals[BalanceSheetSection.ASSETS]
    total_liabilities = totals[BalanceSheetSection.LIABILITIES]
    total_equity = totals[BalanceSheetSection.EQUITY]
    liabilities_and_equity = total_liabilities + total_equity

    logger.debug("Balance sheet as of %s: %d entries", as_of_date, len(entries))
    return BalanceSheet(
        as_of_date=as_of_date,
        entries=tuple(entries),
        sections=tuple(sections),
        total_assets=to_cents(total_assets),
        total_liabilities=to_cents(total_liabilities),
        total_equity=to_cents(total_equity),
        total_liabilities_and_equity=to_cents(liabilities_and_equity),
        is_balanced=total_assets == liabilities_and_equity,
        difference=to_cents(abs(total_assets - liabilities_and_equity)),
        account_count=len(entries),
        compare_date=compare_date,
    )


def income_statement(
    accounts: Sequence[Account],
    postings: Sequence[Posting],
    start: date,
    end: date,
    compare_start: Optional[date] = None,
    compare_end: Optional[date] = None,
    include_inactive: bool = False,
    show_zero_balances: bool = False,
) -> IncomeStatement:
    """Build the income statement for [start, end].

    gross profit = revenue - costs, operating income = gross profit -
    operating expenses, and net income equals operating income. Margins are
    percentages of revenue.

    Args:
        compare_start: Start of an optional comparison period
        compare_end: End of an optional comparison period

    Raises:
        ValidationError: If a range is inverted or the comparison period is
            only half given
    """
    check_date_range(start, end)
    if (compare_start is None) != (compare_end is None):
        raise ValidationError(errors.COMPARE_PERIOD_INCOMPLETE)
    comparing = compare_start is not None
    if comparing:
        check_date_range(compare_start, compare_end)

    statement_accounts = [acc for acc in accounts if acc.type in INCOME_STATEMENT_TYPES]
    current = rollup_balances(statement_accounts, sum_postings(postings, start, end))
    previous = None
    if comparing:
        previous = rollup_balances(
            statement_accounts, sum_postings(postings, compare_start, compare_end)
        )

    entries = []
    totals = {category: ZERO for category in IncomeStatementCategory}
    previous_totals = {category: ZERO for category in IncomeStatementCategory}
    counts = {category: 0 for category in IncomeStatementCategory}

    for account in _sorted(statement_accounts):
        category = get_income_statement_category(account.type)
        sums = current[account.id]
        amount = signed_balance(account.type, sums.debit, sums.credit)
        previous_amount = None
        if previous is not None:
            prev = previous[account.id]
            previous_amount = signed_balance(account.type, prev.debit, prev.credit)

        if account.is_detail:
            totals[category] += amount
            if previous_amount is not None:
                previous_totals[category] += previous_amount

        if not _visible(account, include_inactive):
            continue
        if not show_zero_balances and amount == 0:
            continue
        if account.is_detail:
            counts[category] += 1

        entries.append(
            IncomeStatementEntry(
                account_id=account.id,
                account_number=account.account_number,
                account_name=account.name,
                account_type=account.type,
                account_level=calculate_account_level(account.account_number),
                is_detail=account.is_detail,
                parent_account_id=account.parent_account_id,
                category=category,
                amount=to_cents(amount),
                amount_type=balance_type_for(account.type, amount),
                previous_amount=None if previous_amount is None else to_cents(previous_amount),
                variance=None if previous_amount is None else to_cents(amount - previous_amount),
                variance_percentage=(
                    None
                    if previous_amount is None
                    else variance_percentage(amount, previous_amount)
                ),
            )
        )

    categories = []
    for category in sorted(IncomeStatementCategory, key=CATEGORY_ORDER.get):
        categories.append(
            IncomeStatementCategoryTotal(
                category=category,
                category_name=CATEGORY_NAMES[category],
                order=CATEGORY_ORDER[category],
                total=to_cents(totals[category]),
                account_count=counts[category],
                previous_total=to_cents(previous_totals[category]) if comparing else None,
                variance=(
                    to_cents(totals[category] - previous_totals[category]) if comparing else None
                ),
                variance_percentage=(
                    variance_percentage(totals[category], previous_totals[category])
                    if comparing
                    else None
                ),
            )
        )

    revenue = totals[IncomeStatementCategory.REVENUE]
    costs = totals[IncomeStatementCategory.COSTS]
    operating_expenses = totals[IncomeStatementCategory.OPERATING_EXPENSES]
    gross_profit = revenue - costs
    operating_income = gross_profit - operating_expenses
    net_income = operating_income

    previous_net_income = None
    net_income_variance = None
    if comparing:
        previous_net_income = (
            previous_totals[IncomeStatementCategory.REVENUE]
            - previous_totals[IncomeStatementCategory.COSTS]
            - previous_totals[IncomeStatementCategory.OPERATING_EXPENSES]
        )
        net_income_variance = to_cents(net_income - previous_net_income)
        previous_net_income = to_cents(previous_net_income)

    logger.debug("Income statement %s..%s: %d entries", start, end, len(entries))
    return IncomeStatement(
        start_date=start,
        end_date=end,
        entries=tuple(entries),
        categories=tuple(categories),
        total_revenue=to_cents(revenue),
        total_costs=to_cents(costs),
        gross_profit=to_cents(gross_profit),
        total_operating_expenses=to_cents(operating_expenses),
        operating_income=to_cents(operating_income),
        net_income=to_cents(net_income),
        gross_profit_margin=percentage(gross_profit, revenue),
        operating_margin=percentage(operating_income, revenue),
        net_profit_margin=percentage(net_income, revenue),
        is_profit=net_income > 0,
        account_count=len(entries),
        compare_start_date=compare_start,
        compare_end_date=compare_end,
        previous_net_income=previous_net_income,
        net_income_variance=net_income_variance,
    )


def account_movements(
    account: Account, postings: Iterable[Posting], start: date, end: date
) -> AccountMovements:
    """List one account's lines in [start, end] with a running balance.

    The opening balance comes from the account's postings dated before start.
    Lines are ordered by entry date, entry number and line number.
    """
    check_date_range(start, end)
    own = [p for p in postings if p.account_id == account.id and p.entry_date <= end]
    own.sort(key=lambda p: (p.entry_date, p.entry_number, p.line_number))

    opening = ZERO
    running = ZERO
    total_debits = ZERO
    total_credits = ZERO
    movements = []
    for posting in own:
        change = signed_balance(account.type, posting.debit_amount, posting.credit_amount)
        if posting.entry_date < start:
            opening += change
            running = opening
            continue
        running += change
        total_debits += posting.debit_amount
        total_credits += posting.credit_amount
        movements.append(
            AccountMovement(
                journal_entry_id=posting.journal_entry_id,
                entry_number=posting.entry_number,
                entry_date=posting.entry_date,
                description=posting.description or posting.entry_description,
                debit_amount=to_cents(posting.debit_amount),
                credit_amount=to_cents(posting.credit_amount),
                balance=to_cents(running),
            )
        )

    return AccountMovements(
        account=account,
        opening_balance=to_cents(opening),
        movements=tuple(movements),
        closing_balance=to_cents(running),
        total_debits=to_cents(total_debits),
        total_credits=to_cents(total_credits),
        period_start=start,
        period_end=end,
    )
