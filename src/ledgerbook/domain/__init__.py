"""Domain layer for ledgerbook application."""

from ledgerbook.domain.account import AccountService
from ledgerbook.domain.currency import CurrencyService
from ledgerbook.domain.journal import JournalService
from ledgerbook.domain.report import ReportService
from ledgerbook.domain.statistics import StatisticsService

__all__ = [
    "AccountService",
    "CurrencyService",
    "JournalService",
    "ReportService",
    "StatisticsService",
]
