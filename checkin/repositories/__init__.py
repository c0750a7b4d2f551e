# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Repository package — re-exports both store implementations."""
from checkin.repositories.base import VisitorRepository
from checkin.repositories.sheet_repository import SheetVisitorRepository
from checkin.repositories.sql_repository import SQLVisitorRepository

__all__ = ["VisitorRepository", "SQLVisitorRepository", "SheetVisitorRepository"]
