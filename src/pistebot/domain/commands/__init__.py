from .ledger_commands import LedgerCommand, CreateCommand, ExerciseCommand

__all__ = ["LedgerCommand", "CreateCommand", "ExerciseCommand"]
