# billing/services/numbering.py

"""
Document numbers for credit and debit notes ("#CREDIT00001").

Numbers come from a locked counter row, so a deleted note's number is
never handed out again.
"""

from __future__ import annotations

from accounting.services.journal_entry_service import reserve_sequence_value


def parse_document_number(prefix: str, value: str) -> int | None:
    if not value or not value.startswith(prefix):
        return None
    digits = value[len(prefix):]
    return int(digits) if digits.isdigit() else None


def next_document_number(prefix: str, sequence_name: str, model, field: str) -> str:
    """Reserve the next number; the first use seeds from existing rows."""

    def seed() -> int:
        numbers = (
            parse_document_number(prefix, n)
            for n in model.objects.values_list(field, flat=True)
        )
        return max((n for n in numbers if n is not None), default=0)

    return f"{prefix}{reserve_sequence_value(sequence_name, seed):05d}"
