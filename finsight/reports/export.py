"""CSV export of a filtered transaction list."""

from typing import Iterable, Union

import pandas as pd

from finsight.models.finance import Category, CategoryIndex, Transaction

CSV_COLUMNS = ["Date", "Type", "Amount", "Category", "Description", "Need/Want"]


def transactions_frame(
    transactions: Iterable[Transaction],
    categories: Union[Iterable[Category], CategoryIndex] = (),
) -> pd.DataFrame:
    """One row per transaction, newest first, with display-ready columns."""
    index = categories if isinstance(categories, CategoryIndex) else CategoryIndex(categories)
    ordered = sorted(transactions, key=lambda t: (t.date, t.created_at), reverse=True)
    rows = [
        {
            "Date": t.date.strftime("%d-%m-%Y"),
            "Type": t.type.value,
            "Amount": float(t.amount),
            "Category": index.name_of(t.category_id),
            "Description": t.description,
            "Need/Want": t.expense_type.value if t.expense_type else "",
        }
        for t in ordered
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def transactions_to_csv(
    transactions: Iterable[Transaction],
    categories: Union[Iterable[Category], CategoryIndex] = (),
) -> str:
    return transactions_frame(transactions, categories).to_csv(index=False)


def csv_filename(period_title: str) -> str:
    """transactions-report-this-month.csv for "This Month"."""
    slug = "-".join(period_title.lower().split())
    return f"transactions-report-{slug}.csv"
