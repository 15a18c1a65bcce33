"""Журнал отклонений определения.

Отклонение считается "неотвеченным", пока автор не изменил определение
после него. Новое отклонение принимается только когда последнее отклонение
не позже ``last_submit_change_date``; при равенстве дат отклонение считается
отвеченным.
"""
from datetime import datetime
from typing import Iterable, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from curated.domains.definitions.entities import Rejection


def latest_rejection_date(rejection_log: Iterable["Rejection"]) -> Optional[datetime]:
    """Дата последнего отклонения или None для пустого журнала"""
    latest = None
    for rejection in rejection_log:
        if latest is None or rejection.rejected_date > latest:
            latest = rejection.rejected_date
    return latest


def has_outstanding_rejection(
    rejection_log: Iterable["Rejection"],
    last_submit_change_date: datetime
) -> bool:
    """Есть ли отклонение, на которое автор ещё не ответил правкой"""
    latest = latest_rejection_date(rejection_log)
    if latest is None:
        return False
    return latest > last_submit_change_date
