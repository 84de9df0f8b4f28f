# module storefront.admin.service

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from storefront.admin import repository as admin_repository
from storefront.errors import InvalidInput, Internal
from storefront.infra.database import Store

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


def _parse_day(value: Optional[str], label: str) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise InvalidInput(f"Invalid '{label}' date: use YYYY-MM-DD")


def get_sales(
    store: Store,
    *,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    username: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """
    Rapport des ventes filtrable par période et par utilisateur.
    - date_from / date_to: YYYY-MM-DD, date_to inclut toute la journée
    """
    start = _parse_day(date_from, "from")
    end = _parse_day(date_to, "to")
    if end is not None:
        end = end + timedelta(days=1)
    try:
        with store.connect() as conn:
            return admin_repository.fetch_sales(conn, start=start, end=end, username=(username or "").strip() or None)
    except SQLAlchemyError:
        logger.exception("admin.get_sales failed from=%s to=%s username=%s", date_from, date_to, username)
        raise Internal("Failed to query sales")
