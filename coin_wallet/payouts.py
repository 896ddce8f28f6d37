import csv
from io import StringIO
from typing import List, Optional, Tuple

from coin_wallet.logging_config import get_logger


logger = get_logger(__name__)

PAYOUT_COLUMNS = ["player", "index", "coins", "amountInRupees", "upiId", "status", "txnId", "note", "time"]


def generate_payout_csv(withdrawals: List[dict], status: Optional[str] = None) -> Tuple[str, int]:
    """
    Render admin withdrawal listings as CSV for paying out off-system and
    return the text plus the number of rows written.
    """
    rows = [w for w in withdrawals if status is None or w["status"] == status]

    output = StringIO()
    writer = csv.writer(output)
    writer.writerow(PAYOUT_COLUMNS)
    for row in rows:
        writer.writerow(["" if row.get(col) is None else row[col] for col in PAYOUT_COLUMNS])

    logger.info("Payout export generated rows=%s status=%s", len(rows), status)
    return output.getvalue(), len(rows)
