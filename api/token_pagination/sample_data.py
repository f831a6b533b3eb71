"""Sample data loading for a freshly created resource_context table."""

import logging
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from .models.records import RecordCreate
from .db.records import count_records, insert_record
from .errors.problem_details import ProblemDetailException

logger = logging.getLogger(__name__)


def load_sample_data(path: Union[str, Path]) -> List[RecordCreate]:
    """Parse sample records from a ``resource_id|resource_type|context`` file.

    Blank lines are skipped. Lines with fewer than two fields or with invalid
    values are logged and skipped. An empty context becomes None.

    Args:
        path: Sample data file

    Returns:
        Parsed records in file order

    Raises:
        OSError: If the file cannot be read
    """
    records = []
    with open(path, "r", encoding="utf-8") as f:
        for line_number, raw_line in enumerate(f, start=1):
            line = raw_line.strip()
            if not line:
                continue

            parts = line.split("|", 2)
            if len(parts) < 2:
                logger.warning(
                    f"Invalid format on line {line_number} '{line}': expected resource_id|resource_type|context"
                )
                continue

            context = parts[2] if len(parts) == 3 and parts[2] else None
            try:
                records.append(RecordCreate(
                    resource_id=parts[0],
                    resource_type=parts[1],
                    context=context
                ))
            except ValidationError as e:
                logger.warning(f"Skipping invalid sample record on line {line_number}: {e.errors()[0]['msg']}")

    return records


async def populate_sample_data(path: Union[str, Path]) -> int:
    """Insert sample records if the table is empty.

    Individual insert failures are logged and do not stop the load.

    Returns:
        Number of records inserted
    """
    existing = await count_records()
    if existing > 0:
        logger.info(f"Database already contains {existing} records, skipping sample data insertion")
        return 0

    records = load_sample_data(path)
    logger.info(f"Inserting {len(records)} sample records...")

    inserted = 0
    for record in records:
        try:
            await insert_record(record)
            inserted += 1
        except ProblemDetailException as e:
            logger.warning(f"Failed to insert record {record.resource_type}/{record.resource_id}: {e}")

    logger.info("Sample data insertion completed")
    return inserted
