"""
Excel export of a seating arrangement
"""

import io
from typing import Iterable

import pandas as pd

from seatplan.schemas.seating import Table

COLUMNS = ['Table', 'Capacity', 'Name', 'Phone', 'Guests', 'Side', 'Status', 'Group', 'Notes']


class ExportService:
    """Builds spreadsheets from live tables"""

    @staticmethod
    def export_arrangement(tables: Iterable[Table]) -> bytes:
        """Export seated parties to Excel, one row per party"""
        data = []
        for table in tables:
            for occupant in table.primaries:
                attendee = occupant.attendee
                data.append({
                    'Table': table.name,
                    'Capacity': table.capacity,
                    'Name': attendee.name,
                    'Phone': attendee.phone or '',
                    'Guests': attendee.party_size,
                    'Side': attendee.side.value,
                    'Status': attendee.status_label,
                    'Group': attendee.group or '',
                    'Notes': attendee.notes,
                })

        df = pd.DataFrame(data, columns=COLUMNS)

        buffer = io.BytesIO()
        with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
            df.to_excel(writer, index=False, sheet_name='Seating')

        return buffer.getvalue()
