"""
Excel export service for TutorBridge
Handles Excel export of users and bookings for the admin portal
"""

import logging
from io import BytesIO

import openpyxl
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


class ExcelExportService:
    """Service for exporting admin listings to Excel"""

    @staticmethod
    def create_workbook():
        """Create a new workbook with default styling"""
        wb = openpyxl.Workbook()
        return wb

    @staticmethod
    def style_header_row(ws, row_num, columns):
        """Apply styling to header row"""
        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="000000", end_color="000000", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        for col_num, header in enumerate(columns, 1):
            cell = ws.cell(row=row_num, column=col_num, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment

    @staticmethod
    def auto_adjust_columns(ws):
        """Auto-adjust column widths"""
        for column in ws.columns:
            max_length = 0
            column_letter = get_column_letter(column[0].column)

            for cell in column:
                if cell.value is not None and len(str(cell.value)) > max_length:
                    max_length = len(str(cell.value))

            adjusted_width = min(max_length + 2, 50)
            ws.column_dimensions[column_letter].width = adjusted_width

    @staticmethod
    def format_number(value):
        """Format number: whole numbers without decimals, fractional numbers with 2 decimal places."""
        try:
            if value is None:
                return None
            num = float(value)
            if num == int(num):
                return int(num)
            return round(num, 2)
        except (ValueError, TypeError):
            return value

    @staticmethod
    def _format_datetime(value):
        return value.strftime('%Y-%m-%d %H:%M') if value else ''

    @staticmethod
    def _write_rows(ws, headers, rows):
        ExcelExportService.style_header_row(ws, 1, headers)
        for row_num, row in enumerate(rows, 2):
            for col_num, value in enumerate(row, 1):
                ws.cell(row=row_num, column=col_num, value=value)
        ws.freeze_panes = 'A2'
        ExcelExportService.auto_adjust_columns(ws)

    @staticmethod
    def export_users(users):
        """Export user accounts to Excel"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Users"

        headers = ['ID', 'Username', 'Name', 'Email', 'Role', 'Approved', 'Active', 'Joined', 'Last Login']
        rows = [
            [
                user.id, user.username, user.name, user.email, user.role,
                'Yes' if user.is_approved else 'No',
                'Yes' if user.is_active else 'No',
                ExcelExportService._format_datetime(user.created_at),
                ExcelExportService._format_datetime(user.last_login),
            ]
            for user in users
        ]
        ExcelExportService._write_rows(ws, headers, rows)
        logger.info("Exported %d users to Excel", len(rows))
        return ExcelExportService.workbook_to_bytes(wb)

    @staticmethod
    def export_bookings(bookings):
        """Export bookings with course, student and tutor names to Excel"""
        wb = ExcelExportService.create_workbook()
        ws = wb.active
        ws.title = "Bookings"

        headers = ['ID', 'Course', 'Subject', 'Student', 'Tutor', 'Status', 'Price',
                   'Booked At', 'Session Date', 'Notes']
        rows = []
        for booking in bookings:
            course = booking.course
            rows.append([
                booking.id,
                course.title if course else '',
                course.subject if course else '',
                booking.student.name if booking.student else '',
                booking.tutor.name if booking.tutor else '',
                booking.status,
                ExcelExportService.format_number(course.price) if course else None,
                ExcelExportService._format_datetime(booking.booking_time),
                ExcelExportService._format_datetime(booking.session_date),
                booking.notes or '',
            ])
        ExcelExportService._write_rows(ws, headers, rows)
        logger.info("Exported %d bookings to Excel", len(rows))
        return ExcelExportService.workbook_to_bytes(wb)

    @staticmethod
    def workbook_to_bytes(workbook):
        """Convert workbook to bytes for download"""
        output = BytesIO()
        workbook.save(output)
        output.seek(0)
        return output.getvalue()
