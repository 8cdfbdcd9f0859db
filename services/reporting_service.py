"""
Reporting service for TutorBridge
Platform report PDF for the admin portal
"""

import logging
from datetime import datetime
from io import BytesIO
from xml.sax.saxutils import escape as xml_escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from services.dashboard_service import DashboardService
from services.excel_export_service import ExcelExportService

logger = logging.getLogger(__name__)

STAT_LABELS = [
    ('total_students', 'Students'),
    ('total_tutors', 'Tutors'),
    ('total_courses', 'Courses'),
    ('total_bookings', 'Bookings'),
    ('confirmed_bookings', 'Confirmed bookings'),
    ('pending_bookings', 'Pending bookings'),
    ('total_enrollments', 'Enrollments'),
    ('total_reviews', 'Reviews'),
]


class ReportingService:
    """Service for generating reports"""

    @staticmethod
    def _get_paragraph_style():
        """Return a compact cell Paragraph style to enable auto word-wrap in table cells."""
        styles = getSampleStyleSheet()
        return ParagraphStyle(
            'Cell',
            parent=styles['Normal'],
            fontSize=9,
            leading=11,
            spaceAfter=0,
            spaceBefore=0,
        )

    @staticmethod
    def _to_paragraph(value):
        """Convert any value to a Paragraph so ReportLab wraps text within cell width."""
        text = '' if value is None else xml_escape(str(value)).replace('\n', '<br/>')
        return Paragraph(text, ReportingService._get_paragraph_style())

    @staticmethod
    def _build_table(rows, total_width, col_fracs, header_bg=colors.black, center_cols=None):
        """Header-styled table sized as fractions of the page width"""
        center_cols = set(center_cols or [])
        body = [rows[0]] + [
            [cell if idx in center_cols else ReportingService._to_paragraph(cell)
             for idx, cell in enumerate(row)]
            for row in rows[1:]
        ]
        table = Table(body, colWidths=[total_width * frac for frac in col_fracs], repeatRows=1)
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), header_bg),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('BOX', (0, 0), (-1, -1), 0.5, colors.grey),
            ('INNERGRID', (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ]
        for col in center_cols:
            style.append(('ALIGN', (col, 1), (col, -1), 'CENTER'))
        table.setStyle(TableStyle(style))
        return table

    @staticmethod
    def get_platform_report(now=None):
        """Collect the data shown in the platform report"""
        return {
            'generated_at': now or datetime.utcnow(),
            'statistics': DashboardService.get_platform_statistics(),
            'dashboard': DashboardService.get_admin_stats(now=now),
            'popular_courses': DashboardService.get_popular_courses(),
        }

    @staticmethod
    def generate_platform_report_pdf(report):
        """Generate the platform statistics PDF and return bytes."""
        buffer = BytesIO()
        doc = SimpleDocTemplate(buffer, pagesize=A4, leftMargin=18*mm, rightMargin=18*mm,
                                topMargin=18*mm, bottomMargin=18*mm, title='TutorBridge Platform Report')
        styles = getSampleStyleSheet()
        title_center = ParagraphStyle('TitleCenter', parent=styles['Title'], alignment=1)
        subtitle_center = ParagraphStyle('SubtitleCenter', parent=styles['Normal'], alignment=1)
        page_width = A4[0] - (18*mm + 18*mm)

        elements = [
            Paragraph('TutorBridge Platform Report', title_center),
            Paragraph(f"Generated {report['generated_at'].strftime('%Y-%m-%d %H:%M')} UTC", subtitle_center),
            Spacer(1, 12),
            Paragraph('Platform Statistics', styles['Heading2']),
        ]

        stats = report['statistics']
        stat_rows = [['Metric', 'Value']]
        stat_rows.extend([label, ExcelExportService.format_number(stats.get(key, 0))]
                         for key, label in STAT_LABELS)
        elements.extend([
            ReportingService._build_table(stat_rows, page_width, [0.7, 0.3], center_cols={1}),
            Spacer(1, 12),
            Paragraph('This Month', styles['Heading2']),
        ])

        dashboard = report['dashboard']
        trend_rows = [['Metric', 'Current', 'Change vs last month']]
        for key, label in (('total_students', 'Students'), ('active_courses', 'Active courses'),
                           ('revenue', 'Revenue'), ('completion_rate', 'Completion rate (%)')):
            item = dashboard.get(key, {})
            trend_rows.append([label, ExcelExportService.format_number(item.get('current')),
                               f"{item.get('change_percent', 0):+.1f}%"])
        elements.extend([
            ReportingService._build_table(trend_rows, page_width, [0.5, 0.25, 0.25], center_cols={1, 2}),
            Spacer(1, 12),
            Paragraph('Popular Courses', styles['Heading2']),
        ])

        course_rows = [['Course', 'Subject', 'Students', 'Share']]
        for course in report.get('popular_courses', []):
            course_rows.append([course['title'], course['subject'], course['student_count'],
                                f"{course['percentage']}%"])
        if len(course_rows) == 1:
            course_rows.append(['No data', '', '', ''])
        elements.append(ReportingService._build_table(course_rows, page_width, [0.46, 0.26, 0.14, 0.14],
                                                      center_cols={2, 3}))

        doc.build(elements)
        pdf_bytes = buffer.getvalue()
        buffer.close()
        logger.info("Platform report generated (%d bytes)", len(pdf_bytes))
        return pdf_bytes
