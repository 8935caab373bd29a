"""
PDF generation service for timesheet reports.
"""
from io import BytesIO
import logging

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from timesheet_tracker.models.timesheet import TARGET_WEEKLY_HOURS, Timesheet

logger = logging.getLogger(__name__)


class PDFService:
    """Service for generating PDF reports."""

    def generate_timesheet_report(self, timesheet: Timesheet) -> BytesIO:
        """
        Generate a PDF report for one weekly timesheet.

        Args:
            timesheet: The timesheet with its entries

        Returns:
            BytesIO buffer containing the PDF
        """
        logger.info("Generating timesheet PDF report id=%s", timesheet.id)

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(letter),
            rightMargin=0.5 * inch,
            leftMargin=0.5 * inch,
            topMargin=0.5 * inch,
            bottomMargin=0.5 * inch,
        )

        elements = []
        styles = getSampleStyleSheet()
        title_style = styles['Heading1']
        subtitle_style = styles['Heading2']
        normal_style = styles['Normal']

        elements.append(Paragraph(f"Timesheet – Week {timesheet.week}", title_style))
        elements.append(Spacer(1, 0.2 * inch))
        elements.append(
            Paragraph(
                f"Period: {timesheet.start_date} to {timesheet.end_date} "
                f"({timesheet.status.value})",
                subtitle_style,
            )
        )
        elements.append(Spacer(1, 0.3 * inch))

        if not timesheet.entries:
            elements.append(
                Paragraph("No entries have been logged for this week.", normal_style)
            )
        else:
            table_data = [['Date', 'Project', 'Type of Work', 'Task Description', 'Hours']]
            for entry in sorted(timesheet.entries, key=lambda e: e.date):
                table_data.append([
                    entry.date.strftime("%a %b %d"),
                    entry.project,
                    entry.type_of_work.value,
                    Paragraph(entry.task_description or '-', normal_style),
                    f"{entry.hours:g}",
                ])
            table_data.append(['Total', '', '', '', f"{timesheet.total_hours:g}"])

            entries_table = Table(
                table_data,
                colWidths=[1.1 * inch, 2.0 * inch, 1.6 * inch, 4.3 * inch, 0.8 * inch],
                repeatRows=1,
                hAlign='LEFT',
            )
            entries_style = TableStyle([
                ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2c3e50')),
                ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
                ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
                ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
                ('FONTSIZE', (0, 0), (-1, 0), 9),
                ('BOTTOMPADDING', (0, 0), (-1, 0), 8),

                ('BACKGROUND', (0, 1), (-1, -2), colors.white),
                ('TEXTCOLOR', (0, 1), (-1, -2), colors.black),
                ('ALIGN', (-1, 1), (-1, -1), 'RIGHT'),
                ('VALIGN', (0, 1), (-1, -1), 'TOP'),
                ('FONTNAME', (0, 1), (-1, -2), 'Helvetica'),
                ('FONTSIZE', (0, 1), (-1, -2), 8),
                ('BOTTOMPADDING', (0, 1), (-1, -2), 6),

                ('BACKGROUND', (0, -1), (-1, -1), colors.HexColor('#ecf0f1')),
                ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
                ('FONTSIZE', (0, -1), (-1, -1), 9),

                ('GRID', (0, 0), (-1, -1), 0.5, colors.grey),
            ])
            for i in range(1, len(table_data) - 1):
                if i % 2 == 0:
                    entries_style.add('BACKGROUND', (0, i), (-1, i), colors.HexColor('#f7f9fb'))
            entries_table.setStyle(entries_style)
            elements.append(entries_table)

        elements.append(Spacer(1, 0.3 * inch))
        elements.append(Paragraph("Summary", subtitle_style))
        elements.append(Spacer(1, 0.1 * inch))

        progress = min(timesheet.total_hours / TARGET_WEEKLY_HOURS * 100, 100)
        summary_data = [
            ['Metric', 'Value'],
            ['Entries', str(len(timesheet.entries))],
            ['Logged Hours', f"{timesheet.total_hours:g} / {TARGET_WEEKLY_HOURS}"],
            ['Progress', f"{progress:.0f}%"],
            ['Status', timesheet.status.value],
        ]
        summary_table = Table(summary_data, colWidths=[3 * inch, 2 * inch])
        summary_table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498db')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 12),

            ('ALIGN', (1, 1), (1, -1), 'RIGHT'),
            ('FONTNAME', (0, 1), (0, -1), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('BOTTOMPADDING', (0, 1), (-1, -1), 8),

            ('GRID', (0, 0), (-1, -1), 1, colors.grey),
        ]))
        elements.append(summary_table)

        doc.build(elements)
        buffer.seek(0)

        logger.info("Timesheet PDF report generated id=%s", timesheet.id)
        return buffer
