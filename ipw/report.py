"""
Combine tutorial sections into a PDF: a text page, then a figure page,
for each section.
"""

import logging

from PIL import Image
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Image as RLImage
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

logger = logging.getLogger(__name__)


def _escape(line):
    # reportlab paragraphs are parsed as XML
    return line.replace('&', '&amp;').replace('<', '&lt;').replace('>', '&gt;')


def _styles():
    styles = getSampleStyleSheet()
    return dict(
        normal=styles['Normal'],
        code=ParagraphStyle(
            'CodeBlock', parent=styles['Normal'], fontName='Courier',
            fontSize=8.5, leading=11, spaceAfter=4,
        ),
        section=ParagraphStyle(
            'SectionTitle', parent=styles['Heading1'], fontName='Helvetica-Bold',
            fontSize=14, leading=18, spaceAfter=12, textColor='#2171B5',
        ),
        title=ParagraphStyle(
            'ReportTitle', parent=styles['Title'], fontName='Helvetica-Bold',
            fontSize=18, leading=22, spaceAfter=6,
        ),
        subtitle=ParagraphStyle(
            'Subtitle', parent=styles['Normal'], fontName='Helvetica',
            fontSize=10, leading=13, spaceAfter=20, textColor='#555555',
        ),
    )


def _figure(fig_path, max_w, max_h):
    with Image.open(fig_path) as img:
        iw, ih = img.size
    aspect = ih / iw
    w, h = max_w, max_w * aspect
    if h > max_h:
        h = max_h
        w = h / aspect
    return RLImage(fig_path, width=w, height=h)


def build_pdf(pdf_path, title, subtitle, sections):
    """
    Write the report.

    Parameters
    ----------
    pdf_path : str
        Output file.
    title, subtitle : str
        Cover page heading.
    sections : list of (str, str or None)
        (section_text, figure_path). The first line of each text is the
        section heading. Sections without a figure get no figure page.

    Returns
    -------
    str
        `pdf_path`.
    """
    doc = SimpleDocTemplate(pdf_path, pagesize=letter,
                            leftMargin=0.75*inch, rightMargin=0.75*inch,
                            topMargin=0.75*inch, bottomMargin=0.75*inch)
    st = _styles()
    page_w = letter[0] - 1.5*inch
    page_h = letter[1] - 1.5*inch

    story = [Paragraph(_escape(title), st['title']),
             Paragraph(_escape(subtitle), st['subtitle']),
             PageBreak()]

    for sec_text, fig_path in sections:
        lines = sec_text.strip().split('\n')
        story.append(Paragraph(_escape(lines[0]), st['section']))
        for line in lines[1:]:
            if line.strip() == '':
                story.append(Spacer(1, 6))
            else:
                story.append(Paragraph(_escape(line), st['code']))
        story.append(PageBreak())

        if fig_path:
            story.append(_figure(fig_path, page_w, page_h))
            story.append(PageBreak())

    doc.build(story)
    logger.info("wrote %s (%d sections)", pdf_path, len(sections))
    return pdf_path
