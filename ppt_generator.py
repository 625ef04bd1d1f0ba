# presentation_service/ppt_generator.py
import base64
import io
import logging
from typing import Any, Union

from pptx import Presentation
from pptx.dml.color import RGBColor
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.xmlchemy import OxmlElement
from pptx.util import Inches, Pt

from extractor import find_payload
from models import Document, DocumentValidationError, PresentationError, validate

# --- 1. Design Constants ---
# Colors
BRAND_BLUE = RGBColor(0x1F, 0x47, 0x88)
BODY_TEXT_COLOR = RGBColor(0x33, 0x33, 0x33)
WHITE = RGBColor(0xFF, 0xFF, 0xFF)
# Slide Dimensions (16:9)
SLIDE_WIDTH = Inches(10)
SLIDE_HEIGHT = Inches(5.625)
# Margins
MARGIN_LEFT = Inches(0.5)
CONTENT_WIDTH = int(SLIDE_WIDTH * 0.9)
# Font Sizes
TITLE_FONT_SIZE = Pt(44)
SLIDE_TITLE_FONT_SIZE = Pt(32)
BODY_FONT_SIZE = Pt(18)

BLANK_LAYOUT = 6
DEFAULT_SLIDE_TITLE = "Slide Title"
BULLET_CHAR = "•"

TITLE_SHAPE_NAME = "Title"
BODY_SHAPE_NAME = "Body"


class InvalidDocument(PresentationError):
    """The render input is not a valid presentation outline."""


class RenderFailure(PresentationError):
    """python-pptx failed while building or saving the deck."""


# --- 2. Helper Functions ---

def set_background(slide, color):
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = color


def add_styled_run(p, text, size, color, bold=False):
    run = p.add_run()
    run.text = text
    run.font.size = size
    run.font.color.rgb = color
    run.font.bold = bold
    return run


def make_bullet(p):
    """Turns a paragraph into a native PowerPoint bullet (a:buChar), not a text prefix."""
    pPr = p._p.get_or_add_pPr()
    pPr.set('marL', str(Inches(0.3)))
    pPr.set('indent', str(-Inches(0.3)))
    bu_font = OxmlElement('a:buFont')
    bu_font.set('typeface', 'Arial')
    pPr.append(bu_font)
    bu_char = OxmlElement('a:buChar')
    bu_char.set('char', BULLET_CHAR)
    pPr.append(bu_char)


# --- 3. Slide Drawing Functions ---

def draw_title_slide(slide, title):
    """Full-bleed brand background with the presentation title centred on it."""
    set_background(slide, BRAND_BLUE)

    title_shape = slide.shapes.add_textbox(
        MARGIN_LEFT, int(SLIDE_HEIGHT * 0.4), CONTENT_WIDTH, Inches(1)
    )
    title_shape.name = TITLE_SHAPE_NAME
    title_tf = title_shape.text_frame
    title_tf.word_wrap = True
    title_tf.vertical_anchor = MSO_ANCHOR.MIDDLE
    p = title_tf.paragraphs[0]
    p.alignment = PP_ALIGN.CENTER
    add_styled_run(p, title, TITLE_FONT_SIZE, WHITE, bold=True)
    logging.debug(f"  - Drawing Title Slide: {title}")


def draw_content_slide(slide, data):
    """Heading at a fixed top position, then one bullet per content entry."""
    set_background(slide, WHITE)

    title_shape = slide.shapes.add_textbox(
        MARGIN_LEFT, Inches(0.5), CONTENT_WIDTH, Inches(0.75)
    )
    title_shape.name = TITLE_SHAPE_NAME
    title_tf = title_shape.text_frame
    title_tf.word_wrap = True
    add_styled_run(title_tf.paragraphs[0], data.title or DEFAULT_SLIDE_TITLE,
                   SLIDE_TITLE_FONT_SIZE, BRAND_BLUE, bold=True)

    # The body box is always drawn so an empty slide still has its placeholder
    body_shape = slide.shapes.add_textbox(
        MARGIN_LEFT, Inches(1.5), CONTENT_WIDTH, Inches(4)
    )
    body_shape.name = BODY_SHAPE_NAME
    body_tf = body_shape.text_frame
    body_tf.word_wrap = True
    for i, point in enumerate(data.content):
        p = body_tf.paragraphs[0] if i == 0 else body_tf.add_paragraph()
        make_bullet(p)
        add_styled_run(p, point, BODY_FONT_SIZE, BODY_TEXT_COLOR)
    logging.debug(f"  - Drawing Content Slide: {data.title} ({len(data.content)} points)")


# --- 4. Main Execution Logic ---

def create_presentation(document: Document):
    """Creates a new presentation: the title slide when there is a title, then one slide per outline slide."""
    prs = Presentation()
    prs.slide_width = SLIDE_WIDTH
    prs.slide_height = SLIDE_HEIGHT
    blank_layout = prs.slide_layouts[BLANK_LAYOUT]

    if document.title:
        slide = prs.slides.add_slide(blank_layout)
        draw_title_slide(slide, document.title)

    for slide_data in document.slides:
        slide = prs.slides.add_slide(blank_layout)
        draw_content_slide(slide, slide_data)

    return prs


def coerce_document(source: Union[Document, dict, str, Any]) -> Document:
    """Accepts a Document, a parsed payload, or text with a payload embedded in it."""
    if isinstance(source, str):
        payload = find_payload(source)
        if payload is None:
            raise InvalidDocument("No presentation JSON found in the supplied text")
        source = payload
    try:
        return validate(source)
    except DocumentValidationError as e:
        raise InvalidDocument(f"Invalid presentation: {e.reason}") from e


def render(source: Union[Document, dict, str]) -> bytes:
    """Renders an outline to .pptx bytes. Nothing is returned unless the whole deck was written."""
    document = coerce_document(source)

    logging.info(f"Rendering presentation '{document.title}' with {len(document.slides)} slides...")
    try:
        prs = create_presentation(document)
        buffer = io.BytesIO()
        prs.save(buffer)
    except Exception as e:
        logging.error(f"Failed to render presentation: {e}", exc_info=True)
        raise RenderFailure(f"Failed to render presentation: {e}") from e
    return buffer.getvalue()


def render_base64(source: Union[Document, dict, str]) -> str:
    return base64.b64encode(render(source)).decode("ascii")
