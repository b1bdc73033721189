"""
Visitor pass rendering.

A pass is described as an ordered list of layout instructions built from the
record (`build_layout`) and then drawn onto a single PyMuPDF page in one
top-to-bottom pass. The only branches are the two optional images: the
institution logo and the static map.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
from zoneinfo import ZoneInfo

import fitz  # PyMuPDF

from .errors import ArtifactWriteError
from .records import VisitorRecord

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = 612, 792  # US Letter
MARGIN = 72
BORDER_INSET = 10
LINE_SPACING = 1.2

BLACK = (0, 0, 0)
BLUE = (0, 0, 1)

TITLE_FONT = "tibo"  # Times-Bold
BODY_FONT = "helv"  # Helvetica

MAP_PLACEHOLDER = "Map not available."

Color = Tuple[float, float, float]


def pass_filename(record_id: str) -> str:
    return f"{record_id}-epass.pdf"


def format_created_at(created_at: dt.datetime, zone: dt.tzinfo) -> str:
    """Format a timestamp like `5/1/2024, 3:04:05 PM` in the given zone.

    Naive timestamps are taken to be UTC, which is how pymongo returns them.
    """
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=dt.timezone.utc)
    local = created_at.astimezone(zone)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year}, {hour}:{local.minute:02d}:{local.second:02d} {suffix}"


# ----------------------------------------------------------------------
# Layout instructions
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Border:
    inset: float = BORDER_INSET
    color: Color = BLACK


@dataclass(frozen=True)
class Text:
    content: str
    font: str = BODY_FONT
    size: float = 18
    color: Color = BLACK
    centered: bool = False
    underline: bool = False


@dataclass(frozen=True)
class MoveDown:
    """Advance the cursor by one line of the given font size."""

    size: float


@dataclass(frozen=True)
class Image:
    """
    An image fitted into a `width` x `height` box.

    With `top_right` set the box is pinned to the page corner and the cursor
    does not move; otherwise it is centred at the cursor, clamped to the space
    left above the bottom margin.
    """

    path: Path
    width: float
    height: float
    top_right: bool = False


Instruction = Union[Border, Text, MoveDown, Image]


@dataclass
class PassLayout:
    instructions: List[Instruction] = field(default_factory=list)

    def add(self, instruction: Instruction) -> "PassLayout":
        self.instructions.append(instruction)
        return self


@dataclass(frozen=True)
class PassArtifact:
    record_id: str
    filename: str
    path: Path


# ----------------------------------------------------------------------
# Renderer
# ----------------------------------------------------------------------
class PassRenderer:
    def __init__(
        self,
        output_dir: Path,
        assets_dir: Path,
        timezone: str = "Asia/Kolkata",
        title: str = "Brindavan Group of Institutions",
        map_heading: str = "BGI Map",
    ):
        self.output_dir = Path(output_dir)
        self.assets_dir = Path(assets_dir)
        self.zone = ZoneInfo(timezone)
        self.title = title
        self.map_heading = map_heading

    @property
    def logo_path(self) -> Path:
        return self.assets_dir / "logo.png"

    @property
    def map_path(self) -> Path:
        return self.assets_dir / "map.png"

    def build_layout(self, record: VisitorRecord) -> PassLayout:
        layout = PassLayout().add(Border())

        if self.logo_path.exists():
            layout.add(Image(self.logo_path, 100, 100, top_right=True))
        else:
            logger.debug("No logo at %s; rendering pass without it", self.logo_path)

        layout.add(Text(self.title, font=TITLE_FONT, size=28, color=BLUE, centered=True))
        layout.add(MoveDown(28))
        layout.add(Text("Visitor E-Pass", font=TITLE_FONT, size=22, color=BLUE, centered=True, underline=True))
        layout.add(MoveDown(22))

        created_at = format_created_at(record.created_at, self.zone)
        for line in (
            f"Visitor Name: {record.visitor_name}",
            f"Number of Persons: {record.no_of_persons}",
            f"Purpose: {record.purpose}",
            f"Contact Number: {record.contact_number}",
            f"Visit Date: {record.visit_date}",
            f"Created At: {created_at}",
        ):
            layout.add(Text(line))
        layout.add(MoveDown(18))

        layout.add(Text("Thank you for visiting us!", size=20, centered=True))
        layout.add(MoveDown(20))
        layout.add(Text(self.map_heading, size=22, color=BLUE, centered=True))
        layout.add(MoveDown(22))

        if self.map_path.exists():
            layout.add(Image(self.map_path, 500, 400))
        else:
            layout.add(Text(MAP_PLACEHOLDER, size=22, color=BLUE))
        return layout

    def render(self, record: VisitorRecord) -> PassArtifact:
        filename = pass_filename(record.id)
        target = self.output_dir / filename
        layout = self.build_layout(record)

        doc = fitz.open()
        try:
            page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
            _draw(page, layout)
            doc.set_metadata({"title": f"Visitor E-Pass {record.id}", "creator": "visitor-epass"})
            self.output_dir.mkdir(parents=True, exist_ok=True)
            doc.save(str(target))
        except (OSError, RuntimeError, ValueError) as exc:
            logger.error("Failed to write pass %s: %s", target, exc)
            raise ArtifactWriteError(f"Could not write pass {filename}: {exc}") from exc
        finally:
            doc.close()

        logger.info("Wrote pass %s", target)
        return PassArtifact(record_id=record.id, filename=filename, path=target)

    def locate(self, filename: str) -> Optional[Path]:
        """Return the stored pass for a bare filename, or None."""
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            return None
        candidate = self.output_dir / filename
        return candidate if candidate.is_file() else None


def _draw(page: "fitz.Page", layout: PassLayout) -> None:
    width = page.rect.width
    bottom = page.rect.height - MARGIN
    y = MARGIN

    for item in layout.instructions:
        if isinstance(item, Border):
            rect = fitz.Rect(item.inset, item.inset, width - item.inset, page.rect.height - item.inset)
            page.draw_rect(rect, color=item.color, width=1)

        elif isinstance(item, MoveDown):
            y += item.size * LINE_SPACING

        elif isinstance(item, Text):
            box = fitz.Rect(MARGIN, y, width - MARGIN, max(bottom, y + item.size * LINE_SPACING))
            align = fitz.TEXT_ALIGN_CENTER if item.centered else fitz.TEXT_ALIGN_LEFT
            unused = page.insert_textbox(
                box, item.content, fontsize=item.size, fontname=item.font, color=item.color, align=align
            )
            if unused < 0:
                logger.warning("Pass text overflowed the page: %r", item.content)
                continue
            used = box.height - unused
            if item.underline:
                text_width = fitz.get_text_length(item.content, fontname=item.font, fontsize=item.size)
                x0 = (width - text_width) / 2 if item.centered else MARGIN
                line_y = y + item.size * 1.05
                page.draw_line(fitz.Point(x0, line_y), fitz.Point(x0 + text_width, line_y), color=item.color, width=1)
            y += max(used, item.size * LINE_SPACING)

        elif isinstance(item, Image):
            if item.top_right:
                rect = fitz.Rect(width - item.width - BORDER_INSET, BORDER_INSET, width - BORDER_INSET, BORDER_INSET + item.height)
                page.insert_image(rect, filename=str(item.path), keep_proportion=True)
                continue
            height = min(item.height, bottom - y)
            if height <= 0:
                logger.warning("No room left on the pass for %s", item.path.name)
                continue
            x0 = (width - item.width) / 2
            page.insert_image(fitz.Rect(x0, y, x0 + item.width, y + height), filename=str(item.path), keep_proportion=True)
            y += height
