"""
Merges annotations into a new PDF byte stream.
"""
import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..annotations.models import Annotation, decode_data_url
from ..errors import AnnotationDrawError, PageIndexOutOfRange, TrackSheetError
from .backend import Color, DocumentBackend, FontHandle, PageSize
from .pymupdf_backend import PyMuPDFBackend

logger = logging.getLogger(__name__)

BACKGROUND_COLOR: Color = (1.0, 1.0, 1.0)
DEFAULT_PADDING = 2.0

ProgressCallback = Callable[[int, int], None]  # done, total


@dataclass
class SkippedAnnotation:
    annotation_id: str
    page_index: int
    error: TrackSheetError

    @property
    def reason(self) -> str:
        return str(self.error)


@dataclass
class CompositionResult:
    """Output bytes plus the annotations that could not be drawn."""
    data: bytes
    total: int
    skipped: List[SkippedAnnotation] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def drawn_count(self) -> int:
        return self.total - self.skipped_count

    def summary(self) -> str:
        if self.skipped:
            return f"{self.skipped_count} of {self.total} annotations failed to render"
        if self.total == 0:
            return "Exported document with no annotations"
        return f"All {self.total} annotations rendered"


def project_to_pdf(annotation: Annotation, page: PageSize) -> Tuple[float, float]:
    """
    Convert an annotation's fractional position to PDF page space.

    PDF space has its origin at the bottom-left, the editor at the top-left.
    """
    x = annotation.x_fraction * page.width
    y = (1.0 - annotation.y_fraction) * page.height
    return x, y


def _to_unit_rgb(rgb: Tuple[int, int, int]) -> Color:
    return rgb[0] / 255.0, rgb[1] / 255.0, rgb[2] / 255.0


class DocumentCompositor:
    """
    Copies a source PDF and burns annotations into its pages.

    One bad annotation never aborts the export: page range and drawing
    failures are logged, skipped and reported in the result.
    """

    def __init__(self, backend_factory: Callable[[], DocumentBackend] = PyMuPDFBackend,
                 padding: float = DEFAULT_PADDING,
                 background: Color = BACKGROUND_COLOR):
        self.backend_factory = backend_factory
        self.padding = padding
        self.background = background

    def compose(self, source: bytes, annotations: Iterable[Annotation],
                progress: Optional[ProgressCallback] = None) -> CompositionResult:
        """
        Produce new PDF bytes containing the source pages and annotations.

        Args:
            source: Original PDF bytes (never modified)
            annotations: Annotations to draw; read once, up front
            progress: Optional callback receiving (done, total)

        Raises:
            DocumentParseError: If source is not a readable PDF
        """
        snapshot = [copy.deepcopy(ann) for ann in annotations]
        total = len(snapshot)
        skipped: List[SkippedAnnotation] = []

        backend = self.backend_factory()
        try:
            backend.parse(source)
            pages = backend.copy_pages()
            fonts: Dict[str, FontHandle] = {}

            for done, ann in enumerate(snapshot, start=1):
                try:
                    self._draw_annotation(backend, pages, fonts, ann)
                except (PageIndexOutOfRange, AnnotationDrawError) as exc:
                    logger.warning("Skipping annotation %s: %s", ann.id, exc)
                    skipped.append(SkippedAnnotation(ann.id, ann.page_index, exc))
                if progress is not None:
                    progress(done, total)

            data = backend.serialize()
        finally:
            backend.close()

        if skipped:
            logger.warning("%d of %d annotations failed to render", len(skipped), total)
        return CompositionResult(data=data, total=total, skipped=skipped)

    def _draw_annotation(self, backend: DocumentBackend, pages: List[PageSize],
                         fonts: Dict[str, FontHandle], ann: Annotation) -> None:
        if not 0 <= ann.page_index < len(pages):
            raise PageIndexOutOfRange(ann.id, ann.page_index, len(pages))

        page = pages[ann.page_index]
        x, y = project_to_pdf(ann, page)

        try:
            if ann.is_image:
                self._draw_image(backend, page, ann, x, y)
            else:
                self._draw_text(backend, fonts, ann, x, y)
        except AnnotationDrawError:
            raise
        except (RuntimeError, ValueError, KeyError) as exc:
            raise AnnotationDrawError(ann.id, str(exc)) from exc

    def _draw_text(self, backend: DocumentBackend, fonts: Dict[str, FontHandle],
                   ann: Annotation, x: float, y: float) -> None:
        """
        Draw the background patch, then the text on top of it.

        Everything that can be checked up front (font, metrics, color) is
        resolved before the patch is drawn. A backend failure in draw_text
        itself still leaves the patch on the page; the annotation is then
        reported as skipped like any other draw failure.
        """
        font = fonts.get(ann.base_font)
        if font is None:
            font = fonts[ann.base_font] = backend.embed_font(ann.base_font)

        line = " ".join(ann.text.splitlines())
        color = _to_unit_rgb(ann.rgb)
        metrics = backend.measure_text(font, line, ann.font_size)
        if not all(math.isfinite(v) for v in (metrics.width, metrics.ascent, metrics.descent)) \
                or metrics.width <= 0 or metrics.height <= 0:
            raise AnnotationDrawError(ann.id, f"degenerate font metrics {metrics}")

        pad = self.padding
        backend.draw_rect(
            ann.page_index,
            x - pad,
            y - metrics.descent - pad,
            metrics.width + 2 * pad,
            metrics.height + 2 * pad,
            self.background,
        )
        backend.draw_text(ann.page_index, font, line, x, y, ann.font_size, color)

    def _draw_image(self, backend: DocumentBackend, page: PageSize, ann: Annotation,
                    x: float, y: float) -> None:
        try:
            data = decode_data_url(ann.image_data)
        except ValueError as exc:
            raise AnnotationDrawError(ann.id, f"unreadable image data: {exc}") from exc

        width = ann.width_fraction * page.width
        height = ann.height_fraction * page.height
        # The annotation position is the image's top-left corner
        backend.draw_image(ann.page_index, x, y - height, width, height, data)
