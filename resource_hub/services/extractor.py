import io
import logging
from pypdf import PdfReader
from ..exceptions import ExtractionError

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 5


def extract_text(data: bytes, page_limit: int = DEFAULT_PAGE_LIMIT) -> str:
    """Return the text of the first ``page_limit`` pages, joined by newlines.

    Raises ExtractionError for anything pypdf cannot read, including
    encrypted documents.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted:
            raise ExtractionError("PDF is password-protected")
        pages = reader.pages[:page_limit]
        return "\n".join(page.extract_text() or "" for page in pages)
    except ExtractionError:
        raise
    except Exception as e:
        logger.warning("PDF text extraction failed: %s", e)
        raise ExtractionError(f"Could not read PDF: {e}") from e
