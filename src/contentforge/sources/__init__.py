from contentforge.sources.pdf import PdfFetcher, extract_pdf_lines, extract_pdf_text
from contentforge.sources.text import ensure_source_length
from contentforge.sources.youtube import Transcript, TranscriptFetcher, TranscriptItem, extract_video_id

__all__ = [
    "PdfFetcher",
    "Transcript",
    "TranscriptFetcher",
    "TranscriptItem",
    "ensure_source_length",
    "extract_pdf_lines",
    "extract_pdf_text",
    "extract_video_id",
]
