from legaldocs.config.settings import Settings
from legaldocs.extraction.base import BaseTextExtractor
from legaldocs.extraction.pdfplumber_adapter import PdfPlumberAdapter
from legaldocs.extraction.plain_text_adapter import PlainTextAdapter
from legaldocs.extraction.pymupdf_adapter import PyMuPdfAdapter
from legaldocs.extraction.tesseract_adapter import TesseractAdapter


class TextExtractorFactory:
    """Creates text extractors based on settings."""

    PDF_ADAPTERS: dict[str, type[PdfPlumberAdapter] | type[PyMuPdfAdapter]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create_pdf(cls, settings: Settings) -> BaseTextExtractor:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.PDF_ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.PDF_ADAPTERS)}"
            )
        return adapter_cls(max_pages=settings.ocr_max_pages)

    @classmethod
    def create_image(cls, settings: Settings) -> BaseTextExtractor:
        return TesseractAdapter(
            language=settings.tesseract_language, max_pages=settings.ocr_max_pages
        )

    @classmethod
    def create_text(cls, settings: Settings) -> BaseTextExtractor:
        return PlainTextAdapter()
