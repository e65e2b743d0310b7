import io

import pytest
from PIL import Image, ImageDraw
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from simplymedi.config.settings import Settings

CHOLESTEROL_REPORT = "Total Cholesterol: 220 mg/dL (HIGH - Normal is below 200)"


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a single-page lab report PDF with known text content."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Hemoglobin: 13.5 g/dL")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.drawString(72, 720, "Page one content")
    c.showPage()
    c.drawString(72, 720, "Page two content")
    c.save()
    return buf.getvalue()


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_png_bytes() -> bytes:
    """Generate a large RGBA scan-like PNG so preprocessing has work to do."""
    image = Image.new("RGBA", (3000, 1500), (255, 255, 255, 255))
    ImageDraw.Draw(image).text((50, 50), "Glucose 110 mg/dL", fill=(0, 0, 0, 255))
    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture()
def offline_settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings with every external provider and webhook disabled."""
    for name in (
        "GEMINI_API_KEY",
        "PERPLEXITY_API_KEY",
        "OPENAI_API_KEY",
        "OPENROUTER_API_KEY",
        "GROQ_API_KEY",
        "HUGGINGFACE_API_KEY",
        "RAG_CHAT_WEBHOOK_URL",
        "RAG_DOCUMENT_WEBHOOK_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings(_env_file=None)  # type: ignore[call-arg]
