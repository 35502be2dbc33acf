from io import BytesIO
from reportlab.lib import units
from reportlab.pdfgen import canvas
from reportlab.graphics.shapes import Drawing
from reportlab.graphics.barcode import qr
from reportlab.graphics import renderPDF

from nursery.models.stock import StockBatch

# Etikett für Thermodrucker, 62mm Endlosrolle
LABEL_WIDTH = 62 * units.mm
LABEL_HEIGHT = 100 * units.mm

GROWTH_STAGE_LABELS = {
    "seed": "Samen",
    "seedling": "Sämling",
    "young": "Jungpflanze",
    "established": "Etabliert",
    "mature": "Ausgewachsen",
}


class LabelService:
    @staticmethod
    def generate_batch_label(batch: StockBatch) -> bytes:
        """
        Generiert ein Topf-Etikett für eine Charge (QR-Code BATCH:<id>).
        """
        buffer = BytesIO()
        c = canvas.Canvas(buffer, pagesize=(LABEL_WIDTH, LABEL_HEIGHT))

        y = LABEL_HEIGHT - 10 * units.mm

        # Art
        c.setFont("Helvetica-Bold", 14)
        c.drawString(5 * units.mm, y, batch.species_name or "Unbekannte Art")
        y -= 6 * units.mm

        # Sorte
        if batch.variety_name:
            c.setFont("Helvetica-Oblique", 10)
            c.drawString(5 * units.mm, y, batch.variety_name)
            y -= 6 * units.mm

        c.setFont("Helvetica", 9)
        container = batch.container.short_name if batch.container else ""
        stage = GROWTH_STAGE_LABELS.get(batch.growth_stage.value, batch.growth_stage.value)
        c.drawString(5 * units.mm, y, f"{container} · {stage}")
        y -= 8 * units.mm

        # QR Code
        qr_code = qr.QrCodeWidget(f"BATCH:{batch.id}")
        qr_code.barWidth = 35 * units.mm
        qr_code.barHeight = 35 * units.mm

        d = Drawing(35 * units.mm, 35 * units.mm)
        d.add(qr_code)
        renderPDF.draw(d, c, (LABEL_WIDTH - 35 * units.mm) / 2, y - 35 * units.mm)
        y -= 42 * units.mm

        # Preis
        c.setFont("Helvetica-Bold", 16)
        c.drawRightString(LABEL_WIDTH - 5 * units.mm, y, f"{batch.price_euros:.2f} €")
        if batch.accepts_semos and batch.price_semos is not None:
            y -= 6 * units.mm
            c.setFont("Helvetica", 10)
            c.drawRightString(LABEL_WIDTH - 5 * units.mm, y, f"oder {batch.price_semos:.2f} Semos")
        y -= 8 * units.mm

        c.line(5 * units.mm, y, LABEL_WIDTH - 5 * units.mm, y)
        y -= 5 * units.mm

        c.setFont("Helvetica", 8)
        if batch.sowing_date:
            c.drawString(5 * units.mm, y, f"Aussaat: {batch.sowing_date.strftime('%d.%m.%Y')}")
            y -= 4 * units.mm
        if batch.origin:
            c.drawString(5 * units.mm, y, f"Herkunft: {batch.origin}")
            y -= 4 * units.mm

        # Pépinière
        c.setFont("Helvetica", 6)
        nursery_name = batch.nursery.name if batch.nursery else ""
        c.drawString(5 * units.mm, y, nursery_name)

        c.showPage()
        c.save()

        buffer.seek(0)
        return buffer.getvalue()
