"""
QR code generation service
"""

import io
import qrcode

from app.core.config import settings

class QRService:
    """Service for generating QR codes printed on invitations"""

    @staticmethod
    def get_rsvp_url(event_code: str) -> str:
        """URL a scanned QR code opens: the RSVP form of one event"""
        return f"{settings.BASE_URL.rstrip('/')}/rsvp/{event_code}"

    @staticmethod
    def generate_rsvp_qr(event_code: str, format: str = 'PNG') -> bytes:
        """Generate a QR code linking to an event's RSVP page"""
        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_M,
            box_size=10,
            border=4,
        )
        qr.add_data(QRService.get_rsvp_url(event_code))
        qr.make(fit=True)

        img = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        img.save(buffer, format=format)

        return buffer.getvalue()
