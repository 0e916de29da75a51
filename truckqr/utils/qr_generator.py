import io
import re
import qrcode
from urllib.parse import quote
from flask import current_app, request
from truckqr import cache
from truckqr.utils.logging_config import get_logger

logger = get_logger(__name__)

_LOCAL_HOST_RE = re.compile(r'localhost|127\.0\.0\.1', re.IGNORECASE)


class QRGenerator:

    def profile_base_url(self):
        """Absolute base URL printed into QR codes.

        A QR code pointing at localhost is useless once printed, so a local
        base falls back to PUBLIC_BASE_URL when one is configured.
        """
        base = current_app.config.get('BASE_URL')
        if not base:
            proto = request.headers.get('X-Forwarded-Proto', request.scheme).split(',')[0].strip()
            host = request.headers.get('X-Forwarded-Host', request.host)
            base = f'{proto}://{host}'
        public_base = current_app.config.get('PUBLIC_BASE_URL')
        if _LOCAL_HOST_RE.search(base) and public_base:
            base = public_base
        return base.rstrip('/')

    def profile_url(self, plate):
        return f'{self.profile_base_url()}/c/{quote(plate)}'

    def generate_png(self, plate):
        """PNG bytes of a QR code linking to the truck's public profile."""
        return render_qr_png(self.profile_url(plate))


@cache.memoize()
def render_qr_png(content):
    qr = qrcode.QRCode(border=1, box_size=10)
    qr.add_data(content)
    qr.make(fit=True)
    img = qr.make_image()
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    logger.debug(f"Rendered QR code for {content}")
    return buffer.getvalue()
