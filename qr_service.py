from io import BytesIO

import qrcode
import qrcode.image.svg


def make_hall_qr_svg(url: str) -> str:
    """SVG markup of a QR code pointing students at the seat lookup page."""
    img = qrcode.make(url, image_factory=qrcode.image.svg.SvgImage)
    buffer = BytesIO()
    img.save(buffer)
    return buffer.getvalue().decode("utf-8")
