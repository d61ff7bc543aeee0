import base64
from io import BytesIO

import qrcode


def generate_qr_data_url(data: str) -> str:
    """
    Render ``data`` as a QR code and return it as a PNG data URL,
    ready to be dropped into an ``<img src>``.

    :param data: The string to encode in the QR code
    :return: ``data:image/png;base64,...``
    """
    qr = qrcode.QRCode(
        version=None,  # grow to fit the token
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color='black', back_color='white')

    buffered = BytesIO()
    img.save(buffered, format='PNG')
    encoded = base64.b64encode(buffered.getvalue()).decode('utf-8')
    return f'data:image/png;base64,{encoded}'
