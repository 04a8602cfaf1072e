import logging
import os
from datetime import datetime

import qrcode
from PIL import Image, ImageDraw, ImageFont

import config

logger = logging.getLogger(__name__)


class ReceiptGenerator:
    """Thermal-style PNG receipt for a sale the backend has already confirmed.

    Amounts are printed as given; nothing is recomputed here.
    """

    WIDTH = 576  # 80mm paper at 180 dpi
    MARGIN = 24
    LINE_H = 24
    QR_SIZE = 132

    @staticmethod
    def _load_font(size):
        # Try common system fonts, fallback to default
        for f in ("DejaVuSansMono.ttf", "DejaVuSans.ttf", "arial.ttf", "LiberationSans-Regular.ttf"):
            try:
                return ImageFont.truetype(f, size)
            except OSError:
                continue
        return ImageFont.load_default()

    @staticmethod
    def _text_w(draw, text, font):
        bbox = draw.textbbox((0, 0), text, font=font)
        return bbox[2] - bbox[0]

    @staticmethod
    def _wrap(draw, text, font, max_w):
        words = (text or '').split()
        if not words:
            return ['']
        lines = []
        cur = words[0]
        for w in words[1:]:
            if ReceiptGenerator._text_w(draw, cur + ' ' + w, font) <= max_w:
                cur = cur + ' ' + w
            else:
                lines.append(cur)
                cur = w
        lines.append(cur)
        return lines

    @staticmethod
    def _qr_image(text, size):
        qr = qrcode.QRCode(box_size=4, border=2)
        qr.add_data(text)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white").convert('RGB')
        return img.resize((size, size), Image.NEAREST)

    @staticmethod
    def money(amount):
        return f"{config.CURRENCY} {amount:,.2f}"

    @classmethod
    def generate(cls, sale, totals, lines, customer=None, payment_method='cash', out_dir=None):
        """Render the receipt and return the PNG path.

        `sale` is the SaleRecord from the backend confirmation, `totals` the
        SaleTotals computed before submission and `lines` the submitted
        LineItems.
        """
        out_dir = out_dir or config.RECEIPTS_DIR
        os.makedirs(out_dir, exist_ok=True)
        order_no = sale.order_number or f"SALE-{sale.id}"
        png_path = os.path.join(out_dir, f"{order_no}.png")

        f_head = cls._load_font(26)
        f_body = cls._load_font(15)
        f_mono = cls._load_font(13)

        x = cls.MARGIN
        right = cls.WIDTH - cls.MARGIN
        col_total = right
        col_price = right - 110
        col_qty = col_price - 110
        name_w = col_qty - x - 50

        measure = ImageDraw.Draw(Image.new('RGB', (1, 1)))
        prepared = []
        for item in lines:
            name_lines = cls._wrap(measure, item.product_name, f_mono, name_w)
            prepared.append((name_lines, item))
        item_rows = sum(len(n) for n, _ in prepared)

        header_h = 40 + cls.QR_SIZE + 80
        footer_h = cls.LINE_H * 8
        height = header_h + (item_rows + len(prepared) + 2) * cls.LINE_H + footer_h
        img = Image.new('RGB', (cls.WIDTH, height), color=(255, 255, 255))
        draw = ImageDraw.Draw(img)

        # Header block, QR with the order number on the right
        y = 20
        draw.text((x, y), config.STORE_NAME, font=f_head, fill=(0, 0, 0))
        y += 34
        for extra in (config.STORE_ADDRESS, config.STORE_PHONE):
            if extra:
                draw.text((x, y), extra, font=f_mono, fill=(60, 60, 60))
                y += 18
        img.paste(cls._qr_image(order_no, cls.QR_SIZE), (right - cls.QR_SIZE, 20))
        y = max(y, 20 + cls.QR_SIZE) + 10
        printed_at = sale.created_at or datetime.now().strftime('%Y-%m-%d %H:%M:%S')
        draw.text((x, y), f"Order #: {order_no}", font=f_body, fill=(0, 0, 0))
        y += cls.LINE_H
        draw.text((x, y), f"Date: {printed_at}", font=f_mono, fill=(0, 0, 0))
        y += cls.LINE_H
        draw.text((x, y), f"Customer: {customer.name if customer else 'Walk-in'}", font=f_mono, fill=(0, 0, 0))
        y += cls.LINE_H
        draw.line((x, y, right, y), fill=(0, 0, 0), width=1)
        y += 8

        draw.text((x, y), "Item", font=f_mono, fill=(0, 0, 0))
        for label, col in (("Qty", col_qty), ("Price", col_price), ("Total", col_total)):
            draw.text((col - cls._text_w(draw, label, f_mono), y), label, font=f_mono, fill=(0, 0, 0))
        y += cls.LINE_H

        for name_lines, item in prepared:
            qty = f"{item.quantity:g} {item.unit or ''}".strip()
            cells = ((qty, col_qty), (f"{item.unit_price:,.2f}", col_price), (f"{item.total:,.2f}", col_total))
            for i, ln in enumerate(name_lines):
                draw.text((x, y), ln, font=f_mono, fill=(20, 20, 20))
                if i == 0:
                    for txt, col in cells:
                        draw.text((col - cls._text_w(draw, txt, f_mono), y), txt, font=f_mono, fill=(20, 20, 20))
                y += cls.LINE_H
            draw.line((x, y - 4, right, y - 4), fill=(230, 230, 230), width=1)
        y += 6

        rows = [("Subtotal", totals.subtotal)]
        if totals.discount:
            rows.append(("Discount", -totals.discount))
        rows.append(("Tax", totals.tax))
        rows.append(("Total", totals.grand_total))
        for label, amount in rows:
            txt = f"{label}: {cls.money(amount)}"
            font = f_head if label == "Total" else f_body
            draw.text((right - cls._text_w(draw, txt, font), y), txt, font=font, fill=(0, 0, 0))
            y += cls.LINE_H + (8 if label == "Total" else 0)

        y += 6
        draw.text((x, y), f"Payment: {payment_method}", font=f_body, fill=(0, 0, 0))
        y += cls.LINE_H * 2
        draw.text((x, y), "Thank you for your business!", font=f_body, fill=(80, 80, 80))

        img.save(png_path)
        logger.info("Receipt written to %s", png_path)
        return png_path
