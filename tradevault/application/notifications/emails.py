"""
Email builders for customer notifications.

Each function turns a domain event into an EmailMessage with an HTML
body and a plain-text alternative. All interpolated values are escaped.
"""

from decimal import ROUND_HALF_UP, Decimal
from html import escape

from tradevault.domain.notifications.entities import EmailMessage

BRAND = "TradeVault"

_HTML_LAYOUT = """<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8" /><title>{title}</title></head>
<body style="margin:0;padding:0;font-family:'Segoe UI',Arial,sans-serif;background:#f8fafc;color:#333;">
  <table width="100%" cellspacing="0" cellpadding="0" border="0">
    <tr><td align="center" style="padding:40px 15px;">
      <table width="100%" style="max-width:600px;background:#fff;border-radius:12px;">
        <tr><td style="background:#50626a;padding:24px;text-align:center;color:#fff;font-size:28px;font-weight:700;">{brand}</td></tr>
        <tr><td style="padding:32px;">
          <h2 style="color:#50626a;">{heading}</h2>
          <p>Dear {name},</p>
          <p style="line-height:1.6;">{intro}</p>
          <table style="width:100%;background:#f8f9fa;border-left:5px solid {accent};padding:16px;">
            {rows}
          </table>
          <p style="color:#888;font-size:13px;margin-top:32px;">This is an automated message from {brand}. Please do not reply.</p>
        </td></tr>
      </table>
    </td></tr>
  </table>
</body>
</html>"""

_ROW = '<tr><td style="font-weight:600;width:160px;">{label}</td><td>{value}</td></tr>'


def usd(amount: Decimal) -> str:
    """Format an amount as dollars and cents, e.g. $1,640.00."""
    quantized = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"${quantized:,}"


def _build(
    to: str,
    subject: str,
    name: str,
    heading: str,
    intro: str,
    details: list[tuple[str, str]],
    accent: str = "#27ae60",
) -> EmailMessage:
    rows = "\n            ".join(
        _ROW.format(label=escape(label), value=escape(str(value)))
        for label, value in details
    )
    html = _HTML_LAYOUT.format(
        title=escape(subject),
        brand=BRAND,
        heading=escape(heading),
        name=escape(name),
        intro=escape(intro),
        rows=rows,
        accent=accent,
    )
    text_lines = [f"Dear {name},", "", intro, ""]
    text_lines += [f"{label}: {value}" for label, value in details]
    return EmailMessage(to=to, subject=subject, html=html, text="\n".join(text_lines))


def welcome_email(to: str, name: str) -> EmailMessage:
    return _build(
        to,
        f"Welcome to {BRAND}",
        name,
        "Your account is ready",
        "Thank you for registering. You can now fund your wallet and start investing.",
        [("Email", to)],
    )


def purchase_confirmation_email(
    to: str,
    name: str,
    asset_name: str,
    symbol: str,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    net_amount: Decimal,
    reference: str,
) -> EmailMessage:
    return _build(
        to,
        f"Purchase confirmed: {symbol}",
        name,
        "Purchase confirmed",
        f"Your purchase of {asset_name} has been completed.",
        [
            ("Reference", reference),
            ("Quantity", str(quantity)),
            ("Price", usd(price)),
            ("Fees", usd(fees)),
            ("Total charged", usd(net_amount)),
        ],
    )


def sale_confirmation_email(
    to: str,
    name: str,
    asset_name: str,
    symbol: str,
    quantity: Decimal,
    price: Decimal,
    fees: Decimal,
    net_amount: Decimal,
    realized_gain: Decimal,
    reference: str,
) -> EmailMessage:
    return _build(
        to,
        f"Sale confirmed: {symbol}",
        name,
        "Sale confirmed",
        f"Your sale of {asset_name} has been completed and the proceeds credited to your wallet.",
        [
            ("Reference", reference),
            ("Quantity", str(quantity)),
            ("Price", usd(price)),
            ("Fees", usd(fees)),
            ("Credited", usd(net_amount)),
            ("Realized gain", usd(realized_gain)),
        ],
    )


def status_change_email(
    to: str,
    name: str,
    kind: str,
    reference: str,
    status: str,
    amount: Decimal | None = None,
) -> EmailMessage:
    """Notify a status change of a deposit, withdrawal or loan."""
    accent = "#c0392b" if status in ("rejected", "failed") else "#27ae60"
    details = [("Reference", reference), ("Status", status.capitalize())]
    if amount is not None:
        details.append(("Amount", usd(amount)))
    return _build(
        to,
        f"Your {kind} is {status}",
        name,
        f"{kind.capitalize()} {status}",
        f"The status of your {kind} request has been updated to {status}.",
        details,
        accent=accent,
    )


def kyc_status_email(to: str, name: str, id_type: str, status: str) -> EmailMessage:
    approved = status == "approved"
    intro = (
        "Your identity verification has been approved. Your account is now fully verified."
        if approved
        else "We could not verify your identity documents. Please review them and submit again."
    )
    return _build(
        to,
        f"KYC verification {status}",
        name,
        f"KYC verification {status}",
        intro,
        [("Document type", id_type), ("Status", status.capitalize())],
        accent="#27ae60" if approved else "#c0392b",
    )


def order_paid_email(
    to: str, name: str, order_id: str, car_name: str, amount: Decimal, currency: str
) -> EmailMessage:
    return _build(
        to,
        f"Payment received for order {order_id}",
        name,
        "Payment received",
        f"We received your payment for the {car_name}. Our team will confirm it shortly.",
        [
            ("Order", order_id),
            ("Vehicle", car_name),
            ("Amount", usd(amount)),
            ("Paid with", currency),
        ],
    )
