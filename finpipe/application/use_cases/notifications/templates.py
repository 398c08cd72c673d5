"""Rendering of lifecycle and maturity e-mails.

Every function here is pure: the output depends only on the event and the
explicit ``generated_at`` timestamp. Values coming from users are HTML
escaped; optional sections (rejection reason, transaction hash) are left
out entirely when the value is missing.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from html import escape
from typing import Callable, Iterable, Sequence
from urllib.parse import quote

from finpipe.domain.entities import (
    InvestmentRequestData,
    LifecycleEvent,
    MaturedInvestment,
    MaturityBatchEvent,
    MaturityNoticeEvent,
    NotificationAction,
    NotificationEvent,
    RenderedMessage,
    RequestKind,
    WithdrawalRequestData,
)
from finpipe.utils import ensure_utc, to_decimal

BRAND = "Everest Global Holdings"
NO_MATURITIES_MESSAGE = "No investments matured in this run."

_GRADIENT_BRAND = "#111827, #374151"
_GRADIENT_ALERT = "#dc2626, #ef4444"
_GRADIENT_SUCCESS = "#059669, #10b981"
_GRADIENT_NEUTRAL = "#4b5563, #6b7280"

_CALLOUTS = {
    "info": ("#f0f9ff", "#bae6fd", "#0369a1"),
    "warning": ("#fef3c7", "#fcd34d", "#92400e"),
    "danger": ("#fef2f2", "#fecaca", "#dc2626"),
    "success": ("#ecfdf5", "#a7f3d0", "#047857"),
}

Row = tuple[str, str]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def format_money(value: object) -> str:
    """Format ``value`` in dollars with thousands separators.

    The value keeps its own precision: ``5000`` renders as ``$5,000`` and
    ``1234.56`` as ``$1,234.56``; cents are never dropped.
    """

    amount = to_decimal(value)
    if amount.as_tuple().exponent > 0:
        amount = amount.quantize(Decimal(1))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_date(value: datetime) -> str:
    value = ensure_utc(value).astimezone(timezone.utc)
    return f"{value:%B} {value.day}, {value.year}"


def format_timestamp(value: datetime) -> str:
    value = ensure_utc(value).astimezone(timezone.utc)
    return f"{format_date(value)} {value:%H:%M} UTC"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


# ---------------------------------------------------------------------------
# HTML building blocks
# ---------------------------------------------------------------------------


def _paragraph(content: str) -> str:
    return (
        '<p style="color: #374151; font-size: 16px; line-height: 1.6; margin: 0 0 20px 0;">'
        f"{content}</p>"
    )


def _details(title: str, rows: Sequence[Row], *, accent: str | None = None) -> str:
    border = f" border-left: 4px solid {accent};" if accent else ""
    items = "".join(
        '<div style="display: flex; justify-content: space-between;">'
        f'<span style="color: #6b7280; font-weight: 500;">{escape(label)}:</span>'
        f'<span style="color: #111827; font-weight: 600;">{value}</span>'
        "</div>"
        for label, value in rows
    )
    return (
        f'<div style="background: #EDE8D0; border-radius: 8px; padding: 20px; margin-bottom: 24px;{border}">'
        f'<h3 style="color: #111827; margin: 0 0 16px 0; font-size: 18px; font-weight: 600;">{escape(title)}</h3>'
        f'<div style="display: grid; gap: 8px;">{items}</div>'
        "</div>"
    )


def _callout(kind: str, heading: str, content: str) -> str:
    background, border, color = _CALLOUTS[kind]
    return (
        f'<div style="background: {background}; border: 1px solid {border}; border-radius: 8px; '
        'padding: 16px; margin-bottom: 24px;">'
        f'<p style="margin: 0; color: {color}; font-size: 14px; line-height: 1.4;">'
        f"<strong>{escape(heading)}</strong> {content}</p>"
        "</div>"
    )


def _signature() -> str:
    return (
        '<p style="color: #374151; font-size: 16px; line-height: 1.6; margin: 0;">'
        f"Best regards,<br><strong>{BRAND} Team</strong></p>"
    )


def _footer(lines: Iterable[str]) -> str:
    return (
        '<div style="background: #EDE8D0; padding: 20px; text-align: center; border-top: 1px solid #e5e7eb;">'
        '<p style="margin: 0; color: #6b7280; font-size: 12px;">'
        f"{'<br>'.join(lines)}</p>"
        "</div>"
    )


def _layout(
    *, title: str, heading: str, subtitle: str, gradient: str, content: str, footer: str
) -> str:
    return (
        "<!DOCTYPE html>"
        "<html><head>"
        '<meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
        f"<title>{escape(title)}</title>"
        "</head>"
        '<body style="margin: 0; padding: 20px; font-family: \'Segoe UI\', Tahoma, Geneva, Verdana, sans-serif; background-color: #f8fafc;">'
        '<div style="max-width: 600px; margin: 0 auto; background-color: white; border-radius: 12px; overflow: hidden;">'
        f'<div style="background: linear-gradient(135deg, {gradient}); padding: 30px; text-align: center;">'
        f'<h1 style="color: white; margin: 0; font-size: 24px; font-weight: 600;">{escape(heading)}</h1>'
        f'<p style="color: rgba(255, 255, 255, 0.9); margin: 8px 0 0 0; font-size: 14px;">{escape(subtitle)}</p>'
        "</div>"
        f'<div style="padding: 30px;">{content}</div>'
        f"{footer}"
        "</div>"
        "</body></html>"
    )


def _user_footer() -> str:
    return _footer(
        (f"This is an automated message from {BRAND}.", "Please do not reply to this email.")
    )


def _contact_button(email: str, subject: str) -> str:
    href = f"mailto:{escape(email)}?subject={quote(subject)}"
    return (
        '<div style="text-align: center; padding-top: 20px; border-top: 1px solid #e5e7eb;">'
        '<p style="margin: 0 0 16px 0; color: #6b7280; font-size: 14px;">Quick Actions:</p>'
        f'<a href="{href}" style="background: #111827; color: white; padding: 10px 20px; '
        'border-radius: 6px; text-decoration: none; font-size: 14px; font-weight: 500;">'
        "📧 Contact User</a>"
        "</div>"
    )


# ---------------------------------------------------------------------------
# Plain text building blocks
# ---------------------------------------------------------------------------


def _text(lines: Iterable[str | None]) -> str:
    return "\n".join(line for line in lines if line is not None).strip() + "\n"


def _text_details(title: str, rows: Sequence[Row]) -> list[str]:
    return [f"{title}:", *(f"- {label}: {value}" for label, value in rows), ""]


def _text_signature() -> list[str]:
    return [
        "Best regards,",
        f"{BRAND} Team",
        "",
        "---",
        f"This is an automated message from {BRAND}.",
    ]


# ---------------------------------------------------------------------------
# Shared row builders
# ---------------------------------------------------------------------------


def _user_rows(event: LifecycleEvent) -> list[Row]:
    return [
        ("User ID", event.user.id),
        ("Email", event.user.email),
        ("Name", event.user.name or "Not provided"),
    ]


def _escaped(rows: Sequence[Row]) -> list[Row]:
    return [(label, escape(value)) for label, value in rows]


def _investment_terms(request: InvestmentRequestData) -> list[Row]:
    rows: list[Row] = [
        ("Plan", request.plan_name),
        ("Amount", format_money(request.amount_usd)),
    ]
    if request.expected_return is not None:
        rows.append(("Expected Return", format_money(request.expected_return)))
    rows += [
        ("Duration", f"{request.duration_days} days"),
        ("Interest Rate", f"{request.interest_rate}% daily"),
        ("Payment Method", request.payment_method.upper()),
    ]
    return rows


def _maturity_date_rows(request: InvestmentRequestData) -> list[Row]:
    if request.maturity_date is None:
        return []
    return [("Maturity Date", format_date(request.maturity_date))]


# ---------------------------------------------------------------------------
# Investment templates
# ---------------------------------------------------------------------------


def _investment_request(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, InvestmentRequestData)
    name = event.user.display_name
    rows = _investment_terms(request)
    intro = (
        "Thank you for your investment request. We have received your application "
        "and it is currently awaiting verification by our admin team."
    )
    next_steps = (
        "Our admin team will review your request within 24-48 hours. You will receive "
        "an email notification once your investment has been approved and activated."
    )
    questions = "If you have any questions, please don't hesitate to contact our support team."

    html = _layout(
        title="Investment Request Received",
        heading="🎯 Investment Request Received",
        subtitle=BRAND,
        gradient=_GRADIENT_BRAND,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(intro),
                _details("Investment Details", _escaped(rows)),
                _callout("info", "Next Steps:", next_steps),
                _paragraph(questions),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Investment Request Received - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Investment Details", rows),
            f"Next Steps: {next_steps}",
            "",
            questions,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"Investment Request Received - {request.plan_name}", html=html, text=text
    )


def _investment_admin_alert(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, InvestmentRequestData)
    user = event.user
    rows: list[Row] = [
        ("Request ID", request.id),
        *_investment_terms(request),
        *_maturity_date_rows(request),
    ]
    if request.transaction_hash:
        rows.append(("Transaction Hash", request.transaction_hash))
    action = (
        "Please log into the admin panel to review and approve/reject this "
        "investment request. The user is waiting for confirmation."
    )
    submitted = f"Investment request submitted: {format_timestamp(request.created_at)}"
    generated = f"Generated: {format_timestamp(generated_at)}"

    html = _layout(
        title="New Investment Request",
        heading="🔔 New Investment Request",
        subtitle="Admin Notification - Action Required",
        gradient=_GRADIENT_ALERT,
        content="".join(
            (
                _details("User Information", _escaped(_user_rows(event)), accent="#dc2626"),
                _details("Investment Request Details", _escaped(rows)),
                _callout("warning", "Action Required:", action),
                _contact_button(user.email, f"Re: Your Investment Request - {request.plan_name}"),
            )
        ),
        footer=_footer(
            (escape(submitted), "Reply to this email to contact the user directly.", generated)
        ),
    )
    text = _text(
        (
            "New Investment Request - Admin Notification",
            "",
            *_text_details("User Information", _user_rows(event)),
            *_text_details("Investment Request Details", rows),
            f"Action Required: {action}",
            "",
            submitted,
            generated,
            "",
            "---",
            "Reply to this email to contact the user directly.",
        )
    )
    return RenderedMessage(
        subject=f"🔔 New Investment Request - {format_money(request.amount_usd)} from {user.email}",
        html=html,
        text=text,
        reply_to=user.email,
    )


def _investment_approval(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, InvestmentRequestData)
    name = event.user.display_name
    rows: list[Row] = [
        ("Plan", request.plan_name),
        ("Investment Amount", format_money(request.amount_usd)),
    ]
    if request.expected_return is not None:
        rows.append(("Expected Total Return", format_money(request.expected_return)))
    rows += [
        ("Daily Interest Rate", f"{request.interest_rate}%"),
        ("Investment Period", f"{request.duration_days} days"),
        *_maturity_date_rows(request),
    ]
    intro = (
        "Great news! Your investment request has been approved and is now active. "
        "You will start earning daily returns according to your selected plan."
    )
    next_steps = (
        "Your daily returns will be automatically credited to your account balance. "
        "You can track your investment performance and withdraw profits through your dashboard."
    )
    thanks = (
        f"Thank you for choosing {BRAND} for your investment needs. "
        "We're committed to helping you achieve your financial goals."
    )

    html = _layout(
        title="Investment Approved",
        heading="✅ Investment Approved!",
        subtitle=BRAND,
        gradient=_GRADIENT_SUCCESS,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(intro),
                _details("Active Investment Details", _escaped(rows)),
                _callout("success", "What happens next:", next_steps),
                _paragraph(thanks),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Investment Approved! - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Active Investment Details", rows),
            f"What happens next: {next_steps}",
            "",
            thanks,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"✅ Investment Approved - {request.plan_name}", html=html, text=text
    )


def _investment_rejection(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, InvestmentRequestData)
    name = event.user.display_name
    rows: list[Row] = [
        ("Plan", request.plan_name),
        ("Amount", format_money(request.amount_usd)),
        ("Submitted", format_date(request.created_at)),
    ]
    intro = (
        f"Thank you for your interest in our {request.plan_name}. After careful review, "
        "we are unable to approve your investment request at this time."
    )
    next_steps = (
        "You are welcome to submit a new investment request or contact our support team "
        "for assistance. We remain committed to helping you find the right investment opportunity."
    )
    questions = (
        "If you have any questions about this decision or would like to discuss alternative "
        "investment options, please don't hesitate to contact our support team."
    )

    html = _layout(
        title="Investment Request Update",
        heading="Investment Request Update",
        subtitle=BRAND,
        gradient=_GRADIENT_NEUTRAL,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(escape(intro)),
                _details("Request Details", _escaped(rows)),
                _callout("danger", "Reason:", escape(event.reason)) if event.reason else "",
                _callout("info", "Next Steps:", next_steps),
                _paragraph(questions),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Investment Request Update - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Request Details", rows),
            f"Reason: {event.reason}" if event.reason else None,
            "" if event.reason else None,
            f"Next Steps: {next_steps}",
            "",
            questions,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"❌ Investment Request Update - {request.plan_name}", html=html, text=text
    )


# ---------------------------------------------------------------------------
# Withdrawal templates
# ---------------------------------------------------------------------------


def _withdrawal_request(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, WithdrawalRequestData)
    name = event.user.display_name
    rows: list[Row] = [
        ("Amount", format_money(request.amount)),
        ("Payment Method", request.payment_method.upper()),
        ("Wallet Address", request.wallet_address),
        ("Request Date", format_date(request.created_at)),
    ]
    intro = (
        "We have received your withdrawal request. Our admin team will review and "
        "process your request within 24-48 hours."
    )
    processing = (
        "Withdrawal requests are typically processed within 24-48 hours. You will receive "
        "an email notification once your withdrawal has been processed and the funds have been sent."
    )
    questions = "If you have any questions about your withdrawal, please contact our support team."

    html = _layout(
        title="Withdrawal Request Received",
        heading="💳 Withdrawal Request Received",
        subtitle=BRAND,
        gradient=_GRADIENT_BRAND,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(intro),
                _details("Withdrawal Details", _escaped(rows)),
                _callout("info", "Processing Time:", processing),
                _paragraph(questions),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Withdrawal Request Received - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Withdrawal Details", rows),
            f"Processing Time: {processing}",
            "",
            questions,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"Withdrawal Request Received - {format_money(request.amount)}",
        html=html,
        text=text,
    )


def _withdrawal_admin_alert(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, WithdrawalRequestData)
    user = event.user
    amount = format_money(request.amount)
    rows: list[Row] = [
        ("Request ID", request.id),
        ("Amount", amount),
        ("Payment Method", request.payment_method.upper()),
        ("Wallet Address", request.wallet_address),
        ("Request Date", format_date(request.created_at)),
    ]
    action = (
        "Please log into the admin panel to review and approve/reject this withdrawal "
        "request. Verify the user's available balance and wallet address before processing."
    )
    submitted = f"Withdrawal request submitted: {format_timestamp(request.created_at)}"
    generated = f"Generated: {format_timestamp(generated_at)}"

    html = _layout(
        title="New Withdrawal Request",
        heading="💳 New Withdrawal Request",
        subtitle="Admin Notification - Action Required",
        gradient=_GRADIENT_ALERT,
        content="".join(
            (
                _details("User Information", _escaped(_user_rows(event)), accent="#dc2626"),
                _details("Withdrawal Request Details", _escaped(rows)),
                _callout("warning", "Action Required:", escape(action)),
                _contact_button(user.email, f"Re: Your Withdrawal Request - {amount}"),
            )
        ),
        footer=_footer(
            (escape(submitted), "Reply to this email to contact the user directly.", generated)
        ),
    )
    text = _text(
        (
            "New Withdrawal Request - Admin Notification",
            "",
            *_text_details("User Information", _user_rows(event)),
            *_text_details("Withdrawal Request Details", rows),
            f"Action Required: {action}",
            "",
            submitted,
            generated,
            "",
            "---",
            "Reply to this email to contact the user directly.",
        )
    )
    return RenderedMessage(
        subject=f"💳 New Withdrawal Request - {amount} from {user.email}",
        html=html,
        text=text,
        reply_to=user.email,
    )


def _withdrawal_approval(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, WithdrawalRequestData)
    name = event.user.display_name
    rows: list[Row] = [
        ("Amount Sent", format_money(request.amount)),
        ("Payment Method", request.payment_method.upper()),
        ("Wallet Address", request.wallet_address),
    ]
    if event.transaction_hash:
        rows.append(("Transaction Hash", event.transaction_hash))
    rows.append(("Processed Date", format_date(generated_at)))
    intro = (
        "Great news! Your withdrawal request has been approved and processed. "
        "The funds have been sent to your specified wallet address."
    )
    complete = (
        "Your withdrawal has been successfully processed. Depending on the blockchain "
        "network, it may take a few minutes to several hours for the transaction to be "
        "confirmed and appear in your wallet."
    )
    thanks = (
        f"Thank you for using {BRAND}. We appreciate your business and look forward "
        "to serving you again."
    )

    html = _layout(
        title="Withdrawal Approved",
        heading="✅ Withdrawal Approved!",
        subtitle=BRAND,
        gradient=_GRADIENT_SUCCESS,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(intro),
                _details("Withdrawal Details", _escaped(rows)),
                _callout("success", "Processing Complete:", complete),
                _paragraph(thanks),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Withdrawal Approved! - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Withdrawal Details", rows),
            f"Processing Complete: {complete}",
            "",
            thanks,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"✅ Withdrawal Approved - {format_money(request.amount)}", html=html, text=text
    )


def _withdrawal_rejection(event: LifecycleEvent, generated_at: datetime) -> RenderedMessage:
    request = event.request
    assert isinstance(request, WithdrawalRequestData)
    name = event.user.display_name
    rows: list[Row] = [
        ("Amount", format_money(request.amount)),
        ("Payment Method", request.payment_method.upper()),
        ("Submitted", format_date(request.created_at)),
    ]
    intro = "We have reviewed your withdrawal request and are unable to process it at this time."
    next_steps = (
        "You can submit a new withdrawal request once any issues have been resolved. "
        "Your funds remain safe in your account. Contact our support team if you need assistance."
    )
    questions = (
        "If you have any questions about this decision or need assistance with your "
        "withdrawal, please contact our support team."
    )

    html = _layout(
        title="Withdrawal Request Update",
        heading="Withdrawal Request Update",
        subtitle=BRAND,
        gradient=_GRADIENT_NEUTRAL,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(intro),
                _details("Request Details", _escaped(rows)),
                _callout("danger", "Reason:", escape(event.reason)) if event.reason else "",
                _callout("info", "Next Steps:", next_steps),
                _paragraph(questions),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Withdrawal Request Update - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Request Details", rows),
            f"Reason: {event.reason}" if event.reason else None,
            "" if event.reason else None,
            f"Next Steps: {next_steps}",
            "",
            questions,
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"❌ Withdrawal Request Update - {format_money(request.amount)}",
        html=html,
        text=text,
    )


# ---------------------------------------------------------------------------
# Maturity templates
# ---------------------------------------------------------------------------


def _maturity_rows(investment: MaturedInvestment) -> list[Row]:
    return [
        ("Investment", investment.investment_name),
        ("Amount Invested", format_money(investment.amount_invested)),
        ("Total Payout", format_money(investment.final_amount)),
        ("Profit", format_money(investment.profit)),
        ("Maturity Date", format_date(investment.maturity_date)),
    ]


def _maturity_notice(event: MaturityNoticeEvent, generated_at: datetime) -> RenderedMessage:
    investment = event.investment
    name = investment.user.display_name
    rows = _maturity_rows(investment)
    intro = (
        f"Congratulations! Your {investment.investment_name} investment has reached maturity "
        "and the full payout has been credited to your account balance."
    )
    next_steps = (
        "You can withdraw your funds or reinvest them in a new plan from your dashboard."
    )

    html = _layout(
        title="Investment Matured",
        heading="🎉 Investment Matured",
        subtitle=BRAND,
        gradient=_GRADIENT_SUCCESS,
        content="".join(
            (
                _paragraph(f"Dear {escape(name)},"),
                _paragraph(escape(intro)),
                _details("Maturity Details", _escaped(rows)),
                _callout("success", "What's next:", next_steps),
                _signature(),
            )
        ),
        footer=_user_footer(),
    )
    text = _text(
        (
            f"Investment Matured - {BRAND}",
            "",
            f"Dear {name},",
            "",
            intro,
            "",
            *_text_details("Maturity Details", rows),
            f"What's next: {next_steps}",
            "",
            *_text_signature(),
        )
    )
    return RenderedMessage(
        subject=f"🎉 Investment Matured - {investment.investment_name}", html=html, text=text
    )


def _maturity_table(matured: Sequence[MaturedInvestment]) -> str:
    header = "".join(
        f'<th style="text-align: left; padding: 6px; color: #6b7280;">{label}</th>'
        for label in ("User", "Investment", "Invested", "Payout", "Matured")
    )
    body = "".join(
        "<tr>"
        + "".join(
            f'<td style="padding: 6px; color: #111827;">{escape(cell)}</td>'
            for cell in (
                investment.user_email,
                investment.investment_name,
                format_money(investment.amount_invested),
                format_money(investment.final_amount),
                format_date(investment.maturity_date),
            )
        )
        + "</tr>"
        for investment in matured
    )
    return (
        '<table style="width: 100%; border-collapse: collapse; font-size: 13px; margin-bottom: 24px;">'
        f"<thead><tr>{header}</tr></thead><tbody>{body}</tbody></table>"
    )


def _maturity_summary(event: MaturityBatchEvent, generated_at: datetime) -> RenderedMessage:
    matured = event.matured
    count = len(matured)
    total_invested = sum((item.amount_invested for item in matured), Decimal(0))
    total_paid = sum((item.final_amount for item in matured), Decimal(0))
    totals: list[Row] = [
        ("Matured Investments", str(count)),
        ("Total Invested", format_money(total_invested)),
        ("Total Paid Out", format_money(total_paid)),
    ]
    generated = f"Generated: {format_timestamp(generated_at)}"

    if matured:
        listing_html = _maturity_table(matured)
        listing_text = [
            "Matured Investments:",
            *(
                f"- {item.user_email}: {item.investment_name}, "
                f"{format_money(item.amount_invested)} -> {format_money(item.final_amount)} "
                f"(matured {format_date(item.maturity_date)})"
                for item in matured
            ),
            "",
        ]
    else:
        listing_html = _paragraph(NO_MATURITIES_MESSAGE)
        listing_text = [NO_MATURITIES_MESSAGE, ""]

    html = _layout(
        title="Maturity Processing Summary",
        heading="📊 Maturity Processing Summary",
        subtitle="Admin Notification",
        gradient=_GRADIENT_BRAND,
        content="".join(
            (
                _paragraph(escape(event.summary)) if event.summary else "",
                _details("Totals", _escaped(totals)),
                listing_html,
            )
        ),
        footer=_footer((f"Automated report from {BRAND}.", generated)),
    )
    text = _text(
        (
            "Maturity Processing Summary - Admin Notification",
            "",
            event.summary if event.summary else None,
            "" if event.summary else None,
            *_text_details("Totals", totals),
            *listing_text,
            generated,
        )
    )
    return RenderedMessage(
        subject=f"📊 Maturity Processing Summary - {_plural(count, 'investment')}",
        html=html,
        text=text,
    )


_LIFECYCLE_TEMPLATES: dict[
    tuple[RequestKind, NotificationAction],
    Callable[[LifecycleEvent, datetime], RenderedMessage],
] = {
    (RequestKind.INVESTMENT, NotificationAction.REQUEST): _investment_request,
    (RequestKind.INVESTMENT, NotificationAction.ADMIN_ALERT): _investment_admin_alert,
    (RequestKind.INVESTMENT, NotificationAction.APPROVE): _investment_approval,
    (RequestKind.INVESTMENT, NotificationAction.REJECT): _investment_rejection,
    (RequestKind.WITHDRAWAL, NotificationAction.REQUEST): _withdrawal_request,
    (RequestKind.WITHDRAWAL, NotificationAction.ADMIN_ALERT): _withdrawal_admin_alert,
    (RequestKind.WITHDRAWAL, NotificationAction.APPROVE): _withdrawal_approval,
    (RequestKind.WITHDRAWAL, NotificationAction.REJECT): _withdrawal_rejection,
}

_REQUEST_TYPES = {
    RequestKind.INVESTMENT: InvestmentRequestData,
    RequestKind.WITHDRAWAL: WithdrawalRequestData,
}


def render(
    event: NotificationEvent, *, generated_at: datetime | None = None
) -> RenderedMessage:
    """Return the subject and HTML/plain-text bodies for ``event``.

    ``generated_at`` is the only clock input; pass it explicitly for
    reproducible output. A :class:`MaturityBatchEvent` renders the
    administrator summary.
    """

    moment = ensure_utc(generated_at) if generated_at else datetime.now(timezone.utc)

    if isinstance(event, LifecycleEvent):
        expected = _REQUEST_TYPES[event.kind]
        if not isinstance(event.request, expected):
            raise TypeError(
                f"{event.kind.value} events require {expected.__name__}, "
                f"got {type(event.request).__name__}"
            )
        return _LIFECYCLE_TEMPLATES[(event.kind, event.action)](event, moment)
    if isinstance(event, MaturityNoticeEvent):
        return _maturity_notice(event, moment)
    if isinstance(event, MaturityBatchEvent):
        return _maturity_summary(event, moment)
    raise TypeError(f"Unsupported notification event: {type(event).__name__}")


__all__ = [
    "BRAND",
    "NO_MATURITIES_MESSAGE",
    "format_date",
    "format_money",
    "format_timestamp",
    "render",
]
