import base64

TRADE_SUBJECT = "Trade Instruction"

TRADE_BODY_TEMPLATE = (
    "Please execute the following trade immediately:\n"
    "\n"
    "{trade_details}\n"
    "\n"
    "Regards,\n"
    "Client"
)


def build_trade_message(broker_email: str, trade_details: str) -> str:
    """RFC 2822 plain-text message carrying the trade instruction.

    No From header: Gmail fills it in with the account that owns the token.
    """
    headers = [
        f"To: {broker_email}",
        f"Subject: {TRADE_SUBJECT}",
        'Content-Type: text/plain; charset="UTF-8"',
        "MIME-Version: 1.0",
    ]
    body = TRADE_BODY_TEMPLATE.format(trade_details=trade_details)
    return "\n".join(headers) + "\n\n" + body


def encode_raw_message(message: str) -> str:
    """base64url without padding, as Gmail expects in the ``raw`` field."""
    return base64.urlsafe_b64encode(message.encode("utf-8")).decode("ascii").rstrip("=")
