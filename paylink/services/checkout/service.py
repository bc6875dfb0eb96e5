"""Payment store used by the checkout endpoint.

Inserts one `payments` row per call. Errors raised by the database (including
constraint violations) propagate to the caller untouched.
"""

from paylink.common.logging import logger, payment_id_ctx
from paylink.common.schema import PaymentRequest
from paylink.services.checkout.models import Payment


PENDING = "pending"


class PaymentStore:
    """Owns creation of payment rows."""

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    def create_payment(self, req: PaymentRequest, status: str = PENDING) -> Payment:
        """Insert one payment row and return it with generated id/timestamps."""

        with self.session_factory() as db:
            payment = Payment(
                amount=req.amount,
                currency=req.currency,
                email=req.email,
                status=status,
            )
            db.add(payment)
            db.commit()
            # Timestamps come from server defaults.
            db.refresh(payment)
            payment_id_ctx.set(payment.id)
            logger.info("payment created currency=%s status=%s", payment.currency, payment.status)
            return payment
